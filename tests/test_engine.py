"""
Tests for the pipeline engine run loop and factories.
"""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from detection.decoder import OutputDecoder
from inference.replay_backend import ReplayBackend
from models.config import Config
from models.frame import FrameData
from models.traffic import TrafficState
from observation.opencv_source import OpenCVSource
from observation.synthetic_source import BlankSource, BlankSourceConfig
from pipeline.engine import (
    PipelineConfig,
    PipelineEngine,
    create_backend_from_config,
    create_engine_from_config,
    create_source_from_config,
)
from pipeline.frame_pipeline import FramePipeline
from tracking.tracker import ObjectTracker


def _recording(make_buffer, n):
    """n frames of one car that walks into the danger zone on the last frame."""
    frames = []
    for i in range(n):
        cy = 0.7 if i == n - 1 else 0.5 + i * 0.01
        frames.append(make_buffer([(0.5, cy, 0.2, 0.3, {2: 0.9})])[0])
    return frames


@pytest.fixture
def engine_parts(make_buffer, labels):
    backend = ReplayBackend(_recording(make_buffer, 4))
    pipeline = FramePipeline(OutputDecoder(7, 1, labels), ObjectTracker())
    source = BlankSource(BlankSourceConfig(source_id="replay", resolution=(640, 400), fps=4))
    return source, backend, pipeline


class TestPipelineEngine:

    def test_runs_until_replay_exhausted(self, engine_parts):
        source, backend, pipeline = engine_parts
        engine = PipelineEngine(source, backend, pipeline, PipelineConfig())

        engine.run()

        assert engine.stats.frame_count == 5
        assert pipeline.frames_processed == 4
        assert len(pipeline.tracker.history) == 1
        assert engine.stats.danger_alerts == 1
        assert engine.stats.alerts_by_label == {"car": 1}
        assert not source.is_open

    def test_report_after_run_covers_last_frame(self, make_buffer, labels):
        frames = [make_buffer([(0.5, 0.3, 0.2, 0.2, {2: 0.9})])[0] for _ in range(3)]
        pipeline = FramePipeline(OutputDecoder(7, 1, labels), ObjectTracker())
        source = BlankSource(BlankSourceConfig(resolution=(640, 480), fps=4), clock=lambda: 10.0)
        engine = PipelineEngine(source, ReplayBackend(frames), pipeline, PipelineConfig())

        engine.run()
        report = pipeline.report()

        assert engine.last_result.timestamp_ms == 10500
        assert report.durations_ms[TrafficState.LIGHT] == 500
        assert report.total_duration_ms == 500

    def test_viewport_defaults_to_frame_size(self, engine_parts):
        source, backend, pipeline = engine_parts
        engine = PipelineEngine(source, backend, pipeline, PipelineConfig())

        engine.run()

        assert pipeline.tracker.view_width == 640
        assert pipeline.tracker.view_height == 400

    def test_viewport_override(self, engine_parts):
        source, backend, pipeline = engine_parts
        engine = PipelineEngine(source, backend, pipeline, PipelineConfig(view_width=1280, view_height=720))

        engine.run()

        assert pipeline.tracker.view_width == 1280

    def test_callbacks_receive_results(self, engine_parts):
        source, backend, pipeline = engine_parts
        engine = PipelineEngine(source, backend, pipeline, PipelineConfig())
        seen = []
        engine.add_callback(lambda frame_data, result: seen.append(result.timestamp_ms))

        engine.run()

        assert len(seen) == 4
        assert seen == sorted(seen)

    def test_callback_error_does_not_stop_loop(self, engine_parts):
        source, backend, pipeline = engine_parts
        engine = PipelineEngine(source, backend, pipeline, PipelineConfig())
        engine.add_callback(MagicMock(side_effect=RuntimeError("boom")))

        engine.run()

        assert pipeline.frames_processed == 4

    def test_publishes_to_web_state(self, engine_parts):
        source, backend, pipeline = engine_parts
        web_state = MagicMock()
        engine = PipelineEngine(source, backend, pipeline, PipelineConfig(), web_state=web_state)

        engine.run()

        assert web_state.publish.call_count == 4
        result, report = web_state.publish.call_args[0]
        assert result.in_danger is True
        assert report.danger_counts == {"car": 1}

    @patch("pipeline.engine.time.sleep")
    def test_stops_after_consecutive_failures(self, mock_sleep, labels):
        source = MagicMock()
        source.read.return_value = None
        source.source_id = "dead"
        backend = MagicMock()
        pipeline = FramePipeline(OutputDecoder(7, 1, labels), ObjectTracker())
        engine = PipelineEngine(source, backend, pipeline, PipelineConfig(max_consecutive_failures=3))

        engine.run()

        assert source.read.call_count == 3
        assert mock_sleep.call_count == 2
        backend.infer.assert_not_called()
        source.close.assert_called_once()

    def test_stop_ends_loop(self, labels, make_buffer):
        frame = FrameData.from_numpy(np.zeros((10, 10, 3), dtype=np.uint8), timestamp=1.0)
        source = MagicMock()
        source.read.return_value = frame
        backend = MagicMock()
        backend.infer.return_value = make_buffer([(0.5, 0.5, 0.2, 0.2, {})])
        pipeline = FramePipeline(OutputDecoder(7, 1, labels), ObjectTracker())
        engine = PipelineEngine(source, backend, pipeline, PipelineConfig())
        engine.add_callback(lambda fd, result: engine.stop())

        engine.run()

        assert pipeline.frames_processed == 1


class TestFactories:

    @pytest.fixture
    def replay_file(self, tmp_path, make_buffer):
        path = tmp_path / "rec.npy"
        np.save(path, np.stack(_recording(make_buffer, 3)))
        return str(path)

    @pytest.fixture
    def labels_file(self, tmp_path, labels):
        path = tmp_path / "labels.txt"
        path.write_text("\n".join(labels) + "\n")
        return str(path)

    def test_replay_backend_from_argument(self, replay_file):
        backend = create_backend_from_config(Config(), replay_path=replay_file)

        assert isinstance(backend, ReplayBackend)
        assert backend.output_shape == (7, 1)

    def test_replay_requires_path(self):
        with pytest.raises(ValueError, match="replay_path"):
            create_backend_from_config(Config())

    def test_unknown_backend(self):
        config = Config.from_dict({"inference": {"backend": "onnx"}})

        with pytest.raises(ValueError, match="Unknown inference backend"):
            create_backend_from_config(config)

    def test_blank_source_for_replay_without_camera(self):
        config = Config.from_dict({"view": {"width": 1280, "height": 720}})

        source = create_source_from_config(config, replay=True)

        assert isinstance(source, BlankSource)
        assert source._config.resolution == (1280, 720)

    def test_camera_required_for_live_run(self):
        with pytest.raises(ValueError, match="camera"):
            create_source_from_config(Config(), replay=False)

    def test_camera_source(self, valid_config):
        source = create_source_from_config(Config.from_dict(valid_config))

        assert isinstance(source, OpenCVSource)
        assert source.device_id == 0

    def test_engine_from_config_runs_replay(self, replay_file, labels_file):
        config = Config.from_dict({"detection": {"labels_path": labels_file}})

        engine = create_engine_from_config(config, replay_path=replay_file)
        engine.run()

        assert engine.frame_pipeline.frames_processed == 3
        report = engine.frame_pipeline.report()
        assert report.historical_class_counts == {"car": 1}
