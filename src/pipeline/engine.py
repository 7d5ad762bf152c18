"""
Pipeline engine for the road hazard monitor.

This module provides the main processing loop: it reads frames from an
ObservationSource, runs them through an InferenceBackend, and hands the raw
output to FramePipeline. Results are published to the web state and to any
registered callbacks.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from detection.labels import load_labels
from inference.backend import InferenceBackend
from inference.replay_backend import ReplayBackend
from models.config import Config
from models.frame import FrameData
from observation import (
    BlankSource,
    BlankSourceConfig,
    ObservationSource,
    OpenCVSource,
    OpenCVSourceConfig,
)
from pipeline.frame_pipeline import FramePipeline, FrameResult


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        max_consecutive_failures: Max frame read failures before stopping.
        retry_delay: Seconds to wait after a failed read.
        stats_log_interval: Seconds between status log messages.
        view_width: Viewport width for tracking (0 = use frame width).
        view_height: Viewport height for tracking (0 = use frame height).
    """
    max_consecutive_failures: int = 10
    retry_delay: float = 0.5
    stats_log_interval: float = 60.0
    view_width: int = 0
    view_height: int = 0


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frame_count: int = 0
    danger_alerts: int = 0
    alerts_by_label: Dict[str, int] = field(default_factory=dict)
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)
    consecutive_failures: int = 0


class PipelineEngine:
    """
    Main processing engine.

    This engine:
    - Reads frames from any ObservationSource
    - Runs inference to get the raw output buffer
    - Runs decode, suppression, tracking and traffic classification
    - Updates web state

    Example:
        source = BlankSource(BlankSourceConfig(max_frames=100))
        backend = ReplayBackend.from_file("data/recording.npz")
        pipeline = FramePipeline.from_config(cfg, labels, backend.output_shape)
        engine = PipelineEngine(source, backend, pipeline, PipelineConfig())
        engine.run()
    """

    def __init__(
        self,
        source: ObservationSource,
        backend: InferenceBackend,
        frame_pipeline: FramePipeline,
        config: PipelineConfig,
        web_state: Optional[Any] = None,
    ):
        self.source = source
        self.backend = backend
        self.frame_pipeline = frame_pipeline
        self.config = config
        self.web_state = web_state
        self.stats = PipelineStats()
        self.last_result: Optional[FrameResult] = None
        self._running = False
        self._callbacks: List[Callable[[FrameData, FrameResult], None]] = []

    def add_callback(self, callback: Callable[[FrameData, FrameResult], None]) -> None:
        """
        Add a callback to be called after each frame is processed.

        Args:
            callback: Function taking (frame_data, result) as arguments.
        """
        self._callbacks.append(callback)

    def run(self) -> None:
        """
        Run the main processing loop.

        Opens the observation source, processes frames until stopped, the
        source fails too often, or the backend has no more output.
        """
        self._running = True
        self.stats = PipelineStats()

        try:
            self.source.open()
            logging.info(f"Pipeline started: source={self.source.source_id}")

            while self._running:
                frame_data = self.source.read()

                if frame_data is None:
                    self.stats.consecutive_failures += 1
                    if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
                        logging.error(
                            f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
                        )
                        break
                    logging.warning(
                        f"Frame read failed ({self.stats.consecutive_failures}/"
                        f"{self.config.max_consecutive_failures})"
                    )
                    time.sleep(self.config.retry_delay)
                    continue

                self.stats.consecutive_failures = 0
                result = self._process_frame(frame_data)
                if result is None:
                    logging.info("Inference backend exhausted, stopping")
                    break

                for callback in self._callbacks:
                    try:
                        callback(frame_data, result)
                    except Exception as e:
                        logging.warning(f"Callback error: {e}")

                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        except Exception:
            logging.exception("Pipeline error")
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Signal the pipeline to stop after the current frame."""
        self._running = False

    def _process_frame(self, frame_data: FrameData) -> Optional[FrameResult]:
        """
        Process a single frame.

        Returns None when the backend produced no output.
        """
        self.stats.frame_count += 1

        width = self.config.view_width or frame_data.width
        height = self.config.view_height or frame_data.height
        self.frame_pipeline.set_viewport(width, height)

        buffer = self.backend.infer(frame_data.frame)
        if buffer is None:
            return None

        result = self.frame_pipeline.process(buffer, frame_data.timestamp_ms)
        self.last_result = result

        for entry in result.danger_entries:
            self.stats.danger_alerts += 1
            self.stats.alerts_by_label[entry.label] = self.stats.alerts_by_label.get(entry.label, 0) + 1
            logging.warning(
                f"Danger zone entry: {entry.label} #{entry.track_id}, "
                f"total {entry.label}={entry.total_for_label}"
            )

        if result.danger_state_changed:
            logging.info(f"Danger state: {'ALERT' if result.in_danger else 'clear'}")

        if self.stats.frame_count % 30 == 0 and result.active_tracks:
            track_ids = [t.track_id for t in result.active_tracks]
            logging.debug(f"[TRACK] frame={self.stats.frame_count} active_ids={track_ids}")

        if self.web_state is not None:
            self.web_state.publish(result, self.frame_pipeline.report())

        return result

    def _handle_periodic_tasks(self) -> None:
        """Run periodic tasks (logging)."""
        now = time.time()

        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            state = self.last_result.traffic_state.display_name if self.last_result else "n/a"
            logging.info(
                f"Pipeline stats: frames={self.stats.frame_count}, "
                f"traffic={state}, "
                f"danger_alerts={self.stats.danger_alerts}, "
                f"by_label={self.stats.alerts_by_label}"
            )
            self.stats.last_stats_log_time = now

    def _cleanup(self) -> None:
        """Clean up resources."""
        self._running = False

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        logging.info(f"Pipeline stopped after {self.stats.frame_count} frames")


def create_backend_from_config(config: Config, replay_path: Optional[str] = None) -> InferenceBackend:
    """
    Build the inference backend named by inference.backend.

    An explicit replay_path forces the replay backend.
    """
    inference_cfg = config.inference
    if replay_path or inference_cfg.backend == "replay":
        path = replay_path or inference_cfg.replay_path
        if not path:
            raise ValueError("Replay backend requires inference.replay_path (or --replay)")
        return ReplayBackend.from_file(path)

    if inference_cfg.backend == "tflite":
        from inference.tflite_backend import TFLiteBackend, TFLiteConfig

        return TFLiteBackend(
            TFLiteConfig(model_path=inference_cfg.model_path, num_threads=inference_cfg.num_threads)
        )

    raise ValueError(f"Unknown inference backend: {inference_cfg.backend}")


def create_source_from_config(config: Config, replay: bool = False) -> ObservationSource:
    """
    Build the frame source.

    Replays without a configured camera run on blank frames sized to the
    viewport (or 640x480).
    """
    if config.camera is None:
        if not replay:
            raise ValueError("A camera section is required unless replaying a recording")
        width = config.view.width or 640
        height = config.view.height or 480
        return BlankSource(BlankSourceConfig(source_id="replay", resolution=(width, height)))

    camera_cfg = config.camera.to_dict()
    return OpenCVSource(OpenCVSourceConfig.from_camera_config(camera_cfg, source_id="main-camera"))


def create_engine_from_config(
    config: Config,
    replay_path: Optional[str] = None,
    web_state: Optional[Any] = None,
) -> PipelineEngine:
    """
    Factory function to create a PipelineEngine from typed config.

    Args:
        config: Application config.
        replay_path: Recorded output to replay instead of running a model.
        web_state: Shared state to publish results to.
    """
    labels = load_labels(config.detection.labels_path)
    backend = create_backend_from_config(config, replay_path=replay_path)
    replay = isinstance(backend, ReplayBackend)
    source = create_source_from_config(config, replay=replay)
    frame_pipeline = FramePipeline.from_config(config, labels, backend.output_shape)

    pipeline_config = PipelineConfig(
        view_width=config.view.width,
        view_height=config.view.height,
    )
    return PipelineEngine(source, backend, frame_pipeline, pipeline_config, web_state=web_state)
