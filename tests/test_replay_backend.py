"""
Tests for recorded output replay.
"""

import numpy as np
import pytest

from inference.replay_backend import ReplayBackend, load_recording


class TestLoadRecording:

    def test_npy_stack(self, tmp_path):
        path = tmp_path / "rec.npy"
        np.save(path, np.ones((3, 1, 7, 5), dtype=np.float32))

        frames = load_recording(str(path))

        assert len(frames) == 3
        assert frames[0].shape == (7, 5)

    def test_npz_sorted_keys(self, tmp_path):
        path = tmp_path / "rec.npz"
        np.savez(
            path,
            frame_001=np.full((7, 5), 1.0, dtype=np.float32),
            frame_000=np.full((7, 5), 0.0, dtype=np.float32),
        )

        frames = load_recording(str(path))

        assert [float(f[0, 0]) for f in frames] == [0.0, 1.0]

    def test_bad_shape(self, tmp_path):
        path = tmp_path / "rec.npy"
        np.save(path, np.ones((2, 7), dtype=np.float32))

        with pytest.raises(ValueError, match="channels, elements"):
            load_recording(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_recording(str(tmp_path / "nope.npy"))


class TestReplayBackend:

    def test_serves_frames_in_order_then_none(self):
        frames = [np.full((7, 5), i, dtype=np.float32) for i in range(2)]
        backend = ReplayBackend(frames)
        image = np.zeros((10, 10, 3), dtype=np.uint8)

        first = backend.infer(image)
        second = backend.infer(image)

        assert backend.output_shape == (7, 5)
        assert first.shape == (1, 7, 5)
        assert float(second[0, 0, 0]) == 1.0
        assert backend.remaining == 0
        assert backend.infer(image) is None

    def test_empty_recording_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            ReplayBackend([])

    def test_mixed_shapes_rejected(self):
        with pytest.raises(ValueError, match="mixed shapes"):
            ReplayBackend([np.zeros((7, 5)), np.zeros((8, 5))])

    def test_from_file(self, tmp_path):
        path = tmp_path / "rec.npy"
        np.save(path, np.zeros((4, 7, 3), dtype=np.float32))

        backend = ReplayBackend.from_file(str(path))

        assert backend.remaining == 4
        assert backend.output_shape == (7, 3)
