"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


LABELS = ["person", "bicycle", "car"]


@pytest.fixture
def labels():
    """Three-class label list matching the buffers built by make_buffer."""
    return list(LABELS)


@pytest.fixture
def make_buffer():
    """
    Build a [1, channels, elements] output buffer.

    Each anchor is (cx, cy, w, h, {class_index: confidence}); unspecified
    class scores are zero.
    """
    def _build(anchors, num_classes=len(LABELS)):
        channels = 4 + num_classes
        elements = max(len(anchors), 1)
        grid = np.zeros((channels, elements), dtype=np.float32)
        for i, (cx, cy, w, h, scores) in enumerate(anchors):
            grid[0, i] = cx
            grid[1, i] = cy
            grid[2, i] = w
            grid[3, i] = h
            for cls, conf in scores.items():
                grid[4 + cls, i] = conf
        return grid[np.newaxis, ...]

    return _build


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
detection:
  labels_path: "config/labels.txt"
  confidence_threshold: 0.3
  iou_threshold: 0.5

tracking:
  lost_track_timeout_ms: 2000

inference:
  backend: "replay"
  replay_path: "data/recording.npz"

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "detection": {
            "labels_path": "config/labels.txt",
            "confidence_threshold": 0.3,
            "iou_threshold": 0.5,
        },
        "tracking": {
            "lost_track_timeout_ms": 2000,
            "match_distance_ratio": 0.15,
            "default_match_distance_px": 50.0,
            "max_trail_points": 30,
        },
        "danger_zone": {"height_ratio": 0.2},
        "traffic": {
            "light_max_objects": 5,
            "moderate_max_objects": 8,
            "max_frame_delta_ms": 5000,
        },
        "inference": {
            "backend": "replay",
            "replay_path": "data/recording.npz",
            "num_threads": 4,
        },
        "camera": {
            "backend": "opencv",
            "device_id": 0,
            "resolution": [1280, 720],
            "fps": 30,
        },
        "view": {"width": 0, "height": 0},
        "web": {"enabled": True, "host": "0.0.0.0", "port": 5000},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
