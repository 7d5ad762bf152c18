"""
Typed models for the roadguard pipeline.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox
from .track import Track, TrackState, TrackStatus, HistoricalRecord
from .events import DangerZoneEntry
from .traffic import TrafficState
from .config import (
    Config,
    CameraConfig,
    DangerZoneConfig,
    DetectionConfig,
    InferenceConfig,
    TrackingConfig,
    TrafficConfig,
    ViewConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    # Tracking
    "Track",
    "TrackState",
    "TrackStatus",
    "HistoricalRecord",
    "DangerZoneEntry",
    # Traffic
    "TrafficState",
    # Config
    "Config",
    "CameraConfig",
    "DangerZoneConfig",
    "DetectionConfig",
    "InferenceConfig",
    "TrackingConfig",
    "TrafficConfig",
    "ViewConfig",
    "WebConfig",
]
