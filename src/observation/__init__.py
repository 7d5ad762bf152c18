"""
Observation layer for pluggable frame sources.

This layer abstracts where frames come from (camera, video file, or blank
frames for replays) from the processing pipeline. Each source implements
the ObservationSource interface and returns FrameData objects.
"""

from .base import ObservationSource, ObservationConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig
from .synthetic_source import BlankSource, BlankSourceConfig

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
    "BlankSource",
    "BlankSourceConfig",
]
