"""
FrameData model for frames handed to the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass
class FrameData:
    """
    A captured frame plus the metadata the pipeline needs.

    Attributes:
        frame: Image as a numpy array (H x W x C).
        width: Frame width in pixels.
        height: Frame height in pixels.
        timestamp: Unix timestamp (seconds) when the frame was captured.
        frame_index: Sequential frame number since the source was opened.
        source: Identifier for the camera/video source.
    """
    frame: np.ndarray
    width: int
    height: int
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        """Create FrameData from a numpy array."""
        h, w = frame.shape[:2]
        return cls(
            frame=frame,
            width=w,
            height=h,
            timestamp=timestamp,
            frame_index=frame_index,
            source=source,
        )

    @property
    def timestamp_ms(self) -> int:
        """Capture time in integer milliseconds, the tracker's clock unit."""
        return int(self.timestamp * 1000)

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)
