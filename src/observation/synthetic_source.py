"""
Blank frame source for replaying recorded model output without video.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from models.frame import FrameData
from .base import ObservationSource, ObservationConfig


@dataclass
class BlankSourceConfig(ObservationConfig):
    """
    Attributes:
        max_frames: Stop after this many frames (None = unlimited).
        realtime: Sleep between frames to hold the nominal fps.
    """
    max_frames: Optional[int] = None
    realtime: bool = False


class BlankSource(ObservationSource):
    """
    Yields black frames of the configured resolution.

    Timestamps advance by 1/fps from the open time, so replays produce the
    same frame deltas regardless of how fast they run.
    """

    def __init__(self, config: BlankSourceConfig, clock: Callable[[], float] = time.time):
        super().__init__(config)
        self._blank_config = config
        self._clock = clock
        self._start: float = 0.0
        width, height = config.resolution or (640, 480)
        self._frame = np.zeros((height, width, 3), dtype=np.uint8)

    @property
    def frame_interval(self) -> float:
        return 1.0 / (self._blank_config.fps or 30)

    def open(self) -> None:
        self._is_open = True
        self._frame_index = 0
        self._start = self._clock()

    def read(self) -> Optional[FrameData]:
        if not self._is_open:
            return None
        max_frames = self._blank_config.max_frames
        if max_frames is not None and self._frame_index >= max_frames:
            return None

        if self._blank_config.realtime and self._frame_index > 0:
            time.sleep(self.frame_interval)

        timestamp = self._start + self._frame_index * self.frame_interval
        self._frame_index += 1
        return FrameData.from_numpy(
            self._frame,
            timestamp=timestamp,
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        self._is_open = False
