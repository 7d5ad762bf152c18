"""
Replay backend: serves recorded model output instead of running a model.

Recordings are either a .npy array stacked along the first axis
([N, channels, elements] or [N, 1, channels, elements]) or a .npz archive
with one array per frame, replayed in sorted key order.
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional, Tuple

import numpy as np

from .backend import InferenceBackend


def load_recording(path: str) -> List[np.ndarray]:
    """Load recorded output buffers as a list of [channels, elements] arrays."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Replay file not found: {path}")

    if path.endswith(".npz"):
        with np.load(path) as archive:
            frames = [np.asarray(archive[key], dtype=np.float32) for key in sorted(archive.files)]
    else:
        stacked = np.load(path)
        frames = [np.asarray(f, dtype=np.float32) for f in stacked]

    out: List[np.ndarray] = []
    for f in frames:
        if f.ndim == 3:
            f = f[0]
        if f.ndim != 2:
            raise ValueError(f"Recorded frame must be [channels, elements], got shape {f.shape}")
        out.append(f)
    return out


class ReplayBackend(InferenceBackend):
    """Hands out recorded buffers one per frame, ignoring the frame itself."""

    def __init__(self, frames: List[np.ndarray]):
        if not frames:
            raise ValueError("Replay recording is empty")
        shapes = {f.shape for f in frames}
        if len(shapes) != 1:
            raise ValueError(f"Recorded frames have mixed shapes: {sorted(shapes)}")

        self._frames = frames
        self._pos = 0
        channels, elements = frames[0].shape
        self._output_shape = (int(channels), int(elements))

    @classmethod
    def from_file(cls, path: str) -> "ReplayBackend":
        frames = load_recording(path)
        logging.info(f"Replay loaded: {path} ({len(frames)} frames)")
        return cls(frames)

    @property
    def output_shape(self) -> Tuple[int, int]:
        return self._output_shape

    @property
    def remaining(self) -> int:
        return len(self._frames) - self._pos

    def infer(self, frame: np.ndarray) -> Optional[np.ndarray]:
        if self._pos >= len(self._frames):
            return None
        out = self._frames[self._pos]
        self._pos += 1
        return out[np.newaxis, ...]
