"""
Inference backend interface.

Backends turn a camera frame into the model's raw output buffer, shaped
[1, channels, elements]. Decoding that buffer is not their job.
"""

from __future__ import annotations

from typing import Optional, Protocol, Tuple

import numpy as np


class InferenceBackend(Protocol):
    @property
    def output_shape(self) -> Tuple[int, int]:
        """(channels, elements) of the output tensor, known after setup."""
        ...

    def infer(self, frame: np.ndarray) -> Optional[np.ndarray]:
        """Run the model on one frame. None means no more output is available."""
        ...
