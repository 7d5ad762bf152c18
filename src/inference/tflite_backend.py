"""
TensorFlow Lite inference backend (on-device path).

Uses tflite-runtime if installed. The replay backend keeps the project
runnable without it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from .backend import InferenceBackend

INPUT_MEAN = 0.0
INPUT_STANDARD_DEVIATION = 255.0


@dataclass(frozen=True)
class TFLiteConfig:
    model_path: str
    num_threads: int = 4


class TFLiteBackend(InferenceBackend):
    def __init__(self, cfg: TFLiteConfig):
        self.cfg = cfg
        try:
            from tflite_runtime.interpreter import Interpreter  # type: ignore
        except Exception as e:
            raise ImportError(
                "tflite-runtime is not installed. Install with `pip install tflite-runtime` "
                "or switch inference.backend to 'replay'."
            ) from e

        if not os.path.exists(cfg.model_path):
            raise FileNotFoundError(f"Model file not found: {cfg.model_path}")

        self._interpreter = Interpreter(model_path=cfg.model_path, num_threads=cfg.num_threads)
        self._interpreter.allocate_tensors()

        input_details = self._interpreter.get_input_details()[0]
        output_details = self._interpreter.get_output_details()[0]
        self._input_index = input_details["index"]
        self._output_index = output_details["index"]

        # Input is [1, H, W, 3]; output is [1, channels, elements]
        _, self._input_height, self._input_width, _ = input_details["shape"]
        _, channels, elements = output_details["shape"]
        self._output_shape = (int(channels), int(elements))

        logging.info(
            f"TFLite model loaded: {cfg.model_path}, input={self._input_width}x{self._input_height}, "
            f"output={self._output_shape}"
        )

    @property
    def output_shape(self) -> Tuple[int, int]:
        return self._output_shape

    def infer(self, frame: np.ndarray) -> Optional[np.ndarray]:
        resized = cv2.resize(frame, (int(self._input_width), int(self._input_height)))
        rgb = cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)
        tensor = (rgb.astype(np.float32) - INPUT_MEAN) / INPUT_STANDARD_DEVIATION

        self._interpreter.set_tensor(self._input_index, np.expand_dims(tensor, axis=0))
        self._interpreter.invoke()
        return np.array(self._interpreter.get_tensor(self._output_index), dtype=np.float32)
