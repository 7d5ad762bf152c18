"""
Decoder for raw YOLO-style detection output.

The model emits one float tensor laid out as channels x elements:
channels 0-3 hold the box (cx, cy, w, h, normalized) for every anchor
element, channels 4..N hold one confidence per class.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

import numpy as np

from models.detection import BoundingBox, Detection

BOX_CHANNELS = 4


def decode_output(
    buffer: np.ndarray,
    channels: int,
    elements: int,
    labels: Sequence[str],
    confidence_threshold: float = 0.3,
) -> List[Detection]:
    """
    Convert a raw output buffer into candidate detections.

    For every anchor the highest scoring class wins (lowest class index on
    ties). Anchors whose winning score is not above the threshold, whose class
    index has no label, or whose box leaves the [0, 1] range are dropped.

    Args:
        buffer: Flat buffer or array of shape [1, channels, elements].
        channels: Number of output channels (4 box + one per class).
        elements: Number of anchor elements.
        labels: Class labels, indexed by class channel offset.
        confidence_threshold: Minimum (exclusive) winning confidence.

    Returns:
        Detections in anchor order. Empty when nothing qualifies.
    """
    data = np.asarray(buffer, dtype=np.float32).reshape(-1)
    if data.size != channels * elements:
        logging.error(
            f"Output buffer has {data.size} values, expected {channels} x {elements}"
        )
        return []
    if channels <= BOX_CHANNELS or elements <= 0:
        logging.error(f"Output layout has no class channels: channels={channels}")
        return []

    grid = data.reshape(channels, elements)
    scores = grid[BOX_CHANNELS:]

    # argmax returns the first maximum, i.e. the lowest class index wins ties
    best_cls = np.argmax(scores, axis=0)
    best_conf = scores[best_cls, np.arange(elements)]

    # Threshold compared in float32
    candidates = np.flatnonzero(best_conf > np.float32(confidence_threshold))
    if candidates.size == 0:
        return []

    cx, cy, w, h = grid[0], grid[1], grid[2], grid[3]
    x1 = cx - w / 2
    y1 = cy - h / 2
    x2 = cx + w / 2
    y2 = cy + h / 2
    in_bounds = (
        (x1 >= 0) & (x1 <= 1) & (y1 >= 0) & (y1 <= 1)
        & (x2 >= 0) & (x2 <= 1) & (y2 >= 0) & (y2 <= 1)
    )

    detections: List[Detection] = []
    for idx in candidates:
        cls = int(best_cls[idx])
        if cls >= len(labels):
            logging.warning(f"Invalid class index: {cls} (labels: {len(labels)})")
            continue
        if not in_bounds[idx]:
            continue

        detections.append(
            Detection(
                bbox=BoundingBox(
                    x1=float(x1[idx]),
                    y1=float(y1[idx]),
                    x2=float(x2[idx]),
                    y2=float(y2[idx]),
                ),
                confidence=float(best_conf[idx]),
                class_id=cls,
                class_name=labels[cls],
            )
        )

    return detections


class OutputDecoder:
    """
    Decoder bound to one model's output layout and label list.

    Example:
        decoder = OutputDecoder(channels=84, elements=8400, labels=labels)
        detections = decoder.decode(output)
    """

    def __init__(
        self,
        channels: int,
        elements: int,
        labels: Sequence[str],
        confidence_threshold: float = 0.3,
    ):
        self.channels = channels
        self.elements = elements
        self.labels = list(labels)
        self.confidence_threshold = confidence_threshold

        if channels - BOX_CHANNELS != len(self.labels):
            logging.warning(
                f"Model has {channels - BOX_CHANNELS} class channels but "
                f"{len(self.labels)} labels were loaded"
            )

    def decode(self, buffer: np.ndarray) -> List[Detection]:
        return decode_output(
            buffer,
            self.channels,
            self.elements,
            self.labels,
            self.confidence_threshold,
        )
