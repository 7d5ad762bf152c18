"""
Greedy, class-agnostic non-maximum suppression.
"""

from __future__ import annotations

from typing import List, Sequence

from algorithms.geometry import iou
from models.detection import Detection


def non_max_suppression(
    detections: Sequence[Detection],
    iou_threshold: float = 0.5,
) -> List[Detection]:
    """
    Keep the most confident detection of every overlapping group.

    Detections are visited in descending confidence (stable, so equal scores
    keep decode order). Each kept detection removes every remaining one whose
    IoU with it is >= iou_threshold, whatever its class.

    Args:
        detections: Candidate detections for one frame.
        iou_threshold: Overlap at or above which a candidate is suppressed.

    Returns:
        Surviving detections, most confident first.
    """
    remaining = sorted(detections, key=lambda d: d.confidence, reverse=True)
    kept: List[Detection] = []

    while remaining:
        best = remaining.pop(0)
        kept.append(best)
        best_box = best.bbox.as_tuple()
        remaining = [
            d for d in remaining
            if iou(best_box, d.bbox.as_tuple()) < iou_threshold
        ]

    return kept
