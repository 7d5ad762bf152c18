"""
Rectangle geometry helpers.

Rectangles are (x1, y1, x2, y2) tuples, either normalized (0-1) or in
pixels; the helpers don't care which as long as both arguments agree.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

Rect = Tuple[float, float, float, float]
Point = Tuple[float, float]


def box_area(box: Rect) -> float:
    """Area of a rectangle; inverted rectangles have zero area."""
    x1, y1, x2, y2 = box
    return max(0.0, x2 - x1) * max(0.0, y2 - y1)


def intersection_area(box1: Rect, box2: Rect) -> float:
    """Area of the overlap of two rectangles."""
    x1 = max(box1[0], box2[0])
    y1 = max(box1[1], box2[1])
    x2 = min(box1[2], box2[2])
    y2 = min(box1[3], box2[3])
    return max(0.0, x2 - x1) * max(0.0, y2 - y1)


def iou(box1: Rect, box2: Rect) -> float:
    """
    Calculate Intersection over Union (IoU) between two rectangles.

    Returns:
        IoU value between 0 and 1. Zero-area rectangles always give 0.
    """
    area1 = box_area(box1)
    area2 = box_area(box2)
    if area1 <= 0 or area2 <= 0:
        return 0.0

    inter = intersection_area(box1, box2)
    return inter / (area1 + area2 - inter)


def box_center(box: Rect) -> Point:
    """Calculate center point of a rectangle."""
    x1, y1, x2, y2 = box
    return ((x1 + x2) / 2.0, (y1 + y2) / 2.0)


def to_pixel_rect(box: Rect, view_width: float, view_height: float) -> Optional[Rect]:
    """
    Scale a normalized rectangle to a view of the given size.

    Returns None while the view has no size yet.
    """
    if view_width <= 0 or view_height <= 0:
        return None
    return (
        box[0] * view_width,
        box[1] * view_height,
        box[2] * view_width,
        box[3] * view_height,
    )


def center_distance(box1: Rect, box2: Rect) -> float:
    """Euclidean distance between the centers of two rectangles."""
    c1 = box_center(box1)
    c2 = box_center(box2)
    return math.hypot(c1[0] - c2[0], c1[1] - c2[1])


def in_danger_zone(box: Rect, height_ratio: float) -> bool:
    """True if the bottom edge reaches the bottom `height_ratio` band of the frame."""
    return box[3] >= 1.0 - height_ratio
