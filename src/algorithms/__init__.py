"""
Geometric algorithms shared by detection and tracking.
"""

from .geometry import (
    box_area,
    box_center,
    center_distance,
    in_danger_zone,
    intersection_area,
    iou,
    to_pixel_rect,
)

__all__ = [
    "box_area",
    "box_center",
    "center_distance",
    "in_danger_zone",
    "intersection_area",
    "iou",
    "to_pixel_rect",
]
