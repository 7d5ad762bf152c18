"""
Tests for rectangle geometry helpers.
"""

import pytest

from algorithms.geometry import (
    box_area,
    box_center,
    center_distance,
    in_danger_zone,
    intersection_area,
    iou,
    to_pixel_rect,
)


class TestIoU:
    """Intersection over union."""

    def test_identical_boxes(self):
        assert iou((0, 0, 1, 1), (0, 0, 1, 1)) == pytest.approx(1.0)

    def test_disjoint_boxes(self):
        assert iou((0, 0, 0.2, 0.2), (0.5, 0.5, 0.7, 0.7)) == 0.0

    def test_half_overlap(self):
        """Two unit squares shifted by half share 1/3 IoU."""
        assert iou((0, 0, 2, 2), (1, 0, 3, 2)) == pytest.approx(1 / 3)

    def test_zero_area_box_gives_zero(self):
        assert iou((0.5, 0.5, 0.5, 0.5), (0, 0, 1, 1)) == 0.0
        assert iou((0, 0, 1, 1), (0.6, 0.6, 0.4, 0.4)) == 0.0

    def test_intersection_area_touching_edges(self):
        assert intersection_area((0, 0, 1, 1), (1, 0, 2, 1)) == 0.0

    def test_inverted_box_has_no_area(self):
        assert box_area((1, 1, 0, 0)) == 0.0


class TestCentersAndPixels:

    def test_box_center(self):
        assert box_center((0, 0, 4, 2)) == (2.0, 1.0)

    def test_to_pixel_rect_scales(self):
        assert to_pixel_rect((0.1, 0.2, 0.5, 1.0), 100, 50) == pytest.approx((10, 10, 50, 50))

    def test_to_pixel_rect_without_size(self):
        assert to_pixel_rect((0.1, 0.2, 0.5, 1.0), 0, 50) is None
        assert to_pixel_rect((0.1, 0.2, 0.5, 1.0), 100, 0) is None

    def test_center_distance(self):
        assert center_distance((0, 0, 2, 2), (3, 4, 5, 6)) == pytest.approx(5.0)


class TestDangerZone:

    def test_bottom_on_threshold_counts(self):
        assert in_danger_zone((0.1, 0.5, 0.3, 0.8), 0.2) is True

    def test_bottom_above_threshold(self):
        assert in_danger_zone((0.1, 0.5, 0.3, 0.79), 0.2) is False

    def test_full_height_ratio(self):
        assert in_danger_zone((0.1, 0.0, 0.3, 0.0), 1.0) is True
