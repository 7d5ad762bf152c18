"""
Tests for non-maximum suppression.
"""

import itertools

import pytest

from algorithms.geometry import iou
from detection.nms import non_max_suppression
from models.detection import Detection


def _det(x1, y1, x2, y2, conf, cls=0, name="car"):
    return Detection.from_xyxy(x1, y1, x2, y2, confidence=conf, class_id=cls, class_name=name)


class TestNonMaxSuppression:

    def test_empty_input(self):
        assert non_max_suppression([]) == []

    def test_overlapping_same_class_keeps_most_confident(self):
        a = _det(0.0, 0.0, 0.5, 0.5, 0.9)
        b = _det(0.05, 0.0, 0.55, 0.5, 0.95)
        assert iou(a.bbox.as_tuple(), b.bbox.as_tuple()) >= 0.5

        kept = non_max_suppression([a, b], iou_threshold=0.5)

        assert kept == [b]

    def test_suppression_is_class_agnostic(self):
        car = _det(0.1, 0.1, 0.4, 0.4, 0.8, cls=2, name="car")
        person = _det(0.1, 0.1, 0.4, 0.4, 0.7, cls=0, name="person")

        kept = non_max_suppression([person, car])

        assert kept == [car]

    def test_iou_equal_to_threshold_is_suppressed(self):
        # IoU of these two is about 1/3
        a = _det(0.0, 0.0, 0.2, 0.2, 0.9)
        b = _det(0.1, 0.0, 0.3, 0.2, 0.8)

        assert non_max_suppression([a, b], iou_threshold=iou(a.bbox.as_tuple(), b.bbox.as_tuple())) == [a]

    def test_disjoint_boxes_all_kept_in_confidence_order(self):
        a = _det(0.0, 0.0, 0.1, 0.1, 0.5)
        b = _det(0.5, 0.5, 0.6, 0.6, 0.9)
        c = _det(0.8, 0.8, 0.9, 0.9, 0.7)

        assert non_max_suppression([a, b, c]) == [b, c, a]

    def test_equal_confidence_keeps_scan_order(self):
        first = _det(0.0, 0.0, 0.5, 0.5, 0.8, name="first")
        second = _det(0.0, 0.0, 0.5, 0.5, 0.8, name="second")

        kept = non_max_suppression([first, second])

        assert [d.class_name for d in kept] == ["first"]

    def test_zero_area_boxes_never_suppressed(self):
        point = _det(0.3, 0.3, 0.3, 0.3, 0.9)
        box = _det(0.2, 0.2, 0.4, 0.4, 0.8)

        assert len(non_max_suppression([point, box])) == 2

    def test_kept_set_pairwise_below_threshold(self):
        dets = [
            _det(0.1 * i % 0.7, 0.05 * i % 0.6, 0.1 * i % 0.7 + 0.25, 0.05 * i % 0.6 + 0.3, 0.3 + 0.01 * i)
            for i in range(30)
        ]

        kept = non_max_suppression(dets, iou_threshold=0.4)

        for a, b in itertools.combinations(kept, 2):
            assert iou(a.bbox.as_tuple(), b.bbox.as_tuple()) < 0.4
