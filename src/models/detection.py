"""
Detection models for decoded model output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in normalized image coordinates.

    Attributes:
        x1: Left edge (0-1).
        y1: Top edge (0-1).
        x2: Right edge (0-1).
        y2: Bottom edge (0-1).
    """
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def bottom(self) -> float:
        return self.y2

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.x1, self.y1, self.x2, self.y2)

    def to_pixels(self, view_width: float, view_height: float) -> Tuple[float, float, float, float]:
        """Scale to pixel space for a view of the given size."""
        return (
            self.x1 * view_width,
            self.y1 * view_height,
            self.x2 * view_width,
            self.y2 * view_height,
        )

    @classmethod
    def from_tuple(cls, t: Tuple[float, float, float, float]) -> "BoundingBox":
        """Create from (x1, y1, x2, y2) tuple."""
        return cls(x1=t[0], y1=t[1], x2=t[2], y2=t[3])

    @classmethod
    def from_center(cls, cx: float, cy: float, w: float, h: float) -> "BoundingBox":
        """Create from center/width/height format."""
        return cls(x1=cx - w / 2, y1=cy - h / 2, x2=cx + w / 2, y2=cy + h / 2)


@dataclass(frozen=True)
class Detection:
    """
    A single detection decoded from one anchor of the model output.

    Lives for one frame only; never mutated after creation.

    Attributes:
        bbox: Bounding box in normalized coordinates.
        confidence: Winning class confidence (0-1].
        class_id: Index of the winning class channel.
        class_name: Label for class_id.
    """
    bbox: BoundingBox
    confidence: float
    class_id: int
    class_name: str

    @property
    def x1(self) -> float:
        return self.bbox.x1

    @property
    def y1(self) -> float:
        return self.bbox.y1

    @property
    def x2(self) -> float:
        return self.bbox.x2

    @property
    def y2(self) -> float:
        return self.bbox.y2

    @property
    def center(self) -> Tuple[float, float]:
        return self.bbox.center

    @property
    def width(self) -> float:
        return self.bbox.width

    @property
    def height(self) -> float:
        return self.bbox.height

    @classmethod
    def from_xyxy(
        cls,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        confidence: float = 1.0,
        class_id: int = 0,
        class_name: Optional[str] = None,
    ) -> "Detection":
        """Create Detection from x1, y1, x2, y2 coordinates."""
        return cls(
            bbox=BoundingBox(x1=x1, y1=y1, x2=x2, y2=y2),
            confidence=confidence,
            class_id=class_id,
            class_name=class_name if class_name is not None else str(class_id),
        )
