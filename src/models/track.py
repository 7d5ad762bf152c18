"""
Track models for object tracking state.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Tuple

from .detection import BoundingBox


DEFAULT_TRAIL_POINTS = 30


class TrackStatus(str, Enum):
    """Lifecycle status of a track. Removal is terminal and has no status."""
    ACTIVE = "active"
    LOST = "lost"


@dataclass
class Track:
    """
    A tracked object across frames.

    Attributes:
        track_id: Unique, never reused identifier.
        label: Class label, fixed at creation.
        bbox: Current normalized bounding box.
        last_seen_ms: Timestamp of the last successful match.
        status: ACTIVE or LOST.
        in_danger_zone: Whether the box was in the danger zone when last matched.
        trail: Normalized center history (newest last, bounded).
    """
    track_id: int
    label: str
    bbox: BoundingBox
    last_seen_ms: float
    status: TrackStatus = TrackStatus.ACTIVE
    in_danger_zone: bool = False
    trail: Deque[Tuple[float, float]] = field(
        default_factory=lambda: deque(maxlen=DEFAULT_TRAIL_POINTS)
    )

    @classmethod
    def create(
        cls,
        track_id: int,
        label: str,
        bbox: BoundingBox,
        now_ms: float,
        max_trail_points: int = DEFAULT_TRAIL_POINTS,
    ) -> "Track":
        """Create an ACTIVE track seeded with its first trail point."""
        track = cls(
            track_id=track_id,
            label=label,
            bbox=bbox,
            last_seen_ms=now_ms,
            trail=deque(maxlen=max_trail_points),
        )
        track.trail.append(bbox.center)
        return track

    def update(self, bbox: BoundingBox, now_ms: float) -> None:
        """Apply a matched detection: new box, new trail point, refreshed time."""
        self.bbox = bbox
        self.last_seen_ms = now_ms
        # deque maxlen evicts the oldest point
        self.trail.append(bbox.center)

    @property
    def center(self) -> Tuple[float, float]:
        return self.bbox.center

    @property
    def is_active(self) -> bool:
        return self.status == TrackStatus.ACTIVE


@dataclass(frozen=True)
class TrackState:
    """
    Immutable snapshot of a track (for rendering/API consumers).
    """
    track_id: int
    label: str
    bbox: Tuple[float, float, float, float]
    trail: Tuple[Tuple[float, float], ...]
    status: TrackStatus
    in_danger_zone: bool
    last_seen_ms: float

    @classmethod
    def from_track(cls, track: Track) -> "TrackState":
        """Create immutable snapshot from a Track."""
        return cls(
            track_id=track.track_id,
            label=track.label,
            bbox=track.bbox.as_tuple(),
            trail=tuple(track.trail),
            status=track.status,
            in_danger_zone=track.in_danger_zone,
            last_seen_ms=track.last_seen_ms,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "track_id": self.track_id,
            "label": self.label,
            "bbox": list(self.bbox),
            "trail": [list(p) for p in self.trail],
            "status": self.status.value,
            "in_danger_zone": self.in_danger_zone,
            "last_seen_ms": self.last_seen_ms,
        }


@dataclass
class HistoricalRecord:
    """
    Lifetime entry for every track ever created. Never removed.
    """
    track_id: int
    label: str
    first_seen_ms: float
    last_seen_ms: float


def snapshot_tracks(tracks: List[Track]) -> List[TrackState]:
    """Snapshot a list of live tracks."""
    return [TrackState.from_track(t) for t in tracks]
