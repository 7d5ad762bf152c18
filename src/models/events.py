"""
Event models emitted by the tracker for downstream alerting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class DangerZoneEntry:
    """
    A track moved into the danger zone (transition edge, not presence).

    Attributes:
        track_id: Track that entered.
        label: Class label of the track.
        timestamp_ms: Frame timestamp of the transition.
        total_for_label: Class danger counter after this entry.
        new_track: True when the track was created already inside the zone.
    """
    track_id: int
    label: str
    timestamp_ms: float
    total_for_label: int
    new_track: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "track_id": self.track_id,
            "label": self.label,
            "timestamp_ms": self.timestamp_ms,
            "total_for_label": self.total_for_label,
            "new_track": self.new_track,
        }
