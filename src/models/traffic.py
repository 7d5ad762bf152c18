"""
Traffic density states.
"""

from __future__ import annotations

from enum import Enum


class TrafficState(str, Enum):
    """Traffic density derived from the number of ACTIVE tracks."""
    NO_TRAFFIC = "no_traffic"
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    TrafficState.NO_TRAFFIC: "No Traffic",
    TrafficState.LIGHT: "Light Traffic",
    TrafficState.MODERATE: "Moderate Traffic",
    TrafficState.HEAVY: "Heavy Traffic",
}
