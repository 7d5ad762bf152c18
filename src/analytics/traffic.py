from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from models.traffic import TrafficState


def classify_traffic(active_count: int, light_max: int = 5, moderate_max: int = 8) -> TrafficState:
    """Map the number of ACTIVE tracks to a traffic density state."""
    if active_count <= 0:
        return TrafficState.NO_TRAFFIC
    if active_count <= light_max:
        return TrafficState.LIGHT
    if active_count <= moderate_max:
        return TrafficState.MODERATE
    return TrafficState.HEAVY


@dataclass
class TrafficDurationTracker:
    """
    Time spent in each traffic state, integrated frame by frame.

    Each update credits the time since the previous update to the state that
    was current during that interval, then switches to the new state.
    Deltas that are not positive, or not below max_frame_delta_ms, are
    treated as clock anomalies and dropped.
    """
    max_frame_delta_ms: float = 5000
    current_state: TrafficState = TrafficState.NO_TRAFFIC
    last_update_ms: Optional[float] = None
    durations_ms: Dict[TrafficState, float] = field(
        default_factory=lambda: {s: 0.0 for s in TrafficState}
    )

    def update(self, new_state: Optional[TrafficState], now_ms: float) -> None:
        if self.last_update_ms is not None:
            delta = now_ms - self.last_update_ms
            if 0 < delta < self.max_frame_delta_ms:
                self.durations_ms[self.current_state] += delta

        if new_state is not None:
            self.current_state = new_state
        self.last_update_ms = now_ms

    def flush(self, now_ms: float) -> None:
        """Credit elapsed time to the current state without changing it."""
        self.update(None, now_ms)

    def totals(self) -> Dict[TrafficState, float]:
        return dict(self.durations_ms)

    @property
    def total_ms(self) -> float:
        return sum(self.durations_ms.values())
