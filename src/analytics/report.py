"""
Lifetime traffic report.

Summarizes what the tracker has seen: live objects, per-class lifetime
counts, danger zone entries, and time spent in each traffic state.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List

from algorithms.geometry import in_danger_zone
from models.traffic import TrafficState
from tracking.tracker import ObjectTracker

from .traffic import TrafficDurationTracker


@dataclass
class TrafficReport:
    """
    Snapshot of session statistics.

    Attributes:
        current_state: Traffic state at report time.
        active_objects: Number of ACTIVE tracks.
        active_in_danger_zone: ACTIVE tracks whose box is in the danger zone.
        current_class_counts: ACTIVE tracks per class.
        historical_class_counts: Tracks ever created per class.
        danger_counts: Danger zone entries per class.
        durations_ms: Milliseconds spent in each traffic state.
    """
    current_state: TrafficState
    active_objects: int
    active_in_danger_zone: int
    current_class_counts: Dict[str, int] = field(default_factory=dict)
    historical_class_counts: Dict[str, int] = field(default_factory=dict)
    danger_counts: Dict[str, int] = field(default_factory=dict)
    durations_ms: Dict[TrafficState, float] = field(default_factory=dict)

    @property
    def total_danger_alerts(self) -> int:
        return sum(self.danger_counts.values())

    @property
    def total_duration_ms(self) -> float:
        return sum(self.durations_ms.values())

    def duration_percentages(self) -> Dict[TrafficState, float]:
        """Share of tracked time per state (0-100). Empty until time accrues."""
        total = self.total_duration_ms
        if total <= 0:
            return {}
        return {state: ms / total * 100.0 for state, ms in self.durations_ms.items()}

    def to_dict(self) -> Dict[str, Any]:
        percentages = self.duration_percentages()
        return {
            "current_state": self.current_state.value,
            "active_objects": self.active_objects,
            "active_in_danger_zone": self.active_in_danger_zone,
            "current_class_counts": dict(self.current_class_counts),
            "historical_class_counts": dict(self.historical_class_counts),
            "danger_counts": dict(self.danger_counts),
            "total_danger_alerts": self.total_danger_alerts,
            "durations_ms": {s.value: ms for s, ms in self.durations_ms.items()},
            "duration_percentages": {s.value: p for s, p in percentages.items()},
        }


def build_report(
    tracker: ObjectTracker,
    durations: TrafficDurationTracker,
    danger_zone_ratio: float = 0.2,
) -> TrafficReport:
    """Build a report from the tracker and duration integrators."""
    active = tracker.get_active_tracks()
    in_danger = [
        t for t in active
        if in_danger_zone(t.bbox.as_tuple(), danger_zone_ratio)
    ]

    return TrafficReport(
        current_state=durations.current_state,
        active_objects=len(active),
        active_in_danger_zone=len(in_danger),
        current_class_counts=dict(sorted(Counter(t.label for t in active).items())),
        historical_class_counts=dict(sorted(tracker.class_counts.items())),
        danger_counts=dict(sorted(tracker.danger_counts.items())),
        durations_ms=durations.totals(),
    )


def format_duration(milliseconds: float) -> str:
    """Render a duration as 'S sec', 'M min SS sec' or 'H hr MM min SS sec'."""
    if milliseconds < 0:
        return "N/A"

    total_seconds = int(milliseconds // 1000)
    hours = total_seconds // 3600
    minutes = (total_seconds // 60) % 60
    seconds = total_seconds % 60

    if hours > 0:
        return f"{hours} hr {minutes:02d} min {seconds:02d} sec"
    if minutes > 0:
        return f"{minutes} min {seconds:02d} sec"
    return f"{seconds} sec"


def render_report(report: TrafficReport) -> str:
    """Plain-text report for logs and the CLI."""
    lines: List[str] = [
        "----- Traffic Analysis Report -----",
        f"Current Traffic Status: {report.current_state.display_name}",
        f"Objects Currently Active: {report.active_objects}",
        f"Objects Currently Active in Danger Zone: {report.active_in_danger_zone}",
        f"Total Danger Zone Alerts Issued (by class): {report.total_danger_alerts}",
        "",
        "Time per traffic state:",
    ]

    percentages = report.duration_percentages()
    if not percentages:
        lines.append("  No Traffic Data Yet")
    for state in TrafficState:
        ms = report.durations_ms.get(state, 0.0)
        if ms > 0:
            lines.append(
                f"  {state.display_name}: {format_duration(ms)} ({percentages[state]:.1f}%)"
            )

    for title, counts in (
        ("Objects currently active (by class):", report.current_class_counts),
        ("Objects detected since start (by class):", report.historical_class_counts),
        ("Danger zone entries (by class):", report.danger_counts),
    ):
        if counts:
            lines.append("")
            lines.append(title)
            lines.extend(f"  {label}: {count}" for label, count in counts.items())

    return "\n".join(lines)
