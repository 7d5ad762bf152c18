"""
Traffic analytics: density classification, state durations, reports.
"""

from .traffic import TrafficDurationTracker, classify_traffic
from .report import TrafficReport, build_report, format_duration, render_report

__all__ = [
    "TrafficDurationTracker",
    "classify_traffic",
    "TrafficReport",
    "build_report",
    "format_duration",
    "render_report",
]
