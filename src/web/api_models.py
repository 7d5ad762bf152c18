from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    """
    Compact status response for dashboard polling.
    """
    status: str = Field(..., description="running|degraded|offline")
    alerts: List[str] = Field(default_factory=list)
    last_frame_age_s: Optional[float] = Field(None, description="Seconds since last frame")
    fps: float = 0.0
    uptime_seconds: int = 0
    frame_count: int = 0
    traffic_state: Optional[str] = Field(None, description="no_traffic|light|moderate|heavy")
    in_danger: bool = False
    active_objects: int = 0


class TrackResponse(BaseModel):
    track_id: int
    label: str
    bbox: List[float] = Field(..., description="Normalized [x1, y1, x2, y2]")
    trail: List[List[float]] = Field(default_factory=list, description="Normalized centers, oldest first")
    status: str
    in_danger_zone: bool
    last_seen_ms: float


class TracksResponse(BaseModel):
    timestamp_ms: Optional[float] = None
    tracks: List[TrackResponse] = Field(default_factory=list)


class ReportResponse(BaseModel):
    current_state: str
    active_objects: int
    active_in_danger_zone: int
    current_class_counts: Dict[str, int] = Field(default_factory=dict)
    historical_class_counts: Dict[str, int] = Field(default_factory=dict)
    danger_counts: Dict[str, int] = Field(default_factory=dict)
    total_danger_alerts: int = 0
    durations_ms: Dict[str, float] = Field(default_factory=dict)
    duration_percentages: Dict[str, float] = Field(default_factory=dict)
    text: str = Field("", description="Human-readable report")
