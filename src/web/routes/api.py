from __future__ import annotations

import platform
import time
from typing import List, Optional

from fastapi import APIRouter, HTTPException

from analytics.report import render_report
from ..state import state
from ..api_models import ReportResponse, StatusResponse, TrackResponse, TracksResponse

router = APIRouter()


def _derive_status(last_frame_age: Optional[float]):
    """
    Lightweight status classifier used by /api/status.
    Thresholds: >10s since last frame => offline; >2s => degraded.
    """
    level = "running"
    alerts: List[str] = []
    if last_frame_age is None or last_frame_age > 10:
        level = "offline"
        alerts.append("no_frames")
    elif last_frame_age > 2:
        level = "degraded"
        alerts.append("frames_stale")
    return level, alerts


@router.get("/health")
def health():
    cfg = state.config
    return {
        "timestamp": time.time(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "log_path": cfg.log_path if cfg is not None else None,
    }


@router.get("/status", response_model=StatusResponse)
def status():
    now = time.time()
    stats = state.get_system_stats_copy()
    last_ts = stats.get("last_frame_ts")
    last_frame_age = (now - last_ts) if last_ts else None
    level, alerts = _derive_status(last_frame_age)

    result = state.get_latest_result()
    if result is not None and result.in_danger:
        alerts.append("danger_zone")

    return StatusResponse(
        status=level,
        alerts=alerts,
        last_frame_age_s=last_frame_age,
        fps=round(stats.get("fps", 0.0), 2),
        uptime_seconds=int(now - stats["start_time"]),
        frame_count=stats.get("frame_count", 0),
        traffic_state=result.traffic_state.value if result is not None else None,
        in_danger=result.in_danger if result is not None else False,
        active_objects=len(result.active_tracks) if result is not None else 0,
    )


@router.get("/tracks", response_model=TracksResponse)
def tracks():
    result = state.get_latest_result()
    if result is None:
        return TracksResponse()
    return TracksResponse(
        timestamp_ms=result.timestamp_ms,
        tracks=[TrackResponse(**t.to_dict()) for t in result.active_tracks],
    )


@router.get("/report", response_model=ReportResponse)
def report():
    current = state.get_report()
    if current is None:
        raise HTTPException(status_code=404, detail="No frames processed yet")
    return ReportResponse(**current.to_dict(), text=render_report(current))
