"""
Per-frame orchestration: decode -> suppress -> track -> traffic state.

FramePipeline owns the decoder, the tracker and the duration integrators and
is their only writer. Everything it returns is a snapshot, so callers on
other threads can hold on to results safely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from algorithms.geometry import in_danger_zone
from analytics.report import TrafficReport, build_report
from analytics.traffic import TrafficDurationTracker, classify_traffic
from detection.decoder import OutputDecoder
from detection.nms import non_max_suppression
from models.config import Config
from models.detection import Detection
from models.events import DangerZoneEntry
from models.track import TrackState, snapshot_tracks
from models.traffic import TrafficState
from tracking.tracker import ObjectTracker


@dataclass
class FrameResult:
    """
    Output of one processed frame.

    Attributes:
        timestamp_ms: Frame timestamp.
        detections: Detections that survived suppression.
        active_tracks: Snapshots of tracks matched or created on this frame.
        danger_entries: Danger zone transitions on this frame.
        traffic_state: Density state after this frame.
        in_danger: Whether any active track is in the danger zone.
        danger_state_changed: in_danger differs from the previous frame.
    """
    timestamp_ms: float
    detections: List[Detection] = field(default_factory=list)
    active_tracks: List[TrackState] = field(default_factory=list)
    danger_entries: List[DangerZoneEntry] = field(default_factory=list)
    traffic_state: TrafficState = TrafficState.NO_TRAFFIC
    in_danger: bool = False
    danger_state_changed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp_ms": self.timestamp_ms,
            "detections": len(self.detections),
            "active_tracks": [t.to_dict() for t in self.active_tracks],
            "danger_entries": [e.to_dict() for e in self.danger_entries],
            "traffic_state": self.traffic_state.value,
            "in_danger": self.in_danger,
            "danger_state_changed": self.danger_state_changed,
        }


class FramePipeline:
    """
    Runs one frame of model output through the detection and tracking core.

    Example:
        pipeline = FramePipeline(decoder, ObjectTracker())
        pipeline.set_viewport(1280, 720)
        result = pipeline.process(output_buffer, now_ms)
    """

    def __init__(
        self,
        decoder: OutputDecoder,
        tracker: ObjectTracker,
        iou_threshold: float = 0.5,
        light_max_objects: int = 5,
        moderate_max_objects: int = 8,
        max_frame_delta_ms: float = 5000,
    ):
        self.decoder = decoder
        self.tracker = tracker
        self.iou_threshold = iou_threshold
        self.light_max_objects = light_max_objects
        self.moderate_max_objects = moderate_max_objects
        self.durations = TrafficDurationTracker(max_frame_delta_ms=max_frame_delta_ms)
        self.frames_processed = 0
        self._in_danger = False

    @classmethod
    def from_config(
        cls,
        config: Config,
        labels: Sequence[str],
        output_shape: Tuple[int, int],
    ) -> "FramePipeline":
        """Build the decoder, tracker and pipeline from typed config."""
        channels, elements = output_shape
        decoder = OutputDecoder(
            channels=channels,
            elements=elements,
            labels=labels,
            confidence_threshold=config.detection.confidence_threshold,
        )
        tracker = ObjectTracker(
            lost_track_timeout_ms=config.tracking.lost_track_timeout_ms,
            match_distance_ratio=config.tracking.match_distance_ratio,
            default_match_distance_px=config.tracking.default_match_distance_px,
            max_trail_points=config.tracking.max_trail_points,
            danger_zone_height_ratio=config.danger_zone.height_ratio,
        )
        return cls(
            decoder,
            tracker,
            iou_threshold=config.detection.iou_threshold,
            light_max_objects=config.traffic.light_max_objects,
            moderate_max_objects=config.traffic.moderate_max_objects,
            max_frame_delta_ms=config.traffic.max_frame_delta_ms,
        )

    @property
    def danger_zone_ratio(self) -> float:
        return self.tracker.danger_zone_height_ratio

    def set_viewport(self, width: float, height: float) -> None:
        self.tracker.set_viewport(width, height)

    def process(self, buffer: np.ndarray, now_ms: float) -> FrameResult:
        """
        Process one frame of raw model output.

        Empty frames still go through the tracker so that lost tracks age out.
        """
        self.frames_processed += 1

        candidates = self.decoder.decode(buffer)
        detections = non_max_suppression(candidates, self.iou_threshold) if candidates else []

        entries = self.tracker.update(detections, now_ms)
        active = self.tracker.get_active_tracks()

        if detections:
            state = classify_traffic(len(active), self.light_max_objects, self.moderate_max_objects)
        else:
            state = TrafficState.NO_TRAFFIC
        self.durations.update(state, now_ms)

        in_danger = any(
            in_danger_zone(t.bbox.as_tuple(), self.danger_zone_ratio) for t in active
        )
        changed = in_danger != self._in_danger
        self._in_danger = in_danger
        if changed:
            logging.debug(f"Danger state changed: in_danger={in_danger}")

        return FrameResult(
            timestamp_ms=now_ms,
            detections=detections,
            active_tracks=snapshot_tracks(active),
            danger_entries=entries,
            traffic_state=state,
            in_danger=in_danger,
            danger_state_changed=changed,
        )

    def report(self, now_ms: Optional[float] = None) -> TrafficReport:
        """
        Build the lifetime report.

        Passing now_ms first credits the time since the last frame to the
        current traffic state.
        """
        if now_ms is not None:
            self.durations.flush(now_ms)
        return build_report(self.tracker, self.durations, self.danger_zone_ratio)
