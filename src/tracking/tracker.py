"""
Object tracking across frames.

Tracks are matched greedily to the nearest same-class detection by the
pixel distance between box centers. A track that misses a frame goes LOST;
a LOST track that is not matched again within the timeout is removed for
good and its id is never handed out again.

The tracker also records a trail of centers per track, an append-only
history of every track ever created, and per-class counts of danger zone
entries (transitions into the bottom band of the frame).
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

from algorithms.geometry import center_distance, in_danger_zone, to_pixel_rect
from models.detection import Detection
from models.events import DangerZoneEntry
from models.track import HistoricalRecord, Track, TrackStatus


class ObjectTracker:
    """
    Tracks objects across frames using nearest-center matching.

    This tracker is responsible for:
    - Matching detections to existing tracks of the same class
    - Moving tracks through ACTIVE -> LOST -> removed
    - Maintaining trail history and the lifetime record of every track
    - Counting danger zone entries per class

    The tracker is single-writer: call update() from one thread only.
    """

    def __init__(
        self,
        lost_track_timeout_ms: float = 2000,
        match_distance_ratio: float = 0.15,
        default_match_distance_px: float = 50.0,
        max_trail_points: int = 30,
        danger_zone_height_ratio: float = 0.2,
    ):
        """
        Initialize the object tracker.

        Args:
            lost_track_timeout_ms: How long a LOST track may go unmatched
                                   before it is removed
            match_distance_ratio: Match distance limit as a fraction of the
                                  view width
            default_match_distance_px: Match distance limit while the view
                                       width is unknown
            max_trail_points: Trail capacity per track
            danger_zone_height_ratio: Height of the danger band at the bottom
                                      of the frame, as a fraction of its height
        """
        self.lost_track_timeout_ms = lost_track_timeout_ms
        self.match_distance_ratio = match_distance_ratio
        self.default_match_distance_px = default_match_distance_px
        self.max_trail_points = max_trail_points
        self.danger_zone_height_ratio = danger_zone_height_ratio

        self.tracks: Dict[int, Track] = {}
        self.history: List[HistoricalRecord] = []
        self._history_by_id: Dict[int, HistoricalRecord] = {}
        self.class_counts: Dict[str, int] = {}
        self.danger_counts: Dict[str, int] = {}
        self.next_track_id = 0

        self.view_width = 0.0
        self.view_height = 0.0

        logging.info("Object tracker initialized")

    def set_viewport(self, width: float, height: float) -> None:
        """Set the pixel size of the view used for distance matching."""
        self.view_width = float(width)
        self.view_height = float(height)

    def match_threshold(self) -> float:
        """Maximum (exclusive) center distance in pixels for a match."""
        if self.view_width > 0:
            return self.view_width * self.match_distance_ratio
        return self.default_match_distance_px

    def update(self, detections: Sequence[Detection], now_ms: float) -> List[DangerZoneEntry]:
        """
        Update tracker with the detections of one frame.

        Args:
            detections: Suppressed detections for this frame
            now_ms: Frame timestamp in milliseconds

        Returns:
            Danger zone entries that happened on this frame
        """
        entries: List[DangerZoneEntry] = []

        if len(detections) == 0:
            # No detections: every track misses this frame
            for track_id in list(self.tracks):
                self._handle_miss(self.tracks[track_id], now_ms)
            return entries

        assigned = [False] * len(detections)
        self._update_existing_tracks(detections, assigned, now_ms, entries)
        self._add_new_tracks(detections, assigned, now_ms, entries)
        return entries

    def _is_eligible(self, track: Track, now_ms: float) -> bool:
        if track.status == TrackStatus.ACTIVE:
            return True
        return now_ms - track.last_seen_ms < self.lost_track_timeout_ms

    def _update_existing_tracks(
        self,
        detections: Sequence[Detection],
        assigned: List[bool],
        now_ms: float,
        entries: List[DangerZoneEntry],
    ) -> None:
        """Match existing tracks to detections, in track creation order."""
        threshold = self.match_threshold()
        det_rects = [
            to_pixel_rect(d.bbox.as_tuple(), self.view_width, self.view_height)
            for d in detections
        ]
        skipped = 0

        for track_id in list(self.tracks):
            track = self.tracks[track_id]

            if not self._is_eligible(track, now_ms):
                self._handle_miss(track, now_ms)
                continue

            track_rect = to_pixel_rect(track.bbox.as_tuple(), self.view_width, self.view_height)
            if track_rect is None:
                # No geometry yet: leave the track exactly as it is
                skipped += 1
                continue

            best_idx: Optional[int] = None
            min_distance = math.inf

            for idx, detection in enumerate(detections):
                if assigned[idx] or detection.class_name != track.label:
                    continue
                det_rect = det_rects[idx]
                if det_rect is None:
                    continue

                distance = center_distance(track_rect, det_rect)
                if distance < threshold and distance < min_distance:
                    min_distance = distance
                    best_idx = idx

            if best_idx is not None:
                assigned[best_idx] = True
                entry = self._apply_match(track, detections[best_idx], now_ms)
                if entry is not None:
                    entries.append(entry)
            else:
                self._handle_miss(track, now_ms)

        if skipped:
            logging.warning(
                f"Viewport size unknown, skipped matching for {skipped} track(s)"
            )

    def _apply_match(
        self,
        track: Track,
        detection: Detection,
        now_ms: float,
    ) -> Optional[DangerZoneEntry]:
        entry = None
        in_danger = in_danger_zone(detection.bbox.as_tuple(), self.danger_zone_height_ratio)
        if in_danger and not track.in_danger_zone:
            entry = self._record_danger_entry(track, now_ms, new_track=False)
        track.in_danger_zone = in_danger

        track.update(detection.bbox, now_ms)
        track.status = TrackStatus.ACTIVE

        record = self._history_by_id.get(track.track_id)
        if record is not None:
            record.last_seen_ms = now_ms
        return entry

    def _handle_miss(self, track: Track, now_ms: float) -> None:
        """ACTIVE -> LOST on the first miss; LOST past the timeout -> removed."""
        if track.status == TrackStatus.ACTIVE:
            track.status = TrackStatus.LOST
            return

        if now_ms - track.last_seen_ms >= self.lost_track_timeout_ms:
            del self.tracks[track.track_id]
            logging.debug(f"Permanently removing timed-out LOST track ID: {track.track_id}")

    def _add_new_tracks(
        self,
        detections: Sequence[Detection],
        assigned: List[bool],
        now_ms: float,
        entries: List[DangerZoneEntry],
    ) -> None:
        """Create ACTIVE tracks for detections no track claimed."""
        for idx, detection in enumerate(detections):
            if assigned[idx]:
                continue

            track = Track.create(
                track_id=self.next_track_id,
                label=detection.class_name,
                bbox=detection.bbox,
                now_ms=now_ms,
                max_trail_points=self.max_trail_points,
            )
            self.next_track_id += 1

            if in_danger_zone(detection.bbox.as_tuple(), self.danger_zone_height_ratio):
                entries.append(self._record_danger_entry(track, now_ms, new_track=True))
                track.in_danger_zone = True

            self.tracks[track.track_id] = track
            record = HistoricalRecord(
                track_id=track.track_id,
                label=track.label,
                first_seen_ms=now_ms,
                last_seen_ms=now_ms,
            )
            self.history.append(record)
            self._history_by_id[track.track_id] = record
            self.class_counts[track.label] = self.class_counts.get(track.label, 0) + 1

    def _record_danger_entry(self, track: Track, now_ms: float, new_track: bool) -> DangerZoneEntry:
        total = self.danger_counts.get(track.label, 0) + 1
        self.danger_counts[track.label] = total
        logging.info(
            f"Danger alert for {'new ' if new_track else ''}{track.label} "
            f"(ID {track.track_id})! Total: {total}"
        )
        return DangerZoneEntry(
            track_id=track.track_id,
            label=track.label,
            timestamp_ms=now_ms,
            total_for_label=total,
            new_track=new_track,
        )

    def get_track(self, track_id: int) -> Optional[Track]:
        """Get a live track by id, or None once it has been removed."""
        return self.tracks.get(track_id)

    def get_active_tracks(self) -> List[Track]:
        """Get tracks matched on the most recent frame."""
        return [t for t in self.tracks.values() if t.status == TrackStatus.ACTIVE]

    def get_all_tracks(self) -> List[Track]:
        """Get all live tracks (ACTIVE and LOST)."""
        return list(self.tracks.values())
