"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class DetectionConfig:
    """Output decoding and suppression configuration."""
    labels_path: str = "config/labels.txt"
    confidence_threshold: float = 0.3
    iou_threshold: float = 0.5

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            labels_path=d.get("labels_path", "config/labels.txt"),
            confidence_threshold=d.get("confidence_threshold", 0.3),
            iou_threshold=d.get("iou_threshold", 0.5),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "labels_path": self.labels_path,
            "confidence_threshold": self.confidence_threshold,
            "iou_threshold": self.iou_threshold,
        }


@dataclass
class TrackingConfig:
    """Tracking configuration."""
    lost_track_timeout_ms: int = 2000
    match_distance_ratio: float = 0.15
    default_match_distance_px: float = 50.0
    max_trail_points: int = 30

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackingConfig":
        return cls(
            lost_track_timeout_ms=d.get("lost_track_timeout_ms", 2000),
            match_distance_ratio=d.get("match_distance_ratio", 0.15),
            default_match_distance_px=d.get("default_match_distance_px", 50.0),
            max_trail_points=d.get("max_trail_points", 30),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lost_track_timeout_ms": self.lost_track_timeout_ms,
            "match_distance_ratio": self.match_distance_ratio,
            "default_match_distance_px": self.default_match_distance_px,
            "max_trail_points": self.max_trail_points,
        }


@dataclass
class DangerZoneConfig:
    """Danger zone: the bottom `height_ratio` of the frame."""
    height_ratio: float = 0.2

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DangerZoneConfig":
        return cls(height_ratio=d.get("height_ratio", 0.2))

    def to_dict(self) -> Dict[str, Any]:
        return {"height_ratio": self.height_ratio}


@dataclass
class TrafficConfig:
    """Traffic density thresholds and duration accounting."""
    light_max_objects: int = 5
    moderate_max_objects: int = 8
    max_frame_delta_ms: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrafficConfig":
        return cls(
            light_max_objects=d.get("light_max_objects", 5),
            moderate_max_objects=d.get("moderate_max_objects", 8),
            max_frame_delta_ms=d.get("max_frame_delta_ms", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "light_max_objects": self.light_max_objects,
            "moderate_max_objects": self.moderate_max_objects,
            "max_frame_delta_ms": self.max_frame_delta_ms,
        }


@dataclass
class InferenceConfig:
    """Inference backend configuration."""
    backend: str = "replay"
    model_path: str = ""
    replay_path: str = ""
    num_threads: int = 4

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "InferenceConfig":
        return cls(
            backend=d.get("backend", "replay"),
            model_path=d.get("model_path", ""),
            replay_path=d.get("replay_path", ""),
            num_threads=d.get("num_threads", 4),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "model_path": self.model_path,
            "replay_path": self.replay_path,
            "num_threads": self.num_threads,
        }


@dataclass
class CameraConfig:
    """Camera configuration."""
    backend: str = "opencv"
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [640, 480])
    fps: int = 30
    rotate: int = 0
    flip_horizontal: bool = False
    flip_vertical: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        return cls(
            backend=d.get("backend", "opencv"),
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [640, 480]),
            fps=d.get("fps", 30),
            rotate=d.get("rotate", 0),
            flip_horizontal=d.get("flip_horizontal", False),
            flip_vertical=d.get("flip_vertical", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "rotate": self.rotate,
            "flip_horizontal": self.flip_horizontal,
            "flip_vertical": self.flip_vertical,
        }


@dataclass
class ViewConfig:
    """Viewport used for pixel-space matching. 0 means use the frame size."""
    width: int = 0
    height: int = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ViewConfig":
        return cls(width=d.get("width", 0), height=d.get("height", 0))

    def to_dict(self) -> Dict[str, Any]:
        return {"width": self.width, "height": self.height}


@dataclass
class WebConfig:
    """Status API configuration."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=d.get("enabled", True),
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    danger_zone: DangerZoneConfig = field(default_factory=DangerZoneConfig)
    traffic: TrafficConfig = field(default_factory=TrafficConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    camera: Optional[CameraConfig] = None
    view: ViewConfig = field(default_factory=ViewConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/roadguard.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        camera_dict = d.get("camera")
        return cls(
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            tracking=TrackingConfig.from_dict(d.get("tracking", {}) or {}),
            danger_zone=DangerZoneConfig.from_dict(d.get("danger_zone", {}) or {}),
            traffic=TrafficConfig.from_dict(d.get("traffic", {}) or {}),
            inference=InferenceConfig.from_dict(d.get("inference", {}) or {}),
            camera=CameraConfig.from_dict(camera_dict) if camera_dict else None,
            view=ViewConfig.from_dict(d.get("view", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            log_path=d.get("log_path", "logs/roadguard.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary."""
        d: Dict[str, Any] = {
            "detection": self.detection.to_dict(),
            "tracking": self.tracking.to_dict(),
            "danger_zone": self.danger_zone.to_dict(),
            "traffic": self.traffic.to_dict(),
            "inference": self.inference.to_dict(),
            "view": self.view.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
        if self.camera:
            d["camera"] = self.camera.to_dict()
        return d
