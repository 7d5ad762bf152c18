"""
Main application for the road hazard monitor.

Runs frames through the detector output decoder and object tracker, raises
danger zone alerts and tracks traffic density over time.

Usage:
    python src/main.py --config config/config.yaml
    python src/main.py --replay data/recording.npz --no-web --report

Arguments:
    --config: Path to configuration file
    --replay: Replay recorded model output instead of running a model
    --no-web: Do not start the web API
    --report: Print the traffic analysis report on exit
"""

import os
import sys
import argparse
import logging
import threading
from typing import Dict, Any, Tuple, Optional

import uvicorn
import yaml

from analytics.report import render_report
from models.config import Config
from ops.logging import setup_logging
from pipeline.engine import create_engine_from_config
from web.app import create_app
from web.state import state as web_state

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
VALID_INFERENCE_BACKENDS = ('replay', 'tflite')


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['detection', 'inference', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Detection settings
    detection = config.get('detection', {}) or {}
    if not isinstance(detection.get('labels_path', ''), str):
        return False, "detection.labels_path must be a string"
    if 'confidence_threshold' in detection:
        conf = detection['confidence_threshold']
        if not _is_number(conf) or not (0 <= conf <= 1):
            return False, "detection.confidence_threshold must be between 0 and 1"
    if 'iou_threshold' in detection:
        iou = detection['iou_threshold']
        if not _is_number(iou) or not (0 < iou <= 1):
            return False, "detection.iou_threshold must be between 0 and 1"

    # Tracking settings
    tracking = config.get('tracking', {}) or {}
    if 'lost_track_timeout_ms' in tracking:
        timeout = tracking['lost_track_timeout_ms']
        if not _is_number(timeout) or timeout <= 0:
            return False, "tracking.lost_track_timeout_ms must be a positive number"
    if 'match_distance_ratio' in tracking:
        ratio = tracking['match_distance_ratio']
        if not _is_number(ratio) or ratio <= 0:
            return False, "tracking.match_distance_ratio must be a positive number"
    if 'default_match_distance_px' in tracking:
        px = tracking['default_match_distance_px']
        if not _is_number(px) or px <= 0:
            return False, "tracking.default_match_distance_px must be a positive number"
    if 'max_trail_points' in tracking:
        mtp = tracking['max_trail_points']
        if not isinstance(mtp, int) or mtp <= 0:
            return False, "tracking.max_trail_points must be a positive integer"

    # Danger zone
    danger_zone = config.get('danger_zone', {}) or {}
    if 'height_ratio' in danger_zone:
        hr = danger_zone['height_ratio']
        if not _is_number(hr) or not (0 < hr <= 1):
            return False, "danger_zone.height_ratio must be between 0 and 1"

    # Traffic density thresholds
    traffic = config.get('traffic', {}) or {}
    light_max = traffic.get('light_max_objects', 5)
    moderate_max = traffic.get('moderate_max_objects', 8)
    if not isinstance(light_max, int) or light_max < 1:
        return False, "traffic.light_max_objects must be a positive integer"
    if not isinstance(moderate_max, int) or moderate_max < light_max:
        return False, "traffic.moderate_max_objects must be an integer >= traffic.light_max_objects"
    if 'max_frame_delta_ms' in traffic:
        delta = traffic['max_frame_delta_ms']
        if not _is_number(delta) or delta <= 0:
            return False, "traffic.max_frame_delta_ms must be a positive number"

    # Inference backend
    inference = config.get('inference', {}) or {}
    backend = inference.get('backend', 'replay')
    if backend not in VALID_INFERENCE_BACKENDS:
        return False, f"inference.backend must be one of: {', '.join(VALID_INFERENCE_BACKENDS)}"
    if backend == 'tflite':
        if not isinstance(inference.get('model_path'), str) or not inference.get('model_path'):
            return False, "inference.model_path is required when inference.backend is 'tflite'"
    if 'num_threads' in inference:
        if not isinstance(inference['num_threads'], int) or inference['num_threads'] <= 0:
            return False, "inference.num_threads must be a positive integer"

    # Optional camera settings
    camera = config.get('camera')
    if camera:
        if 'device_id' in camera and not isinstance(camera['device_id'], (int, str)):
            return False, "camera.device_id must be an integer (index) or string (URL/path)"
        if isinstance(camera.get('device_id'), int) and camera['device_id'] < 0:
            return False, "camera.device_id integer must be non-negative"
        if 'resolution' in camera:
            res = camera['resolution']
            if not isinstance(res, list) or len(res) != 2:
                return False, "camera.resolution must be a list of [width, height]"
            if not all(isinstance(x, int) and x > 0 for x in res):
                return False, "camera.resolution values must be positive integers"
        if 'fps' in camera and (not isinstance(camera['fps'], int) or camera['fps'] <= 0):
            return False, "camera.fps must be a positive integer"
        if camera.get('backend', 'opencv') != 'opencv':
            return False, "camera.backend must be: opencv"
        if camera.get('rotate', 0) not in (0, 90, 180, 270, None):
            return False, "camera.rotate must be one of: 0, 90, 180, 270"

    # Viewport override
    view = config.get('view', {}) or {}
    for key in ('width', 'height'):
        if key in view and (not isinstance(view[key], int) or view[key] < 0):
            return False, f"view.{key} must be a non-negative integer"

    # Web settings
    web = config.get('web', {}) or {}
    if 'port' in web and (not isinstance(web['port'], int) or not (0 < web['port'] < 65536)):
        return False, "web.port must be an integer between 1 and 65535"

    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='RoadGuard - road hazard monitor')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--replay', type=str, default=None,
                        help='Replay recorded model output (.npy/.npz)')
    parser.add_argument('--no-web', action='store_true',
                        help='Do not start the web API')
    parser.add_argument('--report', action='store_true',
                        help='Print the traffic analysis report on exit')
    args = parser.parse_args()

    raw_config = load_config(args.config)

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    config = Config.from_dict(raw_config)
    setup_logging(config.log_path, config.log_level)
    logging.info("Starting RoadGuard")

    try:
        engine = create_engine_from_config(config, replay_path=args.replay, web_state=web_state)
    except (FileNotFoundError, ImportError, ValueError) as e:
        logging.error(f"Failed to initialize pipeline: {e}")
        sys.exit(1)

    web_state.set_config(config)
    if config.web.enabled and not args.no_web:
        def run_web_app():
            uvicorn.run(
                create_app(),
                host=config.web.host,
                port=config.web.port,
                log_level="info",
            )

        web_thread = threading.Thread(target=run_web_app, daemon=True)
        web_thread.start()
        logging.info(f"Web interface started on port {config.web.port}")

    engine.run()

    if args.report:
        print(render_report(engine.frame_pipeline.report()))

    logging.info("RoadGuard stopped")


if __name__ == "__main__":
    main()
