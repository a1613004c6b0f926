"""
Presence Monitor: people detection with stable identities and change-gated reports.

Reads frames from a camera, detects people, suppresses duplicate boxes, keeps
identities across frames and publishes a report over MQTT whenever the set of
tracked people changes.

Usage:
    python src/main.py --config config/config.yaml --device 0 --host broker.local

Arguments:
    --config: Path to configuration file
    --device: Camera device index
    --width / --height: Requested frame size
    --host / --port: MQTT broker endpoint
    --display: Show the annotated debug window
"""

import os
import sys
import argparse
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

from detection.hog_detector import HogPeopleDetector
from models.config import Config
from ops.logging import setup_logging
from pipeline.engine import create_engine_from_config
from publish.dispatcher import PublishDispatcher
from publish.report import REPORT_FORMATTERS
from publish.transport import create_transport
from runtime.context import RuntimeContext
from tracking.tracker import MATCH_POLICIES, SubjectTracker
from web.app import start_web_thread
from web.state import state as web_state

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        config_dir = os.path.dirname(config_path)
        base_path = os.path.join(config_dir, "default.yaml")
        merged: Dict[str, Any] = _read_yaml(base_path) if os.path.exists(base_path) else {}

        local_overrides_path = os.path.join(config_dir, "config.yaml")
        if os.path.exists(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(local_overrides_path))

        # Finally apply explicit config_path if it's not one of the files above
        explicit = os.path.abspath(config_path)
        if os.path.exists(config_path) and explicit not in (
            os.path.abspath(base_path),
            os.path.abspath(local_overrides_path),
        ):
            merged = _deep_merge(merged, _read_yaml(config_path))

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration values. Every section is optional; missing values
    fall back to the typed defaults in models.config.

    Returns:
        Tuple of (is_valid, error_message)
    """
    camera = config.get('camera') or {}
    if 'device_id' in camera:
        device_id = camera['device_id']
        if isinstance(device_id, bool) or not isinstance(device_id, (int, str)):
            return False, "camera.device_id must be an integer (index) or string (file path)"
        if isinstance(device_id, int) and device_id < 0:
            return False, "camera.device_id integer must be non-negative"
    if 'resolution' in camera:
        resolution = camera['resolution']
        if not isinstance(resolution, list) or len(resolution) != 2:
            return False, "camera.resolution must be a list of [width, height]"
        if not all(isinstance(x, int) and x > 0 for x in resolution):
            return False, "camera.resolution values must be positive integers"

    suppression = config.get('suppression') or {}
    if 'iou_threshold' in suppression:
        iou = suppression['iou_threshold']
        if not isinstance(iou, (int, float)) or not (0 < iou < 1):
            return False, "suppression.iou_threshold must be between 0 and 1 (exclusive)"

    tracking = config.get('tracking') or {}
    for key in ('min_width', 'min_height'):
        if key in tracking:
            value = tracking[key]
            if not isinstance(value, (int, float)) or value < 0:
                return False, f"tracking.{key} must be a non-negative number"
    if 'match_policy' in tracking and tracking['match_policy'] not in MATCH_POLICIES:
        return False, f"tracking.match_policy must be one of: {', '.join(MATCH_POLICIES)}"

    publish = config.get('publish') or {}
    if 'port' in publish:
        port = publish['port']
        if not isinstance(port, int) or not (0 < port < 65536):
            return False, "publish.port must be an integer between 1 and 65535"
    if 'qos' in publish and publish['qos'] not in (0, 1, 2):
        return False, "publish.qos must be 0, 1 or 2"
    if 'report_format' in publish and publish['report_format'] not in REPORT_FORMATTERS:
        return False, f"publish.report_format must be one of: {', '.join(REPORT_FORMATTERS)}"
    for key in ('max_pending', 'workers'):
        if key in publish:
            value = publish[key]
            if not isinstance(value, int) or value < 1:
                return False, f"publish.{key} must be a positive integer"

    log_level = config.get('log_level', 'INFO')
    if log_level not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def parse_numeric(
    value: Optional[str],
    default: Any,
    name: str,
    cast: Callable[[str], Any] = int,
    valid: Optional[Callable[[Any], bool]] = None,
) -> Any:
    """
    Parse a numeric CLI value, falling back to `default` with a warning when
    the value is not a number or fails the `valid` range check.
    """
    if value is None:
        return default
    try:
        parsed = cast(value)
    except (TypeError, ValueError):
        logging.warning(f"Invalid value for --{name}: {value!r}, using default {default!r}")
        return default
    if valid is not None and not valid(parsed):
        logging.warning(f"Out-of-range value for --{name}: {value!r}, using default {default!r}")
        return default
    return parsed


def apply_cli_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line values on top of the file configuration."""
    config.camera.device_id = parse_numeric(
        args.device, config.camera.device_id, "device", valid=lambda v: v >= 0
    )

    width, height = config.camera.resolution
    config.camera.resolution = [
        parse_numeric(args.width, width, "width", valid=lambda v: v > 0),
        parse_numeric(args.height, height, "height", valid=lambda v: v > 0),
    ]

    if args.host:
        config.publish.host = args.host
    config.publish.port = parse_numeric(
        args.port, config.publish.port, "port", valid=lambda v: 0 < v < 65536
    )
    if args.topic:
        config.publish.topic = args.topic
    if args.simple:
        config.publish.report_format = "count"
    if args.no_web:
        config.web.enabled = False
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Presence Monitor')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    # Numeric options are parsed leniently (see parse_numeric)
    parser.add_argument('--device', type=str, default=None,
                        help='Camera device index')
    parser.add_argument('--width', type=str, default=None,
                        help='Requested frame width')
    parser.add_argument('--height', type=str, default=None,
                        help='Requested frame height')
    parser.add_argument('--host', type=str, default=None,
                        help='MQTT broker host')
    parser.add_argument('--port', type=str, default=None,
                        help='MQTT broker port')
    parser.add_argument('--topic', type=str, default=None,
                        help='MQTT topic for reports')
    parser.add_argument('--simple', action='store_true',
                        help='Publish the bare subject count instead of per-subject lines')
    parser.add_argument('--display', action='store_true',
                        help='Show the annotated debug window')
    parser.add_argument('--no-web', action='store_true',
                        help='Do not start the status API')
    parser.add_argument('--log-level', type=str, default=None, choices=VALID_LOG_LEVELS,
                        help='Override log_level from the config file')
    return parser


def build_context(config: Config) -> RuntimeContext:
    """Create detector, tracker, transport and dispatcher from config."""
    detector = HogPeopleDetector(config.detection)
    tracker = SubjectTracker(
        min_width=config.tracking.min_width,
        min_height=config.tracking.min_height,
        match_policy=config.tracking.match_policy,
        one_to_one=config.tracking.one_to_one,
    )
    transport = create_transport(config.publish)
    dispatcher = PublishDispatcher.from_config(transport, config.publish)
    return RuntimeContext(
        config=config,
        detector=detector,
        tracker=tracker,
        dispatcher=dispatcher,
        web_state=web_state,
    )


def main(argv: Optional[List[str]] = None):
    """Main application function."""
    args = build_parser().parse_args(argv)

    raw_config = load_config(args.config)
    if args.log_level:
        raw_config['log_level'] = args.log_level

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    config = Config.from_dict(raw_config)
    setup_logging(config.log_path, config.log_level)
    config = apply_cli_overrides(config, args)

    logging.info("Starting Presence Monitor")

    ctx = build_context(config)
    web_state.set_config(config)
    web_state.set_dispatcher(ctx.dispatcher)

    if config.web.enabled:
        start_web_thread(config.web.host, config.web.port)

    transport = ctx.dispatcher.transport
    transport.connect()

    engine = create_engine_from_config(config, ctx, display=args.display)
    try:
        engine.run()
    except RuntimeError as e:
        logging.error(f"Fatal: {e}")
        sys.exit(1)
    finally:
        transport.close()
        logging.info("Presence Monitor stopped")


if __name__ == "__main__":
    main()
