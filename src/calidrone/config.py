"""
Unified configuration for CaliDrone.

Hierarchical loading, lowest to highest priority:
1. Defaults (``CaliDroneConfig.DEFAULTS``)
2. JSON config file (``calidrone_config.json`` in the working directory, or
   the file named by ``CALIDRONE_CONFIG_FILE``)
3. Environment variables (``CALIDRONE_<KEY>``)

Usage:
    from calidrone.config import get_config

    cell = get_config().grid_cell_size
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = "CALIDRONE_"
DEFAULT_CONFIG_FILE = "calidrone_config.json"

VALID_FORMATS = ("mp4", "avi", "mov", "webm")
VALID_QUALITIES = ("ultra", "high", "medium", "low")
VALID_FRAMERATES = (15, 24, 30, 60)
VALID_RESOLUTIONS = ("1920x1080", "1280x720", "854x480", "640x360")


class CaliDroneConfig:
    """Configuration values for the planner and camera core."""

    DEFAULTS: Dict[str, Any] = {
        'debug_mode': False,
        'verbose_logging': False,
        # planner / geometry
        'grid_cell_size': 0.5,
        'min_hover_height': 1.0,
        'grid_size': 20,
        'empty_bounds_size': 5.0,
        'framing_multiplier': 1.5,
        'min_framing_distance': 5.0,
        'average_speed': 5.0,
        # camera / recording
        'demo_auto_stop_seconds': 10,
        'tick_interval_seconds': 1.0,
        'zoom_min': 0.5,
        'zoom_max': 3.0,
        'zoom_step': 0.25,
        'default_format': 'mp4',
        'default_quality': 'high',
        'default_framerate': 30,
        'default_resolution': '1920x1080',
        'camera_index': 0,
        'export_directory': '',
    }

    def __init__(self, config_file: Optional[str] = None):
        self._config: Dict[str, Any] = {}
        self._config_file = config_file or os.getenv(f"{ENV_PREFIX}CONFIG_FILE") or DEFAULT_CONFIG_FILE
        self._load_configuration()

    def _load_configuration(self):
        """Load configuration from all sources in priority order."""
        self._config = self.DEFAULTS.copy()
        self._load_from_json_config()
        self._load_from_environment()
        self._validate_config()

        if self.debug_mode:
            logger.info("calidrone configuration loaded: %s", self._config)

    def _load_from_json_config(self):
        config_path = Path(self._config_file)
        if not config_path.exists():
            logger.debug("No config file found at %s", config_path)
            return

        try:
            with open(config_path, 'r') as f:
                json_config = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load JSON config from %s: %s", config_path, e)
            return

        if not isinstance(json_config, dict):
            logger.warning("Ignoring config file %s: top level must be an object", config_path)
            return

        # keys starting with _ are comments
        filtered = {k: v for k, v in json_config.items() if not k.startswith('_')}
        unknown = sorted(set(filtered) - set(self.DEFAULTS))
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", unknown)
        self._config.update({k: v for k, v in filtered.items() if k in self.DEFAULTS})
        logger.debug("Loaded JSON config from %s", config_path)

    def _load_from_environment(self):
        for key in self._config.keys():
            env_key = f"{ENV_PREFIX}{key.upper()}"
            env_value = os.getenv(env_key)
            if env_value is not None:
                converted = self._convert_env_value(env_value, self.DEFAULTS[key])
                self._config[key] = converted
                logger.debug("Loaded environment variable: %s = %s", env_key, converted)

    def _convert_env_value(self, env_value: str, default_value: Any) -> Any:
        """Convert environment variable string to the default's type."""
        if isinstance(default_value, bool):
            return env_value.lower() in ('true', '1', 'yes', 'on')
        elif isinstance(default_value, int):
            try:
                return int(env_value)
            except ValueError:
                logger.warning("Invalid integer value in environment: %s", env_value)
                return default_value
        elif isinstance(default_value, float):
            try:
                return float(env_value)
            except ValueError:
                logger.warning("Invalid float value in environment: %s", env_value)
                return default_value
        return env_value

    def _validate_config(self):
        """Replace out-of-range values with their defaults."""
        for key in ('grid_cell_size', 'empty_bounds_size', 'framing_multiplier',
                    'min_framing_distance', 'average_speed', 'tick_interval_seconds', 'zoom_step'):
            self._require(key, lambda v: isinstance(v, (int, float)) and v > 0)
        for key in ('min_hover_height', 'zoom_min', 'zoom_max'):
            self._require(key, lambda v: isinstance(v, (int, float)) and v >= 0)
        self._require('grid_size', lambda v: isinstance(v, int) and v > 0)
        self._require('demo_auto_stop_seconds', lambda v: isinstance(v, int) and v > 0)
        self._require('camera_index', lambda v: isinstance(v, int) and v >= 0)
        self._require('default_format', lambda v: v in VALID_FORMATS)
        self._require('default_quality', lambda v: v in VALID_QUALITIES)
        self._require('default_framerate', lambda v: v in VALID_FRAMERATES)
        self._require('default_resolution', lambda v: v in VALID_RESOLUTIONS)

        if self._config['zoom_min'] > self._config['zoom_max']:
            logger.warning("zoom_min %s exceeds zoom_max %s, using defaults",
                           self._config['zoom_min'], self._config['zoom_max'])
            self._config['zoom_min'] = self.DEFAULTS['zoom_min']
            self._config['zoom_max'] = self.DEFAULTS['zoom_max']

    def _require(self, key: str, check) -> None:
        value = self._config.get(key)
        if not check(value):
            logger.warning("Invalid %s %r, using %r", key, value, self.DEFAULTS[key])
            self._config[key] = self.DEFAULTS[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set configuration value (runtime only)."""
        self._config[key] = value

    def get_all(self) -> Dict[str, Any]:
        return self._config.copy()

    def reload(self):
        self._load_configuration()

    # Convenience properties
    @property
    def debug_mode(self) -> bool:
        return bool(self._config.get('debug_mode', False))

    @property
    def verbose_logging(self) -> bool:
        return bool(self._config.get('verbose_logging', False))

    @property
    def grid_cell_size(self) -> float:
        return float(self._config['grid_cell_size'])

    @property
    def min_hover_height(self) -> float:
        return float(self._config['min_hover_height'])

    @property
    def grid_size(self) -> int:
        return int(self._config['grid_size'])

    @property
    def empty_bounds_size(self) -> float:
        return float(self._config['empty_bounds_size'])

    @property
    def framing_multiplier(self) -> float:
        return float(self._config['framing_multiplier'])

    @property
    def min_framing_distance(self) -> float:
        return float(self._config['min_framing_distance'])

    @property
    def average_speed(self) -> float:
        return float(self._config['average_speed'])

    @property
    def demo_auto_stop_seconds(self) -> int:
        return int(self._config['demo_auto_stop_seconds'])

    @property
    def tick_interval_seconds(self) -> float:
        return float(self._config['tick_interval_seconds'])

    @property
    def zoom_min(self) -> float:
        return float(self._config['zoom_min'])

    @property
    def zoom_max(self) -> float:
        return float(self._config['zoom_max'])

    @property
    def zoom_step(self) -> float:
        return float(self._config['zoom_step'])

    @property
    def default_format(self) -> str:
        return str(self._config['default_format'])

    @property
    def default_quality(self) -> str:
        return str(self._config['default_quality'])

    @property
    def default_framerate(self) -> int:
        return int(self._config['default_framerate'])

    @property
    def default_resolution(self) -> str:
        return str(self._config['default_resolution'])

    @property
    def camera_index(self) -> int:
        return int(self._config['camera_index'])

    @property
    def export_directory(self) -> str:
        """Export directory with cross-platform temp dir fallback."""
        configured = str(self._config.get('export_directory') or '')
        if not configured:
            return os.path.join(tempfile.gettempdir(), 'calidrone')
        return configured

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {len(self._config)} settings>"


_config_instance: Optional[CaliDroneConfig] = None


def get_config() -> CaliDroneConfig:
    """Get the process-wide configuration instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = CaliDroneConfig()
    return _config_instance


def reset_config() -> None:
    """Forget the cached instance so the next get_config() reloads."""
    global _config_instance
    _config_instance = None
