"""
Centralized configuration manager.
Loads the YAML config over built-in defaults and provides typed access.

    - Schema validation for critical config fields
    - Dot-path access: config.get("suspension.suspend_after_ms")
    - Reset support for testing
"""

import copy
import os
import yaml
import logging

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
_CONFIG_DIR = os.path.join(_BASE_DIR, "config")

DEFAULTS = {
    "camera": {
        "device_id": 0,
        "width": 640,
        "height": 480,
        "fps": 30,
        "backend": "auto",
        "buffer_size": 1,
        "flip_horizontal": False,
        "warmup_frames": 5,
    },
    "mediapipe": {
        "model_path": None,
        "min_detection_confidence": 0.5,
        "min_presence_confidence": 0.5,
        "min_tracking_confidence": 0.5,
    },
    "recognition": {
        "thumb_index_base_min": 0.12,
        "thumb_wrist_min": 0.18,
        "ok_distance": 0.06,
        "direction_deadzone": 0.08,
        "mirrored_view": True,
        "stable_frames": 3,
    },
    "motion": {
        "sample_size": 128,
        "stride": 16,
    },
    "suspension": {
        "suspend_after_ms": 3500,
        "motion_wake_threshold": 18,
    },
    "emitter": {
        "emit_on_change_only": False,
    },
    "visualization": {
        "enabled": True,
        "window_name": "Gesture Navigation",
        "show_landmarks": True,
        "show_fps": True,
        "mirror_preview": True,
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "max_size_mb": 10,
        "backup_count": 3,
    },
    "performance": {
        "metrics_window": 100,
    },
}

# Schema: sections and the expected types of their critical fields
_CONFIG_SCHEMA = {
    "camera": {
        "device_id": int,
        "width": int,
        "height": int,
        "fps": int,
        "flip_horizontal": bool,
    },
    "mediapipe": {
        "min_detection_confidence": float,
        "min_presence_confidence": float,
        "min_tracking_confidence": float,
    },
    "recognition": {
        "thumb_index_base_min": float,
        "thumb_wrist_min": float,
        "ok_distance": float,
        "direction_deadzone": float,
        "mirrored_view": bool,
        "stable_frames": int,
    },
    "motion": {
        "sample_size": int,
        "stride": int,
    },
    "suspension": {
        "suspend_after_ms": int,
        "motion_wake_threshold": float,
    },
    "emitter": {
        "emit_on_change_only": bool,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Singleton configuration manager."""

    _instance = None
    _data = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._data = copy.deepcopy(DEFAULTS)
        return cls._instance

    def load(self, config_path=None):
        """Load configuration from a YAML file over the defaults."""
        config_path = config_path or os.path.join(_CONFIG_DIR, "config.yaml")

        try:
            with open(config_path, "r") as f:
                loaded = yaml.safe_load(f) or {}
            logger.info("Loaded config from %s", config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using defaults", config_path)
            loaded = {}

        if not isinstance(loaded, dict):
            logger.warning("Config root should be a mapping, got %s; using defaults",
                           type(loaded).__name__)
            loaded = {}

        self._data = _deep_merge(copy.deepcopy(DEFAULTS), loaded)
        self._validate()
        return self

    def load_dict(self, data: dict):
        """Load configuration from an already-parsed dict (tests, embedding)."""
        self._data = _deep_merge(copy.deepcopy(DEFAULTS), data or {})
        self._validate()
        return self

    def _validate(self) -> list:
        """Validate critical config fields against schema. Returns the warnings."""
        warnings = []
        for section_name, fields in _CONFIG_SCHEMA.items():
            section = self._data.get(section_name)
            if not isinstance(section, dict):
                warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
                continue
            for field_name, expected_type in fields.items():
                if field_name in section:
                    value = section[field_name]
                    # Allow int where float is expected
                    if expected_type is float and isinstance(value, (int, float)) \
                            and not isinstance(value, bool):
                        continue
                    if expected_type is int and isinstance(value, bool):
                        warnings.append(f"{section_name}.{field_name}: expected int, got bool")
                        continue
                    if not isinstance(value, expected_type):
                        warnings.append(
                            f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                            f"got {type(value).__name__} ({value!r})"
                        )

        if warnings:
            for w in warnings:
                logger.warning("Config validation: %s", w)
        else:
            logger.debug("Config validation passed")
        return warnings

    def get(self, key_path: str, default=None):
        """Get nested config value using dot notation: 'camera.width'."""
        keys = key_path.split(".")
        value = self._data
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value):
        """Set a nested value using dot notation (CLI overrides)."""
        keys = key_path.split(".")
        node = self._data
        for key in keys[:-1]:
            node = node.setdefault(key, {})
        node[keys[-1]] = value

    def get_section(self, section: str) -> dict:
        """Get an entire config section."""
        value = self._data.get(section, {})
        return value if isinstance(value, dict) else {}

    @property
    def camera(self) -> dict:
        return self.get_section("camera")

    @property
    def mediapipe(self) -> dict:
        return self.get_section("mediapipe")

    @property
    def recognition(self) -> dict:
        return self.get_section("recognition")

    @property
    def visualization(self) -> dict:
        return self.get_section("visualization")

    @property
    def base_dir(self) -> str:
        return _BASE_DIR

    @classmethod
    def reset(cls):
        """Reset singleton instance (for testing)."""
        cls._instance = None
        cls._data = {}
