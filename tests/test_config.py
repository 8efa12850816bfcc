"""
Tests for Configuration Manager
================================
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.utils.config import Config, DEFAULTS


@pytest.fixture
def config():
    Config.reset()
    yield Config()
    Config.reset()


class TestConfig:
    """Test suite for Config."""

    def test_singleton(self, config):
        assert Config() is config

    def test_defaults_without_load(self, config):
        assert config.get("suspension.suspend_after_ms") == 3500
        assert config.get("suspension.motion_wake_threshold") == 18
        assert config.get("recognition.stable_frames") == 3
        assert config.get("motion.sample_size") == 128

    def test_shipped_config_is_valid(self, config):
        config.load()
        assert config._validate() == []
        assert config.get("recognition.mirrored_view") is True
        assert config.get("camera.flip_horizontal") is False

    def test_load_merges_over_defaults(self, config, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("suspension:\n  suspend_after_ms: 5000\ncamera:\n  device_id: 2\n")

        config.load(str(path))

        assert config.get("suspension.suspend_after_ms") == 5000
        assert config.get("suspension.motion_wake_threshold") == 18
        assert config.camera["device_id"] == 2
        assert config.camera["width"] == 640

    def test_missing_file_uses_defaults(self, config, tmp_path):
        config.load(str(tmp_path / "missing.yaml"))
        assert config.get_section("suspension") == DEFAULTS["suspension"]

    def test_non_mapping_root_uses_defaults(self, config, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        config.load(str(path))
        assert config.get("recognition.ok_distance") == 0.06

    def test_empty_file_uses_defaults(self, config, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        config.load(str(path))
        assert config.get("emitter.emit_on_change_only") is False

    def test_validation_warnings(self, config):
        config.load_dict({
            "recognition": {"stable_frames": "three", "ok_distance": 1},
            "camera": {"device_id": True},
        })
        warnings = config._validate()
        assert any("recognition.stable_frames" in w for w in warnings)
        assert any("camera.device_id" in w for w in warnings)
        assert not any("ok_distance" in w for w in warnings)

    def test_validation_flags_bad_section(self, config):
        config.load_dict({"motion": 5})
        assert any("'motion'" in w for w in config._validate())
        assert config.get_section("motion") == {}

    def test_get_missing_returns_default(self, config):
        assert config.get("nope.nothing", 42) == 42
        assert config.get("camera.width.deeper") is None

    def test_set_dot_path(self, config):
        config.set("camera.device_id", 4)
        config.set("extra.nested.value", "x")
        assert config.get("camera.device_id") == 4
        assert config.get("extra.nested.value") == "x"

    def test_load_does_not_mutate_defaults(self, config):
        config.load_dict({"camera": {"width": 1920}})
        config.set("suspension.suspend_after_ms", 1)
        assert DEFAULTS["camera"]["width"] == 640
        assert DEFAULTS["suspension"]["suspend_after_ms"] == 3500

    def test_reset(self, config):
        config.set("camera.device_id", 9)
        Config.reset()
        assert Config().get("camera.device_id") == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
