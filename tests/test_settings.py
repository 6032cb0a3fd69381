"""Tests for viewer settings, validation and attribute parsing."""

import json
import math

import pytest

from ui.settings import (
    GestureSettings, MotionSettings, ViewerSettings,
    parse_camera_position, parse_flag, parse_float, parse_int, sanitize,
)


class TestAttributeParsing:
    """Viewer attribute strings."""

    @pytest.mark.parametrize("value,expected", [
        ("true", True), ("false", False), ("True", False), ("1", False), ("", False), (None, False),
    ])
    def test_flag_requires_exact_true(self, value, expected):
        assert parse_flag(value) is expected

    def test_camera_position_distance(self):
        assert parse_camera_position("12") == (0.0, 0.0, 12.0)

    def test_camera_position_xyz(self):
        assert parse_camera_position("1, 2.5, -3") == (1.0, 2.5, -3.0)

    def test_camera_position_invalid_falls_back(self):
        """Unparseable or two-component values use the model-derived default."""
        assert parse_camera_position(None) is None
        assert parse_camera_position("abc") is None
        assert parse_camera_position("1,2") is None
        assert parse_camera_position("nan") is None

    def test_numbers(self):
        assert parse_int("1024", 800) == 1024
        assert parse_int("wide", 800) == 800
        assert parse_float("0.01", 0.005) == 0.01
        assert parse_float("inf", 0.005) == 0.005
        assert parse_float(None, 0.005) == 0.005

    @pytest.mark.parametrize("value", ["inf", "-inf", "1e400", "nan"])
    def test_int_non_finite_falls_back(self, value):
        """Non-finite integers fall back instead of overflowing."""
        assert parse_int(value, 800) == 800

    def test_non_finite_width_attribute(self):
        settings = ViewerSettings()
        settings.apply_attributes({"width": "inf", "height": "1e400"})
        assert settings.display.width == 800
        assert settings.display.height == 600


class TestValidation:
    """Malformed values fall back to defaults."""

    def test_non_finite_resets(self):
        motion = MotionSettings(auto_rotate_speed=math.nan, move_speed=math.inf)
        reset = sanitize(motion)
        assert set(reset) == {"auto_rotate_speed", "move_speed"}
        assert motion.auto_rotate_speed == 0.005
        assert motion.move_speed == 0.15

    @pytest.mark.parametrize("smoothing", [0.0, 1.0, -0.5, 2.0])
    def test_smoothing_out_of_range(self, smoothing):
        gesture = GestureSettings(smoothing=smoothing)
        assert sanitize(gesture) == ["smoothing"]
        assert gesture.smoothing == 0.1

    def test_negative_threshold(self):
        gesture = GestureSettings(pinch_threshold=-1.0)
        sanitize(gesture)
        assert gesture.pinch_threshold == 40.0

    def test_numeric_strings_coerced(self):
        motion = MotionSettings(move_speed="0.3")
        assert sanitize(motion) == []
        assert motion.move_speed == 0.3

    def test_valid_settings_untouched(self):
        settings = ViewerSettings()
        assert settings.validate() == []

    def test_apply_attributes(self):
        settings = ViewerSettings()
        settings.apply_attributes({
            "auto-display": "true",
            "auto-display-speed": "0.01",
            "camera-position": "0,2,8",
            "gesture-control": "yes",
        })
        assert settings.motion.auto_rotate is True
        assert settings.motion.auto_rotate_speed == 0.01
        assert settings.display.camera_position == (0.0, 2.0, 8.0)
        assert settings.gesture.enabled is False


class TestPersistence:
    """JSON save/load."""

    def test_save_and_load(self, tmp_path):
        path = str(tmp_path / "settings.json")
        settings = ViewerSettings()
        settings.motion.auto_rotate = True
        settings.display.camera_position = (1.0, 2.0, 3.0)
        settings.save(path)

        loaded = ViewerSettings.load(path)
        assert loaded.motion.auto_rotate is True
        assert loaded.display.camera_position == (1.0, 2.0, 3.0)
        assert loaded.display.pip_size == (160, 120)

    def test_missing_file_gives_defaults(self, tmp_path):
        loaded = ViewerSettings.load(str(tmp_path / "absent.json"))
        assert loaded == ViewerSettings()

    def test_corrupt_file_gives_defaults(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        assert ViewerSettings.load(str(path)) == ViewerSettings()

    @pytest.mark.parametrize("content", ["[1, 2, 3]", "5", "\"text\"", "null"])
    def test_non_object_file_gives_defaults(self, tmp_path, content):
        """Valid JSON that is not an object is treated as corrupt."""
        path = tmp_path / "settings.json"
        path.write_text(content)
        assert ViewerSettings.load(str(path)) == ViewerSettings()

    def test_invalid_values_in_file_reset(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({
            "gesture": {"smoothing": 5, "unknown_key": 1},
            "motion": {"resume_delay": 2.5},
        }))
        loaded = ViewerSettings.load(str(path))
        assert loaded.gesture.smoothing == 0.1
        assert loaded.motion.resume_delay == 2.5
