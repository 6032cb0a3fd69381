"""
Settings Module
===============
Viewer configuration and persistence.

Features:
- Display, motion and gesture settings as dataclasses
- Fallback to defaults for malformed or out-of-range values
- Parsing of viewer attribute strings (camera position, flags, sizes)
- JSON save/load
"""

import json
import logging
import math
import os
from dataclasses import dataclass, field, fields, asdict, MISSING
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


# =====================================================
# SETTINGS DATA
# =====================================================

@dataclass
class DisplaySettings:
    """Window and camera placement."""
    width: int = 800
    height: int = 600
    fov: float = 45.0
    max_fps: int = 60
    show_pip: bool = True                 # Picture-in-picture camera preview
    pip_size: Tuple[int, int] = (160, 120)
    camera_position: Optional[Tuple[float, float, float]] = None  # None = derive from model


@dataclass
class MotionSettings:
    """Keyboard, pointer and auto-rotate behaviour."""
    auto_rotate: bool = False
    auto_rotate_speed: float = 0.005      # radians per tick
    resume_delay: float = 1.0             # seconds after last interaction
    move_speed: float = 0.15              # camera units per tick
    fast_multiplier: float = 2.0          # with shift held
    drag_sensitivity: float = 0.005       # radians per pointer pixel
    wheel_sensitivity: float = 0.002
    wheel_scale: float = 15.0


@dataclass
class GestureSettings:
    """Pinch-drag gesture control."""
    enabled: bool = False
    smoothing: float = 0.1                # exponential smoothing coefficient (0 - 1)
    position_multiplier: float = 0.005    # viewport pixels -> rotation
    rotation_scale: float = 0.2           # secondary scale applied to each delta
    pinch_threshold: float = 40.0         # thumb/index contact distance, pixels
    camera_index: int = 0
    image_width: int = 640
    image_height: int = 480


# Extra constraints beyond "finite number"
_RANGES = {
    'smoothing': (0.0, 1.0),
}
_POSITIVE = {
    'width', 'height', 'fov', 'max_fps', 'resume_delay', 'move_speed',
    'fast_multiplier', 'pinch_threshold', 'image_width', 'image_height',
}


def _field_default(f) -> Any:
    if f.default is not MISSING:
        return f.default
    if f.default_factory is not MISSING:
        return f.default_factory()
    return None


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Coerce ``value`` to the type of ``default``; raise ValueError if impossible."""
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return parse_flag(value)
        raise ValueError(f"{name} must be a boolean")

    if isinstance(default, (int, float)):
        if isinstance(value, bool):
            raise ValueError(f"{name} must be numeric")
        number = float(value)
        if not math.isfinite(number):
            raise ValueError(f"{name} must be finite")
        if name in _RANGES:
            lo, hi = _RANGES[name]
            if not lo < number < hi:
                raise ValueError(f"{name} must be in ({lo}, {hi})")
        if name in _POSITIVE and number <= 0:
            raise ValueError(f"{name} must be positive")
        return int(number) if isinstance(default, int) else number

    if isinstance(default, tuple):
        items = tuple(value)
        if len(items) != len(default):
            raise ValueError(f"{name} needs {len(default)} values")
        return tuple(_coerce(name, v, d) for v, d in zip(items, default))

    return value


def sanitize(section) -> list:
    """
    Replace invalid values in a settings dataclass with their defaults.

    Returns the names of the fields that were reset.
    """
    reset = []
    for f in fields(section):
        default = _field_default(f)
        value = getattr(section, f.name)
        if f.name == 'camera_position':
            if value is not None:
                try:
                    value = tuple(float(v) for v in value)
                    if len(value) != 3 or not all(math.isfinite(v) for v in value):
                        raise ValueError
                except (TypeError, ValueError):
                    logger.warning("Invalid camera_position %r, using default", value)
                    value = None
                    reset.append(f.name)
                setattr(section, f.name, value)
            continue
        try:
            setattr(section, f.name, _coerce(f.name, value, default))
        except (TypeError, ValueError) as e:
            logger.warning("Invalid setting %s=%r (%s), using default %r", f.name, value, e, default)
            setattr(section, f.name, default)
            reset.append(f.name)
    return reset


# =====================================================
# ATTRIBUTE PARSING
# =====================================================

def parse_flag(value: Optional[str]) -> bool:
    """Only the exact string "true" enables a flag."""
    return value == "true"


def parse_int(value: Optional[str], default: int) -> int:
    number = parse_float(value, float(default))
    return int(number)


def parse_float(value: Optional[str], default: float) -> float:
    try:
        number = float(value) if value else default
    except ValueError:
        return default
    return number if math.isfinite(number) else default


def parse_camera_position(value: Optional[str]) -> Optional[Tuple[float, float, float]]:
    """
    Parse "d" (distance on +Z) or "x,y,z".

    Returns None when the value should fall back to the model-derived
    default distance.
    """
    if not value:
        return None
    parts = []
    for piece in value.split(','):
        try:
            number = float(piece.strip())
        except ValueError:
            continue
        if math.isfinite(number):
            parts.append(number)

    if len(parts) == 1:
        return (0.0, 0.0, parts[0])
    if len(parts) >= 3:
        return (parts[0], parts[1], parts[2])
    return None


# =====================================================
# VIEWER SETTINGS
# =====================================================

@dataclass
class ViewerSettings:
    """Complete viewer settings."""
    display: DisplaySettings = field(default_factory=DisplaySettings)
    motion: MotionSettings = field(default_factory=MotionSettings)
    gesture: GestureSettings = field(default_factory=GestureSettings)

    def validate(self) -> list:
        """Reset invalid values to defaults; returns the reset field names."""
        return sanitize(self.display) + sanitize(self.motion) + sanitize(self.gesture)

    def apply_attributes(self, attributes: Dict[str, str]):
        """Apply viewer attribute strings (``auto-display="true"`` etc.)."""
        if 'width' in attributes:
            self.display.width = parse_int(attributes['width'], 800)
        if 'height' in attributes:
            self.display.height = parse_int(attributes['height'], 600)
        if 'auto-display' in attributes:
            self.motion.auto_rotate = parse_flag(attributes['auto-display'])
        if 'auto-display-speed' in attributes:
            self.motion.auto_rotate_speed = parse_float(
                attributes['auto-display-speed'], MotionSettings.auto_rotate_speed)
        if 'gesture-control' in attributes:
            self.gesture.enabled = parse_flag(attributes['gesture-control'])
        if 'camera-position' in attributes:
            self.display.camera_position = parse_camera_position(attributes['camera-position'])
        self.validate()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['display']['pip_size'] = list(self.display.pip_size)
        if self.display.camera_position is not None:
            data['display']['camera_position'] = list(self.display.camera_position)
        return data

    def save(self, path: str = "viewer_settings.json"):
        """Save settings to file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info("Settings saved to %s", path)

    @classmethod
    def load(cls, path: str = "viewer_settings.json") -> 'ViewerSettings':
        """Load settings from file, falling back to defaults."""
        settings = cls()
        if not os.path.exists(path):
            return settings

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Error loading settings from %s: %s", path, e)
            return cls()

        if not isinstance(data, dict):
            logger.error("Error loading settings from %s: expected a JSON object", path)
            return cls()

        for section_name in ('display', 'motion', 'gesture'):
            section = getattr(settings, section_name)
            values = data.get(section_name, {})
            if not isinstance(values, dict):
                continue
            for key, value in values.items():
                if hasattr(section, key):
                    setattr(section, key, value)

        settings.validate()
        return settings
