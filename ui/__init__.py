"""
Settings and configuration for the viewer.
"""

from .settings import (
    ViewerSettings, DisplaySettings, MotionSettings, GestureSettings,
    parse_camera_position, parse_flag
)

__all__ = [
    'ViewerSettings', 'DisplaySettings', 'MotionSettings', 'GestureSettings',
    'parse_camera_position', 'parse_flag',
]
