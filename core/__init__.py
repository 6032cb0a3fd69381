"""
Core engine components for the viewer.

The webcam gesture engine lives in ``core.gesture_engine`` and is imported
on demand, since it loads MediaPipe.
"""

from .display import ViewerDisplay, ViewerEvent
from .pinch_rotation import ExponentialFilter2D, PinchRotationProcessor, PinchSignal

__all__ = [
    'ViewerDisplay',
    'ViewerEvent',
    'ExponentialFilter2D',
    'PinchRotationProcessor',
    'PinchSignal',
]
