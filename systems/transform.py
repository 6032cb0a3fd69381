"""
Transform Controller
====================
Single owner of camera placement and object orientation.

Input sources (keyboard, pointer drag, wheel, pinch gesture, auto-rotate)
never touch the camera or object directly; they report to this controller,
which applies at most one orientation update per source window.

Orientation ownership:
- Pointer-down or pinch engagement takes ownership (latest activation wins)
- Writes from a source that does not own the orientation are dropped
- Auto-rotate runs only while nobody owns the orientation, no pinch is
  engaged, and the arbiter is idle-rotating
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .auto_rotate import AutoRotateArbiter
from .camera import ViewCamera
from .input_state import InputStateTracker

logger = logging.getLogger(__name__)


# Logical key names (browser-style) for camera movement
FORWARD_KEYS = ('w', 'arrowup')
BACKWARD_KEYS = ('s', 'arrowdown')
LEFT_KEYS = ('a', 'arrowleft')
RIGHT_KEYS = ('d', 'arrowright')
UP_KEYS = ('q',)
DOWN_KEYS = ('e',)
MOVEMENT_KEYS = FORWARD_KEYS + BACKWARD_KEYS + LEFT_KEYS + RIGHT_KEYS + UP_KEYS + DOWN_KEYS
MODIFIER_KEY = 'shift'


# =====================
# STATE
# =====================
@dataclass
class CameraState:
    """Snapshot of camera placement."""
    position: Tuple[float, float, float]
    target: Tuple[float, float, float] = (0.0, 0.0, 0.0)


@dataclass
class ObjectOrientation:
    """Pitch (X axis) and yaw (Y axis) rotation of the viewed object, radians."""
    pitch: float = 0.0
    yaw: float = 0.0

    def rotate(self, d_pitch: float, d_yaw: float):
        self.pitch += d_pitch
        self.yaw += d_yaw


class ControlSource(Enum):
    """Actors that can move the camera or the object."""
    KEYBOARD = "keyboard"
    WHEEL = "wheel"
    POINTER = "pointer"
    GESTURE = "gesture"
    AUTO_ROTATE = "auto_rotate"


@dataclass
class TickReport:
    """What a frame tick did."""
    camera_source: Optional[ControlSource] = None
    orientation_source: Optional[ControlSource] = None


@dataclass
class _Rule:
    """One entry of a priority list: capability check plus optional action."""
    source: ControlSource
    applies: Callable[[], bool]
    run: Optional[Callable[[], None]] = None


# =====================
# CONTROLLER
# =====================
class TransformController:
    """
    Per-frame orchestrator for camera and object transforms.

    Args:
        camera: Camera entity to move
        input_state: Keyboard/pointer state tracker
        arbiter: Auto-rotate arbiter
        motion: MotionSettings-like object (speeds and sensitivities)
        orientation: Object orientation to rotate; None until a model loads
        gesture_scale: Secondary scale applied to gesture rotation deltas
        target: Fixed look-at target
    """

    def __init__(self, camera: ViewCamera, input_state: InputStateTracker,
                 arbiter: AutoRotateArbiter, motion,
                 orientation: Optional[ObjectOrientation] = None,
                 gesture_scale: float = 0.2,
                 target: Sequence[float] = (0.0, 0.0, 0.0)):
        self.camera = camera
        self.input = input_state
        self.arbiter = arbiter
        self.motion = motion
        self.orientation = orientation
        self.gesture_scale = gesture_scale
        self.target = np.asarray(target, dtype=np.float64)

        self.owner: Optional[ControlSource] = None
        self.pinch_engaged = False

        # Ordered capability checks; the first applicable rule wins its channel
        self._camera_rules: List[_Rule] = [
            _Rule(ControlSource.KEYBOARD, self._movement_key_held, self._translate_camera),
        ]
        self._orientation_rules: List[_Rule] = [
            _Rule(ControlSource.GESTURE, lambda: self.owner == ControlSource.GESTURE),
            _Rule(ControlSource.POINTER, lambda: self.owner == ControlSource.POINTER),
            _Rule(ControlSource.AUTO_ROTATE, self._auto_rotate_allowed, self._advance_auto_rotate),
        ]

    # ---- state ----

    def camera_state(self) -> CameraState:
        return CameraState(
            position=tuple(float(v) for v in self.camera.position),
            target=tuple(float(v) for v in self.target),
        )

    def set_orientation(self, orientation: Optional[ObjectOrientation]):
        self.orientation = orientation

    def place_camera(self, position: Sequence[float]):
        """Move the camera to an absolute position and aim it at the target."""
        self.camera.set_position(*position)
        self.camera.look_at(self.target)

    def _take_ownership(self, source: ControlSource):
        if self.owner != source:
            logger.debug("Orientation owner: %s -> %s",
                         self.owner.value if self.owner else None, source.value)
        self.owner = source

    def _release_ownership(self, source: ControlSource):
        """Give up ownership, handing it to the other source if still engaged."""
        if self.owner != source:
            return
        if source == ControlSource.POINTER and self.pinch_engaged:
            self.owner = ControlSource.GESTURE
        elif source == ControlSource.GESTURE and self.input.is_dragging():
            self.owner = ControlSource.POINTER
        else:
            self.owner = None
        logger.debug("Orientation owner released by %s, now %s",
                     source.value, self.owner.value if self.owner else None)

    def _rotate(self, source: ControlSource, d_pitch: float, d_yaw: float) -> bool:
        if self.orientation is None or self.owner != source:
            return False
        self.orientation.rotate(d_pitch, d_yaw)
        return True

    # ---- keyboard ----

    def on_key(self, name: str, pressed: bool):
        """Key down/up notification."""
        key = self.input.normalize(name)
        self.input.set_key(key, pressed)
        if pressed:
            self.arbiter.begin(f"key:{key}")
        else:
            self.arbiter.end(f"key:{key}")

    def release_all_keys(self):
        for key in self.input.pressed_keys:
            self.on_key(key, False)

    def _movement_key_held(self) -> bool:
        return self.input.any_pressed(*MOVEMENT_KEYS)

    def _translate_camera(self):
        speed = self.motion.move_speed
        if self.input.is_pressed(MODIFIER_KEY):
            speed *= self.motion.fast_multiplier

        if self.input.any_pressed(*FORWARD_KEYS):
            self.camera.translate_z(-speed)
        if self.input.any_pressed(*BACKWARD_KEYS):
            self.camera.translate_z(speed)
        if self.input.any_pressed(*LEFT_KEYS):
            self.camera.translate_x(-speed)
        if self.input.any_pressed(*RIGHT_KEYS):
            self.camera.translate_x(speed)
        if self.input.any_pressed(*UP_KEYS):
            self.camera.position[1] += speed
        if self.input.any_pressed(*DOWN_KEYS):
            self.camera.position[1] -= speed
        self.camera.look_at(self.target)

    # ---- pointer ----

    def on_pointer_down(self, x: float, y: float):
        self.input.set_dragging(True, (x, y))
        self.arbiter.begin("pointer")
        self._take_ownership(ControlSource.POINTER)

    def on_pointer_move(self, x: float, y: float) -> bool:
        """Apply drag rotation for this move; returns True if the object rotated."""
        self.input.move_pointer(x, y)
        if not self.input.is_dragging():
            return False
        dx, dy = self.input.consume_pointer_delta()
        if dx == 0.0 and dy == 0.0:
            return False
        sensitivity = self.motion.drag_sensitivity
        return self._rotate(ControlSource.POINTER, dy * sensitivity, dx * sensitivity)

    def on_pointer_up(self):
        """Pointer released or left the viewport."""
        self.input.set_dragging(False)
        self._release_ownership(ControlSource.POINTER)
        self.arbiter.end("pointer")

    # ---- wheel ----

    def on_wheel(self, delta_y: float):
        """Zoom along the camera's local Z axis."""
        self.arbiter.pulse("wheel")
        distance = delta_y * self.motion.wheel_sensitivity * self.motion.wheel_scale
        self.camera.translate_z(distance)
        self.camera.look_at(self.target)

    # ---- gesture ----

    def apply_gesture(self, signal) -> bool:
        """
        Consume a PinchSignal; returns True if the object rotated.

        Engagement takes orientation ownership; release gives it back.
        """
        self.pinch_engaged = signal.engaged
        if signal.just_engaged:
            self._take_ownership(ControlSource.GESTURE)
        if not signal.engaged:
            self._release_ownership(ControlSource.GESTURE)
            return False
        if not signal.has_delta:
            return False
        scale = self.gesture_scale
        return self._rotate(ControlSource.GESTURE, signal.delta_y * scale, signal.delta_x * scale)

    # ---- auto-rotate ----

    def _auto_rotate_allowed(self) -> bool:
        return (self.owner is None
                and not self.pinch_engaged
                and self.orientation is not None
                and self.arbiter.should_rotate())

    def _advance_auto_rotate(self):
        self.orientation.rotate(0.0, self.motion.auto_rotate_speed)

    # ---- frame tick ----

    def tick(self) -> TickReport:
        """Run once per render tick."""
        report = TickReport()
        self.arbiter.update()

        for rule in self._camera_rules:
            if rule.applies():
                rule.run()
                report.camera_source = rule.source
                break

        for rule in self._orientation_rules:
            if rule.applies():
                if rule.run is not None:
                    rule.run()
                report.orientation_source = rule.source
                break

        return report
