"""
Orbit Viewer
============
Interactive 3D object viewer with mouse, keyboard and hand-gesture control.

Controls:
- Drag: rotate the object
- Wheel: zoom
- W/A/S/D or arrows: move the camera, Q/E: up/down, Shift: faster
- Pinch (thumb + index) and move: rotate the object (gesture mode)
- Idle: optional auto-rotation, resuming 1s after the last interaction
"""

import logging
import time
from typing import Annotated, Callable, Optional

import numpy as np
import tyro

from core.display import ViewerDisplay, ViewerEvent
from core.pinch_rotation import PinchRotationProcessor, PinchSignal
from scenes.model_scene import ModelScene
from systems.auto_rotate import AutoRotateArbiter
from systems.camera import ViewCamera
from systems.input_state import InputStateTracker
from systems.model import ModelLoadError, ModelObject, load_model
from systems.transform import TransformController
from ui.settings import ViewerSettings, parse_camera_position

logger = logging.getLogger(__name__)


DEFAULT_SETTINGS_PATH = "viewer_settings.json"
# Camera distance when no model could be loaded
FALLBACK_CAMERA_DISTANCE = 10.0


# =====================
# VIEWER
# =====================
class Viewer:
    """
    Wires input sources, the transform controller and the renderer together.

    Args:
        settings: Viewer settings (validated on construction)
        model_path: OBJ file to show; a cube is shown when omitted
        mtl: Material file name or path
        settings_path: Where settings are saved on close (None = don't save)
        clock: Monotonic time source for the auto-rotate arbiter
    """

    def __init__(self, settings: Optional[ViewerSettings] = None,
                 model_path: Optional[str] = None, mtl: Optional[str] = None,
                 settings_path: Optional[str] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.settings = settings or ViewerSettings()
        self.settings.validate()
        self.model_path = model_path
        self.mtl = mtl
        self.settings_path = settings_path

        display = self.settings.display
        motion = self.settings.motion
        gesture = self.settings.gesture

        self.width, self.height = display.width, display.height
        self.camera = ViewCamera(fov=display.fov, aspect=self.width / self.height)
        self.input = InputStateTracker()
        self.arbiter = AutoRotateArbiter(
            enabled=motion.auto_rotate,
            resume_delay=motion.resume_delay,
            clock=clock,
        )
        self.controller = TransformController(
            self.camera, self.input, self.arbiter, motion,
            gesture_scale=gesture.rotation_scale,
        )
        self.processor = PinchRotationProcessor(
            smoothing=gesture.smoothing,
            position_multiplier=gesture.position_multiplier,
            pinch_threshold=gesture.pinch_threshold,
            image_size=(gesture.image_width, gesture.image_height),
            viewport_size=(self.width, self.height),
        )
        self.scene = ModelScene(self.camera)

        self.model: Optional[ModelObject] = None
        self.display: Optional[ViewerDisplay] = None
        self.engine = None
        self.gesture_enabled = False
        self._hand_landmarks = None

    # ---- model ----

    def load_model(self):
        """Load the model, showing the loading overlay and any error."""
        self.scene.show_loading()
        try:
            self.model = load_model(self.model_path, self.mtl)
        except ModelLoadError as e:
            logger.error("Failed to load model: %s", e)
            self.model = None
            self.scene.show_error(str(e))
        finally:
            self.scene.hide_loading()

        self.scene.set_model(self.model)
        self.controller.set_orientation(self.model.orientation if self.model else None)
        self.adjust_camera()

    def adjust_camera(self):
        """Place the camera at the configured position or a model-derived distance."""
        position = self.settings.display.camera_position
        if position is None:
            distance = self.model.default_camera_distance() if self.model else FALLBACK_CAMERA_DISTANCE
            position = (0.0, 0.0, distance)
        self.controller.place_camera(position)

    # ---- runtime options ----

    def set_auto_rotate(self, enabled: bool, speed: Optional[float] = None):
        self.settings.motion.auto_rotate = enabled
        if speed is not None:
            self.settings.motion.auto_rotate_speed = speed
            self.settings.validate()
        self.arbiter.set_enabled(enabled)

    def set_camera_position(self, value: Optional[str]):
        """Apply a "d" or "x,y,z" camera position string."""
        self.settings.display.camera_position = parse_camera_position(value)
        self.adjust_camera()

    def set_gesture_control(self, enabled: bool):
        """Enable or disable gesture control; the engine starts once."""
        self.settings.gesture.enabled = enabled
        if enabled and self.engine is None:
            self.start_gesture_control()
        self.gesture_enabled = enabled and self.engine is not None
        if not self.gesture_enabled:
            self.controller.apply_gesture(self.processor.update(None))
            self._hand_landmarks = None

    def start_gesture_control(self):
        """Start the webcam gesture engine; failures disable gesture control."""
        from core.gesture_engine import GestureEngine

        try:
            self.engine = GestureEngine(self.settings.gesture)
        except (RuntimeError, OSError) as e:
            logger.error("Gesture control initialisation failed: %s", e)
            self.engine = None
            self.gesture_enabled = False
            return
        self.gesture_enabled = True

    # ---- input ----

    def handle_event(self, event: ViewerEvent):
        kind = event.kind
        if kind == 'key_down':
            self.controller.on_key(event.key, True)
        elif kind == 'key_up':
            self.controller.on_key(event.key, False)
        elif kind == 'pointer_down':
            self.controller.on_pointer_down(event.x, event.y)
        elif kind == 'pointer_move':
            self.controller.on_pointer_move(event.x, event.y)
        elif kind in ('pointer_up', 'pointer_leave'):
            self.controller.on_pointer_up()
        elif kind == 'wheel':
            self.controller.on_wheel(event.delta_y)
        elif kind == 'blur':
            self.controller.release_all_keys()
        elif kind == 'resize' and event.size:
            self.resize(*event.size)

    def resize(self, width: int, height: int):
        self.width, self.height = width, height
        self.camera.set_aspect(width, height)
        self.processor.set_viewport_size(width, height)

    def process_gesture(self, sample=None) -> Optional[PinchSignal]:
        """
        Feed one gesture sample through the pinch pipeline.

        With no explicit sample the engine is polled; returns None when no
        new sample is available.
        """
        if not self.gesture_enabled:
            return None
        if sample is None:
            if self.engine is None:
                return None
            sample = self.engine.poll()
            if sample is None:
                return None

        self.processor.image_size = sample.image_size
        signal = self.processor.update(sample.hands)
        self.controller.apply_gesture(signal)
        self._hand_landmarks = sample.hands[0] if sample.hands else None
        return signal

    # ---- frame ----

    def render(self) -> np.ndarray:
        frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        self.scene.render(frame, pinch_engaged=self.controller.pinch_engaged)
        if self.engine is not None and self.gesture_enabled and self.settings.display.show_pip:
            pip_w, pip_h = self.settings.display.pip_size
            self.engine.render_pip(frame, self._hand_landmarks, pip_w, pip_h,
                                   engaged=self.controller.pinch_engaged)
        return frame

    def step(self, events=()) -> np.ndarray:
        """One loop iteration: events, gesture sample, tick, render."""
        for event in events:
            self.handle_event(event)
        self.process_gesture()
        self.controller.tick()
        return self.render()

    def run(self):
        self.display = ViewerDisplay(self.width, self.height, target_fps=self.settings.display.max_fps)
        self.load_model()
        if self.settings.gesture.enabled:
            self.set_gesture_control(True)

        try:
            while self.display.running:
                frame = self.step(self.display.process_events())
                if not self.display.running:
                    break
                self.display.show_frame(frame)
        finally:
            self.close()

    def close(self):
        if self.settings_path:
            try:
                self.settings.save(self.settings_path)
            except OSError as e:
                logger.error("Could not save settings: %s", e)
        if self.engine is not None:
            self.engine.close()
            self.engine = None
        if self.display is not None:
            self.display.close()
            self.display = None


# =====================
# CLI
# =====================
def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def run(
    model: Annotated[Optional[str], tyro.conf.Positional] = None,
    mtl: Optional[str] = None,
    settings_file: str = DEFAULT_SETTINGS_PATH,
    width: Optional[int] = None,
    height: Optional[int] = None,
    auto_rotate: Optional[bool] = None,
    auto_rotate_speed: Optional[float] = None,
    gesture: Optional[bool] = None,
    camera_position: Optional[str] = None,
    log_level: str = "INFO",
) -> None:
    """
    Orbit Viewer.

    Args:
        model: OBJ file to display (a cube when omitted)
        mtl: Material file; defaults to the OBJ path with .mtl
        settings_file: JSON settings file, loaded at start and saved on exit
        width: Window width override
        height: Window height override
        auto_rotate: Enable idle auto-rotation
        auto_rotate_speed: Auto-rotation speed in radians per frame
        gesture: Enable webcam pinch gesture control
        camera_position: "d" (distance) or "x,y,z"
        log_level: DEBUG, INFO, WARNING or ERROR
    """
    setup_logging(log_level)
    settings = ViewerSettings.load(settings_file)

    overrides = {}
    if width is not None:
        overrides['width'] = str(width)
    if height is not None:
        overrides['height'] = str(height)
    if auto_rotate is not None:
        overrides['auto-display'] = "true" if auto_rotate else "false"
    if auto_rotate_speed is not None:
        overrides['auto-display-speed'] = str(auto_rotate_speed)
    if gesture is not None:
        overrides['gesture-control'] = "true" if gesture else "false"
    if camera_position is not None:
        overrides['camera-position'] = camera_position
    settings.apply_attributes(overrides)

    print("=" * 50)
    print("ORBIT VIEWER")
    print("=" * 50)
    print("Controls:")
    print("  • Drag: Rotate object")
    print("  • Wheel: Zoom")
    print("  • W/A/S/D, Arrows: Move camera (Shift = faster)")
    print("  • Q/E: Camera up/down")
    if settings.gesture.enabled:
        print("  • Pinch + Move: Rotate object")
    print("=" * 50)

    viewer = Viewer(settings, model_path=model, mtl=mtl, settings_path=settings_file)
    viewer.run()


def main():
    tyro.cli(run)


if __name__ == "__main__":
    main()
