"""
Model Scene
===========
Draws the viewed object as a perspective wireframe.

Features:
- Edge projection through the view camera
- Loading and error overlays
- Gesture status indicator
"""

from typing import Optional

import cv2
import numpy as np

from systems.camera import ViewCamera
from systems.model import ModelObject


BACKGROUND = (0, 0, 0)
ERROR_COLOR = (68, 68, 255)  # BGR for #ff4444


class ModelScene:
    """Renders a ModelObject seen from a ViewCamera into BGR frames."""

    def __init__(self, camera: ViewCamera):
        self.camera = camera
        self.model: Optional[ModelObject] = None
        self.loading = False
        self.error: Optional[str] = None

    def show_loading(self):
        self.loading = True
        self.error = None

    def hide_loading(self):
        self.loading = False

    def show_error(self, message: str):
        self.error = message

    def set_model(self, model: Optional[ModelObject]):
        self.model = model

    def render(self, frame: np.ndarray, pinch_engaged: bool = False):
        frame[:] = BACKGROUND
        h, w = frame.shape[:2]

        if self.model is not None and len(self.model.edges) > 0:
            self._draw_wireframe(frame, w, h)

        if self.loading:
            self._draw_message(frame, "Loading...", (255, 255, 255))
        elif self.error:
            self._draw_message(frame, self.error, ERROR_COLOR)

        if pinch_engaged:
            cv2.circle(frame, (20, 20), 8, (0, 255, 0), -1)

    def _draw_wireframe(self, frame: np.ndarray, w: int, h: int):
        pixels, visible = self.camera.project(self.model.world_vertices(), w, h)
        pts = np.round(pixels).astype(np.int64)
        # Keep coordinates in a range OpenCV accepts
        pts = np.clip(pts, -4 * max(w, h), 4 * max(w, h))

        for a, b in self.model.edges:
            if visible[a] and visible[b]:
                cv2.line(frame, (int(pts[a, 0]), int(pts[a, 1])),
                         (int(pts[b, 0]), int(pts[b, 1])),
                         self.model.color, 1, cv2.LINE_AA)

    def _draw_message(self, frame: np.ndarray, text: str, color):
        h, w = frame.shape[:2]
        font = cv2.FONT_HERSHEY_SIMPLEX
        (tw, th), _ = cv2.getTextSize(text, font, 0.6, 1)
        x = max(10, (w - tw) // 2)
        y = (h + th) // 2
        cv2.putText(frame, text, (x, y), font, 0.6, color, 1, cv2.LINE_AA)
