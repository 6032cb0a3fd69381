"""
View Camera
===========
Perspective camera with local-axis translation and look-at aiming.

The camera looks down its local -Z axis with world +Y as up, so
``translate_z(-d)`` moves it forward toward what it is looking at.
"""

from typing import Sequence, Tuple

import numpy as np


WORLD_UP = np.array([0.0, 1.0, 0.0])


class ViewCamera:
    """
    Camera entity for the viewer.

    Args:
        fov: Vertical field of view in degrees
        aspect: Viewport width / height
        near: Near clip distance
        far: Far clip distance
    """

    def __init__(self, fov: float = 45.0, aspect: float = 1.0,
                 near: float = 0.1, far: float = 1000.0):
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far

        self.position = np.zeros(3)
        # Columns are the local x (right), y (up), z (back) axes in world space
        self.basis = np.eye(3)

    # ---- placement ----

    def set_position(self, x: float, y: float, z: float):
        self.position = np.array([x, y, z], dtype=np.float64)

    def translate_x(self, distance: float):
        self.position = self.position + self.basis[:, 0] * distance

    def translate_z(self, distance: float):
        self.position = self.position + self.basis[:, 2] * distance

    def look_at(self, target: Sequence[float]):
        """Rotate so the local -Z axis points at ``target``."""
        z_axis = self.position - np.asarray(target, dtype=np.float64)
        length = np.linalg.norm(z_axis)
        if length < 1e-12:
            z_axis = np.array([0.0, 0.0, 1.0])
        else:
            z_axis = z_axis / length

        x_axis = np.cross(WORLD_UP, z_axis)
        if np.linalg.norm(x_axis) < 1e-12:
            # Looking straight up or down; nudge off the pole
            z_axis = z_axis + np.array([0.0, 0.0, 1e-4])
            z_axis = z_axis / np.linalg.norm(z_axis)
            x_axis = np.cross(WORLD_UP, z_axis)
        x_axis = x_axis / np.linalg.norm(x_axis)
        y_axis = np.cross(z_axis, x_axis)

        self.basis = np.column_stack([x_axis, y_axis, z_axis])

    # ---- projection ----

    def set_aspect(self, width: int, height: int):
        if width > 0 and height > 0:
            self.aspect = width / height

    @property
    def forward(self) -> np.ndarray:
        return -self.basis[:, 2]

    def view_matrix(self) -> np.ndarray:
        """World-to-camera 4x4 matrix."""
        rot = self.basis.T
        view = np.eye(4)
        view[:3, :3] = rot
        view[:3, 3] = -rot @ self.position
        return view

    def projection_matrix(self) -> np.ndarray:
        f = 1.0 / np.tan(np.radians(self.fov) / 2.0)
        n, fa = self.near, self.far
        proj = np.zeros((4, 4))
        proj[0, 0] = f / self.aspect
        proj[1, 1] = f
        proj[2, 2] = (fa + n) / (n - fa)
        proj[2, 3] = 2 * fa * n / (n - fa)
        proj[3, 2] = -1.0
        return proj

    def project(self, points: np.ndarray, width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Project world-space points (N, 3) to pixel coordinates.

        Returns:
            (pixels (N, 2), visible (N,) bool mask of points in front of the
            near plane)
        """
        points = np.asarray(points, dtype=np.float64)
        homo = np.hstack([points, np.ones((len(points), 1))])
        cam = homo @ self.view_matrix().T
        visible = cam[:, 2] < -self.near

        clip = cam @ self.projection_matrix().T
        w = np.where(np.abs(clip[:, 3]) < 1e-9, 1e-9, clip[:, 3])
        ndc = clip[:, :2] / w[:, None]

        pixels = np.empty((len(points), 2))
        pixels[:, 0] = (ndc[:, 0] + 1.0) * 0.5 * width
        pixels[:, 1] = (1.0 - ndc[:, 1]) * 0.5 * height
        return pixels, visible
