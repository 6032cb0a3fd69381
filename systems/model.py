"""
Model Object
============
The viewed 3D object: mesh data plus a pitch/yaw orientation.

Features:
- Minimal OBJ parsing (vertices and face outlines)
- MTL diffuse colour lookup with a grey fallback
- Centering and normalisation to a fixed bounding size
- Default camera distance derived from the bounds
"""

import logging
import math
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .transform import ObjectOrientation

logger = logging.getLogger(__name__)


NORMALIZED_SIZE = 5.0
FALLBACK_COLOR = (136, 136, 136)  # BGR grey


class ModelLoadError(ValueError):
    """Raised when a model file cannot be read or parsed."""


# =====================
# MODEL
# =====================
@dataclass
class ModelObject:
    """Mesh with an orientation about the X (pitch) and Y (yaw) axes."""
    vertices: np.ndarray
    edges: List[Tuple[int, int]] = field(default_factory=list)
    color: Tuple[int, int, int] = FALLBACK_COLOR
    name: str = "model"
    orientation: ObjectOrientation = field(default_factory=ObjectOrientation)

    def rotation_matrix(self) -> np.ndarray:
        """XYZ Euler rotation (roll fixed at zero)."""
        pitch, yaw = self.orientation.pitch, self.orientation.yaw
        cp, sp = np.cos(pitch), np.sin(pitch)
        cy, sy = np.cos(yaw), np.sin(yaw)
        rx = np.array([[1, 0, 0], [0, cp, -sp], [0, sp, cp]])
        ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
        return rx @ ry

    def world_vertices(self) -> np.ndarray:
        return self.vertices @ self.rotation_matrix().T

    def bounding_size(self) -> np.ndarray:
        if len(self.vertices) == 0:
            return np.zeros(3)
        return self.vertices.max(axis=0) - self.vertices.min(axis=0)

    def normalize(self, target_size: float = NORMALIZED_SIZE):
        """Center the mesh on the origin and scale its largest extent to ``target_size``."""
        if len(self.vertices) == 0:
            return
        center = (self.vertices.max(axis=0) + self.vertices.min(axis=0)) / 2.0
        self.vertices = self.vertices - center
        extent = float(self.bounding_size().max())
        if extent > 0:
            self.vertices = self.vertices * (target_size / extent)

    def default_camera_distance(self) -> float:
        """Twice the bounding-box diagonal."""
        return float(np.linalg.norm(self.bounding_size())) * 2.0


# =====================
# LOADING
# =====================
def create_cube(size: float = NORMALIZED_SIZE) -> ModelObject:
    h = size / 2.0
    vertices = np.array([
        [-h, -h, -h], [h, -h, -h], [h, h, -h], [-h, h, -h],
        [-h, -h, h], [h, -h, h], [h, h, h], [-h, h, h],
    ])
    edges = [
        (0, 1), (1, 2), (2, 3), (3, 0),
        (4, 5), (5, 6), (6, 7), (7, 4),
        (0, 4), (1, 5), (2, 6), (3, 7),
    ]
    return ModelObject(vertices=vertices, edges=edges, color=(200, 170, 90), name="cube")


def parse_obj(text: str) -> Tuple[np.ndarray, List[Tuple[int, int]]]:
    """Parse OBJ text into vertices (N, 3) and unique face edges."""
    verts = []
    edges = set()

    for line_no, line in enumerate(text.splitlines(), 1):
        parts = line.split()
        if not parts or parts[0].startswith('#'):
            continue
        try:
            if parts[0] == 'v':
                vertex = [float(parts[1]), float(parts[2]), float(parts[3])]
                if not all(math.isfinite(v) for v in vertex):
                    raise ValueError("non-finite vertex")
                verts.append(vertex)
            elif parts[0] == 'f':
                face = []
                for token in parts[1:]:
                    idx = int(token.split('/')[0])
                    # Negative indices are relative to the end of the list so far
                    face.append(idx - 1 if idx > 0 else len(verts) + idx)
                for a, b in zip(face, face[1:] + face[:1]):
                    if a != b:
                        edges.add((min(a, b), max(a, b)))
        except (ValueError, IndexError) as e:
            raise ModelLoadError(f"Malformed OBJ line {line_no}: {line.strip()!r}") from e

    if not verts:
        raise ModelLoadError("OBJ contains no vertices")

    vertices = np.array(verts, dtype=np.float64)
    valid = [(a, b) for a, b in edges if 0 <= a < len(verts) and 0 <= b < len(verts)]
    return vertices, sorted(valid)


def load_material_color(mtl_path: str) -> Tuple[int, int, int]:
    """First diffuse (Kd) colour of an MTL file as BGR, grey if unavailable."""
    try:
        with open(mtl_path, 'r', encoding='utf-8', errors='ignore') as f:
            for line in f:
                parts = line.split()
                if len(parts) >= 4 and parts[0] == 'Kd':
                    r, g, b = (float(p) for p in parts[1:4])
                    return (int(b * 255), int(g * 255), int(r * 255))
    except (OSError, ValueError) as e:
        logger.warning("Using default material: %s", e)
        return FALLBACK_COLOR

    logger.warning("No diffuse colour in %s, using default material", mtl_path)
    return FALLBACK_COLOR


def default_mtl_path(obj_path: str, mtl: Optional[str] = None) -> str:
    """Material path: explicit name next to the OBJ, or the OBJ with .mtl."""
    if mtl:
        if os.path.dirname(mtl):
            return mtl
        return os.path.join(os.path.dirname(obj_path), mtl)
    return os.path.splitext(obj_path)[0] + '.mtl'


def load_model(path: Optional[str], mtl: Optional[str] = None) -> ModelObject:
    """
    Load and normalise a model.

    Without a path a cube is used. Raises ModelLoadError for unreadable or
    unsupported files.
    """
    if not path:
        model = create_cube()
    else:
        if not path.lower().endswith('.obj'):
            raise ModelLoadError(f"Unsupported model format: {path}")
        try:
            with open(path, 'r', encoding='utf-8', errors='ignore') as f:
                text = f.read()
        except OSError as e:
            raise ModelLoadError(f"Cannot read model {path}: {e}") from e

        vertices, edges = parse_obj(text)
        color = load_material_color(default_mtl_path(path, mtl))
        model = ModelObject(vertices=vertices, edges=edges, color=color,
                            name=os.path.basename(path))

    model.normalize()
    logger.info("Loaded model %s (%d vertices, %d edges)",
                model.name, len(model.vertices), len(model.edges))
    return model
