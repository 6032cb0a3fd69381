"""
Interaction systems and data models for the viewer.
"""

from .auto_rotate import AutoRotateArbiter, AutoRotateMode
from .camera import ViewCamera
from .input_state import InputStateTracker
from .model import ModelLoadError, ModelObject, create_cube, load_model, parse_obj
from .transform import (
    CameraState, ControlSource, ObjectOrientation, TickReport, TransformController
)

__all__ = [
    # Input arbitration
    'AutoRotateArbiter', 'AutoRotateMode', 'InputStateTracker',
    'TransformController', 'ControlSource', 'TickReport',
    # Scene entities
    'ViewCamera', 'CameraState', 'ObjectOrientation',
    'ModelObject', 'ModelLoadError', 'create_cube', 'load_model', 'parse_obj',
]
