"""
Rendered scenes for the viewer.
"""

from .model_scene import ModelScene

__all__ = [
    'ModelScene',
]
