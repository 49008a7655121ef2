"""
Hermite splines and the tube meshes built along them.
"""

from .control_point import ControlPoint, direction
from .spline import MeshState, Spline, SplineData
from .storage import SplineStateError, restore_state, save_state
from .tube_mesh import SplineMesh, build_tube_mesh

__all__ = [
    'ControlPoint',
    'direction',
    'MeshState',
    'Spline',
    'SplineData',
    'SplineStateError',
    'restore_state',
    'save_state',
    'SplineMesh',
    'build_tube_mesh',
]
