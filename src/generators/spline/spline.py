"""
Editable spline with lazily rebuilt tube mesh.

The spline owns its control points and its generated mesh outright. Every
geometric mutation moves the mesh state to DIRTY; rebuild() recomputes the
whole mesh and is the only transition back to CLEAN.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from botpath.generators.spline.control_point import ControlPoint, Color, Vec3, WHITE
from botpath.generators.spline.tube_mesh import SplineMesh, build_tube_mesh, sample_spline

logger = logging.getLogger(__name__)

# Fields of ControlPoint that change the mesh when edited
_GEOMETRY_FIELDS = ("position", "pitch", "yaw", "tangent_magnitude")


class MeshState(Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


@dataclass
class SplineData:
    """The persisted part of a spline."""
    points: List[ControlPoint] = field(default_factory=list)
    radius: float = 4.0
    sides: int = 3
    subdivisions: int = 16
    name: str = ""
    # Reference-only spline, skipped by the model exporter
    bundle: bool = False


class Spline:
    """A named tube path through the map."""

    def __init__(self, data: Optional[SplineData] = None):
        self.data = data if data is not None else SplineData()
        if self.data.subdivisions < 1:
            raise ValueError(f"subdivisions must be at least 1, got {self.data.subdivisions}")
        # len(points) means "append after the last point"
        self.selected_point = len(self.data.points)
        self.mesh = SplineMesh.empty()
        self.state = MeshState.CLEAN
        if self.data.points:
            self.state = MeshState.DIRTY

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def points(self) -> List[ControlPoint]:
        return self.data.points

    @property
    def name(self) -> str:
        return self.data.name

    @name.setter
    def name(self, value: str):
        # Only used by the exporter, the mesh is unaffected.
        self.data.name = value

    @property
    def bundle(self) -> bool:
        return self.data.bundle

    @bundle.setter
    def bundle(self, value: bool):
        self.data.bundle = bool(value)

    @property
    def is_dirty(self) -> bool:
        return self.state is MeshState.DIRTY

    @property
    def has_selection(self) -> bool:
        return self.selected_point < len(self.data.points)

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def request_rebuild(self):
        self.state = MeshState.DIRTY

    def rebuild(self) -> SplineMesh:
        """Regenerate the mesh if dirty; a clean spline is left untouched."""
        if self.state is MeshState.CLEAN:
            return self.mesh

        self.mesh = build_tube_mesh(
            self.data.points, self.data.radius, self.data.sides, self.data.subdivisions
        )
        self.state = MeshState.CLEAN
        logger.debug(
            "Rebuilt spline '%s': %d points, %d vertices, %d triangles",
            self.data.name, len(self.data.points),
            self.mesh.vertex_count, self.mesh.triangle_count,
        )
        return self.mesh

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def set_radius(self, radius: float):
        self.data.radius = float(radius)
        self.request_rebuild()

    def set_sides(self, sides: int):
        self.data.sides = int(sides)
        self.request_rebuild()

    def set_subdivisions(self, subdivisions: int):
        if subdivisions < 1:
            raise ValueError(f"subdivisions must be at least 1, got {subdivisions}")
        self.data.subdivisions = int(subdivisions)
        self.request_rebuild()

    # ------------------------------------------------------------------
    # Point editing
    # ------------------------------------------------------------------

    def place_point(self, position: Vec3, pitch: float, yaw: float,
                    default_tangent_magnitude: float = 512.0,
                    default_color: Color = WHITE) -> ControlPoint:
        """Put a point at the selection and advance the selection.

        At the append position the new point inherits tangent magnitude and
        color from the last point; otherwise it replaces the selected point
        and keeps that point's tangent magnitude and color.

        Args:
            position: World position of the new point
            pitch: Pitch in degrees, as reported by getpos
            yaw: Yaw in degrees
            default_tangent_magnitude: Used when the spline has no points yet
            default_color: Used when the spline has no points yet

        Returns:
            The control point now stored at the old selection index
        """
        new_point = ControlPoint(
            position=position,
            pitch=pitch,
            yaw=yaw,
            tangent_magnitude=default_tangent_magnitude,
            color=default_color,
        )
        points = self.data.points
        if self.selected_point >= len(points):
            if points:
                new_point.tangent_magnitude = points[-1].tangent_magnitude
                new_point.color = points[-1].color
            points.append(new_point)
            self.selected_point = len(points)
        else:
            replaced = points[self.selected_point]
            new_point.tangent_magnitude = replaced.tangent_magnitude
            new_point.color = replaced.color
            points[self.selected_point] = new_point
            self.selected_point += 1

        self.request_rebuild()
        return new_point

    def add_before_selected(self) -> ControlPoint:
        """Insert a copy of the selected point one tangent length behind it."""
        if not self.has_selection:
            raise IndexError("no control point selected")
        selected = self.data.points[self.selected_point]
        position = selected.position_vec - selected.tangent()
        new_point = selected.copy(position=tuple(float(c) for c in position))
        self.data.points.insert(self.selected_point, new_point)
        self.request_rebuild()
        return new_point

    def remove_selected(self) -> ControlPoint:
        if not self.has_selection:
            raise IndexError("no control point selected")
        removed = self.data.points.pop(self.selected_point)
        self.request_rebuild()
        return removed

    def select_previous(self):
        if self.selected_point > 0:
            self.selected_point -= 1

    def select_next(self):
        if self.selected_point < len(self.data.points):
            self.selected_point += 1

    def update_point(self, index: int, **fields) -> ControlPoint:
        """Replace fields of a point; geometric fields mark the mesh dirty."""
        point = self.data.points[index]
        updated = point.copy(**fields)
        self.data.points[index] = updated
        if any(name in _GEOMETRY_FIELDS for name in fields):
            self.request_rebuild()
        return updated

    def snap_selected(self, grid: float) -> Optional[ControlPoint]:
        """Round the selected point's position to a multiple of grid."""
        if not self.has_selection or grid <= 0:
            return None
        position = tuple(round(c / grid) * grid for c in self.data.points[self.selected_point].position)
        return self.update_point(self.selected_point, position=position)

    # ------------------------------------------------------------------
    # Shading
    # ------------------------------------------------------------------

    def point_colors(self) -> np.ndarray:
        """Per-point RGBA in [0, 1] for the shader; the selected point is inverted.

        Independent of the mesh state, meant to be refreshed every frame.
        """
        count = len(self.data.points)
        colors = np.zeros((count, 4), dtype=np.float32)
        for i, point in enumerate(self.data.points):
            r, g, b, a = (c / 255.0 for c in point.color)
            if i == self.selected_point:
                r, g, b = 1.0 - r, 1.0 - g, 1.0 - b
            colors[i] = (r, g, b, a)
        return colors

    def sample_points(self) -> np.ndarray:
        """Sample positions along the spline, one per subdivision."""
        positions, _ = sample_spline(self.data.points, self.data.subdivisions)
        return positions

    def __repr__(self) -> str:
        return (f"Spline(name={self.data.name!r}, points={len(self.data.points)}, "
                f"state={self.state.value})")
