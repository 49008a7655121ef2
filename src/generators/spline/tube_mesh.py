"""
Tube mesh generation along a Hermite spline.

The spline is sampled per segment, a rotation-minimizing (Bishop) frame is
propagated along the samples with the double reflection method, and a
regular polygon cross-section is swept along the frames:

    Wang, Juttler, Zheng, Liu - "Computation of Rotation Minimizing Frames"
    ACM Transactions on Graphics 27(1), 2008.

Every rebuild is a full recomputation; nothing is patched in place.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from botpath.generators.spline.control_point import (
    ControlPoint,
    interpolate,
    tangent_direction,
)

UP_AXIS = np.array([0.0, 0.0, 1.0])
FALLBACK_AXIS = np.array([1.0, 0.0, 0.0])

EPSILON = 1e-12


@dataclass
class SplineMesh:
    """Tube mesh of one spline."""
    # Vertex data: position (3) + normal (3) + t (1) = 7 floats per vertex
    vertices: np.ndarray  # Shape: (N, 7), dtype=float32
    indices: np.ndarray   # Shape: (M, 3), dtype=uint32

    @property
    def positions(self) -> np.ndarray:
        return self.vertices[:, 0:3]

    @property
    def normals(self) -> np.ndarray:
        return self.vertices[:, 3:6]

    @property
    def t_values(self) -> np.ndarray:
        return self.vertices[:, 6]

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices)

    @property
    def is_empty(self) -> bool:
        return len(self.vertices) == 0

    def render_buffer(self) -> np.ndarray:
        """Interleaved position + t, the layout the spline shader consumes."""
        return np.ascontiguousarray(self.vertices[:, [0, 1, 2, 6]])

    @classmethod
    def empty(cls) -> "SplineMesh":
        return cls(
            vertices=np.zeros((0, 7), dtype=np.float32),
            indices=np.zeros((0, 3), dtype=np.uint32),
        )


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

def sample_spline(points: Sequence[ControlPoint],
                  subdivisions: int) -> Tuple[np.ndarray, np.ndarray]:
    """Positions and unit tangents at every subdivision, plus the final endpoint.

    Returns:
        (positions, tangents), each of shape (S, 3) with
        S = (len(points) - 1) * subdivisions + 1. Empty for fewer than 2 points.
    """
    if len(points) < 2:
        return np.zeros((0, 3)), np.zeros((0, 3))

    step = 1.0 / subdivisions
    positions: List[np.ndarray] = []
    tangents: List[np.ndarray] = []
    for p0, p1 in zip(points[:-1], points[1:]):
        for s in range(subdivisions):
            t = step * s
            positions.append(interpolate(p0, p1, t))
            tangents.append(tangent_direction(p0, p1, t))

    positions.append(points[-1].position_vec)
    tangents.append(tangent_direction(points[-2], points[-1], 1.0))

    return np.array(positions), np.array(tangents)


# ---------------------------------------------------------------------------
# Rotation-minimizing frames
# ---------------------------------------------------------------------------

def initial_normal(tangent: np.ndarray) -> np.ndarray:
    """Normal at the first sample: up axis crossed with the tangent."""
    normal = np.cross(UP_AXIS, tangent)
    length = np.linalg.norm(normal)
    if length < 1e-9:
        # Vertical start; any horizontal reference works.
        normal = np.cross(FALLBACK_AXIS, tangent)
        length = np.linalg.norm(normal)
    return normal / length


def _reflect(v: np.ndarray, axis: np.ndarray, axis_sq: float) -> np.ndarray:
    """Reflect v across the plane through the origin with normal axis."""
    return v - (2.0 / axis_sq) * np.dot(axis, v) * axis


def rotation_minimizing_frames(positions: np.ndarray,
                               tangents: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Double reflection frame propagation.

    For each step, the previous normal and tangent are reflected across the
    plane bisecting the two sample positions, then across the plane
    bisecting the reflected and the new tangent. A coincident pair skips
    the corresponding reflection.

    Returns:
        (normals, binormals) of the same shape as tangents.
    """
    count = len(positions)
    normals = np.zeros((count, 3))
    binormals = np.zeros((count, 3))
    if count == 0:
        return normals, binormals

    normals[0] = initial_normal(tangents[0])
    binormals[0] = np.cross(tangents[0], normals[0])

    for i in range(1, count):
        v1 = positions[i] - positions[i - 1]
        c1 = float(np.dot(v1, v1))
        if c1 > EPSILON:
            normal_l = _reflect(normals[i - 1], v1, c1)
            tangent_l = _reflect(tangents[i - 1], v1, c1)
        else:
            normal_l = normals[i - 1]
            tangent_l = tangents[i - 1]

        v2 = tangents[i] - tangent_l
        c2 = float(np.dot(v2, v2))
        if c2 > EPSILON:
            normal = _reflect(normal_l, v2, c2)
        else:
            normal = normal_l

        normals[i] = normal
        binormals[i] = np.cross(tangents[i], normal)

    return normals, binormals


# ---------------------------------------------------------------------------
# Mesh
# ---------------------------------------------------------------------------

def polygon_offsets(sides: int) -> List[Tuple[float, float]]:
    """(cos, sin) of evenly spaced cross-section angles."""
    return [
        (math.cos(i / sides * math.tau), math.sin(i / sides * math.tau))
        for i in range(sides)
    ]


def tube_indices(ring_count: int, sides: int) -> List[Tuple[int, int, int]]:
    """End caps and quad strips for ring_count rings of sides vertices.

    Side counts below 3 give no cap triangles.
    """
    indices: List[Tuple[int, int, int]] = []
    if ring_count == 0 or sides <= 0:
        return indices

    # Start cap
    for i in range(1, sides - 1):
        indices.append((0, i, i + 1))

    # Between rings
    for ring in range(ring_count - 1):
        base = ring * sides
        next_base = (ring + 1) * sides
        for i in range(sides):
            j = (i + 1) % sides
            indices.append((base + j, base + i, next_base + j))
            indices.append((base + i, next_base + i, next_base + j))

    # End cap
    end_base = (ring_count - 1) * sides
    for i in range(1, sides - 1):
        indices.append((end_base, end_base + i, end_base + i + 1))

    return indices


def build_tube_mesh(points: Sequence[ControlPoint], radius: float,
                    sides: int, subdivisions: int) -> SplineMesh:
    """Sweep a regular polygon along the spline through points.

    Args:
        points: Control points; fewer than two gives an empty mesh
        radius: Distance from the curve to each ring vertex
        sides: Polygon side count; 0 gives an empty mesh
        subdivisions: Samples per segment, at least 1

    Returns:
        SplineMesh with one ring of sides vertices per sample

    Raises:
        ValueError: subdivisions is below 1.
    """
    if len(points) < 2 or sides <= 0:
        return SplineMesh.empty()
    if subdivisions < 1:
        raise ValueError(f"subdivisions must be at least 1, got {subdivisions}")

    positions, tangents = sample_spline(points, subdivisions)
    normals, binormals = rotation_minimizing_frames(positions, tangents)

    offsets = polygon_offsets(sides)
    vertices = np.zeros((len(positions) * sides, 7))
    row = 0
    for i in range(len(positions)):
        t_value = i / subdivisions
        for cos_a, sin_a in offsets:
            radial = cos_a * normals[i] + sin_a * binormals[i]
            vertices[row, 0:3] = positions[i] + radial * radius
            vertices[row, 3:6] = radial
            vertices[row, 6] = t_value
            row += 1

    indices = tube_indices(len(positions), sides)
    return SplineMesh(
        vertices=vertices.astype(np.float32),
        indices=np.array(indices, dtype=np.uint32).reshape(-1, 3),
    )
