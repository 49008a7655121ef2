"""
Spline control points and cubic Hermite interpolation.

A control point is a position plus an orientation (pitch/yaw in degrees)
and a tangent magnitude. Two consecutive points define one Hermite
segment; positions and tangent directions along the segment are computed
in closed form, since the frame propagation downstream is sensitive to
noise in the tangent direction.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Tuple

import numpy as np

Vec3 = Tuple[float, float, float]
Color = Tuple[int, int, int, int]  # 8-bit unmultiplied RGBA

WHITE: Color = (255, 255, 255, 255)

EPSILON = 1e-9


def direction(pitch: float, yaw: float) -> np.ndarray:
    """Unit vector for a pitch/yaw pair given in degrees."""
    p = math.radians(pitch)
    y = math.radians(yaw)
    return np.array([
        math.cos(p) * math.cos(y),
        math.cos(p) * math.sin(y),
        math.sin(p),
    ])


def _normalized(v: np.ndarray):
    length = float(np.linalg.norm(v))
    if length < EPSILON:
        return None
    return v / length


@dataclass
class ControlPoint:
    """User-placed oriented anchor of a spline."""
    position: Vec3 = (0.0, 0.0, 0.0)
    pitch: float = 0.0   # Degrees, positive up
    yaw: float = 0.0     # Degrees, counter-clockwise from +X
    tangent_magnitude: float = 512.0
    color: Color = field(default=WHITE)

    def __post_init__(self):
        self.position = tuple(float(c) for c in self.position)
        self.color = tuple(int(c) for c in self.color)

    @property
    def position_vec(self) -> np.ndarray:
        return np.array(self.position, dtype=np.float64)

    def tangent(self) -> np.ndarray:
        """Tangent vector: direction scaled by the tangent magnitude."""
        return direction(self.pitch, self.yaw) * self.tangent_magnitude

    def copy(self, **changes) -> "ControlPoint":
        return replace(self, **changes)


# ---------------------------------------------------------------------------
# Hermite segment
# ---------------------------------------------------------------------------

def hermite_basis(t: float) -> Tuple[float, float, float, float]:
    """(h00, h10, h01, h11) at t."""
    t2 = t * t
    t3 = t2 * t
    return (
        2.0 * t3 - 3.0 * t2 + 1.0,
        t3 - 2.0 * t2 + t,
        -2.0 * t3 + 3.0 * t2,
        t3 - t2,
    )


def interpolate(p0: ControlPoint, p1: ControlPoint, t: float) -> np.ndarray:
    """Position on the segment p0 -> p1 at t in [0, 1]."""
    h00, h10, h01, h11 = hermite_basis(t)
    return (h00 * p0.position_vec + h10 * p0.tangent()
            + h01 * p1.position_vec + h11 * p1.tangent())


def derivative(p0: ControlPoint, p1: ControlPoint, t: float) -> np.ndarray:
    """First derivative of interpolate() with respect to t."""
    t2 = t * t
    return ((6.0 * t2 - 6.0 * t) * (p0.position_vec - p1.position_vec)
            + (3.0 * t2 - 4.0 * t + 1.0) * p0.tangent()
            + (3.0 * t2 - 2.0 * t) * p1.tangent())


def second_derivative(p0: ControlPoint, p1: ControlPoint, t: float) -> np.ndarray:
    return ((12.0 * t - 6.0) * (p0.position_vec - p1.position_vec)
            + (6.0 * t - 4.0) * p0.tangent()
            + (6.0 * t - 2.0) * p1.tangent())


def tangent_direction(p0: ControlPoint, p1: ControlPoint, t: float) -> np.ndarray:
    """Unit tangent of the segment at t.

    Where the first derivative vanishes (a zero tangent magnitude at an
    endpoint) the direction is the one-sided limit of the velocity, which
    is the second derivative pointing into the segment. Coincident points
    with no tangents fall back to +X.
    """
    d = _normalized(derivative(p0, p1, t))
    if d is not None:
        return d

    dd = second_derivative(p0, p1, t)
    if t >= 1.0:
        # Approached from below, the velocity points against the acceleration.
        dd = -dd
    d = _normalized(dd)
    if d is not None:
        return d

    d = _normalized(p1.position_vec - p0.position_vec)
    if d is not None:
        return d
    return np.array([1.0, 0.0, 0.0])
