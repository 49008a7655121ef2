"""
Spline set persistence.

Serializes splines to the JSON record shape used by save files:

    [
      {
        "name": "paths/route_a",
        "radius": 4.0, "sides": 3, "subdivisions": 16, "bundle": false,
        "points": [
          {"position": {"x": 0.0, "y": 0.0, "z": 64.0},
           "pitch": 0.0, "yaw": 90.0, "tangent_magnitude": 512.0,
           "color": [255, 255, 255, 255]}
        ]
      }
    ]

Reading and writing the bytes is left to the caller.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from botpath.generators.spline.control_point import ControlPoint
from botpath.generators.spline.spline import Spline, SplineData

logger = logging.getLogger(__name__)


class SplineStateError(Exception):
    pass


def _point_to_dict(point: ControlPoint) -> Dict[str, Any]:
    x, y, z = point.position
    return {
        "position": {"x": x, "y": y, "z": z},
        "pitch": point.pitch,
        "yaw": point.yaw,
        "tangent_magnitude": point.tangent_magnitude,
        "color": list(point.color),
    }


def _spline_to_dict(spline: Spline) -> Dict[str, Any]:
    data = spline.data
    return {
        "name": data.name,
        "radius": data.radius,
        "sides": data.sides,
        "subdivisions": data.subdivisions,
        "bundle": data.bundle,
        "points": [_point_to_dict(p) for p in data.points],
    }


def _require(data: Dict[str, Any], key: str, kind, where: str):
    if key not in data:
        raise SplineStateError(f"{where}: missing field '{key}'")
    value = data[key]
    # bool is an int subclass; don't accept it for numeric fields
    if isinstance(value, bool) and kind is not bool:
        raise SplineStateError(f"{where}: field '{key}' has the wrong type")
    if not isinstance(value, kind):
        raise SplineStateError(f"{where}: field '{key}' has the wrong type")
    return value


def _dict_to_point(data: Any, where: str) -> ControlPoint:
    if not isinstance(data, dict):
        raise SplineStateError(f"{where}: expected an object")
    number = (int, float)

    position = _require(data, "position", dict, where)
    coords = tuple(_require(position, axis, number, f"{where}.position") for axis in "xyz")

    color = _require(data, "color", list, where)
    if len(color) != 4 or not all(isinstance(c, int) and not isinstance(c, bool) and 0 <= c <= 255
                                  for c in color):
        raise SplineStateError(f"{where}: color must be 4 integers in 0..255")

    return ControlPoint(
        position=coords,
        pitch=float(_require(data, "pitch", number, where)),
        yaw=float(_require(data, "yaw", number, where)),
        tangent_magnitude=float(_require(data, "tangent_magnitude", number, where)),
        color=tuple(color),
    )


def _dict_to_spline(data: Any, index: int) -> Spline:
    where = f"spline {index}"
    if not isinstance(data, dict):
        raise SplineStateError(f"{where}: expected an object")
    number = (int, float)

    subdivisions = _require(data, "subdivisions", int, where)
    if subdivisions < 1:
        raise SplineStateError(f"{where}: subdivisions must be at least 1")

    points = [
        _dict_to_point(p, f"{where} point {i}")
        for i, p in enumerate(_require(data, "points", list, where))
    ]
    spline_data = SplineData(
        points=points,
        radius=float(_require(data, "radius", number, where)),
        sides=_require(data, "sides", int, where),
        subdivisions=subdivisions,
        name=_require(data, "name", str, where),
        bundle=_require(data, "bundle", bool, where) if "bundle" in data else False,
    )
    spline = Spline(spline_data)
    # Restored splines always rebuild, even with no points.
    spline.request_rebuild()
    return spline


def save_state(splines: Sequence[Spline]) -> str:
    """Serialize a spline set to JSON text."""
    return json.dumps([_spline_to_dict(s) for s in splines], indent=2)


def restore_state(serialized: str) -> List[Spline]:
    """Parse JSON text back into splines, all marked dirty.

    Raises:
        SplineStateError: malformed JSON or records not matching the shape.
    """
    try:
        data = json.loads(serialized)
    except json.JSONDecodeError as e:
        raise SplineStateError(f"invalid spline state JSON: {e}") from e
    if not isinstance(data, list):
        raise SplineStateError("spline state must be a list of splines")

    splines = [_dict_to_spline(item, i) for i, item in enumerate(data)]
    logger.info("Restored %d splines", len(splines))
    return splines


def save_state_to_path(splines: Sequence[Spline], file_path: Path) -> Path:
    file_path = Path(file_path)
    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(save_state(splines))
    return file_path


def load_state_from_path(file_path: Path) -> List[Spline]:
    with open(file_path, 'r', encoding='utf-8') as f:
        return restore_state(f.read())
