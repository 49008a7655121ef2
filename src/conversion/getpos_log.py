"""
Source console ``getpos`` logs.

``getpos`` prints ``setpos x y z;setang pitch yaw roll``. Walking a route in
game and logging getpos gives a quick first draft of a path; the reverse
direction writes sampled spline positions as a console script to fly the
route in game.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence, Tuple

from botpath.generators.spline.control_point import ControlPoint

Vec3 = Tuple[float, float, float]

_FP = r"[-+]?(?:[0-9]*\.[0-9]+|[0-9]+)"
_FP_RE = re.compile(rf"^{_FP}$")

# getpos sometimes prints "setang a b c\nsetpos x y z;" instead of the
# usual "setpos x y z;setang a b c\n". Rewrite those before parsing.
_SWAPPED_RE = re.compile(
    rf"^setang ({_FP}) ({_FP}) ({_FP})\nsetpos ({_FP}) ({_FP}) ({_FP});",
    re.MULTILINE,
)


def _fix_swapped_lines(log: str) -> str:
    return _SWAPPED_RE.sub(r"setpos \4 \5 \6;setang \1 \2 \3\n", log)


def parse_getpos_log(log: str) -> List[Tuple[Vec3, Vec3]]:
    """Collect the poses recorded in a console log.

    Args:
        log: Console output holding ``setpos ...;setang ...`` lines

    Returns:
        (position, angles) for every well-formed line; anything else in the
        log is ignored
    """
    entries = []
    for line in _fix_swapped_lines(log).splitlines():
        commands = [part.split() for part in line.split(";")]
        if len(commands) != 2:
            continue
        setpos, setang = commands
        if len(setpos) != 4 or len(setang) != 4:
            continue
        if setpos[0] != "setpos" or setang[0] != "setang":
            continue
        values = setpos[1:] + setang[1:]
        if not all(_FP_RE.match(v) for v in values):
            continue
        numbers = [float(v) for v in values]
        entries.append((tuple(numbers[0:3]), tuple(numbers[3:6])))
    return entries


def points_from_getpos(entries: Iterable[Tuple[Vec3, Vec3]],
                       tangent_magnitude: float = 512.0) -> List[ControlPoint]:
    """Control points at the logged positions, facing the logged view.

    Source view pitch is positive looking down, spline pitch is positive up.
    """
    return [
        ControlPoint(
            position=position,
            pitch=-angles[0],
            yaw=angles[1],
            tangent_magnitude=tangent_magnitude,
        )
        for position, angles in entries
    ]


def format_setpos_script(positions: Sequence[Sequence[float]]) -> str:
    """One ``setpos`` per sampled position, view reset each time."""
    return "".join(
        f"setpos {p[0]:.6f} {p[1]:.6f} {p[2]:.6f};setang 0 0 0\n" for p in positions
    )
