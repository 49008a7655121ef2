# Botpath imports
from botpath.conversion.getpos_log import (
    format_setpos_script,
    parse_getpos_log,
    points_from_getpos,
)

# Third-party imports
import numpy as np
import pytest


@pytest.fixture
def console_log():
    return (
        "] getpos\n"
        "setpos 100.000000 -32.500000 64.031250;setang 10.000000 90.000000 0.000000\n"
        "Unknown command: foo\n"
        "setpos 1 2;setang 0 0 0\n"
        "setpos a b c;setang 0 0 0\n"
        "setang -5.000000 180.000000 0.000000\n"
        "setpos 0.000000 0.000000 0.000000;\n"
        "setpos 5 6 7;setang 1 2 3;extra\n"
    )


class TestParse:
    def test_well_formed_and_swapped_lines(self, console_log):
        entries = parse_getpos_log(console_log)
        assert entries == [
            ((100.0, -32.5, 64.03125), (10.0, 90.0, 0.0)),
            ((0.0, 0.0, 0.0), (-5.0, 180.0, 0.0)),
        ]

    def test_empty(self):
        assert parse_getpos_log("") == []

    def test_windows_line_endings(self):
        entries = parse_getpos_log("setpos 1 2 3;setang 4 5 6\r\n")
        assert entries == [((1.0, 2.0, 3.0), (4.0, 5.0, 6.0))]


class TestPoints:
    def test_pitch_negated(self):
        (point,) = points_from_getpos([((1, 2, 3), (10, 90, 0))], tangent_magnitude=64)
        assert point.position == (1.0, 2.0, 3.0)
        assert point.pitch == -10
        assert point.yaw == 90
        assert point.tangent_magnitude == 64


class TestScript:
    def test_format(self):
        script = format_setpos_script(np.array([[0, 0, 0], [1.5, -2, 3]]))
        assert script.splitlines() == [
            "setpos 0.000000 0.000000 0.000000;setang 0 0 0",
            "setpos 1.500000 -2.000000 3.000000;setang 0 0 0",
        ]

    def test_script_parses_back(self):
        positions = [(10.0, 20.0, 30.0), (-1.0, 0.5, 2.0)]
        entries = parse_getpos_log(format_setpos_script(positions))
        assert [e[0] for e in entries] == positions
