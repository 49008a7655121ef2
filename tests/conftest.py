# Botpath imports
from botpath.conversion.vmf_writer import box_solid, format_vmf, new_map
from botpath.generators.spline.control_point import ControlPoint
from botpath.generators.spline.spline import Spline, SplineData
from botpath.settings.editor_settings import EditorSettings

# Third-party imports
import pytest


@pytest.fixture
def editor_settings(tmp_path):
    """Settings stored in a throwaway ini file"""
    return EditorSettings(str(tmp_path / "editor.ini"))


@pytest.fixture
def box_map_text():
    """VMF text of a single 128 unit box in the world"""
    return format_vmf(new_map([box_solid(2, (0, 0, 0), (128, 128, 128))]))


@pytest.fixture
def straight_points():
    """Two points 256 units apart along +X, tangents along the chord"""
    return [
        ControlPoint(position=(0, 0, 0), yaw=0, tangent_magnitude=256),
        ControlPoint(position=(256, 0, 0), yaw=0, tangent_magnitude=256),
    ]


@pytest.fixture
def curved_points():
    """Quarter turn from +X to +Y"""
    return [
        ControlPoint(position=(0, 0, 0), yaw=0, tangent_magnitude=512),
        ControlPoint(position=(512, 512, 0), yaw=90, tangent_magnitude=512),
        ControlPoint(position=(512, 1024, 128), pitch=10, yaw=90, tangent_magnitude=256),
    ]


@pytest.fixture
def named_spline(straight_points):
    """Exportable spline with the default tube settings"""
    return Spline(SplineData(points=list(straight_points), name="paths/test_route"))
