# Botpath imports
from botpath.conversion.smd_writer import (
    OPAQUE_MATERIAL,
    TRANSLUCENT_MATERIAL,
    SmdWriter,
    qc_text,
    to_smd_normal,
    to_smd_position,
    triangle_t_value,
)
from botpath.generators.spline.tube_mesh import SplineMesh, build_tube_mesh

# Third-party imports
import pytest


@pytest.fixture
def prism_mesh(straight_points):
    return build_tube_mesh(straight_points, radius=4, sides=3, subdivisions=1)


class TestConventions:
    def test_position_axes(self):
        assert to_smd_position((1, 2, 3)) == (2.0, -1.0, 3.0)

    def test_normal_axes(self):
        assert to_smd_normal((1, 2, 3)) == (-2.0, 1.0, -3.0)

    @pytest.mark.parametrize(
        "ts, expected",
        [((0, 0, 1), 0), ((0, 1, 1), 1), ((1, 0, 1), 1), ((2, 2, 2), 2)],
    )
    def test_majority_t(self, ts, expected):
        assert triangle_t_value(*ts) == expected


class TestSmdWriter:
    def test_layout(self, prism_mesh):
        lines = SmdWriter(prism_mesh, [(255, 255, 255, 255)] * 2).lines()
        assert lines[0] == "version 1"
        assert lines[lines.index("triangles") - 1] == "end"
        assert lines[-1] == "end"
        # 8 triangles, each a material line and three vertex lines
        assert len(lines) - lines.index("triangles") - 2 == 8 * 4

    def test_vertex_line(self, prism_mesh):
        lines = SmdWriter(prism_mesh, [(255, 255, 255, 255)] * 2).lines()
        fields = lines[lines.index("triangles") + 2].split()
        assert len(fields) == 9
        assert fields[0] == "0"
        # Start cap vertex 0 sits at x=0, so its SMD y is -0
        assert float(fields[2]) == 0.0

    def test_opaque_material(self, prism_mesh):
        writer = SmdWriter(prism_mesh, [(255, 255, 255, 255)] * 2)
        lines = writer.lines()
        assert lines.count(OPAQUE_MATERIAL) == 8
        assert writer.opaque_triangles == 8
        assert writer.translucent_triangles == 0

    def test_translucent_material(self, prism_mesh):
        writer = SmdWriter(prism_mesh, [(255, 0, 0, 100)] * 2)
        assert writer.lines().count(TRANSLUCENT_MATERIAL) == 8

    def test_mixed_alpha(self, prism_mesh):
        # Start cap uses t=0 (opaque), end cap t=1 (translucent)
        writer = SmdWriter(prism_mesh, [(255, 255, 255, 255), (255, 255, 255, 0)])
        lines = writer.lines()
        first = lines.index("triangles") + 1
        assert lines[first] == OPAQUE_MATERIAL
        assert lines[-5] == TRANSLUCENT_MATERIAL

    def test_uv_shared_per_triangle(self, prism_mesh):
        lines = SmdWriter(prism_mesh, [(0, 255, 0, 255)] * 2).lines()
        first = lines.index("triangles") + 1
        uvs = {tuple(line.split()[7:9]) for line in lines[first + 1:first + 4]}
        assert len(uvs) == 1

    def test_missing_colors(self, prism_mesh):
        with pytest.raises(ValueError):
            SmdWriter(prism_mesh, []).lines()

    def test_empty_mesh(self):
        text = SmdWriter(SplineMesh.empty(), []).to_text()
        assert text.endswith("triangles\nend\n")


class TestQc:
    def test_origin_negated(self):
        qc = qc_text("paths/a", "spline-0", (10.0, -20.0, 0.0), "spline-gen")
        assert "$origin -10.000000 20.000000 0.000000\n" in qc

    def test_fields(self):
        qc = qc_text("paths/a", "spline-3", (0.0, 0.0, 0.0), "custom")
        assert qc.startswith("$staticprop\n")
        assert '$modelname "paths/a"' in qc
        assert '$body "Body" "spline-3"' in qc
        assert '$sequence idle "spline-3"' in qc
        assert '$cdmaterials "custom"' in qc
        assert qc.rstrip().endswith("$mostlyopaque")
