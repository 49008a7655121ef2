# Botpath imports
from botpath.conversion.model_export import (
    ExportError,
    construct_zip,
    spline_model_files,
    vmt_text,
)
from botpath.generators.spline.spline import Spline, SplineData

# Standard library imports
import io
import zipfile

# Third-party imports
import pytest


def open_zip(data):
    return zipfile.ZipFile(io.BytesIO(data))


@pytest.fixture
def bundle_spline(straight_points):
    return Spline(SplineData(points=list(straight_points), name="paths/bundle", bundle=True))


class TestConstructZip:
    def test_archive_contents(self, named_spline, bundle_spline):
        with open_zip(construct_zip([bundle_spline, named_spline])) as zf:
            names = set(zf.namelist())
        assert names == {
            "spline-1.smd",
            "spline-1.qc",
            "materials/spline-gen/",
            "materials/spline-gen/spline.vtf",
            "materials/spline-gen/spline.vmt",
            "materials/spline-gen/spline-transparent.vmt",
        }

    def test_dirty_splines_rebuilt(self, named_spline):
        assert named_spline.is_dirty
        construct_zip([named_spline])
        assert not named_spline.is_dirty

    def test_qc_and_smd(self, named_spline):
        with open_zip(construct_zip([named_spline])) as zf:
            qc = zf.read("spline-0.qc").decode()
            smd = zf.read("spline-0.smd").decode()
        assert '$modelname "paths/test_route"' in qc
        assert "$origin 0.000000 0.000000 0.000000" in qc
        assert smd.startswith("version 1\n")
        assert smd.count("spline.vmt\n") == named_spline.mesh.triangle_count

    def test_custom_material_dir(self, named_spline):
        with open_zip(construct_zip([named_spline], material_dir="paths")) as zf:
            assert '$cdmaterials "paths"' in zf.read("spline-0.qc").decode()
            vmt = zf.read("materials/paths/spline.vmt").decode()
        assert '"$basetexture" "paths/spline"' in vmt

    def test_no_splines(self):
        with open_zip(construct_zip([])) as zf:
            assert "materials/spline-gen/spline.vtf" in zf.namelist()
            assert not [n for n in zf.namelist() if n.endswith(".smd")]

    def test_empty_name(self, straight_points):
        spline = Spline(SplineData(points=list(straight_points), name="  "))
        with pytest.raises(ExportError):
            construct_zip([spline])

    def test_bundle_name_not_required(self, straight_points):
        bundle = Spline(SplineData(points=list(straight_points), bundle=True))
        construct_zip([bundle])


class TestModelFiles:
    def test_file_names(self, named_spline):
        assert set(spline_model_files(named_spline, 4)) == {"spline-4.smd", "spline-4.qc"}

    def test_origin_from_first_point(self, curved_points):
        moved = [p.copy(position=(p.position[0] + 100, p.position[1], p.position[2] - 8))
                 for p in curved_points]
        spline = Spline(SplineData(points=moved, name="paths/b"))
        qc = spline_model_files(spline, 0)["spline-0.qc"]
        assert "$origin -100.000000 0.000000 8.000000" in qc

    def test_pointless_spline(self):
        files = spline_model_files(Spline(SplineData(name="paths/none")), 0)
        assert files["spline-0.smd"].endswith("triangles\nend\n")


class TestVmt:
    def test_opaque(self):
        text = vmt_text("spline-gen")
        assert text.startswith('"UnlitGeneric"')
        assert "$translucent" not in text

    def test_translucent(self):
        assert '"$translucent" "1"' in vmt_text("spline-gen", translucent=True)
