# Botpath imports
from botpath.generators.spline.storage import restore_state
from botpath.pipeline.workspace import Workspace
import main

# Standard library imports
import zipfile

# Third-party imports
import pytest


@pytest.fixture(autouse=True)
def isolated_workspace(monkeypatch, editor_settings):
    """Keep the CLI away from the user's stored settings"""
    monkeypatch.setattr(main, "Workspace", lambda: Workspace(editor_settings))


class TestMapInfo:
    def test_summary(self, tmp_path, box_map_text, capsys):
        path = tmp_path / "box.vmf"
        path.write_text(box_map_text)
        assert main.main(["map-info", str(path)]) == 0
        out = capsys.readouterr().out
        assert "Faces:     6" in out
        assert "Triangles: 12" in out

    def test_parse_error(self, tmp_path):
        path = tmp_path / "broken.vmf"
        path.write_text("world\n{\n")
        assert main.main(["map-info", str(path)]) == 1

    def test_missing_file(self, tmp_path):
        assert main.main(["map-info", str(tmp_path / "nope.vmf")]) == 1


class TestFromLogAndExport:
    def test_log_to_state_to_zip(self, tmp_path):
        log = tmp_path / "console.log"
        log.write_text(
            "setpos 0 0 0;setang 0 0 0\n"
            "setpos 256 0 0;setang 0 0 0\n"
        )
        state = tmp_path / "state.json"
        assert main.main(["from-log", str(log), "-o", str(state), "--name", "paths/log"]) == 0

        (spline,) = restore_state(state.read_text())
        assert spline.name == "paths/log"
        assert len(spline.points) == 2

        archive = tmp_path / "out.zip"
        assert main.main(["export", str(state), "-o", str(archive)]) == 0
        with zipfile.ZipFile(archive) as zf:
            assert "spline-0.smd" in zf.namelist()

    def test_log_without_positions(self, tmp_path):
        log = tmp_path / "console.log"
        log.write_text("nothing here\n")
        assert main.main(["from-log", str(log), "-o", str(tmp_path / "s.json")]) == 1

    def test_export_bad_state(self, tmp_path):
        state = tmp_path / "state.json"
        state.write_text('[{"name": "x"}]')
        assert main.main(["export", str(state), "-o", str(tmp_path / "out.zip")]) == 1

    def test_export_unnamed_spline(self, tmp_path):
        log = tmp_path / "console.log"
        log.write_text("setpos 0 0 0;setang 0 0 0\nsetpos 64 0 0;setang 0 0 0\n")
        state = tmp_path / "state.json"
        main.main(["from-log", str(log), "-o", str(state)])
        assert main.main(["export", str(state), "-o", str(tmp_path / "out.zip")]) == 1
