"""
Editing session: one loaded map plus the spline set drawn over it.

The workspace is what the CLI and any front end drive. It never renders;
it hands out the map mesh and rebuilt spline meshes for whoever draws.
"""

import logging
from pathlib import Path
from typing import List, Optional

from botpath.conversion.map_mesh import MapMesh, extract_map_mesh
from botpath.conversion.model_export import construct_zip
from botpath.conversion.vmf_parser import parse_vmf
from botpath.generators.spline.spline import Spline, SplineData
from botpath.generators.spline.storage import restore_state, save_state
from botpath.settings.editor_settings import EDITOR_SETTINGS, EditorSettings

logger = logging.getLogger(__name__)


class Workspace:
    """The current map and the splines being edited over it."""

    def __init__(self, settings: Optional[EditorSettings] = None):
        self.settings = settings or EDITOR_SETTINGS
        self.map_mesh: MapMesh = MapMesh.empty()
        self.map_path: Optional[str] = None
        self.splines: List[Spline] = []
        self.selected_spline: Optional[int] = None

    # -- map --

    def load_map(self, text: str, source: Optional[str] = None) -> MapMesh:
        """Replace the map mesh with one extracted from VMF text.

        On any error the previous map stays loaded and the error propagates.
        """
        mesh = extract_map_mesh(parse_vmf(text))
        self.map_mesh = mesh
        self.map_path = source
        logger.info(
            "Loaded map %s: %d faces, %d triangles",
            source or "<text>", mesh.face_count, mesh.triangle_count,
        )
        return mesh

    def load_map_path(self, file_path: Path) -> MapMesh:
        with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
            return self.load_map(f.read(), source=str(file_path))

    # -- splines --

    @property
    def current_spline(self) -> Optional[Spline]:
        if self.selected_spline is None:
            return None
        return self.splines[self.selected_spline]

    def add_spline(self) -> Spline:
        """Append an empty spline using the configured defaults and select it."""
        spline = Spline(SplineData(
            radius=self.settings.radius,
            sides=self.settings.sides,
            subdivisions=self.settings.subdivisions,
            name=self.settings.spline_name,
        ))
        self.splines.append(spline)
        self.selected_spline = len(self.splines) - 1
        return spline

    def remove_spline(self, index: Optional[int] = None) -> Spline:
        """Remove a spline (the selected one by default)."""
        if index is None:
            index = self.selected_spline
        if index is None or not 0 <= index < len(self.splines):
            raise IndexError("no spline to remove")
        removed = self.splines.pop(index)

        if not self.splines:
            self.selected_spline = None
        elif self.selected_spline is not None and self.selected_spline >= index:
            self.selected_spline = max(0, self.selected_spline - 1)
        return removed

    def select_spline(self, index: int):
        if not 0 <= index < len(self.splines):
            raise IndexError(f"spline index {index} out of range")
        self.selected_spline = index

    def place_point(self, position, pitch: float, yaw: float):
        """Place a point on the selected spline, creating one if needed."""
        spline = self.current_spline or self.add_spline()
        return spline.place_point(
            position, pitch, yaw,
            default_tangent_magnitude=self.settings.tangent_magnitude,
        )

    def snap_selected_point(self):
        spline = self.current_spline
        if spline is None:
            return None
        return spline.snap_selected(self.settings.snap_value)

    def update(self) -> int:
        """Rebuild dirty splines, bundles first. Returns how many were rebuilt."""
        ordered = [s for s in self.splines if s.bundle] + [s for s in self.splines if not s.bundle]
        rebuilt = 0
        for spline in ordered:
            if spline.is_dirty:
                spline.rebuild()
                rebuilt += 1
        return rebuilt

    # -- persistence / export --

    def save_state(self) -> str:
        return save_state(self.splines)

    def restore_state(self, text: str) -> List[Spline]:
        """Replace the spline set; on error the current set is kept."""
        splines = restore_state(text)
        self.splines = splines
        self.selected_spline = 0 if splines else None
        return splines

    def export(self) -> bytes:
        self.update()
        return construct_zip(self.splines, self.settings.material_dir)
