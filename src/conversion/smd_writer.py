"""
StudioMDL (SMD) and QC export for spline tube meshes.

Writes a static reference SMD with a single root bone. Colors are carried
as palette UVs (see palette.py), and each triangle picks the opaque or the
translucent material depending on its quantized alpha.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from botpath.conversion.palette import (
    color_for_segment,
    is_opaque,
    palette_uv,
    quantize_color,
)
from botpath.generators.spline.tube_mesh import SplineMesh

Vec3 = Tuple[float, float, float]

OPAQUE_MATERIAL = "spline.vmt"
TRANSLUCENT_MATERIAL = "spline-transparent.vmt"

SMD_HEADER = """version 1
nodes
0 "static_prop" -1
end
skeleton
time 0
0 0.000000 0.000000 0.000000 0.000000 0.000000 0.000000
end
triangles
"""


def to_smd_position(v: Sequence[float]) -> Vec3:
    """Hammer east/north/up to the model compiler's north/west/up."""
    return (float(v[1]), -float(v[0]), float(v[2]))


def to_smd_normal(n: Sequence[float]) -> Vec3:
    """Same axis change as positions, then negated: SMD normals point inward."""
    return (-float(n[1]), float(n[0]), -float(n[2]))


def triangle_t_value(t0: float, t1: float, t2: float) -> float:
    """Curve parameter shared by the majority of a triangle's vertices."""
    if t0 == t1 or t0 == t2:
        return t0
    return t1


class SmdWriter:
    """Build SMD text for one spline mesh."""

    def __init__(self, mesh: SplineMesh, point_colors: Sequence[Sequence[int]]):
        self.mesh = mesh
        self.point_colors = list(point_colors)
        self.opaque_triangles = 0
        self.translucent_triangles = 0

    def triangle_material(self, triangle: Sequence[int]) -> Tuple[str, Tuple[float, float]]:
        """Get palette material and UV for one triangle of the mesh.

        Args:
            triangle: Three vertex indices into the spline mesh

        Returns:
            (material name, (u, v)) where the material is the opaque or
            translucent palette depending on the blended alpha
        """
        t_values = self.mesh.t_values
        full_t = triangle_t_value(*(float(t_values[i]) for i in triangle))
        color = color_for_segment(self.point_colors, full_t)
        quantized = quantize_color(color)
        material = OPAQUE_MATERIAL if is_opaque(quantized) else TRANSLUCENT_MATERIAL
        return material, palette_uv(quantized)

    def _vertex_line(self, index: int, uv: Tuple[float, float]) -> str:
        px, py, pz = to_smd_position(self.mesh.positions[index])
        nx, ny, nz = to_smd_normal(self.mesh.normals[index])
        return (f"0 {px:.6f} {py:.6f} {pz:.6f} "
                f"{nx:.6f} {ny:.6f} {nz:.6f} {uv[0]:.6f} {uv[1]:.6f}")

    def lines(self) -> List[str]:
        lines = SMD_HEADER.splitlines()
        self.opaque_triangles = 0
        self.translucent_triangles = 0

        if len(self.mesh.indices) and not self.point_colors:
            raise ValueError("mesh has triangles but no control point colors")

        for triangle in self.mesh.indices:
            material, uv = self.triangle_material(triangle)
            if material == OPAQUE_MATERIAL:
                self.opaque_triangles += 1
            else:
                self.translucent_triangles += 1
            lines.append(material)
            for index in triangle:
                lines.append(self._vertex_line(int(index), uv))

        lines.append("end")
        return lines

    def to_text(self) -> str:
        return "\n".join(self.lines()) + "\n"


def qc_text(model_name: str, body_name: str, origin: Vec3, material_dir: str) -> str:
    """Compile script for one static prop.

    The origin is negated so the model's origin lands on the first
    control point.
    """
    ox, oy, oz = origin
    return (
        "$staticprop\n"
        f"$modelname \"{model_name}\"\n"
        f"$origin {0.0 - ox:.6f} {0.0 - oy:.6f} {0.0 - oz:.6f}\n"
        "$scale \"1.0\"\n"
        f"$body \"Body\" \"{body_name}\"\n"
        f"$cdmaterials \"{material_dir}\"\n"
        f"$sequence idle \"{body_name}\"\n"
        "$surfaceprop \"default\"\n"
        "$mostlyopaque\n"
    )
