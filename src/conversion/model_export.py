"""
Zip export of spline models.

The archive holds the uncompiled model sources, ready for studiomdl:

    spline-<i>.smd / spline-<i>.qc          one pair per exported spline
    materials/<dir>/spline.vtf              palette texture
    materials/<dir>/spline.vmt              opaque material
    materials/<dir>/spline-transparent.vmt  translucent material

<i> is the spline's index in the full list, so bundle splines leave gaps.
"""

from __future__ import annotations

import io
import logging
import zipfile
from typing import Optional, Sequence

from botpath.conversion.palette import build_palette_vtf
from botpath.conversion.smd_writer import SmdWriter, qc_text
from botpath.generators.spline.spline import Spline

logger = logging.getLogger(__name__)

DEFAULT_MATERIAL_DIR = "spline-gen"


class ExportError(Exception):
    pass


def vmt_text(material_dir: str, translucent: bool = False) -> str:
    lines = [
        '"UnlitGeneric"',
        "{",
        f'    "$basetexture" "{material_dir}/spline"',
        '    "$model" "1"',
    ]
    if translucent:
        lines.append('    "$translucent" "1"')
    lines.append("}")
    return "\n".join(lines) + "\n"


def spline_model_files(spline: Spline, index: int,
                       material_dir: str = DEFAULT_MATERIAL_DIR) -> dict:
    """SMD and QC text for one spline, keyed by archive file name."""
    if not spline.name.strip():
        raise ExportError(f"spline {index} has no model name")

    mesh = spline.rebuild()
    body_name = f"spline-{index}"
    colors = [p.color for p in spline.points]

    try:
        writer = SmdWriter(mesh, colors)
        smd = writer.to_text()
    except ValueError as e:
        raise ExportError(f"spline {index} ('{spline.name}'): {e}") from e

    origin = spline.points[0].position if spline.points else (0.0, 0.0, 0.0)
    logger.debug(
        "Spline %d ('%s'): %d opaque, %d translucent triangles",
        index, spline.name, writer.opaque_triangles, writer.translucent_triangles,
    )
    return {
        f"{body_name}.smd": smd,
        f"{body_name}.qc": qc_text(spline.name, body_name, origin, material_dir),
    }


def construct_zip(splines: Sequence[Spline],
                  material_dir: Optional[str] = None) -> bytes:
    """Build the export archive for every non-bundle spline.

    Dirty splines are rebuilt first.

    Raises:
        ExportError: a spline can't be exported or the archive can't be written.
    """
    material_dir = material_dir or DEFAULT_MATERIAL_DIR
    buffer = io.BytesIO()
    exported = 0

    try:
        with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as zf:
            for i, spline in enumerate(splines):
                if spline.bundle:
                    logger.info("Skipping bundle spline %d ('%s')", i, spline.name)
                    continue
                for file_name, text in spline_model_files(spline, i, material_dir).items():
                    zf.writestr(file_name, text)
                exported += 1

            material_path = f"materials/{material_dir}"
            zf.writestr(f"{material_path}/", "")
            zf.writestr(f"{material_path}/spline.vtf", build_palette_vtf())
            zf.writestr(f"{material_path}/spline.vmt", vmt_text(material_dir))
            zf.writestr(f"{material_path}/spline-transparent.vmt",
                        vmt_text(material_dir, translucent=True))
    except (OSError, zipfile.LargeZipFile) as e:
        raise ExportError(f"can't write export archive: {e}") from e

    logger.info("Exported %d of %d splines", exported, len(splines))
    return buffer.getvalue()
