"""
Mesh extraction for VMF brush geometry.

Walks a parsed VMF tree, keeps the faces that are visible in game and
converts them to one vertex/index buffer for rendering the map behind the
spline editor.

Face vertices come from the Hammer++ ``vertices_plus`` field; brush plane
intersection is not attempted. Open and save a map in Hammer++ to
generate the field.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from botpath.conversion.vmf_parser import VMFBranch, VMFError, VMFNode, VMFSchemaError

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]
Vec2 = Tuple[float, float]

# 256 world units = 1 texture tile
TEXTURE_SCALE = 256.0

DETAIL_CLASSNAME = "func_detail"

# Tool materials that never render in game (compared upper-case)
TOOL_MATERIALS = frozenset({
    "TOOLS/TOOLSNODRAW",
    "TOOLS/TOOLSPLAYERCLIP",
    "TOOLS/TOOLSCLIP",
    "TOOLS/TOOLSTRIGGER",
    "TOOLS/TOOLSHINT",
    "TOOLS/TOOLSSKIP",
})

SKY_MATERIALS = frozenset({
    "TOOLS/TOOLSSKYBOX",
    "TOOLS/TOOLSSKYBOX2D",
})

SKY_COLOR: Vec3 = (0.0, 1.0, 1.0)


class MapExtractionError(Exception):
    pass


@dataclass
class MapMesh:
    """Renderable map geometry."""
    # Vertex data: position (3) + uv (2) + color (3) = 8 floats per vertex
    vertices: np.ndarray  # Shape: (N, 8), dtype=float32
    # Triangle indices into the global vertex buffer
    indices: np.ndarray   # Shape: (M, 3), dtype=uint32
    bounds_min: Tuple[float, float, float]
    bounds_max: Tuple[float, float, float]
    face_count: int = 0

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices)

    @property
    def index_count(self) -> int:
        return int(self.indices.size)

    @property
    def is_empty(self) -> bool:
        return len(self.vertices) == 0

    @classmethod
    def empty(cls) -> "MapMesh":
        """Placeholder used before any map is loaded."""
        return cls(
            vertices=np.zeros((0, 8), dtype=np.float32),
            indices=np.zeros((0, 3), dtype=np.uint32),
            bounds_min=(0.0, 0.0, 0.0),
            bounds_max=(0.0, 0.0, 0.0),
        )


# ---------------------------------------------------------------------------
# Per-face helpers
# ---------------------------------------------------------------------------

def side_material(side: VMFNode) -> Optional[str]:
    """Upper-cased material of a side, or None if missing or unreadable."""
    try:
        return side.get_one("material").to_str().upper()
    except VMFSchemaError:
        return None


def is_side_visible(side: VMFNode) -> bool:
    """Filter out tool textures that aren't drawn in game.

    A side without a readable material is treated as invisible rather
    than failing the whole load.
    """
    material = side_material(side)
    if material is None:
        return False
    return material not in TOOL_MATERIALS


def compute_face_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3:
    """Unit normal of (v2 - v1) x (v0 - v1)."""
    cb = (v2[0] - v1[0], v2[1] - v1[1], v2[2] - v1[2])
    ab = (v0[0] - v1[0], v0[1] - v1[1], v0[2] - v1[2])

    nx = cb[1] * ab[2] - cb[2] * ab[1]
    ny = cb[2] * ab[0] - cb[0] * ab[2]
    nz = cb[0] * ab[1] - cb[1] * ab[0]

    length = math.sqrt(nx * nx + ny * ny + nz * nz)
    if length > 1e-9:
        return (nx / length, ny / length, nz / length)
    # Collinear first vertices; keep the face but give it a stable normal.
    return (0.0, 0.0, 1.0)


def face_color(material: str, normal: Vec3) -> Vec3:
    """Flat shading color: cyan for sky, otherwise the normal mapped to [0, 1]."""
    if material in SKY_MATERIALS:
        return SKY_COLOR
    return (normal[0] / 2.0 + 0.5, normal[1] / 2.0 + 0.5, normal[2] / 2.0 + 0.5)


def compute_uv(vertex: Vec3, normal: Vec3) -> Vec2:
    """Planar UVs from the two axes that contribute least to the normal.

    Dropping the dominant normal axis minimizes texture stretching.
    """
    ax, ay, az = abs(normal[0]), abs(normal[1]), abs(normal[2])
    x, y, z = vertex

    if ax <= az and ay <= az:
        u, v = x, y
    elif ax <= ay and az <= ay:
        u, v = x, z
    else:
        u, v = y, z

    return (u / TEXTURE_SCALE, v / TEXTURE_SCALE)


def fan_indices(first_idx: int, vertex_count: int) -> List[List[int]]:
    """Fan triangulation from vertex 0, wound (0, i+1, i)."""
    return [
        [first_idx, first_idx + i + 1, first_idx + i]
        for i in range(1, vertex_count - 1)
    ]


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def _entity_classname(entity: VMFNode) -> Optional[str]:
    try:
        return entity.get_one("classname").to_str()
    except VMFSchemaError:
        return None


def collect_render_solids(root: VMFNode) -> List[VMFNode]:
    """World solids followed by solids of func_detail entities."""
    solids = list(root.get_one("world").get_all("solid"))
    for entity in root.get_all("entity"):
        if _entity_classname(entity) == DETAIL_CLASSNAME:
            solids.extend(entity.get_all("solid"))
    return solids


class MapMeshBuilder:
    """Accumulates visible brush faces into one global vertex buffer."""

    def __init__(self):
        self._vertices: List[List[float]] = []
        self._indices: List[List[int]] = []
        self._bounds_min: Optional[List[float]] = None
        self._bounds_max: Optional[List[float]] = None
        self._face_count = 0
        self.hidden_faces = 0

    def clear(self):
        self._vertices.clear()
        self._indices.clear()
        self._bounds_min = None
        self._bounds_max = None
        self._face_count = 0
        self.hidden_faces = 0

    def add_solid(self, solid: VMFNode, solid_index: int = 0):
        try:
            sides = solid.get_all("side")
        except VMFError as e:
            raise MapExtractionError(f"solid #{solid_index}: {e}") from e

        for side_index, side in enumerate(sides):
            if not is_side_visible(side):
                if side_material(side) is None:
                    logger.warning(
                        "solid #%d side #%d has no readable material, skipped",
                        solid_index, side_index,
                    )
                self.hidden_faces += 1
                continue
            try:
                self.add_side(side)
            except VMFError as e:
                side_id = side.get_value("id", "?") if isinstance(side, VMFBranch) else "?"
                raise MapExtractionError(
                    f"solid #{solid_index} side #{side_index} (id {side_id}): {e}"
                ) from e

    def add_side(self, side: VMFNode):
        """Triangulate one visible side."""
        vertices = [v.to_vector() for v in side.get_one("vertices_plus").get_all("v")]
        if len(vertices) < 3:
            raise VMFSchemaError(
                f"face has {len(vertices)} vertices, at least 3 are required"
            )

        material = side_material(side) or ""
        normal = compute_face_normal(vertices[0], vertices[1], vertices[2])
        color = face_color(material, normal)

        first_idx = len(self._vertices)
        for v in vertices:
            self._update_bounds(v)
            uv = compute_uv(v, normal)
            self._vertices.append([
                v[0], v[1], v[2],               # Position (3)
                uv[0], uv[1],                   # UV (2)
                color[0], color[1], color[2],   # Color (3)
            ])

        self._indices.extend(fan_indices(first_idx, len(vertices)))
        self._face_count += 1

    def _update_bounds(self, v: Vec3):
        if self._bounds_min is None:
            self._bounds_min = [v[0], v[1], v[2]]
            self._bounds_max = [v[0], v[1], v[2]]
        else:
            for axis in range(3):
                self._bounds_min[axis] = min(self._bounds_min[axis], v[axis])
                self._bounds_max[axis] = max(self._bounds_max[axis], v[axis])

    def build(self) -> MapMesh:
        if not self._vertices:
            return MapMesh.empty()

        return MapMesh(
            vertices=np.array(self._vertices, dtype=np.float32),
            indices=np.array(self._indices, dtype=np.uint32).reshape(-1, 3),
            bounds_min=tuple(self._bounds_min),
            bounds_max=tuple(self._bounds_max),
            face_count=self._face_count,
        )


def extract_map_mesh(root: VMFNode) -> MapMesh:
    """Build the render mesh of a parsed VMF.

    Raises:
        MapExtractionError: the tree is missing required structure or a
            visible face is malformed.
    """
    try:
        solids = collect_render_solids(root)
    except VMFError as e:
        raise MapExtractionError(f"can't collect map solids: {e}") from e

    builder = MapMeshBuilder()
    for solid_index, solid in enumerate(solids):
        builder.add_solid(solid, solid_index)

    mesh = builder.build()
    logger.info(
        "Extracted %d faces (%d triangles) from %d solids, %d hidden",
        mesh.face_count, mesh.triangle_count, len(solids), builder.hidden_faces,
    )
    return mesh
