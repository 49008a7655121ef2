"""
VMF format writer.

Serializes VMF trees back to text and provides small builders for
Hammer++ style solids (sides carrying an explicit ``vertices_plus`` list),
which is all the mesh extractor needs.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, TextIO, Tuple
import io

from botpath.conversion.map_mesh import compute_face_normal
from botpath.conversion.vmf_parser import VMFBranch, VMFLeaf

Vec3 = Tuple[float, float, float]


def _format_number(value: float) -> str:
    """Integers without a trailing '.0', everything else as repr."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_vertex(v: Vec3) -> str:
    return " ".join(_format_number(c) for c in v)


class VMFWriter:
    """
    Writes VMF trees as tab-indented text.

    Keys keep their insertion order and repeated keys are written once per
    value, so parse_vmf(format_vmf(tree)) == tree.
    """

    def __init__(self, indent: str = "\t"):
        self.indent = indent

    def write(self, root: VMFBranch, file: TextIO) -> None:
        """Write every child of root at top level (root has no braces)."""
        self._write_children(root, file, 0)

    def _write_children(self, branch: VMFBranch, file: TextIO, depth: int) -> None:
        pad = self.indent * depth
        for key, values in branch.items():
            for node in values:
                if node.is_leaf:
                    file.write(f'{pad}"{key}" "{node.to_str()}"\n')
                else:
                    file.write(f"{pad}{key}\n{pad}{{\n")
                    self._write_children(node, file, depth + 1)
                    file.write(f"{pad}}}\n")


def format_vmf(root: VMFBranch) -> str:
    buffer = io.StringIO()
    VMFWriter().write(root, buffer)
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Tree builders
# ---------------------------------------------------------------------------

def new_branch(**leaves) -> VMFBranch:
    """Branch pre-filled with single string leaves."""
    branch = VMFBranch()
    for key, value in leaves.items():
        branch.insert(key, VMFLeaf(str(value)))
    return branch


def add_leaf(branch: VMFBranch, key: str, value) -> VMFLeaf:
    leaf = VMFLeaf(str(value))
    branch.insert(key, leaf)
    return leaf


def add_branch(branch: VMFBranch, key: str, child: Optional[VMFBranch] = None) -> VMFBranch:
    child = child if child is not None else VMFBranch()
    branch.insert(key, child)
    return child


def side_branch(side_id: int, material: Optional[str], vertices: Sequence[Vec3]) -> VMFBranch:
    """A ``side`` with a ``vertices_plus`` list. material=None omits the field."""
    side = new_branch(id=side_id)
    if material is not None:
        add_leaf(side, "material", material)
    vertices_plus = add_branch(side, "vertices_plus")
    for v in vertices:
        add_leaf(vertices_plus, "v", format_vertex(v))
    return side


def box_faces(min_point: Vec3, max_point: Vec3) -> List[Tuple[Vec3, List[Vec3]]]:
    """Outward normal and 4-vertex loop for each face of an axis-aligned box.

    Loops are ordered so the extractor's winding convention yields the
    outward normal.
    """
    x1, y1, z1 = min_point
    x2, y2, z2 = max_point
    faces = [
        ((0, 0, 1), [(x1, y2, z2), (x1, y1, z2), (x2, y1, z2), (x2, y2, z2)]),
        ((0, 0, -1), [(x1, y1, z1), (x1, y2, z1), (x2, y2, z1), (x2, y1, z1)]),
        ((1, 0, 0), [(x2, y1, z2), (x2, y1, z1), (x2, y2, z1), (x2, y2, z2)]),
        ((-1, 0, 0), [(x1, y2, z2), (x1, y2, z1), (x1, y1, z1), (x1, y1, z2)]),
        ((0, 1, 0), [(x2, y2, z2), (x2, y2, z1), (x1, y2, z1), (x1, y2, z2)]),
        ((0, -1, 0), [(x1, y1, z2), (x1, y1, z1), (x2, y1, z1), (x2, y1, z2)]),
    ]
    result = []
    for outward, loop in faces:
        n = compute_face_normal(loop[0], loop[1], loop[2])
        if n[0] * outward[0] + n[1] * outward[1] + n[2] * outward[2] < 0:
            loop = list(reversed(loop))
        result.append((outward, loop))
    return result


def box_solid(solid_id: int, min_point: Vec3, max_point: Vec3,
              material: str = "DEV/DEV_MEASUREGENERIC01",
              first_side_id: int = 1) -> VMFBranch:
    """Six-sided ``solid`` branch for an axis-aligned box."""
    solid = new_branch(id=solid_id)
    for i, (_, loop) in enumerate(box_faces(min_point, max_point)):
        add_branch(solid, "side", side_branch(first_side_id + i, material, loop))
    return solid


def new_map(world_solids: Sequence[VMFBranch] = (),
            entities: Sequence[VMFBranch] = ()) -> VMFBranch:
    """Root tree with a worldspawn ``world`` branch and optional entities."""
    root = VMFBranch()
    versioninfo = add_branch(root, "versioninfo")
    add_leaf(versioninfo, "editorversion", 400)
    add_leaf(versioninfo, "formatversion", 100)
    world = add_branch(root, "world", new_branch(id=1, classname="worldspawn"))
    for solid in world_solids:
        add_branch(world, "solid", solid)
    for entity in entities:
        add_branch(root, "entity", entity)
    return root


def detail_entity(entity_id: int, solids: Sequence[VMFBranch]) -> VMFBranch:
    entity = new_branch(id=entity_id, classname="func_detail")
    for solid in solids:
        add_branch(entity, "solid", solid)
    return entity
