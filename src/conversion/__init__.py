"""
Map import and model export.

Reads Hammer VMF maps into render meshes and writes spline tubes out as
StudioMDL sources.
"""

from .vmf_parser import (
    VMFError,
    VMFParseError,
    UnbalancedBracesError,
    MalformedSyntaxError,
    VMFSchemaError,
    VMFBranch,
    VMFLeaf,
    parse_vmf,
    load_vmf,
)
from .map_mesh import (
    MapMesh,
    MapExtractionError,
    extract_map_mesh,
)
from .model_export import (
    ExportError,
    construct_zip,
)

__all__ = [
    # VMF
    'VMFError',
    'VMFParseError',
    'UnbalancedBracesError',
    'MalformedSyntaxError',
    'VMFSchemaError',
    'VMFBranch',
    'VMFLeaf',
    'parse_vmf',
    'load_vmf',
    # Map mesh
    'MapMesh',
    'MapExtractionError',
    'extract_map_mesh',
    # Export
    'ExportError',
    'construct_zip',
]
