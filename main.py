#!/usr/bin/env python3
"""
Botpath - command line entry point.

    python main.py map-info MAP.vmf
    python main.py export STATE.json -o model_export.zip
    python main.py from-log console.log -o STATE.json
"""

import argparse
import logging
import sys
from pathlib import Path

from botpath.conversion.getpos_log import parse_getpos_log, points_from_getpos
from botpath.conversion.map_mesh import MapExtractionError
from botpath.conversion.model_export import ExportError
from botpath.conversion.vmf_parser import VMFError
from botpath.generators.spline.spline import Spline, SplineData
from botpath.generators.spline.storage import SplineStateError, save_state
from botpath.pipeline.workspace import Workspace

logger = logging.getLogger("botpath")


def cmd_map_info(args, workspace: Workspace) -> int:
    mesh = workspace.load_map_path(args.map)
    print(f"Faces:     {mesh.face_count}")
    print(f"Vertices:  {mesh.vertex_count}")
    print(f"Triangles: {mesh.triangle_count}")
    if not mesh.is_empty:
        print(f"Bounds:    {mesh.bounds_min} - {mesh.bounds_max}")
    return 0


def cmd_export(args, workspace: Workspace) -> int:
    with open(args.state, 'r', encoding='utf-8') as f:
        workspace.restore_state(f.read())
    data = workspace.export()
    out = Path(args.output)
    out.write_bytes(data)
    print(f"Wrote {out} ({len(data)} bytes)")
    return 0


def cmd_from_log(args, workspace: Workspace) -> int:
    with open(args.log, 'r', encoding='utf-8', errors='replace') as f:
        entries = parse_getpos_log(f.read())
    if not entries:
        logger.error("No setpos/setang lines found in %s", args.log)
        return 1

    points = points_from_getpos(entries, workspace.settings.tangent_magnitude)
    spline = Spline(SplineData(
        points=points,
        radius=workspace.settings.radius,
        sides=workspace.settings.sides,
        subdivisions=workspace.settings.subdivisions,
        name=args.name,
    ))
    out = Path(args.output)
    out.write_text(save_state([spline]), encoding='utf-8')
    print(f"Wrote {out} ({len(points)} control points)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="botpath", description="Spline path editor tools")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("map-info", help="summarize the render mesh of a VMF map")
    p.add_argument("map")
    p.set_defaults(func=cmd_map_info)

    p = sub.add_parser("export", help="export a saved spline set as model sources")
    p.add_argument("state")
    p.add_argument("-o", "--output", default="model_export.zip")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("from-log", help="make a spline from a console getpos log")
    p.add_argument("log")
    p.add_argument("-o", "--output", required=True)
    p.add_argument("--name", default="", help="model name for the new spline")
    p.set_defaults(func=cmd_from_log)
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args, Workspace())
    except (VMFError, MapExtractionError, SplineStateError, ExportError) as e:
        logger.error("%s", e)
        return 1
    except OSError as e:
        logger.error("I/O error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
