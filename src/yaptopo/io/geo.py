"""Gmsh ``.geo`` export for yapTopo models."""

from __future__ import annotations

import io
import logging
from typing import TextIO

from yaptopo.closure import closure
from yaptopo.construct import (
    arc_center, edge_point, ellipse_center, ellipse_major_point,
)
from yaptopo.entity import DIM_NAMES, REVERSE, Entity, Kind, is_boundary, is_cell

logger = logging.getLogger(__name__)

GEO_NAMES = {
    Kind.POINT: "Point",
    Kind.LINE: "Line",
    Kind.ARC: "Circle",
    Kind.ELLIPSE: "Ellipse",
    Kind.SPLINE: "Spline",
    Kind.PLANE: "Plane Surface",
    Kind.RULED: "Ruled Surface",
    Kind.VOLUME: "Volume",
    Kind.LOOP: "Line Loop",
    Kind.SHELL: "Surface Loop",
}

PHYSICAL_NAMES = {
    0: "Physical Point",
    1: "Physical Line",
    2: "Physical Surface",
    3: "Physical Volume",
}


def _ids(ids) -> str:
    return ",".join(str(i) for i in ids)


def _write_entity(stream: TextIO, obj: Entity) -> None:
    kind = obj.kind
    if kind == Kind.GROUP:
        return
    name = GEO_NAMES[kind]
    if kind == Kind.POINT:
        x, y, z = obj.pos[:3]
        print(f"{name}({obj.id}) = {{{x:f},{y:f},{z:f},{obj.size:f}}};", file=stream)
        return
    if kind == Kind.ARC:
        refs = [edge_point(obj, 0).id, arc_center(obj).id, edge_point(obj, 1).id]
    elif kind == Kind.ELLIPSE:
        refs = [edge_point(obj, 0).id, ellipse_center(obj).id,
                ellipse_major_point(obj).id, edge_point(obj, 1).id]
    elif kind == Kind.SPLINE:
        refs = ([edge_point(obj, 0).id] + [h.id for h in obj.helpers]
                + [edge_point(obj, 1).id])
    else:
        # only loops and shells carry orientation in the .geo syntax
        refs = [-u.entity.id if is_boundary(kind) and u.direction == REVERSE
                else u.entity.id for u in obj.used]
    print(f"{name}({obj.id}) = {{{_ids(refs)}}};", file=stream)
    for emb in obj.embedded:
        print(f"{DIM_NAMES[emb.dim]}{{{emb.id}}} In {DIM_NAMES[obj.dim]}{{{obj.id}}};",
              file=stream)


def format_geo(root: Entity) -> str:
    """Return the ``.geo`` text describing everything reachable from ``root``."""
    stream = io.StringIO()
    _write(root, stream)
    return stream.getvalue()


def _write(root: Entity, stream: TextIO) -> None:
    entities = closure(root, True, True)
    for obj in entities:
        _write_entity(stream, obj)
    physical = [e for e in closure(root, False, True) if is_cell(e.kind)]
    for obj in physical:
        print(f"{PHYSICAL_NAMES[obj.dim]}({obj.id}) = {{{obj.id}}};", file=stream)
    logger.debug("wrote %d entities and %d physical groups for %r",
                 len(entities), len(physical), root)


def write_geo(root: Entity, path_or_file) -> None:
    """Write ``root``'s closure as a Gmsh ``.geo`` script.

    ``path_or_file`` can be a filesystem path or an open text stream.
    """
    if hasattr(path_or_file, 'write'):
        _write(root, path_or_file)
        return
    with open(path_or_file, 'w', encoding='ascii') as stream:
        _write(root, stream)
