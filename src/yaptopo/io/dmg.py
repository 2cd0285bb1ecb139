"""SCOREC ``.dmg`` geometric model export.

The ``.dmg`` format lists model entities dimension by dimension after a
header of per-dimension counts.  Faces and volumes are written as their
boundary aggregates: one block per loop/shell, one line per use with a
flag that is 1 for a forward use.
"""

from __future__ import annotations

import io
import logging
from typing import TextIO

from yaptopo.closure import closure, count_of_dim, filter_by_dim
from yaptopo.construct import edge_point
from yaptopo.entity import FORWARD, Entity

logger = logging.getLogger(__name__)


def _write_entity(stream: TextIO, obj: Entity) -> None:
    dim = obj.dim
    if dim == 0:
        x, y, z = obj.pos[:3]
        print(f"{obj.id} {x:f} {y:f} {z:f}", file=stream)
    elif dim == 1:
        print(f"{obj.id} {edge_point(obj, 0).id} {edge_point(obj, 1).id}", file=stream)
    else:
        print(f"{obj.id} {len(obj.used)}", file=stream)
        for use in obj.used:
            bound = use.entity
            print(f" {len(bound.used)}", file=stream)
            for bu in bound.used:
                print(f"  {bu.entity.id} {int(bu.direction == FORWARD)}", file=stream)


def _write(root: Entity, stream: TextIO) -> None:
    entities = closure(root, False, True)
    counts = [count_of_dim(entities, d) for d in (3, 2, 1, 0)]
    print(" ".join(str(c) for c in counts), file=stream)
    print("0 0 0", file=stream)
    print("0 0 0", file=stream)
    for d in range(4):
        for obj in filter_by_dim(entities, d):
            _write_entity(stream, obj)
    logger.debug("wrote dmg model for %r: %s regions/faces/edges/vertices",
                 root, counts)


def format_dmg(root: Entity) -> str:
    stream = io.StringIO()
    _write(root, stream)
    return stream.getvalue()


def write_dmg(root: Entity, path_or_file) -> None:
    """Write ``root``'s closure as a ``.dmg`` model to a path or text stream."""
    if hasattr(path_or_file, 'write'):
        _write(root, path_or_file)
        return
    with open(path_or_file, 'w', encoding='ascii') as stream:
        _write(root, stream)
