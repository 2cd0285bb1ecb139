"""Closure queries over the topology graph.

The closure of an entity is everything reachable from it.  It is
returned in *dependency order*: the reverse of breadth-first visitation
from the root.  Starting at a high-dimensional root, BFS reaches parents
before their children, so the reversed sequence lists points before the
curves that use them, curves before loops, and so on.  Serializers rely
on this order to declare every entity before it is referenced, and the
extrusion and counting code relies on it being reproducible for a given
root and flags.

Copyright (c) 2025 yapCAD contributors
MIT License
"""

from __future__ import annotations

from typing import Dict, Iterable, List

import numpy as np

from yaptopo.entity import Entity, Kind, Point, Use, is_cell, kind_dim, new_entity
from yaptopo.errors import TopologyError
from yaptopo.xform import Matrix


def closure(root: Entity, include_helpers: bool = False,
            include_embedded: bool = False) -> List[Entity]:
    """Return the closure of ``root`` in dependency order.

    ``used`` references are always followed; ``helpers`` and
    ``embedded`` references only when the corresponding flag is set.
    Each entity appears once.
    """
    queue = [root]
    visited = {id(root)}

    def visit(child):
        if id(child) not in visited:
            visited.add(id(child))
            queue.append(child)

    first = 0
    while first < len(queue):
        current = queue[first]
        first += 1
        for use in current.used:
            visit(use.entity)
        if include_helpers:
            for child in current.helpers:
                visit(child)
        if include_embedded:
            for child in current.embedded:
                visit(child)
    queue.reverse()
    return queue


def filter_by_dim(entities: Iterable[Entity], dim: int) -> List[Entity]:
    return [e for e in entities if kind_dim(e.kind) == dim]


def filter_points(entities: Iterable[Entity]) -> List[Point]:
    return filter_by_dim(entities, 0)


def count_of_kind(entities: Iterable[Entity], kind: Kind) -> int:
    return sum(1 for e in entities if e.kind == kind)


def count_of_dim(entities: Iterable[Entity], dim: int) -> int:
    """Number of cells (not aggregates) of dimension ``dim``."""
    return sum(1 for e in entities if is_cell(e.kind) and e.dim == dim)


def transform_closure(root: Entity, linear=None, translation=None) -> None:
    """Move every point reachable from ``root``, in place.

    Each position ``p`` becomes ``linear @ p + translation``.  ``linear``
    may be a :class:`yaptopo.xform.Matrix` (whose own translation column
    is honored too) or any 3x3 array-like; ``None`` means identity.
    """
    points = filter_points(closure(root, True, True))
    if not points:
        return

    offset = np.zeros(3)
    if linear is None:
        lin = np.eye(3)
    elif isinstance(linear, Matrix):
        lin = np.array(linear.linear(), dtype=float)
        offset += np.array(linear.translation()[:3], dtype=float)
    else:
        lin = np.asarray(linear, dtype=float)
        if lin.shape != (3, 3):
            raise ValueError("linear part must be 3x3, got shape {}".format(lin.shape))
    if translation is not None:
        offset += np.asarray(translation, dtype=float)[:3]

    pos = np.array([p.pos[:3] for p in points], dtype=float)
    moved = pos @ lin.T + offset
    for p, q in zip(points, moved):
        p.pos = [float(q[0]), float(q[1]), float(q[2]), 1.0]


def copy_closure(root: Entity) -> Entity:
    """Deep-copy everything reachable from ``root``; return the new root.

    Uses (with their directions), helpers and embedded references are
    all reproduced between the copies.
    """
    copies: Dict[int, Entity] = {}

    def copied(e):
        try:
            return copies[id(e)]
        except KeyError:
            raise TopologyError(
                "closure order violated: {!r} needed before it was copied".format(e),
                {'entity': e.id}) from None

    for e in closure(root, True, True):
        if e.kind == Kind.POINT:
            out = Point(e.pos, e.size)
        else:
            out = new_entity(e.kind)
        out.helpers = [copied(h) for h in e.helpers]
        out.used = [Use(u.direction, copied(u.entity)) for u in e.used]
        out.embedded = [copied(m) for m in e.embedded]
        copies[id(e)] = out
    return copies[id(root)]
