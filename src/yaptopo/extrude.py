"""Extrusion: sweeping entities along a transform.

Every operator takes an existing entity and a *transform* and returns
an :class:`Extruded` pair:

``middle``
    the new entity one dimension up that the sweep traces out
``end``
    a new entity of the starting kind, moved by the transform

A transform is any callable mapping a yapCAD point to a point.  A plain
vector is also accepted and means translation by that vector; a
:class:`yaptopo.xform.Matrix` can be wrapped with
:func:`yaptopo.xform.pointmap`.

Loops, faces and face groups share sub-entities between their members.
Those passes first sweep every point and edge exactly once into a cache
keyed by the original entity, then assemble the higher-dimensional
results out of the cache, so a vertex shared by two edges maps to one
swept vertex and the resulting solid stays watertight.

Copyright (c) 2025 yapCAD contributors
MIT License
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, NamedTuple

import numpy as np

from yaptopo.closure import closure, filter_by_dim, filter_points
from yaptopo.construct import (
    add_to_group, arc_center, edge_point, ellipse_center, ellipse_major_point,
    new_arc, new_ellipse, new_face_like, new_group, new_line, new_loop,
    new_plane, new_point, new_ruled, new_shell, new_spline, new_volume,
)
from yaptopo.entity import (
    FORWARD, REVERSE, Direction, Entity, Kind, add_use, is_edge, is_face,
)
from yaptopo.errors import PreconditionError
from yaptopo.geom import add, isgoodnum

logger = logging.getLogger(__name__)

Transform = Callable[[list], list]


class Extruded(NamedTuple):
    """Result of an extrusion: the swept entity and the moved copy."""
    middle: Entity
    end: Entity


def translation(delta) -> Transform:
    """Transform that translates points by ``delta``."""
    def apply(p):
        return add(p, delta)
    return apply


def as_transform(transform) -> Transform:
    """Accept either a point -> point callable or a translation vector."""
    if callable(transform):
        return transform
    if isinstance(transform, (list, tuple)) and len(transform) >= 3 \
       and all(isgoodnum(x) for x in transform[:3]):
        return translation(transform)
    raise ValueError('bad transform: {}'.format(transform))


def _moved(p, transform):
    moved = np.asarray(transform(p.pos), dtype=float).ravel()
    if moved.shape[0] not in (3, 4):
        raise ValueError('transform must return a 3- or 4-vector, got {}'.format(moved))
    return new_point(moved[:3].tolist(), p.size)


# -----------------------------------------------------------------------------
# Points
# -----------------------------------------------------------------------------

def extrude_point(p, transform) -> Extruded:
    transform = as_transform(transform)
    end = _moved(p, transform)
    return Extruded(new_line(p, end), end)


def extrude_points(points: Iterable[Entity], transform) -> Dict[Entity, Extruded]:
    transform = as_transform(transform)
    return {p: extrude_point(p, transform) for p in points}


# -----------------------------------------------------------------------------
# Edges
# -----------------------------------------------------------------------------

def extrude_edge(edge, transform, left=None, right=None) -> Extruded:
    """Sweep an edge into a side face.

    ``left`` and ``right`` are the extrusions of the edge's start and
    end points.  Pass them in when the points are shared with other
    edges being swept in the same pass; otherwise they are computed here.

    The side face is bounded by the edge itself, the right connector,
    the moved edge (reversed) and the left connector (reversed).  It is
    a plane when the edge is a line and a ruled surface otherwise.
    """
    if not is_edge(edge.kind):
        raise PreconditionError(
            "cannot extrude {!r} as an edge".format(edge),
            {'entity': edge.id, 'kind': edge.kind.name})
    transform = as_transform(transform)
    if left is None:
        left = extrude_point(edge_point(edge, 0), transform)
    if right is None:
        right = extrude_point(edge_point(edge, 1), transform)

    if edge.kind == Kind.LINE:
        end = new_line(left.end, right.end)
    elif edge.kind == Kind.ARC:
        end = new_arc(left.end, _moved(arc_center(edge), transform),
                      right.end)
    elif edge.kind == Kind.ELLIPSE:
        end = new_ellipse(left.end,
                          _moved(ellipse_center(edge), transform),
                          _moved(ellipse_major_point(edge), transform),
                          right.end)
    else:
        end = new_spline([left.end]
                         + [_moved(h, transform) for h in edge.helpers]
                         + [right.end])

    loop = new_loop()
    add_use(loop, FORWARD, edge)
    add_use(loop, FORWARD, right.middle)
    add_use(loop, REVERSE, end)
    add_use(loop, REVERSE, left.middle)

    if edge.kind == Kind.LINE:
        middle = new_plane(loop)
    else:
        middle = new_ruled(loop)
    return Extruded(middle, end)


def extrude_edges(edges: Iterable[Entity], transform,
                  point_extrusions: Dict[Entity, Extruded]) -> Dict[Entity, Extruded]:
    """Sweep ``edges`` using already-swept endpoints from ``point_extrusions``."""
    transform = as_transform(transform)
    out = {}
    for edge in edges:
        out[edge] = extrude_edge(edge, transform,
                                 point_extrusions[edge_point(edge, 0)],
                                 point_extrusions[edge_point(edge, 1)])
    return out


def _sweep_closure(root, transform):
    """Sweep every point and edge reachable from ``root`` exactly once."""
    found = closure(root, False, True)
    points = filter_points(found)
    edges = filter_by_dim(found, 1)
    logger.debug("sweeping %d points and %d edges under %r",
                 len(points), len(edges), root)
    return extrude_edges(edges, transform, extrude_points(points, transform))


# -----------------------------------------------------------------------------
# Loops
# -----------------------------------------------------------------------------

def _loop_from_cache(loop, shell, shell_dir, edge_extrusions):
    end = new_loop()
    for use in loop.used:
        add_use(end, use.direction, edge_extrusions[use.entity].end)
    for use in loop.used:
        add_use(shell, use.direction ^ shell_dir,
                edge_extrusions[use.entity].middle)
    return Extruded(shell, end)


def extrude_loop(loop, transform, shell=None, shell_dir=FORWARD) -> Extruded:
    """Sweep a loop into a band of side faces.

    The side faces are appended to ``shell`` (a new one if omitted),
    each with the direction of its edge in the loop XOR ``shell_dir``.
    Returns ``Extruded(shell, moved_loop)``.
    """
    transform = as_transform(transform)
    if loop.kind != Kind.LOOP:
        raise PreconditionError("expected a loop, got {!r}".format(loop),
                                {'entity': loop.id})
    if shell is None:
        shell = new_shell()
    points = dict.fromkeys(edge_point(u.entity, i)
                           for u in loop.used for i in (0, 1))
    edges = dict.fromkeys(u.entity for u in loop.used)
    logger.debug("sweeping loop %r: %d points, %d edges",
                 loop, len(points), len(edges))
    cache = extrude_edges(edges, transform, extrude_points(points, transform))
    return _loop_from_cache(loop, shell, Direction(shell_dir), cache)


# -----------------------------------------------------------------------------
# Faces
# -----------------------------------------------------------------------------

def _face_from_cache(face, edge_extrusions):
    end = new_face_like(face)
    shell = new_shell()
    add_use(shell, REVERSE, face)
    add_use(shell, FORWARD, end)
    for use in face.used:
        end_loop = _loop_from_cache(use.entity, shell, use.direction,
                                    edge_extrusions).end
        add_use(end, use.direction, end_loop)
    return Extruded(new_volume(shell), end)


def extrude_face(face, transform) -> Extruded:
    """Sweep a face (holes included) into a volume.

    The volume's shell holds the original face reversed, the moved face,
    then the side faces of each boundary loop in order.
    """
    if not is_face(face.kind):
        raise PreconditionError("expected a face, got {!r}".format(face),
                                {'entity': face.id})
    transform = as_transform(transform)
    return _face_from_cache(face, _sweep_closure(face, transform))


def extrude_face_group(group, transform) -> Extruded:
    """Sweep every face of ``group`` with one shared cache.

    Faces that share edges yield volumes that share the corresponding
    side faces, so the volumes are mutually watertight.  Returns
    ``Extruded(volume_group, end_face_group)``.
    """
    if group.kind != Kind.GROUP:
        raise PreconditionError("expected a group, got {!r}".format(group),
                                {'entity': group.id})
    for use in group.used:
        if not is_face(use.entity.kind):
            raise PreconditionError(
                "face group member {!r} is not a face".format(use.entity),
                {'group': group.id, 'entity': use.entity.id})
    transform = as_transform(transform)
    cache = _sweep_closure(group, transform)
    volumes = new_group()
    ends = new_group()
    for use in group.used:
        ext = _face_from_cache(use.entity, cache)
        add_to_group(volumes, ext.middle)
        add_to_group(ends, ext.end)
    return Extruded(volumes, ends)
