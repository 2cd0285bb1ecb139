"""Assembly and welding of separately built sub-models.

Sub-assemblies are built independently (often by extrusion) and then
stitched together here.  The central tool is
:func:`collect_assembly_boundary`, which finds the outer boundary of a
group of cells by counting how often each boundary sub-entity is used:
a face or edge shared by two neighbouring cells is interior and drops
out.

When a face ends up bounding two volumes, the two volumes see it from
opposite sides.  The welding operations therefore add it to the
receiving shell with the *opposite* direction to the one it has in its
original shell.

Copyright (c) 2025 yapCAD contributors
MIT License
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict

from yaptopo.construct import edge_point, face_loop, new_plane, volume_shell
from yaptopo.entity import (
    FORWARD, REVERSE, Direction, Kind, Use, add_use, boundary_kind,
    get_used_dir, is_cell, is_face, new_entity,
)
from yaptopo.errors import MalformedLoopError, PreconditionError

logger = logging.getLogger(__name__)


def collect_assembly_boundary(assembly):
    """Outer boundary of a group of same-dimension cells.

    Returns a new Loop (for a group of faces) or Shell (for a group of
    volumes) holding, in encounter order, the uses of every sub-entity
    that occurs in exactly one member's boundary.
    """
    if not assembly.used:
        raise PreconditionError("cannot collect the boundary of an empty assembly",
                                {'assembly': assembly.id})
    dim = None
    uses = []
    for cell_use in assembly.used:
        cell = cell_use.entity
        if not is_cell(cell.kind) or boundary_kind(cell.kind) is None:
            raise PreconditionError(
                "assembly member {!r} has no boundary".format(cell),
                {'assembly': assembly.id, 'entity': cell.id})
        if dim is None:
            dim = cell.dim
        elif cell.dim != dim:
            raise PreconditionError(
                "assembly mixes dimension {} and {!r}".format(dim, cell),
                {'assembly': assembly.id, 'entity': cell.id})
        uses.extend(cell.used[0].entity.used)

    counts = Counter(id(u.entity) for u in uses)
    boundary = new_entity(boundary_kind(assembly.used[0].entity.kind))
    boundary.used = [u for u in uses if counts[id(u.entity)] == 1]
    logger.debug("assembly %r: %d members, %d of %d sides on the boundary",
                 assembly, len(assembly.used), len(boundary.used), len(uses))
    return boundary


def insert_into(into, other):
    """Cut ``other`` out of ``into`` as a hole (faces) or void (volumes).

    ``other`` may be a face, a volume or a group of either, whose
    assembly boundary is inserted.
    """
    if is_face(other.kind):
        if not is_face(into.kind):
            raise PreconditionError(
                "cannot insert face {!r} into {!r}".format(other, into),
                {'into': into.id, 'other': other.id})
        add_use(into, REVERSE, face_loop(other))
    elif other.kind == Kind.VOLUME:
        if into.kind != Kind.VOLUME:
            raise PreconditionError(
                "cannot insert volume {!r} into {!r}".format(other, into),
                {'into': into.id, 'other': other.id})
        add_use(into, REVERSE, volume_shell(other))
    elif other.kind == Kind.GROUP:
        boundary = collect_assembly_boundary(other)
        if boundary.kind != boundary_kind(into.kind):
            raise PreconditionError(
                "group boundary {!r} does not fit into {!r}".format(boundary, into),
                {'into': into.id, 'other': other.id})
        add_use(into, REVERSE, boundary)
    else:
        raise PreconditionError(
            "unexpected inserted kind {}".format(other.kind.name),
            {'into': into.id, 'other': other.id})


def weld_volume_face_into(big_volume, small_volume, big_face, small_face):
    """Attach ``small_volume`` to ``big_volume`` across ``small_face``.

    ``small_face`` becomes a hole in ``big_face`` and joins the big
    volume's shell facing the other way than in the small volume.
    """
    insert_into(big_face, small_face)
    direction = get_used_dir(volume_shell(small_volume), small_face)
    add_use(volume_shell(big_volume), direction.flip(), small_face)


def weld_plane_with_holes_into(big_volume, small_volume, big_face, small_face):
    """Like :func:`weld_volume_face_into`, plugging ``small_face``'s holes.

    Each hole loop of ``small_face`` gets a new plane that closes it in
    the combined shell.
    """
    weld_volume_face_into(big_volume, small_volume, big_face, small_face)
    direction = get_used_dir(volume_shell(small_volume), small_face).flip()
    big_shell = volume_shell(big_volume)
    for hole in small_face.used[1:]:
        add_use(big_shell, direction, new_plane(hole.entity))


def unscramble_loop(loop):
    """Reorder ``loop`` in place into one connected cycle.

    The first use is kept; every following use is the edge that meets
    the far end of the previous one, with its direction set by which of
    its endpoints is shared.  Raises :class:`MalformedLoopError` when the
    uses are not a single simple cycle.
    """
    at_point = defaultdict(list)
    for use in loop.used:
        at_point[id(edge_point(use.entity, 0))].append(Use(FORWARD, use.entity))
        at_point[id(edge_point(use.entity, 1))].append(Use(REVERSE, use.entity))

    ordered = [loop.used[0]] if loop.used else []
    placed = {id(u.entity) for u in ordered}
    while len(ordered) < len(loop.used):
        current = ordered[-1]
        far = edge_point(current.entity, 1 - current.direction)
        nexts = [u for u in at_point[id(far)] if u.entity is not current.entity]
        if len(nexts) != 1 or id(nexts[0].entity) in placed:
            raise MalformedLoopError(
                "loop {!r} is not a simple cycle at point {!r}".format(loop, far),
                {'loop': loop.id, 'point': far.id,
                 'candidates': [u.entity.id for u in nexts]})
        ordered.append(nexts[0])
        placed.add(id(nexts[0].entity))
    if ordered:
        start = edge_point(ordered[0].entity, ordered[0].direction)
        last = ordered[-1]
        far = edge_point(last.entity, 1 - last.direction)
        if far is not start:
            raise MalformedLoopError(
                "loop {!r} is an open chain from {!r} to {!r}".format(loop, start, far),
                {'loop': loop.id, 'point': far.id, 'start': start.id})
    loop.used = ordered


def weld_half_shell_onto(volume, big_face, half_shell, direction):
    """Weld a group of faces onto ``big_face`` of ``volume``.

    The half shell's outer rim becomes a hole in ``big_face`` and its
    faces join the volume's shell with their group direction XOR
    ``direction``.
    """
    rim = collect_assembly_boundary(half_shell)
    unscramble_loop(rim)
    add_use(big_face, REVERSE, rim)
    vshell = volume_shell(volume)
    for use in half_shell.used:
        add_use(vshell, use.direction ^ Direction(direction), use.entity)
