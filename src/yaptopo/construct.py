"""Typed constructors and accessors for topology entities.

These build entities of one specific kind with the uses and helpers
that kind requires, so that the dimension and orientation conventions
hold by construction.  A fresh entity always uses its sub-entities in
the ``FORWARD`` direction; reversal only ever happens when an existing
entity is reused by an aggregate.

The geometry queries at the bottom (:func:`evaluate`,
:func:`plane_normal`) are the only places the kernel looks at actual
coordinates.

Module settings, in the yapCAD manner (redefine at your peril):

``default_size``
    mesh size given to points created without an explicit one
``axis_tolerance``
    tolerance of the parallel/perpendicular tests in ellipse evaluation

Copyright (c) 2025 yapCAD contributors
MIT License
"""

from math import acos, cos, pi, sin

from yaptopo.entity import (
    FORWARD, REVERSE, Kind, Point, add_helper, add_use, is_face, new_entity,
)
from yaptopo.errors import DegenerateGeometryError, PreconditionError
from yaptopo.geom import (
    add, cross, dot, epsilon, mag, normalize, point, scale3, sub, vect,
)
from yaptopo.xform import rotate

default_size = 0.1
axis_tolerance = 1e-6


def _require(entity, pred, what):
    if not pred(entity.kind):
        raise PreconditionError(
            "expected {}, got {!r}".format(what, entity),
            {'entity': entity.id, 'kind': entity.kind.name})


# -----------------------------------------------------------------------------
# Points
# -----------------------------------------------------------------------------

def new_point(pos, size=None):
    """Create a point at ``pos`` with mesh ``size`` (``default_size`` if None)."""
    return Point(pos, default_size if size is None else size)


def new_points(positions):
    return [new_point(p) for p in positions]


# -----------------------------------------------------------------------------
# Edges
# -----------------------------------------------------------------------------

def edge_point(edge, i):
    """Endpoint ``i`` (0 = start, 1 = end) of an edge."""
    return edge.used[int(i)].entity


def new_line(start, end):
    line = new_entity(Kind.LINE)
    add_use(line, FORWARD, start)
    add_use(line, FORWARD, end)
    return line


def line_from(origin, span):
    """Line from position ``origin`` to ``origin + span``, with new points."""
    return new_line(new_point(origin), new_point(add(origin, span)))


def line_between(a, b):
    return line_from(a, sub(b, a))


def new_arc(start, center, end):
    """Circular arc from ``start`` to ``end`` around helper ``center``."""
    a = new_entity(Kind.ARC)
    add_use(a, FORWARD, start)
    add_helper(a, center)
    add_use(a, FORWARD, end)
    return a


def arc_center(arc):
    return arc.helpers[0]


def arc_normal(arc):
    c = arc_center(arc).pos
    return normalize(cross(sub(edge_point(arc, 0).pos, c),
                           sub(edge_point(arc, 1).pos, c)))


def new_ellipse(start, center, major_point, end):
    """Elliptical arc; ``center`` and ``major_point`` become helpers."""
    e = new_entity(Kind.ELLIPSE)
    add_use(e, FORWARD, start)
    add_helper(e, center)
    add_helper(e, major_point)
    add_use(e, FORWARD, end)
    return e


def ellipse_center(e):
    return e.helpers[0]


def ellipse_major_point(e):
    return e.helpers[1]


def new_spline(points):
    """Spline through ``points``; interior points are helpers."""
    if len(points) < 2:
        raise PreconditionError(
            "a spline needs at least two points, got {}".format(len(points)))
    s = new_entity(Kind.SPLINE)
    add_use(s, FORWARD, points[0])
    for p in points[1:-1]:
        add_helper(s, p)
    add_use(s, FORWARD, points[-1])
    return s


def spline_from_positions(positions):
    return new_spline(new_points(positions))


# -----------------------------------------------------------------------------
# Aggregates
# -----------------------------------------------------------------------------

def new_loop():
    return new_entity(Kind.LOOP)


def loop_points(loop):
    """Start point of every use of ``loop``, in loop order."""
    return [edge_point(u.entity, u.direction) for u in loop.used]


def new_shell():
    return new_entity(Kind.SHELL)


def new_group():
    return new_entity(Kind.GROUP)


def add_to_group(group, entity):
    add_use(group, FORWARD, entity)


# -----------------------------------------------------------------------------
# Faces and volumes
# -----------------------------------------------------------------------------

def _bounded(kind, boundary):
    cell = new_entity(kind)
    if boundary is not None:
        add_use(cell, FORWARD, boundary)
    return cell


def new_plane(loop=None):
    return _bounded(Kind.PLANE, loop)


def new_ruled(loop=None):
    return _bounded(Kind.RULED, loop)


def new_face_like(face):
    """Empty face of the same kind as ``face``."""
    _require(face, is_face, "a face")
    return new_entity(face.kind)


def face_loop(face):
    """Outer boundary loop of a face."""
    return face.used[0].entity


def add_hole_to_face(face, loop):
    add_use(face, REVERSE, loop)


def new_volume(shell=None):
    return _bounded(Kind.VOLUME, shell)


def volume_shell(volume):
    return volume.used[0].entity


# -----------------------------------------------------------------------------
# Geometry queries
# -----------------------------------------------------------------------------

def _parallel(a, b):
    return abs(1.0 - abs(dot(normalize(a), normalize(b)))) < axis_tolerance


def _perpendicular(a, b):
    return abs(dot(normalize(a), normalize(b))) < axis_tolerance


def evaluate(entity, u=0.0):
    """Position at parameter ``u`` in [0, 1] along ``entity``.

    Ellipses are limited to quarter arcs that run between an endpoint
    on the minor axis and one on the major axis.
    """
    if entity.kind == Kind.POINT:
        return point(entity.pos)

    if entity.kind == Kind.LINE:
        a = edge_point(entity, 0).pos
        b = edge_point(entity, 1).pos
        return add(scale3(a, 1.0 - u), scale3(b, u))

    if entity.kind == Kind.ARC:
        c = arc_center(entity).pos
        ca = sub(edge_point(entity, 0).pos, c)
        cb = sub(edge_point(entity, 1).pos, c)
        cosang = dot(ca, cb) / (mag(ca) * mag(cb))
        full_ang = acos(max(-1.0, min(1.0, cosang)))
        return add(c, rotate(ca, arc_normal(entity), full_ang * u))

    if entity.kind == Kind.ELLIPSE:
        a = edge_point(entity, 0).pos
        b = edge_point(entity, 1).pos
        c = ellipse_center(entity).pos
        cm = sub(ellipse_major_point(entity).pos, c)
        if not _parallel(sub(b, c), cm):
            a, b = b, a
            u = 1.0 - u
        ca = sub(a, c)
        cb = sub(b, c)
        if not _parallel(cb, cm):
            raise DegenerateGeometryError(
                "only quarter ellipses are supported, and {!r} has no "
                "endpoint on the major axis".format(entity),
                {'entity': entity.id})
        if not _perpendicular(ca, cm):
            raise DegenerateGeometryError(
                "only quarter ellipses are supported, and {!r} has no "
                "endpoint on the minor axis".format(entity),
                {'entity': entity.id})
        ang = (pi / 2.0) * u
        return add(c, add(scale3(ca, cos(ang)), scale3(cb, sin(ang))))

    raise PreconditionError(
        "cannot evaluate {!r}".format(entity),
        {'entity': entity.id, 'kind': entity.kind.name})


def plane_normal(face, tolerance=epsilon):
    """Unit normal of a planar face from its outer loop points.

    Returns the zero vector when the loop points are all coincident or
    collinear.
    """
    pts = [p.pos for p in loop_points(face_loop(face))]
    first = None
    for p in pts[1:]:
        v = sub(p, pts[0])
        if mag(v) < tolerance:
            continue
        if first is None:
            first = v
            continue
        n = cross(first, v)
        if mag(n) >= tolerance:
            return normalize(n)
    return vect(0, 0, 0, 1)
