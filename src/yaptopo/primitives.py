"""Basic shapes built purely out of kernel operations.

Nothing here touches the graph directly; every primitive is a
composition of constructors and extrusions, which makes these handy
fixtures for the rest of the kernel as well as building blocks.

Copyright (c) 2025 yapCAD contributors
MIT License
"""

from enum import IntEnum
from math import pi

from yaptopo.construct import (
    arc_center, arc_normal, loop_points, new_arc, new_ellipse, new_loop,
    new_plane, new_point, new_points, new_ruled, new_shell, new_volume,
    line_from, new_line, volume_shell,
)
from yaptopo.entity import FORWARD, REVERSE, Direction, add_use
from yaptopo.errors import PreconditionError
from yaptopo.extrude import extrude_edge, extrude_face
from yaptopo.geom import add, dist, scale3, sub
from yaptopo.xform import rotate


class CubeFace(IntEnum):
    """Position of each face in the shell of a cube from :func:`new_cube`."""
    BOTTOM = 0
    TOP = 1
    FRONT = 2
    RIGHT = 3
    BACK = 4
    LEFT = 5


## curves and loops

def new_circle(center, normal, x):
    """Loop of four quarter arcs around ``center``.

    ``x`` is the vector from the center to the first ring point; the
    others follow at quarter turns about ``normal``.
    """
    center_point = new_point(center)
    ring = []
    for _ in range(4):
        ring.append(new_point(add(center, x)))
        x = rotate(x, normal, pi / 2)
    loop = new_loop()
    for i in range(4):
        add_use(loop, FORWARD, new_arc(ring[i], center_point, ring[(i + 1) % 4]))
    return loop


def new_ellipse_loop(center, major, minor):
    """Loop of four quarter ellipses with semi-axes ``major`` and ``minor``."""
    center_point = new_point(center)
    ring = new_points([add(center, major), add(center, minor),
                       sub(center, major), sub(center, minor)])
    major_point = new_point(add(center, scale3(major, 0.5)))
    loop = new_loop()
    for i in range(4):
        add_use(loop, FORWARD,
                new_ellipse(ring[i], center_point, major_point, ring[(i + 1) % 4]))
    return loop


def new_polyline(points):
    """Closed loop of lines through ``points``."""
    loop = new_loop()
    for i, p in enumerate(points):
        add_use(loop, FORWARD, new_line(p, points[(i + 1) % len(points)]))
    return loop


def new_polyline_from_positions(positions):
    return new_polyline(new_points(positions))


## faces

def new_polygon(positions):
    return new_plane(new_polyline_from_positions(positions))


def new_square(origin, x, y):
    """Parallelogram spanned by ``x`` and ``y`` at ``origin``."""
    return extrude_edge(line_from(origin, x), y).middle


def new_disk(center, normal, x):
    return new_plane(new_circle(center, normal, x))


def new_elliptical_disk(center, major, minor):
    return new_plane(new_ellipse_loop(center, major, minor))


## volumes

def new_cube(origin, x, y, z):
    """Parallelepiped spanned by ``x``, ``y`` and ``z`` at ``origin``."""
    return extrude_face(new_square(origin, x, y), z).middle


def cube_face(cube, which):
    return volume_shell(cube).used[int(which)].entity


def make_hemisphere(circle, center, shell, direction):
    """Add four ruled patches capping ``circle`` to ``shell``.

    The cap bulges along the circle's normal for ``FORWARD`` and against
    it for ``REVERSE``; patch orientation follows the same bit.
    """
    if len(circle.used) != 4:
        raise PreconditionError(
            "a hemisphere needs a four-arc circle, got {} uses".format(len(circle.used)),
            {'circle': circle.id})
    direction = Direction(direction)
    normal = arc_normal(circle.used[0].entity)
    if direction == REVERSE:
        normal = scale3(normal, -1.0)
    rim = loop_points(circle)
    radius = dist(rim[0].pos, center.pos)
    cap = new_point(add(center.pos, scale3(normal, radius)))
    inward = [new_arc(p, center, cap) for p in rim]
    for i in range(4):
        loop = new_loop()
        add_use(loop, circle.used[i].direction ^ direction, circle.used[i].entity)
        add_use(loop, FORWARD ^ direction, inward[(i + 1) % 4])
        add_use(loop, REVERSE ^ direction, inward[i])
        add_use(shell, FORWARD, new_ruled(loop))


def new_sphere(center, normal, x):
    """Closed shell of eight patches around a circle in the plane ``normal``."""
    circle = new_circle(center, normal, x)
    center_point = arc_center(circle.used[0].entity)
    shell = new_shell()
    make_hemisphere(circle, center_point, shell, FORWARD)
    make_hemisphere(circle, center_point, shell, REVERSE)
    return shell


def new_ball(center, normal, x):
    return new_volume(new_sphere(center, normal, x))
