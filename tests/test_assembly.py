"""Tests for assembly boundaries and welding."""

import pytest

from yaptopo.assembly import (
    collect_assembly_boundary, insert_into, unscramble_loop,
    weld_half_shell_onto, weld_plane_with_holes_into, weld_volume_face_into,
)
from yaptopo.construct import (
    add_hole_to_face, add_to_group, arc_center, face_loop, line_from,
    loop_points, new_group, new_line, new_loop, new_plane, new_points,
    new_ruled, volume_shell,
)
from yaptopo.entity import FORWARD, REVERSE, Kind, Use, add_use
from yaptopo.errors import MalformedLoopError, PreconditionError, TopologyError
from yaptopo.extrude import extrude_edge, extrude_face, extrude_face_group
from yaptopo.geom import point, vclose, vect
from yaptopo.primitives import (
    CubeFace, cube_face, make_hemisphere, new_circle, new_cube,
    new_polyline_from_positions, new_square,
)


def _two_squares():
    """Two unit squares side by side sharing the edge x=1."""
    p = new_points([[0, 0, 0], [1, 0, 0], [2, 0, 0],
                    [0, 1, 0], [1, 1, 0], [2, 1, 0]])
    shared = new_line(p[1], p[4])
    a = new_loop()
    for edge in (new_line(p[0], p[1]), shared, new_line(p[4], p[3]),
                 new_line(p[3], p[0])):
        add_use(a, FORWARD, edge)
    b = new_loop()
    for edge in (new_line(p[1], p[2]), new_line(p[2], p[5]),
                 new_line(p[5], p[4])):
        add_use(b, FORWARD, edge)
    add_use(b, REVERSE, shared)
    group = new_group()
    add_to_group(group, new_plane(a))
    add_to_group(group, new_plane(b))
    return group, shared


def _cube(origin, size):
    return new_cube(origin, vect(size, 0, 0), vect(0, size, 0), vect(0, 0, size))


class TestCollectAssemblyBoundary:
    """Test boundary extraction from groups of cells."""

    def test_face_group(self):
        group, shared = _two_squares()
        rim = collect_assembly_boundary(group)
        assert rim.kind == Kind.LOOP
        assert len(rim.used) == 6
        assert shared not in [u.entity for u in rim.used]
        # encounter order: first square's surviving edges, then the second's
        first = face_loop(group.used[0].entity)
        assert [u.entity for u in rim.used[:3]] == [
            u.entity for u in first.used if u.entity is not shared]

    def test_adjacent_cubes(self):
        group, _ = _two_squares()
        volumes, _ = extrude_face_group(group, vect(0, 0, 1))
        shell = collect_assembly_boundary(volumes)
        assert shell.kind == Kind.SHELL
        assert len(shell.used) == 10
        directions = {}
        for vol_use in volumes.used:
            for u in volume_shell(vol_use.entity).used:
                directions[id(u.entity)] = u.direction
        assert all(u.direction == directions[id(u.entity)] for u in shell.used)

    def test_mixed_faces(self):
        group, _ = _two_squares()
        ruled = new_ruled(new_polyline_from_positions(
            [[0, 0, 5], [1, 0, 5], [1, 1, 5]]))
        add_to_group(group, ruled)
        rim = collect_assembly_boundary(group)
        assert len(rim.used) == 9

    def test_empty(self):
        with pytest.raises(PreconditionError):
            collect_assembly_boundary(new_group())

    def test_no_boundary(self):
        group = new_group()
        add_to_group(group, new_line(*new_points([[0, 0, 0], [1, 0, 0]])))
        with pytest.raises(PreconditionError):
            collect_assembly_boundary(group)

    def test_mixed_dimensions(self):
        group = new_group()
        add_to_group(group, new_square(point(0, 0, 0), vect(1, 0, 0), vect(0, 1, 0)))
        add_to_group(group, _cube(point(2, 0, 0), 1))
        with pytest.raises(PreconditionError) as info:
            collect_assembly_boundary(group)
        assert info.value.details['assembly'] == group.id


class TestInsertInto:
    """Test holes and voids."""

    def test_face(self):
        big = new_square(point(0, 0, 0), vect(4, 0, 0), vect(0, 4, 0))
        small = new_square(point(1, 1, 0), vect(1, 0, 0), vect(0, 1, 0))
        insert_into(big, small)
        assert big.used[1] == Use(REVERSE, face_loop(small))

    def test_volume(self):
        big = _cube(point(0, 0, 0), 4)
        small = _cube(point(1, 1, 1), 1)
        insert_into(big, small)
        assert len(big.used) == 2
        assert big.used[1] == Use(REVERSE, volume_shell(small))

    def test_face_group(self):
        big = new_square(point(-1, -1, 0), vect(4, 0, 0), vect(0, 4, 0))
        group, _ = _two_squares()
        insert_into(big, group)
        hole = big.used[1]
        assert hole.direction == REVERSE
        assert hole.entity.kind == Kind.LOOP
        assert len(hole.entity.used) == 6

    def test_volume_group(self):
        big = _cube(point(-1, -1, -1), 4)
        group, _ = _two_squares()
        volumes, _ = extrude_face_group(group, vect(0, 0, 1))
        insert_into(big, volumes)
        assert big.used[1].entity.kind == Kind.SHELL

    def test_mismatches(self):
        face = new_square(point(0, 0, 0), vect(1, 0, 0), vect(0, 1, 0))
        cube = _cube(point(0, 0, 0), 1)
        group, _ = _two_squares()
        with pytest.raises(PreconditionError):
            insert_into(cube, face)
        with pytest.raises(PreconditionError):
            insert_into(face, cube)
        with pytest.raises(PreconditionError):
            insert_into(cube, group)

    def test_unexpected_kind(self):
        face = new_square(point(0, 0, 0), vect(1, 0, 0), vect(0, 1, 0))
        with pytest.raises(PreconditionError, match="unexpected inserted kind"):
            insert_into(face, line_from(point(0, 0, 0), vect(1, 0, 0)))


class TestWeld:
    """Test welding sub-volumes together."""

    def test_volume_face(self):
        big = _cube(point(0, 0, 0), 4)
        small = _cube(point(1, 1, 4), 1)
        top = cube_face(big, CubeFace.TOP)
        bottom = cube_face(small, CubeFace.BOTTOM)
        assert volume_shell(small).used[0] == Use(REVERSE, bottom)
        weld_volume_face_into(big, small, top, bottom)
        assert top.used[-1] == Use(REVERSE, face_loop(bottom))
        shell = volume_shell(big)
        assert len(shell.used) == 7
        assert shell.used[-1] == Use(FORWARD, bottom)

    def test_plane_with_holes(self):
        big = _cube(point(0, 0, 0), 4)
        base = new_square(point(1, 1, 4), vect(2, 0, 0), vect(0, 2, 0))
        hole = new_polyline_from_positions(
            [[1.5, 1.5, 4], [1.5, 2.5, 4], [2.5, 2.5, 4], [2.5, 1.5, 4]])
        add_hole_to_face(base, hole)
        small, _ = extrude_face(base, vect(0, 0, 1))
        top = cube_face(big, CubeFace.TOP)
        weld_plane_with_holes_into(big, small, top, base)
        shell = volume_shell(big)
        assert len(shell.used) == 8
        assert shell.used[6] == Use(FORWARD, base)
        plug = shell.used[7]
        assert plug.direction == FORWARD
        assert plug.entity.kind == Kind.PLANE
        assert face_loop(plug.entity) is hole

    def test_face_not_in_volume(self):
        big = _cube(point(0, 0, 0), 4)
        small = _cube(point(1, 1, 4), 1)
        stray = new_square(point(1, 1, 4), vect(1, 0, 0), vect(0, 1, 0))
        with pytest.raises(PreconditionError):
            weld_volume_face_into(big, small, cube_face(big, CubeFace.TOP), stray)

    def test_half_shell(self):
        cube = _cube(point(0, 0, 0), 4)
        top = cube_face(cube, CubeFace.TOP)
        circle = new_circle(point(2, 2, 4), vect(0, 0, 1), vect(1, 0, 0))
        dome = new_group()
        make_hemisphere(circle, arc_center(circle.used[0].entity), dome, FORWARD)
        assert len(dome.used) == 4
        weld_half_shell_onto(cube, top, dome, FORWARD)
        rim = top.used[-1]
        assert rim.direction == REVERSE
        assert [u.entity for u in rim.entity.used] == [u.entity for u in circle.used]
        shell = volume_shell(cube)
        assert len(shell.used) == 10
        assert all(u.direction == FORWARD and u.entity.kind == Kind.RULED
                   for u in shell.used[6:])

    def test_half_shell_reversed(self):
        cube = _cube(point(0, 0, 0), 4)
        bottom = cube_face(cube, CubeFace.BOTTOM)
        circle = new_circle(point(2, 2, 0), vect(0, 0, 1), vect(1, 0, 0))
        dome = new_group()
        make_hemisphere(circle, arc_center(circle.used[0].entity), dome, REVERSE)
        weld_half_shell_onto(cube, bottom, dome, REVERSE)
        assert all(u.direction == REVERSE for u in volume_shell(cube).used[6:])


class TestUnscrambleLoop:
    """Test reordering loops into connected cycles."""

    def test_swept_line(self):
        line = line_from(point(0, 0, 0), vect(1, 0, 0))
        loop = face_loop(extrude_edge(line, vect(0, 1, 0)).middle)
        expected = list(loop.used)
        loop.used = [expected[0], expected[3]._replace(direction=FORWARD),
                     expected[2]._replace(direction=FORWARD), expected[1]]
        unscramble_loop(loop)
        assert loop.used == expected

    def test_assembly_rim(self):
        group, _ = _two_squares()
        rim = collect_assembly_boundary(group)
        unscramble_loop(rim)
        corners = [p.pos for p in loop_points(rim)]
        expected = [point(0, 0, 0), point(1, 0, 0), point(2, 0, 0),
                    point(2, 1, 0), point(1, 1, 0), point(0, 1, 0)]
        assert all(vclose(a, b) for a, b in zip(corners, expected))

    def test_already_ordered(self):
        loop = new_polyline_from_positions([[0, 0, 0], [1, 0, 0], [0, 1, 0]])
        before = list(loop.used)
        unscramble_loop(loop)
        assert loop.used == before

    def test_disconnected(self):
        a = line_from(point(0, 0, 0), vect(1, 0, 0))
        b = line_from(point(5, 0, 0), vect(1, 0, 0))
        loop = new_loop()
        add_use(loop, FORWARD, a)
        add_use(loop, FORWARD, b)
        with pytest.raises(MalformedLoopError) as info:
            unscramble_loop(loop)
        assert info.value.details['loop'] == loop.id
        assert isinstance(info.value, TopologyError)

    def test_open_chain(self):
        a, b, c, d = new_points([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]])
        loop = new_loop()
        for start, end in ((a, b), (b, c), (c, d)):
            add_use(loop, FORWARD, new_line(start, end))
        before = list(loop.used)
        with pytest.raises(MalformedLoopError) as info:
            unscramble_loop(loop)
        assert info.value.details['start'] == a.id
        assert info.value.details['point'] == d.id
        assert loop.used == before

    def test_branching(self):
        hub, a, b, c = new_points([[0, 0, 0], [1, 0, 0], [0, 1, 0], [-1, 0, 0]])
        loop = new_loop()
        for end in (a, b, c):
            add_use(loop, FORWARD, new_line(hub, end))
        with pytest.raises(MalformedLoopError):
            unscramble_loop(loop)
