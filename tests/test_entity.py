"""Tests for the entity store."""

import numpy as np
import pytest

from yaptopo.entity import (
    FORWARD, REVERSE, Direction, Entity, Kind, Point, Use,
    add_helper, add_use, boundary_kind, embed, get_used_dir, is_boundary,
    is_cell, is_edge, is_face, kind_dim, new_entity, used_entities,
)
from yaptopo.errors import PreconditionError, TopologyError


class TestDirection:
    """Test orientation bit arithmetic."""

    def test_xor(self):
        assert FORWARD ^ FORWARD is FORWARD
        assert FORWARD ^ REVERSE is REVERSE
        assert REVERSE ^ REVERSE is FORWARD
        assert isinstance(REVERSE ^ 1, Direction)

    def test_flip(self):
        assert FORWARD.flip() is REVERSE
        assert REVERSE.flip() is FORWARD


class TestKinds:
    """Test the dimension table and kind predicates."""

    def test_dimensions(self):
        assert kind_dim(Kind.POINT) == 0
        for k in (Kind.LINE, Kind.ARC, Kind.ELLIPSE, Kind.SPLINE):
            assert kind_dim(k) == 1
            assert is_edge(k)
        assert kind_dim(Kind.PLANE) == kind_dim(Kind.RULED) == 2
        assert kind_dim(Kind.VOLUME) == 3
        for k in (Kind.LOOP, Kind.SHELL, Kind.GROUP):
            assert kind_dim(k) == -1
            assert not is_cell(k)

    def test_predicates(self):
        assert is_face(Kind.PLANE) and is_face(Kind.RULED)
        assert not is_face(Kind.VOLUME)
        assert is_boundary(Kind.LOOP) and is_boundary(Kind.SHELL)
        assert not is_boundary(Kind.GROUP)

    def test_boundary_kind(self):
        assert boundary_kind(Kind.PLANE) == Kind.LOOP
        assert boundary_kind(Kind.RULED) == Kind.LOOP
        assert boundary_kind(Kind.VOLUME) == Kind.SHELL
        assert boundary_kind(Kind.LINE) is None
        assert boundary_kind(Kind.GROUP) is None


class TestStore:
    """Test entity allocation and the append operations."""

    def test_ids_unique_and_increasing(self):
        a = new_entity(Kind.LINE)
        b = new_entity(Kind.LOOP)
        c = new_entity(Kind.POINT)
        assert 0 < a.id < b.id < c.id

    def test_new_entity_is_empty(self):
        e = new_entity(Kind.SHELL)
        assert e.kind == Kind.SHELL
        assert e.used == [] and e.helpers == [] and e.embedded == []
        assert e.dim == -1

    def test_point_entity(self):
        p = new_entity(Kind.POINT)
        assert isinstance(p, Point)
        assert p.pos == [0, 0, 0, 1]
        q = Point([1, 2, 3], 0.5)
        assert q.pos == [1, 2, 3, 1]
        assert q.size == 0.5
        r = Point(np.array([4, 5, 6], dtype=np.int64))
        assert r.pos == [4.0, 5.0, 6.0, 1]

    def test_add_use_and_helpers(self):
        arc = new_entity(Kind.ARC)
        a, c, b = Point(), Point(), Point()
        add_use(arc, FORWARD, a)
        add_helper(arc, c)
        add_use(arc, 1, b)
        assert arc.used == [Use(FORWARD, a), Use(REVERSE, b)]
        assert arc.used[1].direction is REVERSE
        assert arc.helpers == [c]
        assert used_entities(arc) == [a, b]

    def test_embed(self):
        face = new_entity(Kind.PLANE)
        p = Point()
        embed(face, p)
        assert face.embedded == [p]

    def test_identity_semantics(self):
        a = Point([1, 1, 1])
        b = Point([1, 1, 1])
        assert a != b
        assert len({a, b}) == 2

    def test_get_used_dir(self):
        shell = new_entity(Kind.SHELL)
        f1 = new_entity(Kind.PLANE)
        f2 = new_entity(Kind.PLANE)
        add_use(shell, REVERSE, f1)
        add_use(shell, FORWARD, f2)
        assert get_used_dir(shell, f1) is REVERSE
        assert get_used_dir(shell, f2) is FORWARD
        with pytest.raises(PreconditionError) as info:
            get_used_dir(shell, new_entity(Kind.PLANE))
        assert isinstance(info.value, TopologyError)
        assert info.value.details['user'] == shell.id
