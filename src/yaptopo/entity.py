"""Entity store for the yapTopo topology graph.

Every node of the graph is an :class:`Entity`.  An entity has a
:class:`Kind`, a process-unique integer ``id`` and three kinds of
outgoing reference:

- ``used``: ordered, directed uses ``(direction, entity)`` that make up
  the entity's boundary (a line uses its two points, a loop uses its
  edges, a face uses its loops, ...)
- ``helpers``: ordered auxiliary references with a geometric but
  non-boundary role (an arc's center, a spline's interior points)
- ``embedded``: lower-dimensional entities that a mesher must conform
  to without them bounding this entity

Entities are shared freely between parents and are compared by
identity.  Nothing in this module validates dimensions or orientation;
the constructors in :mod:`yaptopo.construct` are responsible for that.

Traversal state is never stored on an entity.  Algorithms that need
per-entity working storage keep it in a dict keyed by entity for the
duration of the call.

Copyright (c) 2025 yapCAD contributors
MIT License
"""

from __future__ import annotations

from enum import IntEnum
from itertools import count
from typing import List, NamedTuple, Optional

from yaptopo.errors import PreconditionError
from yaptopo.geom import point


class Kind(IntEnum):
    """Closed set of entity kinds."""
    POINT = 0
    LINE = 1
    ARC = 2
    ELLIPSE = 3
    SPLINE = 4
    PLANE = 5
    RULED = 6
    VOLUME = 7
    LOOP = 8
    SHELL = 9
    GROUP = 10


class Direction(IntEnum):
    """Whether a use agrees with the used entity's own orientation."""
    FORWARD = 0
    REVERSE = 1

    def __xor__(self, other):
        return Direction(int(self) ^ int(other))

    __rxor__ = __xor__

    def flip(self) -> "Direction":
        return Direction(1 - int(self))


FORWARD = Direction.FORWARD
REVERSE = Direction.REVERSE


# Topological dimension of each kind; aggregates have none.
KIND_DIMS = {
    Kind.POINT: 0,
    Kind.LINE: 1,
    Kind.ARC: 1,
    Kind.ELLIPSE: 1,
    Kind.SPLINE: 1,
    Kind.PLANE: 2,
    Kind.RULED: 2,
    Kind.VOLUME: 3,
    Kind.LOOP: -1,
    Kind.SHELL: -1,
    Kind.GROUP: -1,
}

KIND_NAMES = {
    Kind.POINT: "Point",
    Kind.LINE: "Line",
    Kind.ARC: "Arc",
    Kind.ELLIPSE: "Ellipse",
    Kind.SPLINE: "Spline",
    Kind.PLANE: "Plane",
    Kind.RULED: "Ruled Surface",
    Kind.VOLUME: "Volume",
    Kind.LOOP: "Loop",
    Kind.SHELL: "Shell",
    Kind.GROUP: "Group",
}

DIM_NAMES = ("Point", "Line", "Surface", "Volume")


def kind_dim(kind: Kind) -> int:
    """Return the topological dimension of ``kind`` (-1 for aggregates)."""
    return KIND_DIMS[kind]


def is_cell(kind: Kind) -> bool:
    return KIND_DIMS[kind] >= 0


def is_edge(kind: Kind) -> bool:
    return KIND_DIMS[kind] == 1


def is_face(kind: Kind) -> bool:
    return kind in (Kind.PLANE, Kind.RULED)


def is_boundary(kind: Kind) -> bool:
    return kind in (Kind.LOOP, Kind.SHELL)


def boundary_kind(kind: Kind) -> Optional[Kind]:
    """Kind of the aggregate that bounds a cell of ``kind``, if any."""
    dim = KIND_DIMS[kind]
    if dim == 3:
        return Kind.SHELL
    if dim == 2:
        return Kind.LOOP
    return None


class Use(NamedTuple):
    """A directed reference from one entity to another."""
    direction: Direction
    entity: "Entity"


_ids = count(1)


class Entity:
    """A node in the topology graph."""

    def __init__(self, kind: Kind):
        self.kind = Kind(kind)
        self.id = next(_ids)
        self.used: List[Use] = []
        self.helpers: List[Entity] = []
        self.embedded: List[Entity] = []

    @property
    def dim(self) -> int:
        return KIND_DIMS[self.kind]

    def __repr__(self):
        return "{}({}, {} uses)".format(KIND_NAMES[self.kind], self.id,
                                        len(self.used))


class Point(Entity):
    """A vertex: position plus the target mesh size around it."""

    def __init__(self, pos=None, size=0.0):
        super().__init__(Kind.POINT)
        self.pos = point(0, 0, 0) if pos is None else point([float(x) for x in pos])
        self.size = float(size)

    def __repr__(self):
        return "Point({}, [{}, {}, {}])".format(self.id, *self.pos[:3])


def new_entity(kind: Kind) -> Entity:
    """Allocate a fresh, empty entity of ``kind``."""
    if kind == Kind.POINT:
        return Point()
    return Entity(kind)


def add_use(owner: Entity, direction: Direction, target: Entity) -> None:
    owner.used.append(Use(Direction(direction), target))


def add_helper(owner: Entity, target: Entity) -> None:
    owner.helpers.append(target)


def embed(into: Entity, target: Entity) -> None:
    into.embedded.append(target)


def used_entities(user: Entity) -> List[Entity]:
    return [u.entity for u in user.used]


def get_used_dir(user: Entity, used: Entity) -> Direction:
    """Direction of the first use of ``used`` by ``user``."""
    for u in user.used:
        if u.entity is used:
            return u.direction
    raise PreconditionError(
        "{!r} does not use {!r}".format(user, used),
        {'user': user.id, 'used': used.id})
