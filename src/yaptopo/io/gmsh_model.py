"""Load yapTopo models straight into Gmsh.

Instead of writing a ``.geo`` script and having Gmsh parse it, this
builds the same entities through the Gmsh Python API's built-in
(``geo``) kernel.  Entity ids are reused as Gmsh tags, so a model loaded
here numbers its entities exactly like the ``.geo`` export.

Usage:
    from yaptopo.io.gmsh_model import GmshModelBuilder

    with GmshModelBuilder() as builder:
        builder.add(cube)
        builder.generate(3)
        builder.write("cube.msh")

Copyright (c) 2025 yapCAD contributors
MIT License
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Set, Tuple, Union

from yaptopo.closure import closure
from yaptopo.construct import (
    arc_center, edge_point, ellipse_center, ellipse_major_point,
)
from yaptopo.entity import REVERSE, Entity, Kind, is_cell

# Gmsh import with graceful fallback
try:
    import gmsh
    _GMSH_AVAILABLE = True
except ImportError:
    gmsh = None  # type: ignore
    _GMSH_AVAILABLE = False

logger = logging.getLogger(__name__)


def gmsh_available() -> bool:
    """Return True if Gmsh Python API is available."""
    return _GMSH_AVAILABLE


def require_gmsh() -> None:
    """Raise error if Gmsh is not available."""
    if not _GMSH_AVAILABLE:
        raise RuntimeError(
            "Gmsh Python API is not available. Install the 'mesh' extra "
            "(pip install yapTopo[mesh]) or gmsh from conda-forge"
        )


class GmshModelBuilder:
    """Creates Gmsh geometry from yapTopo entity graphs."""

    def __init__(self, model_name: str = "yapTopo_model", terminal: bool = False):
        require_gmsh()
        self._model_name = model_name
        self._terminal = terminal
        self._initialized = False
        self._seen: Set[int] = set()

    def initialize(self) -> None:
        """Initialize Gmsh (must be called before other operations)."""
        if self._initialized:
            return
        gmsh.initialize()
        gmsh.model.add(self._model_name)
        gmsh.option.setNumber("General.Terminal", 1 if self._terminal else 0)
        self._initialized = True

    def finalize(self) -> None:
        """Finalize Gmsh and release resources."""
        if self._initialized:
            gmsh.finalize()
            self._initialized = False
            self._seen.clear()

    def __enter__(self) -> "GmshModelBuilder":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.finalize()

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("GmshModelBuilder not initialized. Call initialize() first.")

    def _create(self, obj: Entity) -> bool:
        geo = gmsh.model.geo
        kind = obj.kind
        tag = obj.id
        if kind == Kind.POINT:
            x, y, z = obj.pos[:3]
            geo.addPoint(x, y, z, obj.size, tag)
        elif kind == Kind.LINE:
            geo.addLine(edge_point(obj, 0).id, edge_point(obj, 1).id, tag)
        elif kind == Kind.ARC:
            geo.addCircleArc(edge_point(obj, 0).id, arc_center(obj).id,
                             edge_point(obj, 1).id, tag)
        elif kind == Kind.ELLIPSE:
            geo.addEllipseArc(edge_point(obj, 0).id, ellipse_center(obj).id,
                              ellipse_major_point(obj).id, edge_point(obj, 1).id, tag)
        elif kind == Kind.SPLINE:
            tags = ([edge_point(obj, 0).id] + [h.id for h in obj.helpers]
                    + [edge_point(obj, 1).id])
            geo.addSpline(tags, tag)
        elif kind == Kind.LOOP:
            geo.addCurveLoop(self._signed(obj), tag)
        elif kind == Kind.SHELL:
            geo.addSurfaceLoop([u.entity.id for u in obj.used], tag)
        elif kind == Kind.PLANE:
            geo.addPlaneSurface([u.entity.id for u in obj.used], tag)
        elif kind == Kind.RULED:
            geo.addSurfaceFilling([u.entity.id for u in obj.used], tag)
        elif kind == Kind.VOLUME:
            geo.addVolume([u.entity.id for u in obj.used], tag)
        else:
            return False
        self._seen.add(tag)
        return True

    @staticmethod
    def _signed(obj: Entity) -> List[int]:
        return [-u.entity.id if u.direction == REVERSE else u.entity.id
                for u in obj.used]

    def add(self, root: Entity, physical: bool = True) -> List[Tuple[int, int]]:
        """Create every entity reachable from ``root``.

        Entities already created by an earlier call are skipped, so
        models sharing sub-entities can be added one after another.

        Returns:
            List of (dim, tag) pairs for the cells created by this call
        """
        self._require_initialized()
        created = []
        entities = closure(root, True, True)
        for obj in entities:
            if obj.id in self._seen:
                continue
            if self._create(obj) and is_cell(obj.kind):
                created.append((obj.dim, obj.id))
        gmsh.model.geo.synchronize()

        new_ids = {tag for _, tag in created}
        for obj in entities:
            if obj.id not in new_ids:
                continue
            for emb in obj.embedded:
                gmsh.model.mesh.embed(emb.dim, [emb.id], obj.dim, obj.id)
        if physical:
            for dim, tag in created:
                gmsh.model.addPhysicalGroup(dim, [tag], tag)
        logger.debug("created %d gmsh entities for %r", len(created), root)
        return created

    def generate(self, dim: int = 3) -> None:
        """Generate the mesh up to dimension ``dim``."""
        self._require_initialized()
        gmsh.model.mesh.generate(dim)

    def write(self, path: Union[str, Path]) -> None:
        """Write the model or mesh; the format follows the file extension."""
        self._require_initialized()
        gmsh.write(str(path))
