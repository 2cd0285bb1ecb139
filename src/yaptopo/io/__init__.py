"""Serializers for yapTopo models.

These only read the finished graph; the Gmsh-backed loader lives in
:mod:`yaptopo.io.gmsh_model` and needs the optional ``gmsh`` package.
"""

from .geo import format_geo, write_geo
from .dmg import format_dmg, write_dmg

__all__ = ['format_geo', 'write_geo', 'format_dmg', 'write_dmg']
