"""Mesh data consumed by the spatial discretization.

The grid and its cells are produced by the mesh-partitioning collaborator and
are read-only from the point of view of this package's consumers.
"""

from .mesh_data import Cell, CellFace, CellType, Grid
from .simple_structured import (
    create_slab_mesh_1d,
    create_polygon_mesh_2d,
    create_triangle_mesh_2d,
    create_polyhedron_mesh_3d,
    create_tetrahedron_mesh_3d,
    local_block,
)

__all__ = [
    # Data model
    "Cell",
    "CellFace",
    "CellType",
    "Grid",
    # Builders
    "create_slab_mesh_1d",
    "create_polygon_mesh_2d",
    "create_triangle_mesh_2d",
    "create_polyhedron_mesh_3d",
    "create_tetrahedron_mesh_3d",
    "local_block",
]
