"""
Grid / Cell: read-only mesh data consumed by the spatial discretization.

This module defines the node coordinates, the local cell list and the per-cell
connectivity (vertices and faces) handed over by the mesh-partitioning
collaborator. Nothing here is mutated once the grid has been built.

Indexing Conventions:
- Node indices address rows of ``Grid.nodes`` (shape (n_nodes, 3)).
- Local cell indices address ``Grid.local_cells`` (0 to n_cells-1) and are the
  shared index space for every per-cell array of the discretization.
- Face indices are local to a cell and follow the order of ``Cell.faces``.

Geometry Conventions:
- All coordinates are 3-D. Slabs lie along an arbitrary axis (builders use z),
  polygons and triangles lie in the xy-plane.
- Centroids are vertex averages, matching the piecewise-linear basis centre.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

import numpy as np


class CellType(str, Enum):
    """Topology tag of a mesh cell."""

    SLAB = "slab"
    POLYGON = "polygon"
    POLYHEDRON = "polyhedron"
    TRIANGLE = "triangle"
    TETRAHEDRON = "tetrahedron"


@dataclass
class CellFace:
    """Ordered vertex list of one cell face plus its vertex-average centroid."""

    vertex_ids: List[int]
    centroid: np.ndarray = None


@dataclass
class Cell:
    """A local mesh cell: topology tag, ordered vertices, ordered faces."""

    cell_type: CellType
    vertex_ids: List[int]
    faces: List[CellFace] = field(default_factory=list)
    local_id: int = -1
    global_id: int = -1
    centroid: np.ndarray = None

    @property
    def num_vertices(self) -> int:
        return len(self.vertex_ids)


class Grid:
    """Node coordinates and the ordered sequence of local cells.

    Parameters
    ----------
    nodes : array_like
        Node coordinates, shape (n_nodes, 3). 1-D/2-D inputs are padded with zeros.
    local_cells : sequence of Cell
        Cells owned by this partition, in local-index order.
    """

    def __init__(self, nodes, local_cells: Sequence[Cell]):
        nodes = np.atleast_2d(np.asarray(nodes, dtype=np.float64))
        if nodes.shape[1] < 3:
            nodes = np.hstack([nodes, np.zeros((nodes.shape[0], 3 - nodes.shape[1]))])

        # --- Geometry ---
        self.nodes = nodes
        self.nodes.setflags(write=False)

        # --- Connectivity ---
        self.local_cells = list(local_cells)
        for local_id, cell in enumerate(self.local_cells):
            cell.local_id = local_id
            if cell.global_id < 0:
                cell.global_id = local_id
            if cell.centroid is None:
                cell.centroid = self.vertex_average(cell.vertex_ids)
            for face in cell.faces:
                if face.centroid is None:
                    face.centroid = self.vertex_average(face.vertex_ids)

    @property
    def num_local_cells(self) -> int:
        return len(self.local_cells)

    def vertex_average(self, vertex_ids) -> np.ndarray:
        """Return the arithmetic mean of the given nodes."""
        return self.nodes[list(vertex_ids)].mean(axis=0)

    def __len__(self):
        return len(self.local_cells)

    def __iter__(self):
        return iter(self.local_cells)
