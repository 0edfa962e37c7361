"""Structured mesh builders for slab, polygon, polyhedron, triangle and tetrahedron grids.

All builders return a :class:`~meshing.mesh_data.Grid` holding every cell as a
local cell. Vertex orderings:

- Polygons (quads) are counter-clockwise in the xy-plane, faces are the edges
  ``(v_k, v_{k+1})``.
- Triangles of order 2 list the three corners first, then the midpoints of
  edges (0,1), (1,2), (2,0).
- Tetrahedra of order 2 list the four corners first, then the midpoints of
  edges (0,1), (1,2), (2,0), (0,3), (1,3), (2,3).
- Face vertex lists of quadratic cells hold the corners first, then the face's
  edge midpoints.
"""

import numpy as np

from .mesh_data import Cell, CellFace, CellType, Grid

# Local corner indices of each tetrahedron face
TET_FACES = ((0, 2, 1), (0, 1, 3), (1, 2, 3), (0, 3, 2))
# Local corner indices of each triangle edge
TRI_EDGES = ((0, 1), (1, 2), (2, 0))
TET_EDGES = ((0, 1), (1, 2), (2, 0), (0, 3), (1, 3), (2, 3))

# Hexahedron faces by local corner index (corner = i + 2j + 4k), outward ordering
HEX_FACES = (
    (0, 4, 6, 2),  # x-
    (1, 3, 7, 5),  # x+
    (0, 1, 5, 4),  # y-
    (2, 6, 7, 3),  # y+
    (0, 2, 3, 1),  # z-
    (4, 5, 7, 6),  # z+
)

# Kuhn subdivision of the unit cube into 6 tetrahedra sharing diagonal 0-7
KUHN_TETS = (
    (0, 1, 3, 7),
    (0, 1, 5, 7),
    (0, 2, 3, 7),
    (0, 2, 6, 7),
    (0, 4, 5, 7),
    (0, 4, 6, 7),
)


class _MidpointTable:
    """Creates (once) and returns the node index of each edge midpoint."""

    def __init__(self, nodes):
        self.nodes = nodes
        self._ids = {}

    def __call__(self, a: int, b: int) -> int:
        key = (min(a, b), max(a, b))
        if key not in self._ids:
            self.nodes.append(0.5 * (np.asarray(self.nodes[a]) + np.asarray(self.nodes[b])))
            self._ids[key] = len(self.nodes) - 1
        return self._ids[key]


def _lattice_nodes(counts, lengths):
    axes = [np.linspace(0.0, L, n + 1) for n, L in zip(counts, lengths)]
    while len(axes) < 3:
        axes.append(np.zeros(1))
    Z, Y, X = np.meshgrid(axes[2], axes[1], axes[0], indexing="ij")
    return [np.array(p) for p in np.column_stack([X.ravel(), Y.ravel(), Z.ravel()])]


def create_slab_mesh_1d(n_cells: int = 10, length: float = 1.0) -> Grid:
    """Line mesh of ``n_cells`` equal slabs along the z-axis."""
    z = np.linspace(0.0, length, n_cells + 1)
    nodes = np.column_stack([np.zeros_like(z), np.zeros_like(z), z])

    cells = []
    for c in range(n_cells):
        cells.append(
            Cell(
                cell_type=CellType.SLAB,
                vertex_ids=[c, c + 1],
                faces=[CellFace([c]), CellFace([c + 1])],
            )
        )
    return Grid(nodes, cells)


def create_polygon_mesh_2d(nx: int = 4, ny: int = 4, Lx: float = 1.0, Ly: float = 1.0) -> Grid:
    """Cartesian quad mesh where every cell is a 4-vertex polygon."""
    nodes = _lattice_nodes((nx, ny), (Lx, Ly))

    def nid(i, j):
        return i + (nx + 1) * j

    cells = []
    for j in range(ny):
        for i in range(nx):
            loop = [nid(i, j), nid(i + 1, j), nid(i + 1, j + 1), nid(i, j + 1)]
            faces = [CellFace([loop[k], loop[(k + 1) % 4]]) for k in range(4)]
            cells.append(Cell(CellType.POLYGON, loop, faces))
    return Grid(np.array(nodes), cells)


def create_triangle_mesh_2d(
    nx: int = 4,
    ny: int = 4,
    Lx: float = 1.0,
    Ly: float = 1.0,
    order: int = 1,
    cell_type: CellType = CellType.TRIANGLE,
) -> Grid:
    """Cartesian mesh with every quad split into two triangles.

    Parameters
    ----------
    order : int
        1 for 3-node triangles, 2 for 6-node triangles (``cell_type`` TRIANGLE only).
    cell_type : CellType
        TRIANGLE builds Lagrange cells, POLYGON builds 3-vertex PWL polygons.
    """
    cell_type = CellType(cell_type)
    if order not in (1, 2):
        raise ValueError(f"Unsupported triangle order: {order}")
    if order == 2 and cell_type != CellType.TRIANGLE:
        raise ValueError("Quadratic triangles require cell_type=TRIANGLE")

    nodes = _lattice_nodes((nx, ny), (Lx, Ly))
    midpoint = _MidpointTable(nodes)

    def nid(i, j):
        return i + (nx + 1) * j

    cells = []
    for j in range(ny):
        for i in range(nx):
            v00, v10, v11, v01 = nid(i, j), nid(i + 1, j), nid(i + 1, j + 1), nid(i, j + 1)
            for corners in ((v00, v10, v11), (v00, v11, v01)):
                vertex_ids = list(corners)
                faces = []
                for a, b in TRI_EDGES:
                    face_ids = [corners[a], corners[b]]
                    if order == 2:
                        face_ids.append(midpoint(corners[a], corners[b]))
                    faces.append(CellFace(face_ids))
                if order == 2:
                    vertex_ids += [midpoint(corners[a], corners[b]) for a, b in TRI_EDGES]
                cells.append(Cell(cell_type, vertex_ids, faces))
    return Grid(np.array(nodes), cells)


def create_polyhedron_mesh_3d(
    nx: int = 2,
    ny: int = 2,
    nz: int = 2,
    Lx: float = 1.0,
    Ly: float = 1.0,
    Lz: float = 1.0,
) -> Grid:
    """Cartesian hexahedral mesh where every cell is an 8-vertex polyhedron."""
    nodes = _lattice_nodes((nx, ny, nz), (Lx, Ly, Lz))

    def nid(i, j, k):
        return i + (nx + 1) * (j + (ny + 1) * k)

    cells = []
    for k in range(nz):
        for j in range(ny):
            for i in range(nx):
                corners = [
                    nid(i + (c & 1), j + ((c >> 1) & 1), k + ((c >> 2) & 1))
                    for c in range(8)
                ]
                faces = [CellFace([corners[c] for c in face]) for face in HEX_FACES]
                cells.append(Cell(CellType.POLYHEDRON, corners, faces))
    return Grid(np.array(nodes), cells)


def create_tetrahedron_mesh_3d(
    nx: int = 2,
    ny: int = 2,
    nz: int = 2,
    Lx: float = 1.0,
    Ly: float = 1.0,
    Lz: float = 1.0,
    order: int = 1,
    cell_type: CellType = CellType.TETRAHEDRON,
) -> Grid:
    """Cartesian mesh with every hexahedron split into 6 Kuhn tetrahedra.

    Parameters
    ----------
    order : int
        1 for 4-node tetrahedra, 2 for 10-node tetrahedra (``cell_type`` TETRAHEDRON only).
    cell_type : CellType
        TETRAHEDRON builds Lagrange cells, POLYHEDRON builds 4-vertex PWL polyhedra.
    """
    cell_type = CellType(cell_type)
    if order not in (1, 2):
        raise ValueError(f"Unsupported tetrahedron order: {order}")
    if order == 2 and cell_type != CellType.TETRAHEDRON:
        raise ValueError("Quadratic tetrahedra require cell_type=TETRAHEDRON")

    nodes = _lattice_nodes((nx, ny, nz), (Lx, Ly, Lz))
    midpoint = _MidpointTable(nodes)

    def nid(i, j, k):
        return i + (nx + 1) * (j + (ny + 1) * k)

    cells = []
    for k in range(nz):
        for j in range(ny):
            for i in range(nx):
                hex_ids = [
                    nid(i + (c & 1), j + ((c >> 1) & 1), k + ((c >> 2) & 1))
                    for c in range(8)
                ]
                for tet in KUHN_TETS:
                    corners = [hex_ids[c] for c in tet]
                    faces = []
                    for face in TET_FACES:
                        face_ids = [corners[c] for c in face]
                        if order == 2:
                            face_ids += [
                                midpoint(corners[face[a]], corners[face[(a + 1) % 3]])
                                for a in range(3)
                            ]
                        faces.append(CellFace(face_ids))
                    vertex_ids = list(corners)
                    if order == 2:
                        vertex_ids += [midpoint(corners[a], corners[b]) for a, b in TET_EDGES]
                    cells.append(Cell(cell_type, vertex_ids, faces))
    return Grid(np.array(nodes), cells)


def local_block(grid: Grid, rank: int, size: int) -> Grid:
    """Contiguous block of ``grid``'s cells owned by ``rank`` out of ``size`` ranks.

    Cells are copied with fresh local indices; global indices are preserved.
    """
    n_cells = grid.num_local_cells
    start = (n_cells * rank) // size
    stop = (n_cells * (rank + 1)) // size
    cells = []
    for cell in grid.local_cells[start:stop]:
        cells.append(
            Cell(
                cell.cell_type,
                list(cell.vertex_ids),
                [CellFace(list(f.vertex_ids), f.centroid) for f in cell.faces],
                global_id=cell.global_id,
                centroid=cell.centroid,
            )
        )
    return Grid(np.array(grid.nodes), cells)
