"""Tests for the structured mesh builders and the Grid data model."""

import numpy as np
import pytest

from meshing import (
    Cell,
    CellFace,
    CellType,
    Grid,
    create_polygon_mesh_2d,
    create_polyhedron_mesh_3d,
    create_slab_mesh_1d,
    create_tetrahedron_mesh_3d,
    create_triangle_mesh_2d,
    local_block,
)


class TestGrid:
    def test_nodes_padded_and_read_only(self):
        grid = Grid([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], [])
        assert grid.nodes.shape == (3, 3)
        with pytest.raises(ValueError):
            grid.nodes[0, 0] = 5.0

    def test_local_ids_and_centroids_assigned(self):
        cells = [
            Cell(CellType.SLAB, [0, 1], [CellFace([0]), CellFace([1])]),
            Cell(CellType.SLAB, [1, 2], [CellFace([1]), CellFace([2])]),
        ]
        grid = Grid([[0, 0, 0], [0, 0, 1], [0, 0, 3]], cells)
        assert [c.local_id for c in grid] == [0, 1]
        assert np.allclose(grid.local_cells[1].centroid, [0, 0, 2])
        assert np.allclose(grid.local_cells[1].faces[1].centroid, [0, 0, 3])


class TestBuilders:
    def test_slab_mesh(self):
        grid = create_slab_mesh_1d(n_cells=5, length=2.5)
        assert len(grid) == 5
        assert all(c.cell_type == CellType.SLAB for c in grid)
        assert np.isclose(grid.nodes[-1, 2], 2.5)

    def test_polygon_mesh_counter_clockwise(self):
        grid = create_polygon_mesh_2d(nx=2, ny=3)
        assert len(grid) == 6
        cell = grid.local_cells[0]
        x, y = grid.nodes[cell.vertex_ids, 0], grid.nodes[cell.vertex_ids, 1]
        signed_area = 0.5 * np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y)
        assert signed_area > 0.0

    @pytest.mark.parametrize("order,n_vertices", [(1, 3), (2, 6)])
    def test_triangle_mesh_orders(self, order, n_vertices):
        grid = create_triangle_mesh_2d(nx=2, ny=2, order=order)
        assert len(grid) == 8
        assert all(c.num_vertices == n_vertices for c in grid)
        assert all(len(f.vertex_ids) == order + 1 for c in grid for f in c.faces)

    def test_quadratic_triangle_midpoints_shared(self):
        grid = create_triangle_mesh_2d(nx=1, ny=1, order=2)
        # 4 corners + 5 distinct edges
        assert grid.nodes.shape[0] == 9

    def test_polyhedron_mesh(self):
        grid = create_polyhedron_mesh_3d(nx=2, ny=2, nz=1)
        assert len(grid) == 4
        assert all(len(c.faces) == 6 for c in grid)

    @pytest.mark.parametrize("order,n_vertices", [(1, 4), (2, 10)])
    def test_tetrahedron_mesh_orders(self, order, n_vertices):
        grid = create_tetrahedron_mesh_3d(nx=1, ny=1, nz=1, order=order)
        assert len(grid) == 6
        assert all(c.num_vertices == n_vertices for c in grid)

    def test_quadratic_polygon_rejected(self):
        with pytest.raises(ValueError):
            create_triangle_mesh_2d(order=2, cell_type=CellType.POLYGON)


class TestLocalBlock:
    def test_blocks_partition_cells(self):
        grid = create_polygon_mesh_2d(nx=3, ny=3)
        blocks = [local_block(grid, rank, 4) for rank in range(4)]
        assert sum(len(b) for b in blocks) == len(grid)
        global_ids = [c.global_id for b in blocks for c in b]
        assert global_ids == list(range(len(grid)))

    def test_local_ids_restart_at_zero(self):
        grid = create_slab_mesh_1d(n_cells=6)
        block = local_block(grid, 1, 2)
        assert [c.local_id for c in block] == [0, 1, 2]
        assert [c.global_id for c in block] == [3, 4, 5]
