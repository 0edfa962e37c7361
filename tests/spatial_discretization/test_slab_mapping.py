"""Tests for the 1-D slab mapping: closed forms, point evaluation, point faces."""

import numpy as np
import pytest

from meshing import Cell, CellFace, CellType, Grid
from spatial_discretization import DegenerateGeometryError, SlabMapping, make_cell_mapping
from spatial_discretization import unit_integrals


@pytest.fixture
def slab(unit_slab, provider):
    return make_cell_mapping(unit_slab, unit_slab.local_cells[0], provider)


class TestSlabClosedForms:
    """Length h = 2 slab."""

    def test_mapping_type(self, slab):
        assert isinstance(slab, SlabMapping)
        assert slab.dofs == 2
        assert slab.face_dof_mappings == [[0], [1]]

    def test_mass(self, slab):
        ui = slab.compute_unit_integrals()
        assert np.allclose(ui.mass, [[2.0 / 3.0, 1.0 / 3.0], [1.0 / 3.0, 2.0 / 3.0]], atol=1e-9)

    def test_stiffness(self, slab):
        ui = slab.compute_unit_integrals()
        assert np.allclose(ui.stiffness, [[0.5, -0.5], [-0.5, 0.5]], atol=1e-9)

    def test_shape_integral(self, slab):
        ui = slab.compute_unit_integrals()
        assert np.allclose(ui.shape_integral, [1.0, 1.0], atol=1e-9)

    def test_point_face_blocks(self, slab):
        ui = slab.compute_unit_integrals()
        assert np.allclose(ui.face_mass[0], [[1.0, 0.0], [0.0, 0.0]])
        assert np.allclose(ui.face_mass[1], [[0.0, 0.0], [0.0, 1.0]])
        assert np.allclose(ui.face_shape_integral[1], [0.0, 1.0])
        assert np.allclose(ui.face_mixed[0][1], 0.0)

    def test_closed_form_matches_quadrature(self, slab):
        closed = slab.compute_unit_integrals()
        numeric = unit_integrals.compute_unit_integrals(
            slab, slab.quadratures.volume_arbitrary, slab.quadratures.face_second
        )
        for a, b in zip(closed.arrays(), numeric.arrays()):
            assert np.allclose(a, b, atol=1e-12)

    def test_unit_integrals_read_only(self, slab):
        ui = slab.compute_unit_integrals()
        with pytest.raises(ValueError):
            ui.mass[0, 0] = 1.0


class TestSlabPointEvaluation:
    def test_midpoint_values(self, slab):
        assert np.allclose(slab.shape_values([0.0, 0.0, 1.0]), [0.5, 0.5])

    def test_vertex_values(self, slab):
        assert slab.shape_value(0, [0.0, 0.0, 0.0]) == pytest.approx(1.0)
        assert slab.shape_value(1, [0.0, 0.0, 0.0]) == pytest.approx(0.0)

    def test_outside_returns_zero(self, slab):
        assert slab.shape_value(0, [0.0, 0.0, 3.0]) == 0.0
        assert np.all(slab.shape_values([0.0, 0.0, -0.5]) == 0.0)

    def test_gradients_along_axis(self, slab):
        assert np.allclose(slab.grad_shape_value(0, [0.0, 0.0, 0.5]), [0.0, 0.0, -0.5])
        assert np.allclose(slab.grad_shape_value(1, [0.0, 0.0, 0.5]), [0.0, 0.0, 0.5])

    def test_measure_and_centroid(self, slab):
        assert slab.measure == pytest.approx(2.0)
        assert np.allclose(slab.centroid, [0.0, 0.0, 1.0])


class TestSlabQuadratureData:
    def test_face_normals_point_outward(self, slab):
        qp = slab.initialize_quadrature_data()
        assert np.allclose(qp.faces[0].normals, [[0.0, 0.0, -1.0]])
        assert np.allclose(qp.faces[1].normals, [[0.0, 0.0, 1.0]])

    def test_face_points_at_vertices(self, slab):
        qp = slab.initialize_quadrature_data()
        assert np.allclose(qp.faces[1].qpoints_xyz, [[0.0, 0.0, 2.0]])
        assert np.allclose(qp.faces[1].JxW, [1.0])

    def test_volume_weights_sum_to_length(self, slab):
        qp = slab.initialize_quadrature_data()
        assert qp.volume.JxW.sum() == pytest.approx(2.0)


def test_zero_length_slab_rejected(provider):
    cell = Cell(CellType.SLAB, [0, 1], [CellFace([0]), CellFace([1])])
    grid = Grid([[0.0, 0.0, 1.0], [0.0, 0.0, 1.0]], [cell])
    with pytest.raises(DegenerateGeometryError):
        make_cell_mapping(grid, cell, provider)
