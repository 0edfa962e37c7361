"""Tests for the unit-integral and quadrature-data driver."""

import numpy as np
import pytest

from spatial_discretization import (
    DegenerateGeometryError,
    QuadraturePointData,
    UnitIntegralData,
    VolumeQuadraturePointData,
    make_cell_mapping,
)
from spatial_discretization import unit_integrals


def two_point_data():
    """Two dofs sampled at two nodes with hand-picked values."""
    return VolumeQuadraturePointData(
        qpoints_ref=np.zeros((2, 3)),
        qpoints_xyz=np.zeros((2, 3)),
        JxW=np.array([0.5, 1.5]),
        shape_values=np.array([[1.0, 0.0], [0.0, 1.0]]),
        shape_grad=np.array([[[1.0, 0, 0], [1.0, 0, 0]], [[-1.0, 0, 0], [0.0, 2.0, 0]]]),
    )


class TestIntegrateVolume:
    def test_mass_and_shape_integral(self):
        mass, _, _, shape_integral = unit_integrals.integrate_volume(two_point_data())
        assert np.allclose(mass, [[0.5, 0.0], [0.0, 1.5]])
        assert np.allclose(shape_integral, [0.5, 1.5])

    def test_stiffness(self):
        _, stiffness, _, _ = unit_integrals.integrate_volume(two_point_data())
        # node 0: g0=(1,0), g1=(-1,0); node 1: g0=(1,0), g1=(0,2)
        assert np.allclose(stiffness, [[2.0, -0.5], [-0.5, 6.5]])

    def test_mixed(self):
        _, _, mixed, _ = unit_integrals.integrate_volume(two_point_data())
        assert np.allclose(mixed[0, 1], [-0.5, 0.0, 0.0])
        assert np.allclose(mixed[1, 1], [0.0, 3.0, 0.0])


class TestUnitIntegralsFromQuadratureData:
    def test_result_is_frozen(self):
        qp = QuadraturePointData(volume=two_point_data())
        data = unit_integrals.unit_integrals_from_quadrature_data(qp, [])
        assert data.num_dofs == 2
        assert data.num_faces == 0
        with pytest.raises(ValueError):
            data.stiffness[0, 0] = 0.0

    def test_non_finite_values_raise(self, caplog):
        volume = two_point_data()
        volume.JxW[1] = np.nan
        qp = QuadraturePointData(volume=volume)
        with pytest.raises(DegenerateGeometryError):
            unit_integrals.unit_integrals_from_quadrature_data(qp, [])
        assert "non-finite" in caplog.text


class TestDriverOnMappings:
    def test_quadrature_data_matches_unit_integrals(self, unit_square, provider):
        mapping = make_cell_mapping(unit_square, unit_square.local_cells[0], provider)
        qp = mapping.initialize_quadrature_data()
        from_qp = unit_integrals.unit_integrals_from_quadrature_data(qp, mapping.face_dof_mappings)
        direct = mapping.compute_unit_integrals()
        for a, b in zip(from_qp.arrays(), direct.arrays()):
            assert np.allclose(a, b, atol=1e-12)

    def test_iteration_yields_points_and_weights(self, unit_square, provider):
        mapping = make_cell_mapping(unit_square, unit_square.local_cells[0], provider)
        volume = mapping.initialize_quadrature_data().volume
        total = sum(w for _, _, w in volume)
        assert total == pytest.approx(1.0)
        assert list(volume.quadrature_point_indices) == list(range(len(volume)))

    def test_face_count_and_dof_mappings(self, unit_cube, provider):
        mapping = make_cell_mapping(unit_cube, unit_cube.local_cells[0], provider)
        data = mapping.compute_unit_integrals()
        assert isinstance(data, UnitIntegralData)
        assert data.num_faces == 6
        assert data.face_dof_mappings == mapping.face_dof_mappings
