"""Basis properties that must hold on every supported cell type.

For each cell of each mesh:
- Partition of unity of the values and of the gradients
- Symmetric mass and stiffness, zero stiffness row sums
- Shape integrals summing to the cell measure
"""

import numpy as np
import pytest

from spatial_discretization import SetupFlags, SpatialDiscretization

ALL_FLAGS = SetupFlags.COMPUTE_UNIT_INTEGRALS | SetupFlags.INIT_QP_DATA


@pytest.fixture
def built(any_grid, communicator):
    grid, domain_measure = any_grid
    sd = SpatialDiscretization(grid, communicator=communicator).precompute(ALL_FLAGS)
    return sd, domain_measure


def test_partition_of_unity_at_quadrature_points(built):
    sd, _ = built
    for qp in sd.quadrature_data:
        assert np.allclose(qp.volume.shape_values.sum(axis=0), 1.0, atol=1e-9)
        for face in qp.faces:
            assert np.allclose(face.shape_values.sum(axis=0), 1.0, atol=1e-9)


def test_gradient_partition_of_unity(built):
    sd, _ = built
    for qp in sd.quadrature_data:
        assert np.allclose(qp.volume.shape_grad.sum(axis=0), 0.0, atol=1e-9)


def test_partition_of_unity_at_physical_points(built):
    sd, _ = built
    rng = np.random.default_rng(0)
    for mapping in sd.cell_mappings:
        # Convex combinations of the nodes lie inside the (convex) cell
        for _ in range(3):
            weights = rng.dirichlet(np.ones(mapping.num_nodes))
            xyz = weights @ mapping.node_locations
            assert sum(mapping.shape_value(i, xyz) for i in range(mapping.dofs)) == pytest.approx(1.0, abs=1e-9)
            grad = sum(mapping.grad_shape_value(i, xyz) for i in range(mapping.dofs))
            assert np.allclose(grad, 0.0, atol=1e-9)


def test_stiffness_row_sums_vanish(built):
    sd, _ = built
    for ui in sd.unit_integrals:
        assert np.allclose(ui.stiffness.sum(axis=1), 0.0, atol=1e-9)
        assert np.allclose(ui.stiffness, ui.stiffness.T, atol=1e-12)


def test_mass_symmetric(built):
    sd, _ = built
    for ui in sd.unit_integrals:
        assert np.allclose(ui.mass, ui.mass.T, atol=1e-14)


def test_shape_integral_equals_measure(built):
    sd, domain_measure = built
    total = 0.0
    for mapping, ui in zip(sd.cell_mappings, sd.unit_integrals):
        assert ui.shape_integral.sum() == pytest.approx(mapping.measure, rel=1e-6)
        total += mapping.measure
    assert total == pytest.approx(domain_measure, rel=1e-9)


def test_quadrature_weights_sum_to_measure(built):
    sd, _ = built
    for mapping, qp in zip(sd.cell_mappings, sd.quadrature_data):
        assert qp.volume.JxW.sum() == pytest.approx(mapping.measure, rel=1e-9)


def test_face_normals_are_unit(built):
    sd, _ = built
    for qp in sd.quadrature_data:
        for face in qp.faces:
            assert np.allclose(np.linalg.norm(face.normals, axis=1), 1.0)
