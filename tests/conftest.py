"""Pytest configuration and fixtures for spatial discretization tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from meshing import (  # noqa: E402
    create_polygon_mesh_2d,
    create_polyhedron_mesh_3d,
    create_slab_mesh_1d,
    create_tetrahedron_mesh_3d,
    create_triangle_mesh_2d,
)
from quadrature import QuadratureProvider  # noqa: E402


class FakeCommunicator:
    """Counts barrier calls instead of synchronizing."""

    def __init__(self):
        self.barriers = 0

    def barrier(self):
        self.barriers += 1


# Builders for every supported cell type, with the measure of the whole domain
GRID_BUILDERS = {
    "slab": (lambda: create_slab_mesh_1d(n_cells=4, length=2.0), 2.0),
    "polygon": (lambda: create_polygon_mesh_2d(nx=3, ny=2, Lx=1.5, Ly=1.0), 1.5),
    "polygon_tri": (lambda: create_triangle_mesh_2d(nx=2, ny=2, cell_type="polygon"), 1.0),
    "triangle_p1": (lambda: create_triangle_mesh_2d(nx=2, ny=2), 1.0),
    "triangle_p2": (lambda: create_triangle_mesh_2d(nx=2, ny=2, Lx=2.0, order=2), 2.0),
    "polyhedron": (lambda: create_polyhedron_mesh_3d(nx=2, ny=1, nz=1, Lx=2.0), 2.0),
    "polyhedron_tet": (lambda: create_tetrahedron_mesh_3d(nx=1, ny=1, nz=1, cell_type="polyhedron"), 1.0),
    "tetrahedron_p1": (lambda: create_tetrahedron_mesh_3d(nx=1, ny=1, nz=1), 1.0),
    "tetrahedron_p2": (lambda: create_tetrahedron_mesh_3d(nx=1, ny=1, nz=1, order=2), 1.0),
}


@pytest.fixture
def communicator():
    """Barrier-counting stand-in for the PETSc communicator."""
    return FakeCommunicator()


@pytest.fixture
def provider():
    """Quadrature provider with default orders (second=2, arbitrary=4)."""
    return QuadratureProvider()


@pytest.fixture(params=sorted(GRID_BUILDERS))
def any_grid(request):
    """(grid, domain measure) for every supported cell type."""
    build, domain_measure = GRID_BUILDERS[request.param]
    return build(), domain_measure


@pytest.fixture
def unit_slab():
    """A single slab of length 2 along z."""
    return create_slab_mesh_1d(n_cells=1, length=2.0)


@pytest.fixture
def unit_square():
    """A single 4-vertex polygon covering [0, 1]^2."""
    return create_polygon_mesh_2d(nx=1, ny=1)


@pytest.fixture
def unit_cube():
    """A single 8-vertex polyhedron covering [0, 1]^3."""
    return create_polyhedron_mesh_3d(nx=1, ny=1, nz=1)
