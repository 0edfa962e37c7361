"""Abstract base class for per-cell finite element mappings."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

import numpy as np

from quadrature import QuadratureRule
from ..datastructures import (
    FaceQuadraturePointData,
    QuadraturePointData,
    UnitIntegralData,
    VolumeQuadraturePointData,
)
from ..exceptions import DegenerateGeometryError
from .. import unit_integrals

log = logging.getLogger(__name__)

# Reference-domain tolerance for "point inside cell" tests
INSIDE_TOLERANCE = 1.0e-12
# Relative tolerance below which a Jacobian determinant counts as zero
DEGENERATE_TOLERANCE = 1.0e-12


@dataclass(frozen=True)
class MappingQuadratures:
    """Volume and face rules handed to a mapping for both order configurations."""

    volume_second: QuadratureRule
    face_second: QuadratureRule
    volume_arbitrary: QuadratureRule
    face_arbitrary: QuadratureRule


class CellMapping(ABC):
    """Basis functions and geometry of one mesh cell.

    Holds a non-owning reference to the grid; the grid must outlive the mapping.
    A mapping is immutable after construction.

    Subclasses must:
    - Implement shape_values() and grad_shape_values()
    - Implement volume_quadrature_data() and face_quadrature_data()
    - Implement the measure property

    Parameters
    ----------
    grid : Grid
        Mesh providing node coordinates.
    cell : Cell
        The cell being mapped.
    num_dofs : int
        Number of basis functions.
    quadratures : MappingQuadratures
        Second-order and arbitrary-order reference rules.
    """

    def __init__(self, grid, cell, num_dofs: int, quadratures: MappingQuadratures):
        self.grid = grid
        self.cell = cell
        self.dofs = num_dofs
        self.quadratures = quadratures

        self.vertex_ids = list(cell.vertex_ids)
        self.vertex_xyz = grid.nodes[self.vertex_ids]
        self.centroid = self.vertex_xyz.mean(axis=0)

        # face index -> ordered cell-local dof indices on that face
        self.face_dof_mappings: List[List[int]] = [
            [self.vertex_ids.index(v) for v in face.vertex_ids] for face in cell.faces
        ]

    # =========================================================================
    # Geometry
    # =========================================================================

    @property
    def num_faces(self) -> int:
        return len(self.cell.faces)

    @property
    def num_nodes(self) -> int:
        return self.dofs

    @property
    def node_locations(self) -> np.ndarray:
        """Physical location of each dof's node, shape (dofs, 3)."""
        return self.vertex_xyz.copy()

    @property
    @abstractmethod
    def measure(self) -> float:
        """Length, area or volume of the cell."""
        pass

    # =========================================================================
    # Basis evaluation
    # =========================================================================

    @abstractmethod
    def shape_values(self, xyz) -> np.ndarray:
        """Value of every basis function at ``xyz``; zeros outside the cell."""
        pass

    @abstractmethod
    def grad_shape_values(self, xyz) -> np.ndarray:
        """Physical gradient of every basis function at ``xyz``, shape (dofs, 3)."""
        pass

    def shape_value(self, i: int, xyz) -> float:
        """Value of basis function ``i`` at ``xyz``; 0 outside the cell."""
        return float(self.shape_values(xyz)[i])

    def grad_shape_value(self, i: int, xyz) -> np.ndarray:
        """Physical gradient of basis function ``i`` at ``xyz``."""
        return self.grad_shape_values(xyz)[i]

    # =========================================================================
    # Quadrature-point data
    # =========================================================================

    @abstractmethod
    def volume_quadrature_data(self, rule: QuadratureRule) -> VolumeQuadraturePointData:
        """Evaluate the basis at every node of a reference volume rule."""
        pass

    @abstractmethod
    def face_quadrature_data(
        self, face_index: int, rule: QuadratureRule
    ) -> FaceQuadraturePointData:
        """Evaluate the basis at every node of a reference face rule on face ``face_index``."""
        pass

    def compute_unit_integrals(self) -> UnitIntegralData:
        """Integral tensors using the second-order rules."""
        return unit_integrals.compute_unit_integrals(
            self, self.quadratures.volume_second, self.quadratures.face_second
        )

    def initialize_quadrature_data(self) -> QuadraturePointData:
        """Quadrature-point data using the arbitrary-order rules."""
        return unit_integrals.initialize_quadrature_data(
            self, self.quadratures.volume_arbitrary, self.quadratures.face_arbitrary
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _outward(self, normal: np.ndarray, point_on_face: np.ndarray) -> np.ndarray:
        """Flip ``normal`` so that it points away from the cell centroid."""
        if np.dot(normal, point_on_face - self.centroid) < 0.0:
            return -normal
        return normal

    def _check_determinant(self, det: float, scale: float, dim: int, what: str):
        if not np.isfinite(det) or abs(det) <= DEGENERATE_TOLERANCE * scale**dim:
            log.error(f"{type(self).__name__}: {what} det={det:.3e} in cell {self.cell.local_id}")
            raise DegenerateGeometryError(
                f"{type(self).__name__}: degenerate {what} in cell "
                f"{self.cell.local_id} (det={det:.3e})"
            )

    def __repr__(self):
        return (
            f"{type(self).__name__}(cell={self.cell.local_id}, dofs={self.dofs}, "
            f"faces={self.num_faces})"
        )
