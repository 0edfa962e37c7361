"""Piecewise linear mapping for 1-D slab cells."""

import logging

import numpy as np

from quadrature import QuadratureRule
from .base import CellMapping, INSIDE_TOLERANCE, MappingQuadratures
from ..datastructures import (
    FaceQuadraturePointData,
    UnitIntegralData,
    VolumeQuadraturePointData,
)
from ..exceptions import DegenerateGeometryError

log = logging.getLogger(__name__)


class SlabMapping(CellMapping):
    """Two linear hat functions on a segment of length h.

    phi_0 = 1 - xi, phi_1 = xi with xi = (x - v0) . e / h, where e is the unit
    vector along the slab axis. Gradients are constant: grad phi_0 = -e/h,
    grad phi_1 = e/h. Each end vertex is its own face.
    """

    def __init__(self, grid, cell, quadratures: MappingQuadratures):
        super().__init__(grid, cell, num_dofs=2, quadratures=quadratures)

        self.v0 = self.vertex_xyz[0]
        self.v1 = self.vertex_xyz[1]
        v01 = self.v1 - self.v0
        self.h = float(np.linalg.norm(v01))
        if not self.h > 0.0:
            log.error(f"SlabMapping: zero-length slab in cell {cell.local_id}")
            raise DegenerateGeometryError(
                f"SlabMapping: zero-length slab in cell {cell.local_id}"
            )
        self.axis = v01 / self.h
        self._grads = np.array([-self.axis / self.h, self.axis / self.h])

    @property
    def measure(self) -> float:
        return self.h

    def _xi(self, xyz) -> float:
        return float(np.dot(self.axis, np.asarray(xyz, dtype=float) - self.v0)) / self.h

    def shape_values(self, xyz) -> np.ndarray:
        xi = self._xi(xyz)
        if -INSIDE_TOLERANCE <= xi <= 1.0 + INSIDE_TOLERANCE:
            return np.array([1.0 - xi, xi])
        return np.zeros(2)

    def grad_shape_values(self, xyz) -> np.ndarray:
        return self._grads.copy()

    def compute_unit_integrals(self) -> UnitIntegralData:
        """Closed-form integrals of the linear hat functions."""
        h = self.h
        ui = UnitIntegralData.allocate(n_dofs=2, n_faces=2)

        ui.mass[:] = [[h / 3.0, h / 6.0], [h / 6.0, h / 3.0]]
        ui.stiffness[:] = [[1.0 / h, -1.0 / h], [-1.0 / h, 1.0 / h]]
        ui.shape_integral[:] = [h / 2.0, h / 2.0]
        # int phi_i grad phi_j = (h/2) grad phi_j
        ui.mixed[:] = 0.5 * h * self._grads[None, :, :]

        # Point faces: phi_i(v_f) = delta_if
        for f in range(2):
            ui.face_mass[f][f, f] = 1.0
            ui.face_shape_integral[f][f] = 1.0
            ui.face_mixed[f][f, :, :] = self._grads

        ui.face_dof_mappings = [list(m) for m in self.face_dof_mappings]
        return ui.freeze()

    def volume_quadrature_data(self, rule: QuadratureRule) -> VolumeQuadraturePointData:
        xi = rule.points[:, 0]
        n_qp = len(rule)
        return VolumeQuadraturePointData(
            qpoints_ref=rule.points.copy(),
            qpoints_xyz=self.v0[None, :] + np.outer(xi, self.v1 - self.v0),
            JxW=rule.weights * self.h,
            shape_values=np.array([1.0 - xi, xi]),
            shape_grad=np.repeat(self._grads[:, None, :], n_qp, axis=1),
        )

    def face_quadrature_data(self, face_index: int, rule: QuadratureRule) -> FaceQuadraturePointData:
        n_qp = len(rule)
        dof = self.face_dof_mappings[face_index][0]
        vertex = self.vertex_xyz[dof]
        values = np.zeros((2, n_qp))
        values[dof, :] = 1.0
        normal = self.axis if dof == 1 else -self.axis
        return FaceQuadraturePointData(
            qpoints_ref=rule.points.copy(),
            qpoints_xyz=np.repeat(vertex[None, :], n_qp, axis=0),
            JxW=rule.weights.copy(),
            shape_values=values,
            shape_grad=np.repeat(self._grads[:, None, :], n_qp, axis=1),
            normals=np.repeat(normal[None, :], n_qp, axis=0),
        )
