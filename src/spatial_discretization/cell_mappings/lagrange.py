r"""Isoparametric Lagrange mappings on reference simplices.

A Lagrange cell of order p maps the reference simplex onto the physical cell
with its own basis:

.. math::

    x(r) = \sum_i N_i(r) x_i, \qquad J(r) = \frac{\partial x}{\partial r}

and physical gradients follow from the inverse-transpose Jacobian,
:math:`\nabla \phi_i = J^{-T} \hat\nabla N_i`. Concrete shapes only supply
reference-space primitives (basis, reference gradient, face-to-element point
conversion, face Jacobian and normal); everything else lives in
:class:`LagrangeMapping`.

Orders 1 and 2 are supported, written in barycentric coordinates L_k:

- corner node k: ``L_k`` (p=1) or ``L_k (2 L_k - 1)`` (p=2)
- edge node (a, b): ``4 L_a L_b`` (p=2)
"""

import logging
from abc import abstractmethod

import numpy as np

from quadrature import QuadratureRule
from .base import CellMapping, INSIDE_TOLERANCE, MappingQuadratures
from ..datastructures import FaceQuadraturePointData, VolumeQuadraturePointData
from ..exceptions import DegenerateGeometryError, UnsupportedTopologyError

log = logging.getLogger(__name__)

NEWTON_MAX_ITERATIONS = 25
NEWTON_TOLERANCE = 1.0e-13


def barycentric_shapes(L: np.ndarray, dL: np.ndarray, edges, order: int):
    """P1/P2 basis values and reference gradients from barycentric coordinates.

    Parameters
    ----------
    L : np.ndarray
        Barycentric coordinates at one reference point, shape (dim+1,).
    dL : np.ndarray
        Constant reference gradients of L, shape (dim+1, dim).
    edges : sequence of (int, int)
        Corner pairs of the edge nodes, in node order.
    order : int
        1 or 2.

    Returns
    -------
    values : np.ndarray
        Shape (dofs,).
    grads : np.ndarray
        Shape (dofs, dim).
    """
    if order == 1:
        return L.copy(), dL.copy()

    corner_values = L * (2.0 * L - 1.0)
    corner_grads = (4.0 * L - 1.0)[:, None] * dL
    edge_values = np.array([4.0 * L[a] * L[b] for a, b in edges])
    edge_grads = np.array([4.0 * (L[b] * dL[a] + L[a] * dL[b]) for a, b in edges])
    return (
        np.concatenate([corner_values, edge_values]),
        np.vstack([corner_grads, edge_grads]),
    )


class LagrangeMapping(CellMapping):
    """Shared isoparametric machinery for Lagrange triangles and tetrahedra.

    Subclasses must:
    - Set dim, EDGES, BARYCENTRIC_GRADS and NODES_PER_ORDER
    - Implement face_to_element_qpoint()
    - Implement ref_face_jacobian_determinant_and_normal()
    """

    dim = None
    EDGES = ()
    BARYCENTRIC_GRADS = None
    NODES_PER_ORDER = {}

    def __init__(self, grid, cell, quadratures: MappingQuadratures):
        n_nodes = len(cell.vertex_ids)
        order_by_count = {n: p for p, n in self.NODES_PER_ORDER.items()}
        if n_nodes not in order_by_count:
            log.error(
                f"{type(self).__name__}: no Lagrange basis with {n_nodes} nodes "
                f"(cell {cell.local_id})"
            )
            raise UnsupportedTopologyError(cell.cell_type, operation=type(self).__name__)

        super().__init__(grid, cell, num_dofs=n_nodes, quadratures=quadratures)
        self.order = order_by_count[n_nodes]
        self._x = self.vertex_xyz[:, : self.dim]

        corners = self._x[: self.dim + 1]
        self._scale = float(np.linalg.norm(corners[1:] - corners[0], axis=1).max())
        self._measure = self._integrate_measure(quadratures.volume_second)

    # =========================================================================
    # Reference-space primitives
    # =========================================================================

    def barycentric(self, ref) -> np.ndarray:
        r = np.asarray(ref, dtype=float)[: self.dim]
        return np.concatenate([[1.0 - r.sum()], r])

    def ref_shape_values(self, ref) -> np.ndarray:
        values, _ = barycentric_shapes(
            self.barycentric(ref), self.BARYCENTRIC_GRADS, self.EDGES, self.order
        )
        return values

    def ref_grad_shape_values(self, ref) -> np.ndarray:
        """Reference-space gradients of every basis function, shape (dofs, dim)."""
        _, grads = barycentric_shapes(
            self.barycentric(ref), self.BARYCENTRIC_GRADS, self.EDGES, self.order
        )
        return grads

    def ref_shape(self, i: int, ref) -> float:
        return float(self.ref_shape_values(ref)[i])

    def ref_grad_shape(self, i: int, ref) -> np.ndarray:
        return self.ref_grad_shape_values(ref)[i]

    def ref_jacobian(self, ref) -> np.ndarray:
        """J[a, b] = dx_a / dr_b at reference point ``ref``, shape (dim, dim)."""
        return self._x.T @ self.ref_grad_shape_values(ref)

    @abstractmethod
    def face_to_element_qpoint(self, face_index: int, face_ref) -> np.ndarray:
        """Map a face-local reference point into the cell's reference domain."""
        pass

    @abstractmethod
    def ref_face_jacobian_determinant_and_normal(self, face_index: int, face_ref):
        """Face-measure scaling and outward unit normal (3-vector) at a face point."""
        pass

    def _face_reference_corners(self, face_index: int) -> np.ndarray:
        """Reference coordinates of the face's corner nodes, shape (dim, dim)."""
        ref_corners = np.vstack([np.zeros(self.dim), np.eye(self.dim)])
        return ref_corners[self.face_dof_mappings[face_index][: self.dim]]

    # =========================================================================
    # Reference <-> physical
    # =========================================================================

    def to_physical(self, ref) -> np.ndarray:
        xyz = np.zeros(3)
        xyz[: self.dim] = self.ref_shape_values(ref) @ self._x
        return xyz

    def to_reference(self, xyz) -> np.ndarray:
        """Invert the isoparametric map with Newton's method."""
        target = np.asarray(xyz, dtype=float)[: self.dim]
        ref = np.full(self.dim, 1.0 / (self.dim + 1))
        for _ in range(NEWTON_MAX_ITERATIONS):
            residual = self.ref_shape_values(ref) @ self._x - target
            if np.linalg.norm(residual) <= NEWTON_TOLERANCE * self._scale:
                break
            ref = ref - np.linalg.solve(self.ref_jacobian(ref), residual)
        return ref

    def _off_plane(self, xyz) -> bool:
        """True if ``xyz`` leaves the plane of a 2-D cell."""
        xyz = np.asarray(xyz, dtype=float)
        offset = xyz[self.dim :] - self.vertex_xyz[0, self.dim : len(xyz)]
        return bool(np.any(np.abs(offset) > INSIDE_TOLERANCE * self._scale))

    def _inside(self, ref) -> bool:
        return bool(np.all(self.barycentric(ref) >= -INSIDE_TOLERANCE))

    def _physical_gradients(self, ref):
        """Physical gradients (dofs, 3) and Jacobian determinant at ``ref``."""
        J = self.ref_jacobian(ref)
        grads = np.zeros((self.dofs, 3))
        grads[:, : self.dim] = np.linalg.solve(J.T, self.ref_grad_shape_values(ref).T).T
        return grads, float(np.linalg.det(J))

    # =========================================================================
    # CellMapping interface
    # =========================================================================

    @property
    def measure(self) -> float:
        return self._measure

    def _integrate_measure(self, rule: QuadratureRule) -> float:
        total = 0.0
        for ref, w in zip(rule.points, rule.weights):
            det = float(np.linalg.det(self.ref_jacobian(ref)))
            self._check_determinant(det, self._scale, self.dim, "reference Jacobian")
            total += w * abs(det)
        return total

    def shape_values(self, xyz) -> np.ndarray:
        if self._off_plane(xyz):
            return np.zeros(self.dofs)
        ref = self.to_reference(xyz)
        if not self._inside(ref):
            return np.zeros(self.dofs)
        return self.ref_shape_values(ref)

    def grad_shape_values(self, xyz) -> np.ndarray:
        if self._off_plane(xyz):
            return np.zeros((self.dofs, 3))
        ref = self.to_reference(xyz)
        if not self._inside(ref):
            return np.zeros((self.dofs, 3))
        grads, _ = self._physical_gradients(ref)
        return grads

    def volume_quadrature_data(self, rule: QuadratureRule) -> VolumeQuadraturePointData:
        n_qp = len(rule)
        xyz = np.zeros((n_qp, 3))
        JxW = np.zeros(n_qp)
        values = np.zeros((self.dofs, n_qp))
        grads = np.zeros((self.dofs, n_qp, 3))

        for q, ref in enumerate(rule.points):
            grads[:, q, :], det = self._physical_gradients(ref)
            values[:, q] = self.ref_shape_values(ref)
            xyz[q] = self.to_physical(ref)
            JxW[q] = rule.weights[q] * abs(det)

        return VolumeQuadraturePointData(
            qpoints_ref=rule.points.copy(),
            qpoints_xyz=xyz,
            JxW=JxW,
            shape_values=values,
            shape_grad=grads,
        )

    def face_quadrature_data(self, face_index: int, rule: QuadratureRule) -> FaceQuadraturePointData:
        n_qp = len(rule)
        ref_points = np.zeros((n_qp, 3))
        xyz = np.zeros((n_qp, 3))
        JxW = np.zeros(n_qp)
        values = np.zeros((self.dofs, n_qp))
        grads = np.zeros((self.dofs, n_qp, 3))
        normals = np.zeros((n_qp, 3))

        for q, face_ref in enumerate(rule.points):
            ref = self.face_to_element_qpoint(face_index, face_ref)
            det, normals[q] = self.ref_face_jacobian_determinant_and_normal(face_index, face_ref)
            ref_points[q, : self.dim] = ref
            xyz[q] = self.to_physical(ref)
            values[:, q] = self.ref_shape_values(ref)
            grads[:, q, :], _ = self._physical_gradients(ref)
            JxW[q] = rule.weights[q] * det

        if not np.all(JxW > 0.0):
            log.error(f"{type(self).__name__}: degenerate face {face_index} in cell {self.cell.local_id}")
            raise DegenerateGeometryError(
                f"{type(self).__name__}: zero face Jacobian on face {face_index} "
                f"of cell {self.cell.local_id}"
            )

        return FaceQuadraturePointData(
            qpoints_ref=ref_points,
            qpoints_xyz=xyz,
            JxW=JxW,
            shape_values=values,
            shape_grad=grads,
            normals=normals,
        )
