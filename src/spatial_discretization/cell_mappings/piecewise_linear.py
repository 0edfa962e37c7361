"""Piecewise linear (PWL) basis on polygons and polyhedra via sub-simplex decomposition.

A PWL cell is split into sub-simplices that all share the cell centroid:

- Polygon: one triangle (v_a, v_b, c) per boundary edge (v_a, v_b).
- Polyhedron: one tetrahedron (v_a, v_b, f_c, c) per edge (v_a, v_b) of every
  face, with f_c the face centroid.

On each sub-simplex the cell basis function of vertex i is a combination of
the sub-simplex's linear barycentric functions:

    phi_i = delta_ia N_a + delta_ib N_b + beta_i N_fc + alpha N_c

with alpha = 1 / n_vertices and beta_i = 1 / n_face_vertices if i lies on
the face (polyhedra only). This combination is stored as a (dofs, dim+1)
coefficient matrix per sub-simplex, so values and gradients are matrix
products of that matrix with the local barycentric data.

References
----------
Stone & Adams (2003), "A piecewise linear finite element basis with
application to particle transport"
Bailey, Adams & Yang (2008), "A piecewise linear finite element discretization
of the diffusion equation for arbitrary polyhedral grids"
"""

from abc import abstractmethod
from dataclasses import dataclass
from math import factorial
from typing import List

import numpy as np

from quadrature import QuadratureRule
from .base import CellMapping, INSIDE_TOLERANCE
from ..datastructures import FaceQuadraturePointData, VolumeQuadraturePointData


@dataclass
class SubSimplex:
    """One triangle (dim=2) or tetrahedron (dim=3) of a PWL decomposition.

    Reference coordinates r map as x = origin + J r (first ``dim`` components).
    """

    origin: np.ndarray  # (3,)
    J: np.ndarray  # (dim, dim), columns are edge vectors from origin
    Jinv: np.ndarray  # (dim, dim)
    detJ: float
    coefficients: np.ndarray  # (dofs, dim+1), cell basis in terms of barycentrics
    face_index: int = -1

    @property
    def dim(self) -> int:
        return self.J.shape[0]

    def barycentric(self, ref: np.ndarray) -> np.ndarray:
        """Local linear functions at reference points ``ref`` (nqp, >=dim) -> (dim+1, nqp)."""
        r = np.atleast_2d(ref)[:, : self.dim]
        return np.vstack([1.0 - r.sum(axis=1), r.T])

    def local_gradients(self) -> np.ndarray:
        """Physical gradients of the local linear functions, shape (dim+1, 3)."""
        ref_grads = np.vstack([-np.ones(self.dim), np.eye(self.dim)])
        grads = np.zeros((self.dim + 1, 3))
        grads[:, : self.dim] = ref_grads @ self.Jinv
        return grads

    def to_physical(self, ref: np.ndarray) -> np.ndarray:
        r = np.atleast_2d(ref)[:, : self.dim]
        xyz = np.repeat(self.origin[None, :], r.shape[0], axis=0)
        xyz[:, : self.dim] += r @ self.J.T
        return xyz

    def to_reference(self, xyz) -> np.ndarray:
        d = np.asarray(xyz, dtype=float)[: self.dim] - self.origin[: self.dim]
        return self.Jinv @ d

    def contains(self, xyz) -> bool:
        xyz = np.asarray(xyz, dtype=float)
        # Points off the plane of a 2-D sub-simplex are outside
        scale = np.linalg.norm(self.J, axis=0).max()
        if np.any(np.abs(xyz[self.dim :] - self.origin[self.dim :]) > INSIDE_TOLERANCE * scale):
            return False
        return bool(np.all(self.barycentric(self.to_reference(xyz)) >= -INSIDE_TOLERANCE))

    def cell_values(self, ref) -> np.ndarray:
        """Cell basis values at reference points, shape (dofs, nqp)."""
        return self.coefficients @ self.barycentric(ref)

    def cell_gradients(self) -> np.ndarray:
        """Cell basis gradients (constant on the sub-simplex), shape (dofs, 3)."""
        return self.coefficients @ self.local_gradients()


class PiecewiseLinearMapping(CellMapping):
    """Shared PWL machinery; subclasses build ``self.sub_simplices``.

    Subclasses must:
    - Set the dim class attribute (2 or 3)
    - Register sub-simplices face by face via _add_sub_simplex()
    - Implement _face_jacobian_and_normal()
    """

    dim = None

    def __init__(self, grid, cell, quadratures):
        super().__init__(grid, cell, num_dofs=len(cell.vertex_ids), quadratures=quadratures)
        self.sub_simplices: List[SubSimplex] = []
        self.face_sub_simplices: List[List[int]] = [[] for _ in cell.faces]

    def _add_sub_simplex(self, corners, coefficients, face_index: int):
        """Register the sub-simplex spanned by ``corners`` (dim+1 points)."""
        corners = np.asarray(corners, dtype=float)
        origin = corners[0]
        J = (corners[1:, : self.dim] - origin[: self.dim]).T
        detJ = float(np.linalg.det(J))
        scale = np.linalg.norm(J, axis=0).max()
        self._check_determinant(detJ, scale, self.dim, "sub-simplex Jacobian")

        self.sub_simplices.append(
            SubSimplex(
                origin=origin.copy(),
                J=J,
                Jinv=np.linalg.inv(J),
                detJ=detJ,
                coefficients=coefficients,
                face_index=face_index,
            )
        )
        self.face_sub_simplices[face_index].append(len(self.sub_simplices) - 1)

    @property
    def measure(self) -> float:
        return float(sum(abs(s.detJ) for s in self.sub_simplices)) / factorial(self.dim)

    def _locate(self, xyz):
        for sub in self.sub_simplices:
            if sub.contains(xyz):
                return sub
        return None

    def shape_values(self, xyz) -> np.ndarray:
        sub = self._locate(xyz)
        if sub is None:
            return np.zeros(self.dofs)
        return sub.cell_values(sub.to_reference(xyz))[:, 0]

    def grad_shape_values(self, xyz) -> np.ndarray:
        sub = self._locate(xyz)
        if sub is None:
            return np.zeros((self.dofs, 3))
        return sub.cell_gradients()

    def volume_quadrature_data(self, rule: QuadratureRule) -> VolumeQuadraturePointData:
        parts = [self._sub_simplex_data(sub, rule, abs(sub.detJ)) for sub in self.sub_simplices]
        return VolumeQuadraturePointData.concatenate(parts)

    def _sub_simplex_data(self, sub: SubSimplex, rule: QuadratureRule, jacobian, normal=None):
        """Quadrature data of one sub-simplex at the given reference points.

        ``jacobian`` scales the rule weights; ``normal`` switches to face data.
        """
        n_qp = len(rule)
        ref = rule.points.copy()
        grads = np.repeat(sub.cell_gradients()[:, None, :], n_qp, axis=1)
        kwargs = dict(
            qpoints_ref=ref,
            qpoints_xyz=sub.to_physical(ref),
            JxW=rule.weights * jacobian,
            shape_values=sub.cell_values(ref),
            shape_grad=grads,
        )
        if normal is None:
            return VolumeQuadraturePointData(**kwargs)
        return FaceQuadraturePointData(
            normals=np.repeat(normal[None, :], n_qp, axis=0), **kwargs
        )

    def face_quadrature_data(self, face_index: int, rule: QuadratureRule) -> FaceQuadraturePointData:
        parts = []
        for s in self.face_sub_simplices[face_index]:
            sub = self.sub_simplices[s]
            jacobian, normal = self._face_jacobian_and_normal(sub)
            parts.append(self._sub_simplex_data(sub, rule, jacobian, normal))
        return FaceQuadraturePointData.concatenate(parts)

    @abstractmethod
    def _face_jacobian_and_normal(self, sub: SubSimplex):
        """Measure scaling and outward unit normal of a sub-simplex's boundary facet.

        The boundary facet is the one opposite the cell centroid, spanned by the
        first ``dim`` corners.
        """
        pass
