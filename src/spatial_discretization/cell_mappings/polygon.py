"""Piecewise linear mapping for polygons in the xy-plane."""

import numpy as np

from .base import MappingQuadratures
from .piecewise_linear import PiecewiseLinearMapping, SubSimplex


class PolygonMapping(PiecewiseLinearMapping):
    """PWL basis on an n-gon, triangulated by fanning from the vertex centroid.

    Each face (edge) f = (v_a, v_b) owns the side triangle (v_a, v_b, c):
    reference coordinates (xi, eta) map as x = v_a + xi (v_b - v_a) + eta (c - v_a),
    so the edge itself is eta = 0.
    """

    dim = 2

    def __init__(self, grid, cell, quadratures: MappingQuadratures):
        super().__init__(grid, cell, quadratures)

        alpha = 1.0 / self.dofs
        for f, (a, b) in enumerate(self.face_dof_mappings):
            coefficients = np.zeros((self.dofs, 3))
            coefficients[a, 0] = 1.0
            coefficients[b, 1] = 1.0
            coefficients[:, 2] = alpha
            corners = [self.vertex_xyz[a], self.vertex_xyz[b], self.centroid]
            self._add_sub_simplex(corners, coefficients, face_index=f)

    def _face_jacobian_and_normal(self, sub: SubSimplex):
        tangent = np.zeros(3)
        tangent[:2] = sub.J[:, 0]
        length = float(np.linalg.norm(tangent))
        normal = np.array([tangent[1], -tangent[0], 0.0]) / length
        midpoint = sub.origin + 0.5 * tangent
        return length, self._outward(normal, midpoint)
