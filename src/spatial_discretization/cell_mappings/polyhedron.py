"""Piecewise linear mapping for general polyhedra."""

import numpy as np

from .base import MappingQuadratures
from .piecewise_linear import PiecewiseLinearMapping, SubSimplex


class PolyhedronMapping(PiecewiseLinearMapping):
    """PWL basis on a polyhedron with arbitrary planar or non-planar faces.

    Every face is fanned from its vertex centroid f_c, and every resulting
    triangle is joined to the cell centroid c. The sub-tetrahedron of face
    edge (v_a, v_b) has corners (v_a, v_b, f_c, c); its facet opposite c lies
    on the cell boundary.
    """

    dim = 3

    def __init__(self, grid, cell, quadratures: MappingQuadratures):
        super().__init__(grid, cell, quadratures)

        alpha = 1.0 / self.dofs
        for f, face_dofs in enumerate(self.face_dof_mappings):
            n_face = len(face_dofs)
            face_centroid = self.vertex_xyz[face_dofs].mean(axis=0)
            beta = 1.0 / n_face

            for e in range(n_face):
                a = face_dofs[e]
                b = face_dofs[(e + 1) % n_face]

                coefficients = np.zeros((self.dofs, 4))
                coefficients[a, 0] = 1.0
                coefficients[b, 1] = 1.0
                coefficients[face_dofs, 2] += beta
                coefficients[:, 3] = alpha

                corners = [self.vertex_xyz[a], self.vertex_xyz[b], face_centroid, self.centroid]
                self._add_sub_simplex(corners, coefficients, face_index=f)

    def _face_jacobian_and_normal(self, sub: SubSimplex):
        # Reference facet is the unit triangle: |e0 x e1| is twice its physical area
        cross = np.cross(sub.J[:, 0], sub.J[:, 1])
        area2 = float(np.linalg.norm(cross))
        normal = cross / area2
        facet_centroid = sub.origin + (sub.J[:, 0] + sub.J[:, 1]) / 3.0
        return area2, self._outward(normal, facet_centroid)
