"""Lagrange tetrahedra of order 1 (4 nodes) and 2 (10 nodes)."""

import numpy as np

from .lagrange import LagrangeMapping


class LagrangeTetrahedronMapping(LagrangeMapping):
    """Isoparametric tetrahedron on the unit corner reference tetrahedron.

    Node order: corners 0-3, then midpoints of edges (0,1), (1,2), (2,0),
    (0,3), (1,3), (2,3). A face-local point (s, t) on the reference triangle
    maps to c0 + s (c1 - c0) + t (c2 - c0) with c the face's first three
    (corner) nodes.
    """

    dim = 3
    EDGES = ((0, 1), (1, 2), (2, 0), (0, 3), (1, 3), (2, 3))
    BARYCENTRIC_GRADS = np.vstack([-np.ones(3), np.eye(3)])
    NODES_PER_ORDER = {1: 4, 2: 10}

    def face_to_element_qpoint(self, face_index: int, face_ref) -> np.ndarray:
        R = self._face_reference_corners(face_index)
        s, t = np.asarray(face_ref, dtype=float).ravel()[:2]
        return R[0] + s * (R[1] - R[0]) + t * (R[2] - R[0])

    def ref_face_jacobian_determinant_and_normal(self, face_index: int, face_ref):
        R = self._face_reference_corners(face_index)
        ref = self.face_to_element_qpoint(face_index, face_ref)
        J = self.ref_jacobian(ref)
        cross = np.cross(J @ (R[1] - R[0]), J @ (R[2] - R[0]))
        area2 = float(np.linalg.norm(cross))
        if area2 == 0.0:
            return 0.0, np.zeros(3)
        return area2, self._outward(cross / area2, self.to_physical(ref))
