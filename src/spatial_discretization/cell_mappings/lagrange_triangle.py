"""Lagrange triangles of order 1 (3 nodes) and 2 (6 nodes)."""

import numpy as np

from .lagrange import LagrangeMapping


class LagrangeTriangleMapping(LagrangeMapping):
    """Isoparametric triangle on the reference cell (0,0), (1,0), (0,1).

    Node order: corners 0, 1, 2, then midpoints of edges (0,1), (1,2), (2,0).
    Faces are edges; a face-local point s in [0, 1] runs from the face's first
    corner to its second.
    """

    dim = 2
    EDGES = ((0, 1), (1, 2), (2, 0))
    BARYCENTRIC_GRADS = np.array([[-1.0, -1.0], [1.0, 0.0], [0.0, 1.0]])
    NODES_PER_ORDER = {1: 3, 2: 6}

    def face_to_element_qpoint(self, face_index: int, face_ref) -> np.ndarray:
        R = self._face_reference_corners(face_index)
        s = float(np.asarray(face_ref, dtype=float).ravel()[0])
        return R[0] + s * (R[1] - R[0])

    def ref_face_jacobian_determinant_and_normal(self, face_index: int, face_ref):
        R = self._face_reference_corners(face_index)
        ref = self.face_to_element_qpoint(face_index, face_ref)
        tangent = self.ref_jacobian(ref) @ (R[1] - R[0])
        length = float(np.linalg.norm(tangent))
        if length == 0.0:
            return 0.0, np.zeros(3)
        normal = np.array([tangent[1], -tangent[0], 0.0]) / length
        return length, self._outward(normal, self.to_physical(ref))
