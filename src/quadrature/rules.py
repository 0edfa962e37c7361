"""Quadrature rules on the reference point, line, triangle and tetrahedron.

Reference domains:

- POINT: the origin, unit weight (face rule of a line).
- LINE: [0, 1] along the first coordinate.
- TRIANGLE: vertices (0,0), (1,0), (0,1); weights sum to 1/2.
- TETRAHEDRON: vertices (0,0,0), (1,0,0), (0,1,0), (0,0,1); weights sum to 1/6.

Points are always stored as (n, 3) arrays padded with zeros so that every rule
can be fed to the same cell-mapping code.

Two families are provided:

- Tabulated second-order rules (2-point Gauss, 3-point Strang-Fix,
  4-point Zienkiewicz-Taylor), used for assembly-grade unit integrals.
- Arbitrary-order rules: Gauss-Legendre on the line, collapsed (Duffy)
  Gauss-Jacobi product rules on simplices.

References
----------
Strang & Fix (1973), "An Analysis of the Finite Element Method"
Karniadakis & Sherwin (2005), "Spectral/hp Element Methods for CFD", App. B
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

import numpy as np
from numpy.polynomial.legendre import leggauss
from scipy.special import roots_jacobi


class ReferenceShape(str, Enum):
    """Reference domain of a quadrature rule."""

    POINT = "point"
    LINE = "line"
    TRIANGLE = "triangle"
    TETRAHEDRON = "tetrahedron"


@dataclass(frozen=True, eq=False)
class QuadratureRule:
    """Points and weights on a reference domain.

    Attributes
    ----------
    shape : ReferenceShape
        Reference domain.
    order : int
        Polynomial degree integrated exactly.
    points : np.ndarray
        Quadrature points, shape (n, 3).
    weights : np.ndarray
        Quadrature weights, shape (n,).
    """

    shape: ReferenceShape
    order: int
    points: np.ndarray
    weights: np.ndarray

    def __len__(self):
        return len(self.weights)

    @property
    def num_points(self) -> int:
        return len(self.weights)

    def integrate(self, f) -> float:
        """Integrate ``f(points) -> values`` over the reference domain."""
        return float(np.dot(self.weights, f(self.points)))


def _pad(points) -> np.ndarray:
    points = np.asarray(points, dtype=np.float64)
    if points.ndim == 1:
        points = points[:, None]
    padded = np.zeros((points.shape[0], 3))
    padded[:, : points.shape[1]] = points
    return padded


def _make_rule(shape, order, points, weights) -> QuadratureRule:
    points = _pad(points)
    weights = np.asarray(weights, dtype=np.float64).ravel()
    points.setflags(write=False)
    weights.setflags(write=False)
    return QuadratureRule(ReferenceShape(shape), int(order), points, weights)


def _num_points_for_degree(order: int) -> int:
    """Number of 1-D Gauss points exact for polynomials of degree ``order``."""
    return max(order, 1) // 2 + 1


def _gauss_jacobi_01(n: int, alpha: float):
    """Gauss-Jacobi nodes/weights on [0, 1] for weight (1-u)^alpha."""
    x, w = roots_jacobi(n, alpha, 0.0)
    return 0.5 * (x + 1.0), w / 2.0 ** (alpha + 1.0)


# =============================================================================
# Tabulated second-order rules
# =============================================================================


def _second_order_rule(shape: ReferenceShape) -> QuadratureRule:
    if shape == ReferenceShape.POINT:
        return _make_rule(shape, 2, [[0.0]], [1.0])
    if shape == ReferenceShape.LINE:
        # 2-point Gauss mapped to [0, 1]
        d = 0.5 / np.sqrt(3.0)
        return _make_rule(shape, 2, [[0.5 - d], [0.5 + d]], [0.5, 0.5])
    if shape == ReferenceShape.TRIANGLE:
        # Strang and Fix, 3 points, degree of precision 2
        x = [[1.0 / 6.0, 1.0 / 6.0], [2.0 / 3.0, 1.0 / 6.0], [1.0 / 6.0, 2.0 / 3.0]]
        return _make_rule(shape, 2, x, np.full(3, 1.0 / 6.0))
    if shape == ReferenceShape.TETRAHEDRON:
        # Zienkiewicz and Taylor, 4 points, degree of precision 2
        a, b = 0.585410196624969, 0.138196601125011
        x = [[b, b, b], [a, b, b], [b, a, b], [b, b, a]]
        return _make_rule(shape, 2, x, np.full(4, 1.0 / 24.0))
    raise ValueError(f"Unknown reference shape: {shape}")


# =============================================================================
# Arbitrary-order rules
# =============================================================================


def gauss_legendre_line(order: int) -> QuadratureRule:
    """Gauss-Legendre rule on [0, 1] exact for degree ``order``."""
    xi, w = leggauss(_num_points_for_degree(order))
    return _make_rule(ReferenceShape.LINE, order, 0.5 * (xi + 1.0), 0.5 * w)


def collapsed_triangle(order: int) -> QuadratureRule:
    """Duffy-collapsed Gauss-Jacobi rule on the reference triangle.

    Maps the unit square (u, v) to the triangle via x = u, y = v (1 - u); the
    (1 - u) Jacobian is absorbed by a Gauss-Jacobi(1, 0) rule in u.
    """
    n = _num_points_for_degree(order + 1)
    u, wu = _gauss_jacobi_01(n, 1.0)
    v, wv = _gauss_jacobi_01(n, 0.0)
    U, V = np.meshgrid(u, v, indexing="ij")
    W = np.outer(wu, wv)
    points = np.column_stack([U.ravel(), (V * (1.0 - U)).ravel()])
    return _make_rule(ReferenceShape.TRIANGLE, order, points, W.ravel())


def collapsed_tetrahedron(order: int) -> QuadratureRule:
    """Duffy-collapsed Gauss-Jacobi rule on the reference tetrahedron.

    x = u, y = v (1 - u), z = w (1 - u)(1 - v) with Jacobian (1 - u)^2 (1 - v).
    """
    n = _num_points_for_degree(order + 2)
    u, wu = _gauss_jacobi_01(n, 2.0)
    v, wv = _gauss_jacobi_01(n, 1.0)
    w, ww = _gauss_jacobi_01(n, 0.0)
    U, V, Wc = np.meshgrid(u, v, w, indexing="ij")
    weights = np.einsum("i,j,k->ijk", wu, wv, ww)
    points = np.column_stack(
        [
            U.ravel(),
            (V * (1.0 - U)).ravel(),
            (Wc * (1.0 - U) * (1.0 - V)).ravel(),
        ]
    )
    return _make_rule(ReferenceShape.TETRAHEDRON, order, points, weights.ravel())


@lru_cache(maxsize=None)
def get_rule(shape: ReferenceShape, order: int, tabulated: bool = False) -> QuadratureRule:
    """Return (and cache) a quadrature rule.

    Parameters
    ----------
    shape : ReferenceShape
        Reference domain.
    order : int
        Polynomial degree to integrate exactly (>= 0).
    tabulated : bool
        Use the fixed second-order table when ``order <= 2``.

    Returns
    -------
    QuadratureRule
    """
    shape = ReferenceShape(shape)
    if order < 0:
        raise ValueError(f"Quadrature order must be non-negative, got {order}")

    if shape == ReferenceShape.POINT:
        return _second_order_rule(shape)
    if tabulated and order <= 2:
        return _second_order_rule(shape)
    if shape == ReferenceShape.LINE:
        return gauss_legendre_line(order)
    if shape == ReferenceShape.TRIANGLE:
        return collapsed_triangle(order)
    if shape == ReferenceShape.TETRAHEDRON:
        return collapsed_tetrahedron(order)
    raise ValueError(f"Unknown reference shape: {shape}")
