"""Quadrature rules on reference simplices."""

from .rules import (
    QuadratureRule,
    ReferenceShape,
    collapsed_tetrahedron,
    collapsed_triangle,
    gauss_legendre_line,
    get_rule,
)
from .provider import FACE_SHAPE, OrderConfig, QuadratureOrders, QuadratureProvider

__all__ = [
    "QuadratureRule",
    "ReferenceShape",
    "collapsed_tetrahedron",
    "collapsed_triangle",
    "gauss_legendre_line",
    "get_rule",
    "FACE_SHAPE",
    "OrderConfig",
    "QuadratureOrders",
    "QuadratureProvider",
]
