"""Per-cell finite element mappings.

Mapping Hierarchy:
------------------
CellMapping (abstract base - basis evaluation and quadrature-point data)
├── SlabMapping (closed-form linear hats)
├── PiecewiseLinearMapping (sub-simplex decomposition)
│   ├── PolygonMapping
│   └── PolyhedronMapping
└── LagrangeMapping (isoparametric, order 1 or 2)
    ├── LagrangeTriangleMapping
    └── LagrangeTetrahedronMapping
"""

from .base import CellMapping, MappingQuadratures
from .slab import SlabMapping
from .piecewise_linear import PiecewiseLinearMapping, SubSimplex
from .polygon import PolygonMapping
from .polyhedron import PolyhedronMapping
from .lagrange import LagrangeMapping
from .lagrange_triangle import LagrangeTriangleMapping
from .lagrange_tetrahedron import LagrangeTetrahedronMapping

__all__ = [
    "CellMapping",
    "MappingQuadratures",
    "SlabMapping",
    "PiecewiseLinearMapping",
    "SubSimplex",
    "PolygonMapping",
    "PolyhedronMapping",
    "LagrangeMapping",
    "LagrangeTriangleMapping",
    "LagrangeTetrahedronMapping",
]
