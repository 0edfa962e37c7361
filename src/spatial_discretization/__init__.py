"""Spatial discretization: per-cell mappings, unit integrals and quadrature-point data.

Flow:
-----
Grid ──> make_cell_mapping (per cell) ──> CellMapping
CellMapping + QuadratureRule ──> unit_integrals driver ──> UnitIntegralData / QuadraturePointData
SpatialDiscretization.precompute() drives all of the above for one partition.
"""

from .datastructures import (
    DiscretizationParameters,
    FaceQuadraturePointData,
    PrecomputeMetrics,
    PrecomputeStage,
    QuadraturePointData,
    SetupFlags,
    UnitIntegralData,
    VolumeQuadraturePointData,
)
from .exceptions import (
    DegenerateGeometryError,
    IndexOutOfRangeError,
    SpatialDiscretizationError,
    UnsupportedTopologyError,
)
from .cell_mappings import (
    CellMapping,
    LagrangeTetrahedronMapping,
    LagrangeTriangleMapping,
    PolygonMapping,
    PolyhedronMapping,
    SlabMapping,
)
from .factory import MAPPING_REGISTRY, make_cell_mapping
from .parallel import SerialCommunicator, default_communicator
from .discretization import SpatialDiscretization

__all__ = [
    # Orchestrator
    "SpatialDiscretization",
    "SetupFlags",
    "PrecomputeStage",
    "PrecomputeMetrics",
    "DiscretizationParameters",
    # Cached data
    "UnitIntegralData",
    "VolumeQuadraturePointData",
    "FaceQuadraturePointData",
    "QuadraturePointData",
    # Mappings
    "CellMapping",
    "SlabMapping",
    "PolygonMapping",
    "PolyhedronMapping",
    "LagrangeTriangleMapping",
    "LagrangeTetrahedronMapping",
    "MAPPING_REGISTRY",
    "make_cell_mapping",
    # Parallel
    "SerialCommunicator",
    "default_communicator",
    # Errors
    "SpatialDiscretizationError",
    "UnsupportedTopologyError",
    "IndexOutOfRangeError",
    "DegenerateGeometryError",
]
