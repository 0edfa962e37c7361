"""Cell mapping factory: topology tag -> concrete mapping."""

import logging

from meshing import CellType
from quadrature import OrderConfig, QuadratureProvider, ReferenceShape
from .cell_mappings import (
    LagrangeMapping,
    LagrangeTetrahedronMapping,
    LagrangeTriangleMapping,
    MappingQuadratures,
    PolygonMapping,
    PolyhedronMapping,
    SlabMapping,
)
from .exceptions import UnsupportedTopologyError

log = logging.getLogger(__name__)

# Cell type -> (mapping class, reference shape its quadrature lives on)
MAPPING_REGISTRY = {
    CellType.SLAB: (SlabMapping, ReferenceShape.LINE),
    CellType.POLYGON: (PolygonMapping, ReferenceShape.TRIANGLE),
    CellType.POLYHEDRON: (PolyhedronMapping, ReferenceShape.TETRAHEDRON),
    CellType.TRIANGLE: (LagrangeTriangleMapping, ReferenceShape.TRIANGLE),
    CellType.TETRAHEDRON: (LagrangeTetrahedronMapping, ReferenceShape.TETRAHEDRON),
}


def _basis_order(mapping_cls, cell) -> int:
    if issubclass(mapping_cls, LagrangeMapping):
        for order, n_nodes in mapping_cls.NODES_PER_ORDER.items():
            if n_nodes == len(cell.vertex_ids):
                return order
    return 1


def mapping_quadratures(
    provider: QuadratureProvider, shape: ReferenceShape, basis_order: int = 1
) -> MappingQuadratures:
    """Volume and face rules for a mapping on reference ``shape``.

    The second-order configuration is raised to ``2 * basis_order`` so mass
    matrices of higher-order bases are integrated exactly.
    """
    second = max(provider.order(OrderConfig.SECOND), 2 * basis_order)
    return MappingQuadratures(
        volume_second=provider.volume_rule(shape, OrderConfig.SECOND, order=second),
        face_second=provider.face_rule(shape, OrderConfig.SECOND, order=second),
        volume_arbitrary=provider.volume_rule(shape, OrderConfig.ARBITRARY),
        face_arbitrary=provider.face_rule(shape, OrderConfig.ARBITRARY),
    )


def make_cell_mapping(grid, cell, provider: QuadratureProvider = None):
    """Construct the cell mapping matching ``cell.cell_type``.

    Parameters
    ----------
    grid : Grid
        Mesh providing node coordinates; must outlive the mapping.
    cell : Cell
        Cell to map.
    provider : QuadratureProvider, optional
        Source of the second-order and arbitrary-order rules.

    Raises
    ------
    UnsupportedTopologyError
        If no mapping exists for the cell's topology tag.
    """
    provider = provider if provider is not None else QuadratureProvider()

    try:
        entry = MAPPING_REGISTRY.get(CellType(cell.cell_type))
    except ValueError:
        entry = None
    if entry is None:
        log.error(f"make_cell_mapping: unsupported cell type {cell.cell_type!r} (cell {cell.local_id})")
        raise UnsupportedTopologyError(cell.cell_type)

    mapping_cls, shape = entry
    quadratures = mapping_quadratures(provider, shape, _basis_order(mapping_cls, cell))
    return mapping_cls(grid, cell, quadratures)
