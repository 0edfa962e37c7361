"""Error taxonomy of the spatial discretization.

All conditions are programmer or input-model errors: none is retried and each
aborts the run when left to propagate.
"""


class SpatialDiscretizationError(Exception):
    """Base class for spatial discretization failures."""


class UnsupportedTopologyError(SpatialDiscretizationError, ValueError):
    """No cell mapping exists for the cell's topology tag."""

    def __init__(self, cell_type, operation: str = "make_cell_mapping"):
        self.cell_type = cell_type
        self.operation = operation
        name = getattr(cell_type, "value", cell_type)
        super().__init__(f"{operation}: unsupported cell type encountered: {name!r}")


class IndexOutOfRangeError(SpatialDiscretizationError, IndexError):
    """A local cell index outside [0, size) was requested."""

    def __init__(self, index, size: int, operation: str):
        self.index = index
        self.size = size
        self.operation = operation
        super().__init__(
            f"{operation}: local index {index} outside [0, {size}). "
            "The data is either not available or the supplied local index is invalid."
        )


class DegenerateGeometryError(SpatialDiscretizationError, ArithmeticError):
    """Zero-measure geometry or non-finite derived quantities."""
