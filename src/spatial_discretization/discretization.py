"""Spatial discretization orchestrator."""

import logging
import time

import numpy as np
import pandas as pd

from quadrature import QuadratureProvider
from .datastructures import (
    DiscretizationParameters,
    PrecomputeMetrics,
    PrecomputeStage,
    SetupFlags,
)
from .exceptions import IndexOutOfRangeError
from .factory import make_cell_mapping
from .parallel import default_communicator

log = logging.getLogger(__name__)


class SpatialDiscretization:
    """Per-cell mappings and cached integral data of one mesh partition.

    Handles:
    - Building one cell mapping per local cell, in local-cell order
    - Unit integrals and quadrature-point data, each computed at most once
    - Collective barriers after each precompute phase
    - Indexed, bounds-checked access for solvers

    The cached arrays ``cell_mappings``, ``unit_integrals`` and
    ``quadrature_data`` share the local cell index space of the grid.

    Parameters
    ----------
    grid : Grid
        Local mesh partition; held for the lifetime of the discretization.
    params : DiscretizationParameters, optional
        Quadrature orders. If not provided, kwargs are used to create params.
    communicator : object, optional
        Anything with a ``barrier()`` method. Defaults to PETSc's COMM_WORLD.
    logger : logging.Logger, optional
        Sink for progress and error messages. Defaults to the module logger.
    timer : callable, optional
        Returns the current time in seconds. Defaults to ``time.perf_counter``.
    **kwargs
        Configuration passed to DiscretizationParameters if params is None.
    """

    def __init__(self, grid, params=None, communicator=None, logger=None, timer=None, **kwargs):
        if params is None:
            params = DiscretizationParameters(**kwargs)

        self.grid = grid
        self.params = params
        self.provider = QuadratureProvider(params.quadrature_orders())
        self.communicator = communicator if communicator is not None else default_communicator()
        self.log = logger if logger is not None else log
        self.timer = timer if timer is not None else time.perf_counter

        self.cell_mappings = []
        self.unit_integrals = []
        self.quadrature_data = []

        self.setup_flags = SetupFlags.NO_FLAGS
        self.metrics = PrecomputeMetrics()
        self._stage = PrecomputeStage.EMPTY

    # =========================================================================
    # State
    # =========================================================================

    @property
    def stage(self) -> PrecomputeStage:
        return self._stage

    def is_built(self, stage: PrecomputeStage) -> bool:
        """True if every phase in ``stage`` has completed."""
        return (self._stage & stage) == stage

    @property
    def num_local_cells(self) -> int:
        return len(self.cell_mappings)

    # =========================================================================
    # Precomputation
    # =========================================================================

    def precompute(self, flags=SetupFlags.NO_FLAGS):
        """Run the requested precompute phases.

        Always builds the cell mappings, then unit integrals and quadrature
        data if requested in ``flags``. Completed phases are skipped. Exactly
        one barrier follows each of the three phases, whether or not it did
        work, so all ranks stay in lock-step.
        """
        flags = SetupFlags(flags)
        self.setup_flags |= flags
        t_start = self.timer()
        metrics = PrecomputeMetrics(n_cells=self.grid.num_local_cells)

        # --- Phase 1: cell mappings ---
        t0 = self.timer()
        if not self.is_built(PrecomputeStage.MAPPINGS_BUILT):
            self._build_cell_mappings()
        metrics.mapping_time_seconds = self.timer() - t0
        self.communicator.barrier()

        # --- Phase 2: unit integrals ---
        t0 = self.timer()
        if flags & SetupFlags.COMPUTE_UNIT_INTEGRALS and not self.is_built(
            PrecomputeStage.INTEGRALS_BUILT
        ):
            self.log.info(f"{self.timer() - t_start:.3f}s Computing unit integrals.")
            self.unit_integrals = [m.compute_unit_integrals() for m in self.cell_mappings]
            self._stage |= PrecomputeStage.INTEGRALS_BUILT
        metrics.unit_integral_time_seconds = self.timer() - t0
        self.communicator.barrier()

        # --- Phase 3: quadrature-point data ---
        t0 = self.timer()
        if flags & SetupFlags.INIT_QP_DATA and not self.is_built(
            PrecomputeStage.QUADRATURE_BUILT
        ):
            self.log.info(f"{self.timer() - t_start:.3f}s Computing quadrature data.")
            self.quadrature_data = [m.initialize_quadrature_data() for m in self.cell_mappings]
            self._stage |= PrecomputeStage.QUADRATURE_BUILT
        metrics.quadrature_time_seconds = self.timer() - t0
        self.communicator.barrier()

        metrics.total_time_seconds = self.timer() - t_start
        self.metrics = metrics
        self.log.info(f"{metrics.total_time_seconds:.3f}s Done adding cell SD-values.")
        return self

    def _build_cell_mappings(self):
        self.cell_mappings = [
            make_cell_mapping(self.grid, cell, self.provider) for cell in self.grid.local_cells
        ]
        self._stage |= PrecomputeStage.MAPPINGS_BUILT

    # =========================================================================
    # Accessors
    # =========================================================================

    def _checked(self, array, i, operation: str):
        if not 0 <= i < len(array):
            self.log.error(f"{operation}: invalid local cell index {i} (size {len(array)})")
            raise IndexOutOfRangeError(i, len(array), operation)
        return array[i]

    def get_cell_mapping(self, i: int):
        return self._checked(self.cell_mappings, i, "get_cell_mapping")

    def get_unit_integrals(self, i: int):
        return self._checked(self.unit_integrals, i, "get_unit_integrals")

    def get_quadrature_data(self, i: int):
        return self._checked(self.quadrature_data, i, "get_quadrature_data")

    def get_cell_num_nodes(self, i: int) -> int:
        return self.get_cell_mapping(i).num_nodes

    def get_cell_node_locations(self, i: int) -> np.ndarray:
        return self.get_cell_mapping(i).node_locations

    # =========================================================================
    # Summaries
    # =========================================================================

    def to_dataframe(self):
        """One row per local cell: type, dofs, faces, measure and centroid."""
        rows = []
        for i, mapping in enumerate(self.cell_mappings):
            x, y, z = mapping.centroid
            rows.append(
                {
                    "local_id": i,
                    "global_id": mapping.cell.global_id,
                    "cell_type": getattr(mapping.cell.cell_type, "value", mapping.cell.cell_type),
                    "mapping": type(mapping).__name__,
                    "dofs": mapping.dofs,
                    "faces": mapping.num_faces,
                    "measure": mapping.measure,
                    "centroid_x": x,
                    "centroid_y": y,
                    "centroid_z": z,
                }
            )
        return pd.DataFrame(rows)

    def __repr__(self):
        return (
            f"SpatialDiscretization(cells={self.grid.num_local_cells}, "
            f"stage={self._stage})"
        )
