"""
Spatial Discretization - entry point for building per-cell FEM data on a mesh.

Usage:
    python main.py
    python main.py mesh=tetrahedron mesh.order=2
    python main.py mesh=slab discretization.arbitrary_order=6 precompute.quadrature_data=false
    mpiexec -n 4 python main.py mesh=polyhedron parallel=true
"""

import logging
import sys
from pathlib import Path

import hydra
from hydra.utils import instantiate
from omegaconf import DictConfig, OmegaConf

sys.path.insert(0, str(Path(__file__).parent / "src"))

from cli import header, print_summary, run_precompute  # noqa: E402
from meshing import local_block  # noqa: E402
from spatial_discretization import (  # noqa: E402
    DiscretizationParameters,
    SerialCommunicator,
    SetupFlags,
    SpatialDiscretization,
    default_communicator,
)

log = logging.getLogger(__name__)


def get_setup_flags(cfg: DictConfig) -> SetupFlags:
    """Translate the precompute block into SetupFlags."""
    flags = SetupFlags.NO_FLAGS
    if cfg.precompute.get("unit_integrals", True):
        flags |= SetupFlags.COMPUTE_UNIT_INTEGRALS
    if cfg.precompute.get("quadrature_data", False):
        flags |= SetupFlags.INIT_QP_DATA
    return flags


def build_local_grid(cfg: DictConfig):
    """Build the configured mesh and keep this rank's block of cells."""
    grid = instantiate(cfg.mesh, _convert_="partial")
    comm = default_communicator() if cfg.get("parallel", False) else SerialCommunicator()
    rank, size = comm.getRank(), comm.getSize()
    if size == 1:
        return grid, comm

    log.info(f"Rank {rank}/{size}: taking local block of {grid.num_local_cells} cells")
    return local_block(grid, rank, size), comm


@hydra.main(config_path="conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    """Main entry point."""
    log.info(f"Mesh: {cfg.mesh._target_}")
    log.debug(OmegaConf.to_yaml(cfg))

    grid, comm = build_local_grid(cfg)
    params = DiscretizationParameters(**cfg.discretization)
    sd = SpatialDiscretization(grid, params=params, communicator=comm)

    header(f"Spatial discretization: {grid.num_local_cells} local cells")
    run_precompute(sd, get_setup_flags(cfg))
    print_summary(sd)


if __name__ == "__main__":
    main()
