"""Tests for the rich summary output."""

import pandas as pd
import pytest

from cli import make_metrics_panel, make_summary_table, print_summary, run_precompute
from meshing import Cell, CellFace, Grid, create_polygon_mesh_2d, create_triangle_mesh_2d
from spatial_discretization import SetupFlags, SpatialDiscretization, UnsupportedTopologyError


def mixed_grid():
    """Quads and Lagrange triangles in one partition; triangles reuse quad node ids."""
    quads = create_polygon_mesh_2d(nx=2, ny=1)
    tris = create_triangle_mesh_2d(nx=1, ny=1)
    cells = [
        Cell(c.cell_type, list(c.vertex_ids), [CellFace(list(f.vertex_ids)) for f in c.faces])
        for c in list(quads.local_cells) + list(tris.local_cells)
    ]
    return Grid(quads.nodes, cells)


def test_summary_table_groups_by_mapping(communicator):
    sd = SpatialDiscretization(mixed_grid(), communicator=communicator).precompute()
    table = make_summary_table(sd.to_dataframe())
    assert table.row_count == 2


def test_empty_summary_table():
    assert make_summary_table(pd.DataFrame()).row_count == 0


def test_metrics_panel_and_print(communicator, capsys):
    sd = SpatialDiscretization(mixed_grid(), communicator=communicator)
    sd.precompute(SetupFlags.COMPUTE_UNIT_INTEGRALS)
    panel = make_metrics_panel(sd.metrics.to_dataframe())
    assert "Precompute" in str(panel.title)
    print_summary(sd)
    out = capsys.readouterr().out
    assert "PolygonMapping" in out
    assert "LagrangeTriangleMapping" in out


def test_run_precompute_reports_stage(communicator, capsys):
    sd = SpatialDiscretization(mixed_grid(), communicator=communicator)
    assert run_precompute(sd, SetupFlags.COMPUTE_UNIT_INTEGRALS) is sd
    assert "stage" in capsys.readouterr().out
    assert len(sd.unit_integrals) == sd.num_local_cells


def test_run_precompute_reports_and_reraises_errors(communicator, capsys):
    grid = Grid([[0.0, 0.0, 0.0]], [Cell("wedge", [0], [])])
    sd = SpatialDiscretization(grid, communicator=communicator)
    with pytest.raises(UnsupportedTopologyError):
        run_precompute(sd, SetupFlags.NO_FLAGS)
    out = capsys.readouterr().out
    assert "UnsupportedTopologyError" in out
    assert "stage" not in out
