"""Rich console output helpers."""

import pandas as pd
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from spatial_discretization import SpatialDiscretizationError

console = Console()


def ok(msg: str):
    """Print success message."""
    console.print(f"  [green]✓[/green] {msg}")


def fail(msg: str):
    """Print failure message."""
    console.print(f"  [red]✗[/red] {msg}")


def header(msg: str):
    """Print bold header."""
    console.print(f"\n[bold]{msg}[/bold]")


def make_summary_table(cells: pd.DataFrame) -> Table:
    """Per-mapping summary: cell count, dofs per cell and total measure."""
    table = Table(show_header=True, header_style="bold cyan", border_style="dim")

    table.add_column("Mapping", style="bold")
    table.add_column("Cells", justify="right")
    table.add_column("Dofs/cell", justify="right")
    table.add_column("Faces/cell", justify="right")
    table.add_column("Measure", justify="right")

    if cells.empty:
        return table

    grouped = cells.groupby("mapping").agg(
        cells=("local_id", "count"),
        dofs=("dofs", "max"),
        faces=("faces", "max"),
        measure=("measure", "sum"),
    )
    for name, row in grouped.iterrows():
        table.add_row(
            name,
            str(int(row["cells"])),
            str(int(row["dofs"])),
            str(int(row["faces"])),
            f"{row['measure']:.6g}",
        )
    return table


def make_metrics_panel(metrics: pd.DataFrame) -> Panel:
    """Phase timings of the last precompute call."""
    row = metrics.iloc[0]
    lines = [
        f"mappings:        {row['mapping_time_seconds']:.4f}s",
        f"unit integrals:  {row['unit_integral_time_seconds']:.4f}s",
        f"quadrature data: {row['quadrature_time_seconds']:.4f}s",
        f"[bold]total:           {row['total_time_seconds']:.4f}s[/bold]",
    ]
    return Panel(
        "\n".join(lines),
        title="[bold cyan]Precompute[/bold cyan]",
        subtitle=f"[dim]{int(row['n_cells'])} cells[/dim]",
        border_style="cyan",
    )


def print_summary(discretization):
    """Print the mapping table and the timing panel of a discretization."""
    console.print(make_summary_table(discretization.to_dataframe()))
    console.print(make_metrics_panel(discretization.metrics.to_dataframe()))


def run_precompute(discretization, flags):
    """Run ``discretization.precompute(flags)`` and report the outcome.

    Discretization errors are printed and re-raised.
    """
    try:
        discretization.precompute(flags)
    except SpatialDiscretizationError as exc:
        fail(f"{type(exc).__name__}: {exc}")
        raise
    ok(f"stage: {discretization.stage}")
    return discretization
