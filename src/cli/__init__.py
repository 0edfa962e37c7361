"""Console output for the spatial discretization entry point."""

from .console import (
    console,
    fail,
    header,
    make_metrics_panel,
    make_summary_table,
    ok,
    print_summary,
    run_precompute,
)

__all__ = [
    "console",
    "fail",
    "header",
    "make_metrics_panel",
    "make_summary_table",
    "ok",
    "print_summary",
    "run_precompute",
]
