"""
view_table.py

Render flattened profile rows as a table in your terminal using Rich,
with human-friendly time units.
"""

from typing import Iterable, Optional

from rich.table import Table

from profiler_excel.exporters.excel import HEADER
from profiler_excel.flatten import FlattenedRow


def format_time(seconds: float) -> str:
    """Convert seconds to a human-friendly string."""
    if seconds >= 1:
        return f"{seconds:.2f}s"
    elif seconds >= 1e-3:
        return f"{seconds * 1_000:.2f}ms"
    else:
        return f"{seconds * 1_000_000:.0f}μs"


def build_table(rows: Iterable[FlattenedRow], title: Optional[str] = None) -> Table:
    table = Table(title=title)
    name_col, *metric_cols = HEADER
    table.add_column(name_col, style="bold", overflow="fold")
    for col in metric_cols:
        table.add_column(col, justify="right")
    for row in rows:
        table.add_row(
            row.name,
            format_time(row.total_time),
            format_time(row.self_time),
            str(row.number_of_calls),
        )
    return table
