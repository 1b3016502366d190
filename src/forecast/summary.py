# file: src/forecast/summary.py
"""
Rich table rendering for fitted models.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

from rich.console import Console
from rich.table import Table

from src.forecast.series import Series

_console = Console()


def _fmt(value) -> str:
    if isinstance(value, float):
        return f"{value:.6f}"
    return str(value)


def key_value_table(title: str, rows: Iterable[Tuple[str, object]]) -> Table:
    table = Table(title=title)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    for k, v in rows:
        table.add_row(str(k), _fmt(v))

    return table


def columns_table(title: str, columns: Sequence[Series]) -> Table:
    """Side by side series, padded with blanks where lengths differ"""
    table = Table(title=title)
    table.add_column("#", style="dim")
    for col in columns:
        table.add_column(col.name, style="green")

    n = max((len(c) for c in columns), default=0)
    for i in range(n):
        table.add_row(str(i), *[_fmt(c[i]) if i < len(c) else "" for c in columns])

    return table


def render(tables: Iterable[Table], console: Optional[Console] = None) -> None:
    console = console or _console
    for table in tables:
        console.print(table)
