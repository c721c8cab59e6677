from __future__ import annotations

from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from querydesk.domain.models import Row, Value


def _format_value(value: Value) -> str:
    if value is None:
        return "[dim]NULL[/dim]"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return escape(str(value))


def _collect_columns(rows: Sequence[Row]) -> List[str]:
    """Column order of the first row, then any names that only appear later."""
    columns: List[str] = []
    seen = set()
    for row in rows:
        for name in row:
            if name not in seen:
                seen.add(name)
                columns.append(name)
    return columns


def build_rows_table(rows: Sequence[Row], title: Optional[str] = None) -> Table:
    """
    Build a rich table for a normalized result set.

    Numbers are right-aligned; NULL cells are dimmed.
    """
    columns = _collect_columns(rows)
    caption = f"{len(rows)} row" + ("" if len(rows) == 1 else "s")
    table = Table(title=title, box=box.ROUNDED, caption=caption)

    for name in columns:
        numeric = any(
            isinstance(row.get(name), (int, float)) and not isinstance(row.get(name), bool)
            for row in rows
        )
        table.add_column(
            escape(name), justify="right" if numeric else "left", style="cyan", no_wrap=True
        )

    for row in rows:
        table.add_row(*(_format_value(row.get(name)) for name in columns))
    return table


def print_rows(
    rows: Sequence[Row], console: Optional[Console] = None, title: Optional[str] = None
) -> None:
    """
    Render query results as a rich table.
    """
    console = console or Console()
    if not rows:
        console.print("[yellow]No results to display.[/yellow]")
        return
    console.print(build_rows_table(rows, title=title))


def print_tables(
    names: Sequence[str], console: Optional[Console] = None, title: str = "Tables"
) -> None:
    """
    Render a table listing as a single-column rich table.
    """
    console = console or Console()
    if not names:
        console.print("[yellow]No tables found.[/yellow]")
        return
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Table", style="cyan", no_wrap=True)
    for name in names:
        table.add_row(escape(name) if name else "[dim](unnamed)[/dim]")
    console.print(table)


__all__ = ["build_rows_table", "print_rows", "print_tables"]
