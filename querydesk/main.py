from __future__ import annotations

import asyncio
import json
import sys
from typing import List, Optional

import typer

from querydesk import operations
from querydesk.config import get_settings
from querydesk.domain.classifier import detect_kind, redact_conn_string
from querydesk.domain.models import Row
from querydesk.errors import QueryDeskError
from querydesk.infrastructure.registry import ConnectionRegistry
from querydesk.reporter import print_rows, print_tables
from querydesk.utils.logging import configure_logging

app = typer.Typer(help="querydesk: run SQL against PostgreSQL, MySQL or SQLite.")

_CONN_OPTION_HELP = "Connection string (default: QUERYDESK_DEFAULT_CONN)."


def _resolve_conn(conn: Optional[str]) -> str:
    resolved = conn or get_settings().default_conn
    if not resolved:
        typer.echo(
            "Error: no connection string given and QUERYDESK_DEFAULT_CONN is unset.", err=True
        )
        raise typer.Exit(code=2)
    return resolved


async def _query(conn_string: str, sql: str) -> List[Row]:
    registry = ConnectionRegistry()
    try:
        handle = await operations.connect(registry, conn_string)
        return await operations.execute(registry, handle, sql)
    finally:
        await registry.close_all()


async def _tables(conn_string: str) -> List[str]:
    registry = ConnectionRegistry()
    try:
        handle = await operations.connect(registry, conn_string)
        return await operations.get_tables(registry, handle)
    finally:
        await registry.close_all()


def _setup_logging() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    default_conn = redact_conn_string(settings.default_conn) if settings.default_conn else "-"
    typer.echo(
        f"env={settings.app_env} | log_level={settings.log_level} json_logs={settings.log_json} | "
        f"default_conn={default_conn}"
    )


@app.command()
def detect(conn_string: str = typer.Argument(..., help="Connection string or path.")) -> None:
    """
    Print the backend a connection string would use.
    """
    typer.echo(detect_kind(conn_string).value)


@app.command()
def tables(
    conn: Optional[str] = typer.Option(None, "--conn", "-c", help=_CONN_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """
    List the user tables of a database.
    """
    _setup_logging()
    try:
        names = asyncio.run(_tables(_resolve_conn(conn)))
    except QueryDeskError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(json.dumps(names, indent=2))
    else:
        print_tables(names)


@app.command()
def query(
    sql: str = typer.Argument(..., help="SQL to execute verbatim."),
    conn: Optional[str] = typer.Option(None, "--conn", "-c", help=_CONN_OPTION_HELP),
    json_output: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """
    Execute one SQL statement and print the rows.
    """
    _setup_logging()
    try:
        rows = asyncio.run(_query(_resolve_conn(conn), sql))
    except QueryDeskError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(json.dumps(rows, indent=2))
    else:
        print_rows(rows)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
