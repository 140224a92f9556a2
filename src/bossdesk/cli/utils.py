"""
CLI utility helpers: output formatting and connection management.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from bossdesk.core.connection import SCHEMA_NAME_REQUIREMENTS, ConnectionConfig, is_valid_schema_name
from bossdesk.core.executor import PostgresExecutor
from bossdesk.core.protocols import Executor
from bossdesk.core.settings import get_settings
from bossdesk.ops.context import OperationContext
from bossdesk.ops.result import OperationResult, PagedResult, to_plain
from bossdesk.schema.registry import AdapterRegistry

console = Console()
err_console = Console(stderr=True)

# One registry per process so repeated commands in a session detect once
_registry = AdapterRegistry()


# ── Connection helper ────────────────────────────────────────────────────


def make_context(
    schema: str | None = None,
    *,
    dry_run: bool = False,
) -> tuple[OperationContext, Executor]:
    """Create an ``OperationContext`` + executor pair for CLI commands."""
    settings = get_settings()
    config = ConnectionConfig.from_settings(settings)
    if schema:
        if not is_valid_schema_name(schema):
            raise typer.BadParameter(SCHEMA_NAME_REQUIREMENTS, param_hint="--schema")
        config = config.model_copy(update={"schema_name": schema})
    executor = PostgresExecutor(config, pool_min=settings.pool_min, pool_max=settings.pool_max)
    ctx = OperationContext(
        executor=executor,
        registry=_registry,
        connection_id=config.id,
        schema=config.schema_name,
        caller="cli",
        dry_run=dry_run,
    )
    return ctx, executor


@contextmanager
def open_context(schema: str | None = None, *, dry_run: bool = False) -> Iterator[OperationContext]:
    """``make_context`` that closes the executor when the command ends."""
    ctx, executor = make_context(schema, dry_run=dry_run)
    try:
        yield ctx
    finally:
        executor.close()


# ── Output helpers ───────────────────────────────────────────────────────


def fail(result: OperationResult) -> None:
    """Print the envelope's error (and hint) and exit 1."""
    err = result.error
    msg = err.message if err else "Unknown error"
    code = err.code if err else "ERROR"
    err_console.print(f"[bold red]Error[/bold red] ({code}): {msg}")
    hint = err.details.get("hint") if err else None
    if hint:
        err_console.print(f"[dim]{hint}[/dim]")
    raise typer.Exit(code=1)


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(to_plain(payload), default=str))


def print_warnings(result: OperationResult) -> None:
    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {warning}")


def output_result(
    result: OperationResult,
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render an ``OperationResult`` to the terminal."""
    if not result.success:
        if as_json:
            print_json(result.to_dict())
            raise typer.Exit(code=1)
        fail(result)

    if as_json:
        print_json(result.data)
        return

    print_warnings(result)
    data = to_plain(result.data)
    if isinstance(data, list):
        if not data:
            console.print("[dim]No items.[/dim]")
            return
        print_table(data, title=title)
    elif isinstance(data, dict):
        print_dict(data, title=title)
    else:
        console.print(data)


def output_paged(
    result: PagedResult,
    *,
    as_json: bool = False,
    title: str = "",
    columns: Sequence[str] | None = None,
    footer: str = "",
) -> None:
    """Render a ``PagedResult`` to the terminal with pagination info."""
    if not result.success:
        if as_json:
            print_json(result.to_dict())
            raise typer.Exit(code=1)
        fail(result)

    items = result.data or []

    if as_json:
        print_json({
            "items": items,
            "total": result.total,
            "limit": result.limit,
            "offset": result.offset,
            "has_more": result.has_more,
        })
        return

    if not items:
        console.print("[dim]No items.[/dim]")
        return

    print_table([to_plain(item) for item in items], title=title, columns=columns)
    console.print(f"\n[dim]{footer or f'Showing {len(items)} of {result.total} (offset {result.offset})'}[/dim]")


def print_table(rows: list[dict[str, Any]], *, title: str = "", columns: Sequence[str] | None = None) -> None:
    """Render a list of dicts as a Rich table."""
    columns = list(columns or rows[0].keys())
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in columns:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*("" if row.get(col) is None else str(row.get(col)) for col in columns))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
