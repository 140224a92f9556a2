"""
CLI: connectivity check and schema version.
"""

from __future__ import annotations

import typer

from bossdesk.cli.utils import console, open_context, output_result, print_warnings


def ping(
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Check the database answers and the pg-boss schema is readable."""
    from bossdesk.ops.health import test_connection

    with open_context(schema) as ctx:
        result = test_connection(ctx)
    if json_out or not result.success:
        output_result(result, as_json=json_out)
        return

    check = result.data
    console.print(f"[green]●[/green] {check.message} ({check.latency_ms:.1f} ms)")
    if check.schema_version is not None:
        console.print(f"  schema v{check.schema_version} · {check.adapter_group}")
    print_warnings(result)


def version(
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the detected pg-boss schema version and adapter."""
    from bossdesk.ops.result import SERVICE_ERRORS, OperationResult

    with open_context(schema) as ctx:
        try:
            adapter = ctx.adapter()
        except SERVICE_ERRORS as exc:
            output_result(OperationResult.from_exception(exc), as_json=json_out)
            raise typer.Exit(code=1) from exc
        detected = ctx.registry.detected_version(ctx.connection_id, ctx.schema)

    info = {
        "schema": ctx.schema,
        "version": detected.value if detected is not None else None,
        "display_name": detected.display_name if detected is not None else None,
        "adapter_group": adapter.group.value,
        "adapter": adapter.group.display_name,
    }
    output_result(OperationResult.ok(info), as_json=json_out, title="pg-boss schema")
