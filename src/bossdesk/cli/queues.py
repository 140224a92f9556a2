"""
CLI: queue listing, schedules and the per-queue dashboard.
"""

from __future__ import annotations

import threading

import typer
from rich.table import Table

from bossdesk.cli.utils import console, err_console, open_context, output_result, print_json, print_table
from bossdesk.models import QueueConfig, TimeRange, format_duration
from bossdesk.ops.result import OperationResult


def _config_cell(config: QueueConfig | None, attr: str) -> str:
    if config is None:
        return "-"
    value = getattr(config, attr)
    if value is None:
        return "-"
    if attr == "policy" or attr == "retry_limit":
        return str(value)
    return QueueConfig.format_seconds(value) or "-"


def list_queues(
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List queues with per-state job counts."""
    from bossdesk.ops.queues import list_queues as _list

    with open_context(schema) as ctx:
        result = _list(ctx)
    if json_out or not result.success:
        output_result(result, as_json=json_out)
        return

    queues = result.data or []
    if not queues:
        console.print("[dim]No queues.[/dim]")
        return

    table = Table(title="Queues", pad_edge=False)
    for col in ("name", "created", "retry", "active", "completed", "failed", "cancelled", "total"):
        table.add_column(col, justify="left" if col == "name" else "right")
    has_config = any(q.config is not None for q in queues)
    if has_config:
        for col in ("policy", "retention", "expire", "retries"):
            table.add_column(col)
    for queue in queues:
        s = queue.stats
        row = [queue.name, *(str(v) for v in (s.created, s.retry, s.active, s.completed, s.failed, s.cancelled, s.total))]
        if has_config:
            row += [
                _config_cell(queue.config, "policy"),
                _config_cell(queue.config, "retention_seconds"),
                _config_cell(queue.config, "expire_seconds"),
                _config_cell(queue.config, "retry_limit"),
            ]
        table.add_row(*row)
    console.print(table)


def list_schedules(
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List cron schedules."""
    from bossdesk.ops.schedules import list_schedules as _list

    with open_context(schema) as ctx:
        result = _list(ctx)
    if result.success and result.metadata.get("supported") is False and not json_out:
        console.print("[dim]This schema generation has no schedule table.[/dim]")
        return
    if json_out or not result.success:
        output_result(result, as_json=json_out)
        return
    rows = [
        {
            "id": s.id,
            "cron": s.cron,
            "timezone": s.timezone,
            "data": s.data,
            "updated_on": s.updated_on.isoformat(timespec="seconds"),
        }
        for s in result.data or []
    ]
    if not rows:
        console.print("[dim]No schedules.[/dim]")
        return
    print_table(rows, title="Schedules")


def render_dashboard(result: OperationResult) -> None:
    snapshot = result.data
    console.rule(f"[bold]{snapshot.queue}[/bold] · {snapshot.time_range.display_name}")

    if snapshot.status is not None:
        status = snapshot.status
        console.print(
            f"[cyan]pending[/cyan] {status.pending_jobs}  "
            f"[cyan]active[/cyan] {status.active_jobs}  "
            f"[cyan]retry[/cyan] {status.retry_jobs}  "
            f"[cyan]drain estimate[/cyan] {format_duration(status.estimated_completion)}"
        )

    if snapshot.stats is not None:
        stats = snapshot.stats
        console.print(
            f"[cyan]total[/cyan] {stats.total_jobs}  "
            f"[cyan]completed[/cyan] {stats.completed_jobs}  "
            f"[cyan]failed[/cyan] {stats.failed_jobs}  "
            f"[cyan]cancelled[/cyan] {stats.cancelled_jobs}  "
            f"[cyan]failure rate[/cyan] {stats.failure_rate:.1f}%"
        )
        console.print(
            f"[cyan]avg processing[/cyan] {format_duration(stats.avg_processing_time)}  "
            f"[cyan]avg wait[/cyan] {format_duration(stats.avg_wait_time)}  "
            f"[cyan]avg end-to-end[/cyan] {format_duration(stats.avg_end_to_end_time)}"
        )

    if snapshot.throughput is not None and snapshot.throughput.points:
        categories = snapshot.throughput.categories()
        by_bucket: dict = {}
        for point in snapshot.throughput.points:
            by_bucket.setdefault(point.timestamp, {})[point.category] = point.count
        table = Table(title="Throughput", pad_edge=False)
        table.add_column("bucket")
        for category in categories:
            table.add_column(category, justify="right")
        for bucket, counts in by_bucket.items():
            table.add_row(bucket.strftime("%Y-%m-%d %H:%M"), *(str(counts.get(c, 0)) for c in categories))
        console.print(table)

    for slot, message in snapshot.errors.items():
        err_console.print(f"[yellow]{slot} unavailable:[/yellow] {message}")


def dashboard(
    queue: str = typer.Argument(..., help="Queue name"),
    time_range: TimeRange = typer.Option(TimeRange.TWENTY_FOUR_HOURS, "--range", "-r"),
    watch: bool = typer.Option(False, "--watch", "-w", help="Refresh until interrupted."),
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Live status, historical stats and throughput for one queue."""
    from bossdesk.core.cancellation import RefreshLoop
    from bossdesk.core.settings import get_settings
    from bossdesk.ops.dashboard import refresh_dashboard
    from bossdesk.ops.requests import DashboardRequest

    request = DashboardRequest(queue=queue, time_range=time_range)

    with open_context(schema) as ctx:
        if not watch:
            result = refresh_dashboard(ctx, request)
            if json_out or not result.success:
                output_result(result, as_json=json_out)
                return
            render_dashboard(result)
            return

        def _cycle(token) -> None:
            token.raise_if_cancelled()
            result = refresh_dashboard(ctx, request)
            if json_out:
                print_json(result.to_dict())
            elif result.success:
                render_dashboard(result)
            else:
                err_console.print(f"[bold red]Error[/bold red] ({result.error.code}): {result.error.message}")

        loop = RefreshLoop(_cycle, interval=get_settings().refresh_interval_seconds, name="bossdesk-dashboard")
        loop.start()
        try:
            threading.Event().wait()
        except KeyboardInterrupt:
            pass
        finally:
            loop.stop()
