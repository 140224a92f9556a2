"""
Root Typer application for the bossdesk CLI.

Commands are flat (``bossdesk jobs QUEUE``); their implementations live in
the sibling modules and import the ops layer lazily.
"""

from __future__ import annotations

import typer
from typer import Typer

from bossdesk import __version__
from bossdesk.cli import health, jobs, queues

app = Typer(
    name="bossdesk",
    help="bossdesk: inspect pg-boss queues, jobs and schedules.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"bossdesk {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Overrides BOSSDESK_LOG_LEVEL."),
) -> None:
    """bossdesk CLI: pg-boss queue browser and metrics."""
    from bossdesk.core.logging import configure_logging
    from bossdesk.core.settings import get_settings

    settings = get_settings()
    configure_logging(level=log_level or settings.log_level, json_format=settings.json_logs)


# ── Command registration ─────────────────────────────────────────────────

app.command("version")(health.version)
app.command("ping")(health.ping)
app.command("queues")(queues.list_queues)
app.command("schedules")(queues.list_schedules)
app.command("dashboard")(queues.dashboard)
app.command("jobs")(jobs.list_jobs)
app.command("retry")(jobs.retry)
app.command("cancel")(jobs.cancel)
app.command("delete")(jobs.delete)
app.command("retry-failed")(jobs.retry_failed)
app.command("cancel-pending")(jobs.cancel_pending)
app.command("purge-completed")(jobs.purge_completed)
app.command("purge-failed")(jobs.purge_failed)
