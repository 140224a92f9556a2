"""
CLI: job browsing and job/queue mutations.
"""

from __future__ import annotations

import typer

from bossdesk.cli.utils import (
    console,
    err_console,
    fail,
    open_context,
    output_result,
    print_json,
    print_table,
    print_warnings,
)
from bossdesk.models import JobSearchField, JobSortField, JobState, SortOrder
from bossdesk.ops.result import to_plain

JOB_COLUMNS = ("id", "state", "priority", "retry_count", "created_on", "started_on", "completed_on")


def list_jobs(
    queue: str = typer.Argument(..., help="Queue name"),
    state: JobState | None = typer.Option(None, "--state"),
    search: str | None = typer.Option(None, "--search", "-q", help="Case-insensitive substring."),
    field: JobSearchField = typer.Option(JobSearchField.UUID, "--field", help="Column searched by --search."),
    sort: JobSortField = typer.Option(JobSortField.CREATED_ON, "--sort"),
    order: SortOrder = typer.Option(SortOrder.DESC, "--order"),
    page: int = typer.Option(1, "--page", "-p", min=1, help="1-based page number."),
    page_size: int | None = typer.Option(None, "--page-size", "-n", min=1),
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List one page of a queue's jobs."""
    from bossdesk.core.settings import get_settings
    from bossdesk.ops.browser import QueueBrowser

    with open_context(schema) as ctx:
        browser = QueueBrowser(ctx, queue, page_size=page_size or get_settings().page_size)
        browser.state_filter = state
        browser.search_text = search or ""
        browser.search_field = field
        browser.sort_by = sort
        browser.sort_order = order
        browser.current_page = page - 1
        ok = browser.refresh_jobs()

    if not ok:
        if json_out:
            print_json({"success": False, "error": browser.error})
            raise typer.Exit(code=1)
        err = browser.error
        err_console.print(f"[bold red]Error[/bold red] ({err.code}): {err.message}")
        raise typer.Exit(code=1)

    if json_out:
        print_json({
            "items": browser.jobs,
            "total": browser.total_jobs,
            "page": browser.current_page + 1,
            "total_pages": browser.total_pages,
        })
        return

    if not browser.jobs:
        console.print("[dim]No jobs.[/dim]")
        return

    print_table([to_plain(job) for job in browser.jobs], title=f"Jobs: {queue}", columns=JOB_COLUMNS)
    console.print(
        f"\n[dim]Page {browser.current_page + 1} of {browser.total_pages}"
        f" ({browser.total_jobs} jobs)[/dim]"
    )


def _bulk(
    action: str, queue: str, job_ids: list[str], dry_run: bool, json_out: bool, schema: str | None
) -> None:
    from bossdesk.ops import jobs as job_ops
    from bossdesk.ops.requests import JobIdsRequest

    operation = {
        "retry": job_ops.retry_jobs,
        "cancel": job_ops.cancel_jobs,
        "delete": job_ops.delete_jobs,
    }[action]
    with open_context(schema, dry_run=dry_run) as ctx:
        result = operation(ctx, JobIdsRequest(queue=queue, job_ids=job_ids))

    if json_out or not result.success:
        output_result(result, as_json=json_out)
        return
    print_warnings(result)
    bulk = result.data
    console.print(f"{action}: {bulk.succeeded} of {bulk.attempted} jobs")
    for job_id in bulk.failed_ids:
        console.print(f"  [red]✗[/red] {job_id}")


def retry(
    queue: str = typer.Argument(..., help="Queue name"),
    job_ids: list[str] = typer.Argument(..., help="Job IDs"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Move jobs back to the retry state."""
    _bulk("retry", queue, job_ids, dry_run, json_out, schema)


def cancel(
    queue: str = typer.Argument(..., help="Queue name"),
    job_ids: list[str] = typer.Argument(..., help="Job IDs"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Cancel jobs."""
    _bulk("cancel", queue, job_ids, dry_run, json_out, schema)


def delete(
    queue: str = typer.Argument(..., help="Queue name"),
    job_ids: list[str] = typer.Argument(..., help="Job IDs"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Permanently delete jobs."""
    if not (yes or dry_run):
        typer.confirm(f"Delete {len(job_ids)} job(s) from '{queue}'?", abort=True)
    _bulk("delete", queue, job_ids, dry_run, json_out, schema)


def _queue_wide(action: str, queue: str, dry_run: bool, json_out: bool, schema: str | None) -> None:
    from bossdesk.ops import jobs as job_ops
    from bossdesk.ops.requests import QueueActionRequest

    operation = getattr(job_ops, action)
    with open_context(schema, dry_run=dry_run) as ctx:
        result = operation(ctx, QueueActionRequest(queue=queue))

    if json_out:
        output_result(result, as_json=True)
        return
    if not result.success:
        fail(result)
    print_warnings(result)
    affected = result.data
    suffix = " (dry run)" if affected.dry_run else ""
    console.print(f"{affected.action}: {affected.rows} jobs in '{affected.queue}'{suffix}")


def retry_failed(
    queue: str = typer.Argument(..., help="Queue name"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Retry every failed job in a queue."""
    _queue_wide("retry_all_failed", queue, dry_run, json_out, schema)


def cancel_pending(
    queue: str = typer.Argument(..., help="Queue name"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Cancel every created or retrying job in a queue."""
    _queue_wide("cancel_all_pending", queue, dry_run, json_out, schema)


def purge_completed(
    queue: str = typer.Argument(..., help="Queue name"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Delete every completed job in a queue."""
    if not (yes or dry_run):
        typer.confirm(f"Purge completed jobs from '{queue}'?", abort=True)
    _queue_wide("purge_completed", queue, dry_run, json_out, schema)


def purge_failed(
    queue: str = typer.Argument(..., help="Queue name"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    schema: str | None = typer.Option(None, "--schema", "-s", help="pg-boss schema name."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Delete every failed job in a queue."""
    if not (yes or dry_run):
        typer.confirm(f"Purge failed jobs from '{queue}'?", abort=True)
    _queue_wide("purge_failed", queue, dry_run, json_out, schema)
