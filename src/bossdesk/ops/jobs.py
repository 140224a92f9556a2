"""
Job operations.

Paged job listing with state/search filters, single-job state changes,
per-id bulk mutations, and queue-wide retry/cancel/purge statements.

Mutations are surfaced immediately and never retried. Bulk operations
attempt every id independently and report how many went through; a
partial result is a success with warnings, not a failure.
"""

from __future__ import annotations

from typing import Any

from bossdesk.core.logging import get_logger
from bossdesk.models import Job, JobSearchField, JobState
from bossdesk.ops.context import OperationContext
from bossdesk.ops.requests import JobIdsRequest, ListJobsRequest, QueueActionRequest
from bossdesk.ops.responses import AffectedRows, BulkResult
from bossdesk.ops.result import (
    SERVICE_ERRORS,
    OperationResult,
    PagedResult,
    start_timer,
)
from bossdesk.schema.adapters import SchemaAdapter, has_search

logger = get_logger(__name__)


def job_filter_params(
    queue: str,
    state: JobState | None,
    search_field: JobSearchField | None,
    search_text: str | None,
) -> list[Any]:
    """Positional values for the WHERE clause shared by count and fetch."""
    params: list[Any] = [queue]
    if state is not None:
        params.append(JobState(state).value)
    if has_search(search_field, search_text):
        params.append(f"%{search_text}%")
    return params


def list_jobs(ctx: OperationContext, request: ListJobsRequest) -> PagedResult[Job]:
    """One page of jobs plus the total matching the same filters."""
    timer = start_timer()

    if not request.queue:
        return PagedResult.fail("VALIDATION_FAILED", "queue is required", elapsed_ms=timer.elapsed_ms)
    if request.limit <= 0 or request.offset < 0:
        return PagedResult.fail(
            "VALIDATION_FAILED", "limit must be positive and offset non-negative",
            elapsed_ms=timer.elapsed_ms,
        )

    search_text = request.search_text or None
    search_field = request.search_field if search_text else None
    has_state = request.state is not None

    try:
        adapter = ctx.adapter()
        params = job_filter_params(request.queue, request.state, search_field, search_text)

        count_sql = adapter.count_jobs_sql(has_state, search_field, search_text)
        count_rows = ctx.executor.execute(count_sql, params)
        total = int(count_rows[0][0]) if count_rows else 0

        fetch_sql = adapter.fetch_jobs_sql(
            has_state,
            search_field,
            search_text,
            request.sort_by.column_name(adapter.job_columns),
            request.sort_order,
        )
        rows = ctx.executor.execute(fetch_sql, [*params, request.limit, request.offset])
        jobs = [adapter.decode_job(row) for row in rows]
    except SERVICE_ERRORS as exc:
        logger.warning("list_jobs_failed", queue=request.queue, error=str(exc))
        return PagedResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)
    except ValueError as exc:
        return PagedResult.fail("INVALID_DATA", f"Invalid data: {exc}", elapsed_ms=timer.elapsed_ms)

    return PagedResult.from_items(
        jobs,
        total=total,
        limit=request.limit,
        offset=request.offset,
        elapsed_ms=timer.elapsed_ms,
    )


# ------------------------------------------------------------------ #
# Single-job mutations
# ------------------------------------------------------------------ #


def _set_state(adapter: SchemaAdapter, ctx: OperationContext, job_id: str, state: JobState) -> int:
    return ctx.executor.execute_write(adapter.update_job_state_sql(), [state.value, job_id])


def _delete(adapter: SchemaAdapter, ctx: OperationContext, job_id: str) -> int:
    return ctx.executor.execute_write(adapter.delete_job_sql(), [job_id])


def _single(ctx: OperationContext, job_id: str, action: str, apply) -> OperationResult[str]:
    timer = start_timer()
    if not job_id:
        return OperationResult.fail("VALIDATION_FAILED", "job_id is required", elapsed_ms=timer.elapsed_ms)
    if ctx.dry_run:
        return OperationResult.ok(
            job_id, warnings=["dry run: no changes made"], elapsed_ms=timer.elapsed_ms,
            metadata={"dry_run": True, "action": action},
        )
    try:
        rows = apply(ctx.adapter(), ctx, job_id)
    except SERVICE_ERRORS as exc:
        logger.warning("job_mutation_failed", action=action, job_id=job_id, error=str(exc))
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)
    if rows == 0:
        return OperationResult.fail("NOT_FOUND", f"Job '{job_id}' not found", elapsed_ms=timer.elapsed_ms)
    logger.info("job_mutated", action=action, job_id=job_id)
    return OperationResult.ok(job_id, elapsed_ms=timer.elapsed_ms)


def retry_job(ctx: OperationContext, job_id: str) -> OperationResult[str]:
    return _single(ctx, job_id, "retry", lambda a, c, i: _set_state(a, c, i, JobState.RETRY))


def cancel_job(ctx: OperationContext, job_id: str) -> OperationResult[str]:
    return _single(ctx, job_id, "cancel", lambda a, c, i: _set_state(a, c, i, JobState.CANCELLED))


def delete_job(ctx: OperationContext, job_id: str) -> OperationResult[str]:
    """Irreversible; there is no soft delete."""
    return _single(ctx, job_id, "delete", _delete)


# ------------------------------------------------------------------ #
# Per-id bulk mutations
# ------------------------------------------------------------------ #


def _bulk(ctx: OperationContext, request: JobIdsRequest, action: str, apply) -> OperationResult[BulkResult]:
    timer = start_timer()
    ids = list(request.job_ids)

    if ctx.dry_run:
        return OperationResult.ok(
            BulkResult(attempted=len(ids), succeeded=0),
            warnings=["dry run: no changes made"],
            elapsed_ms=timer.elapsed_ms,
            metadata={"dry_run": True, "action": action},
        )

    try:
        adapter = ctx.adapter()
    except SERVICE_ERRORS as exc:
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)

    failed: list[str] = []
    for job_id in ids:
        try:
            if apply(adapter, ctx, job_id) == 0:
                failed.append(job_id)
        except SERVICE_ERRORS as exc:
            logger.warning("bulk_item_failed", action=action, job_id=job_id, error=str(exc))
            failed.append(job_id)

    result = BulkResult(attempted=len(ids), succeeded=len(ids) - len(failed), failed_ids=failed)
    warnings = [f"{len(failed)} of {len(ids)} jobs could not be {action}"] if failed else []
    logger.info(
        "bulk_mutation_done",
        action=action,
        queue=request.queue,
        attempted=result.attempted,
        succeeded=result.succeeded,
    )
    return OperationResult.ok(result, warnings=warnings, elapsed_ms=timer.elapsed_ms)


def retry_jobs(ctx: OperationContext, request: JobIdsRequest) -> OperationResult[BulkResult]:
    return _bulk(ctx, request, "retried", lambda a, c, i: _set_state(a, c, i, JobState.RETRY))


def cancel_jobs(ctx: OperationContext, request: JobIdsRequest) -> OperationResult[BulkResult]:
    return _bulk(ctx, request, "cancelled", lambda a, c, i: _set_state(a, c, i, JobState.CANCELLED))


def delete_jobs(ctx: OperationContext, request: JobIdsRequest) -> OperationResult[BulkResult]:
    return _bulk(ctx, request, "deleted", _delete)


# ------------------------------------------------------------------ #
# Queue-wide mutations
# ------------------------------------------------------------------ #


def _queue_wide(
    ctx: OperationContext, request: QueueActionRequest, action: str, sql_for
) -> OperationResult[AffectedRows]:
    timer = start_timer()
    if not request.queue:
        return OperationResult.fail("VALIDATION_FAILED", "queue is required", elapsed_ms=timer.elapsed_ms)
    if ctx.dry_run:
        return OperationResult.ok(
            AffectedRows(queue=request.queue, action=action, rows=0, dry_run=True),
            warnings=["dry run: no changes made"],
            elapsed_ms=timer.elapsed_ms,
        )
    try:
        rows = ctx.executor.execute_write(sql_for(ctx.adapter()), [request.queue])
    except SERVICE_ERRORS as exc:
        logger.warning("queue_mutation_failed", action=action, queue=request.queue, error=str(exc))
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)
    logger.info("queue_mutated", action=action, queue=request.queue, rows=rows)
    return OperationResult.ok(
        AffectedRows(queue=request.queue, action=action, rows=rows),
        elapsed_ms=timer.elapsed_ms,
    )


def retry_all_failed(ctx: OperationContext, request: QueueActionRequest) -> OperationResult[AffectedRows]:
    """failed → retry for every job in the queue."""
    return _queue_wide(ctx, request, "retry_failed", lambda a: a.retry_all_failed_sql())


def cancel_all_pending(ctx: OperationContext, request: QueueActionRequest) -> OperationResult[AffectedRows]:
    """created/retry → cancelled for every job in the queue."""
    return _queue_wide(ctx, request, "cancel_pending", lambda a: a.cancel_all_pending_sql())


def purge_completed(ctx: OperationContext, request: QueueActionRequest) -> OperationResult[AffectedRows]:
    return _queue_wide(ctx, request, "purge_completed", lambda a: a.purge_completed_sql())


def purge_failed(ctx: OperationContext, request: QueueActionRequest) -> OperationResult[AffectedRows]:
    return _queue_wide(ctx, request, "purge_failed", lambda a: a.purge_failed_sql())
