"""
Dashboard operations: live status, historical stats, throughput.

Live status is never time-filtered. Historical stats and throughput are
filtered to the requested window; throughput starts at the first bucket
of that window. The unbounded range omits the stats filter entirely and
starts throughput at the epoch.

The sub-queries share no transaction, so a refresh may observe slight skew
between them. :func:`refresh_dashboard` runs each one independently and
records per-slot failures instead of aborting.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from bossdesk.core.logging import LogContext, get_logger
from bossdesk.models import (
    DashboardStats,
    QueueStatus,
    RecentCompletionMetrics,
    ThroughputData,
    TimeRange,
)
from bossdesk.ops.context import OperationContext
from bossdesk.ops.requests import DashboardRequest
from bossdesk.ops.responses import DashboardSnapshot
from bossdesk.ops.result import SERVICE_ERRORS, OperationResult, start_timer
from bossdesk.ops.throughput import decode_throughput_rows, normalize_throughput, window_start

logger = get_logger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(UTC)


def _opt_float(value: Any) -> float | None:
    return None if value is None else float(value)


# ------------------------------------------------------------------ #
# Pure estimates
# ------------------------------------------------------------------ #


def estimated_completion(pending_jobs: int, recent: RecentCompletionMetrics) -> float | None:
    """Seconds to drain *pending_jobs* at the recent mean processing time.

    ``None`` unless the recent sample is non-empty with a positive mean.
    """
    mean = recent.avg_processing_time
    if recent.completed_count <= 0 or mean is None or mean <= 0:
        return None
    return pending_jobs * mean


def estimate_from_window(pending_jobs: int, completed_jobs: int, time_range: TimeRange) -> float | None:
    """Fallback estimate from the window's completion rate.

    Used when the dashboard range changes without a fresh live status.
    """
    duration = time_range.duration
    if duration is None or pending_jobs <= 0 or completed_jobs <= 0:
        return None
    per_second = completed_jobs / duration.total_seconds()
    return pending_jobs / per_second


# ------------------------------------------------------------------ #
# Queries
# ------------------------------------------------------------------ #


def fetch_recent_completion_metrics(ctx: OperationContext, queue: str) -> RecentCompletionMetrics:
    adapter = ctx.adapter()
    rows = ctx.executor.execute(adapter.recent_completion_metrics_sql(), [queue])
    if not rows:
        return RecentCompletionMetrics()
    count, avg = rows[0]
    return RecentCompletionMetrics(completed_count=int(count or 0), avg_processing_time=_opt_float(avg))


def _queue_status(ctx: OperationContext, queue: str) -> QueueStatus:
    adapter = ctx.adapter()
    recent = fetch_recent_completion_metrics(ctx, queue)
    rows = ctx.executor.execute(adapter.queue_status_sql(), [queue])
    created, active, retry = (int(v or 0) for v in (rows[0] if rows else (0, 0, 0)))
    return QueueStatus(
        created_jobs=created,
        active_jobs=active,
        retry_jobs=retry,
        estimated_completion=estimated_completion(created + retry, recent),
    )


def _dashboard_stats(ctx: OperationContext, queue: str, time_range: TimeRange, now: datetime) -> DashboardStats:
    adapter = ctx.adapter()
    start = time_range.start_date(now)
    params: list[Any] = [queue] if start is None else [queue, start]
    rows = ctx.executor.execute(adapter.dashboard_stats_sql(start is not None), params)
    if not rows:
        return DashboardStats(time_range=time_range)
    total, completed, failed, cancelled, processing, wait, end_to_end = rows[0]
    return DashboardStats(
        total_jobs=int(total or 0),
        completed_jobs=int(completed or 0),
        failed_jobs=int(failed or 0),
        cancelled_jobs=int(cancelled or 0),
        time_range=time_range,
        avg_processing_time=_opt_float(processing),
        avg_wait_time=_opt_float(wait),
        avg_end_to_end_time=_opt_float(end_to_end),
    )


def _throughput(ctx: OperationContext, queue: str, time_range: TimeRange, now: datetime) -> ThroughputData:
    adapter = ctx.adapter()
    start = window_start(time_range, now) or EPOCH
    rows = ctx.executor.execute(adapter.throughput_sql(time_range.bucket_seconds), [queue, start])
    points = normalize_throughput(decode_throughput_rows(rows), time_range, now)
    return ThroughputData(points=tuple(points))


def get_queue_status(ctx: OperationContext, queue: str) -> OperationResult[QueueStatus]:
    """Live created/active/retry counts plus the drain estimate."""
    timer = start_timer()
    try:
        status = _queue_status(ctx, queue)
    except SERVICE_ERRORS as exc:
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)
    return OperationResult.ok(status, elapsed_ms=timer.elapsed_ms)


def get_dashboard_stats(
    ctx: OperationContext, queue: str, time_range: TimeRange, *, now: datetime | None = None
) -> OperationResult[DashboardStats]:
    timer = start_timer()
    try:
        stats = _dashboard_stats(ctx, queue, time_range, _now(now))
    except SERVICE_ERRORS as exc:
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)
    return OperationResult.ok(stats, elapsed_ms=timer.elapsed_ms)


def get_throughput(
    ctx: OperationContext, queue: str, time_range: TimeRange, *, now: datetime | None = None
) -> OperationResult[ThroughputData]:
    timer = start_timer()
    try:
        data = _throughput(ctx, queue, time_range, _now(now))
    except SERVICE_ERRORS as exc:
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)
    return OperationResult.ok(data, elapsed_ms=timer.elapsed_ms)


def refresh_dashboard(
    ctx: OperationContext,
    request: DashboardRequest,
    *,
    now: datetime | None = None,
) -> OperationResult[DashboardSnapshot]:
    """Historical stats, throughput and live status for one queue.

    Fails outright only when the adapter cannot be resolved; otherwise
    individual sub-query failures are reported on the snapshot.
    """
    timer = start_timer()
    moment = _now(now)

    try:
        ctx.adapter()
    except SERVICE_ERRORS as exc:
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)

    errors: dict[str, str] = {}
    slots: dict[str, Any] = {}
    with LogContext(queue=request.queue, time_range=request.time_range.value):
        for slot, load in (
            ("stats", lambda: _dashboard_stats(ctx, request.queue, request.time_range, moment)),
            ("throughput", lambda: _throughput(ctx, request.queue, request.time_range, moment)),
            ("status", lambda: _queue_status(ctx, request.queue)),
        ):
            try:
                slots[slot] = load()
            except SERVICE_ERRORS as exc:
                errors[slot] = getattr(exc, "message", str(exc))
                logger.warning("dashboard_slot_failed", slot=slot, error=errors[slot])

    snapshot = DashboardSnapshot(
        queue=request.queue,
        time_range=request.time_range,
        status=slots.get("status"),
        stats=slots.get("stats"),
        throughput=slots.get("throughput"),
        errors=errors,
    )
    warnings = [f"{slot}: {message}" for slot, message in errors.items()]
    return OperationResult.ok(snapshot, warnings=warnings, elapsed_ms=timer.elapsed_ms)


__all__ = [
    "estimate_from_window",
    "estimated_completion",
    "fetch_recent_completion_metrics",
    "get_dashboard_stats",
    "get_queue_status",
    "get_throughput",
    "refresh_dashboard",
]
