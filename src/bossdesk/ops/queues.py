"""
Queue operations.

Lists every queue in the schema with per-state counts and, where the
generation has a queue table, its retention/expiry policy.
"""

from __future__ import annotations

from dataclasses import replace

from bossdesk.core.logging import get_logger
from bossdesk.models import Queue, QueueConfig
from bossdesk.ops.context import OperationContext
from bossdesk.ops.result import SERVICE_ERRORS, OperationResult, start_timer

logger = get_logger(__name__)


def list_queues(ctx: OperationContext) -> OperationResult[list[Queue]]:
    """Per-queue counts grouped by state, ordered by name."""
    timer = start_timer()
    try:
        adapter = ctx.adapter()

        configs: dict[str, QueueConfig] = {}
        config_sql = adapter.fetch_queue_config_sql()
        if config_sql is not None:
            for row in ctx.executor.execute(config_sql):
                name, config = adapter.decode_queue_config(row)
                configs[name] = config

        rows = ctx.executor.execute(adapter.fetch_queues_sql())
        queues = [adapter.decode_queue(row) for row in rows]
        queues = [replace(q, config=configs.get(q.name)) for q in queues]
    except SERVICE_ERRORS as exc:
        logger.warning("list_queues_failed", schema=ctx.schema, error=str(exc))
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)
    except ValueError as exc:
        return OperationResult.fail("INVALID_DATA", f"Invalid data: {exc}", elapsed_ms=timer.elapsed_ms)

    logger.debug("queues_listed", schema=ctx.schema, count=len(queues))
    return OperationResult.ok(queues, elapsed_ms=timer.elapsed_ms)


def get_queue(ctx: OperationContext, name: str) -> OperationResult[Queue]:
    """A single queue from :func:`list_queues`."""
    result = list_queues(ctx)
    if not result.success:
        return OperationResult(
            success=False, error=result.error, elapsed_ms=result.elapsed_ms
        )
    for queue in result.data or []:
        if queue.name == name:
            return OperationResult.ok(queue, elapsed_ms=result.elapsed_ms)
    return OperationResult.fail(
        "NOT_FOUND", f"Queue '{name}' not found", elapsed_ms=result.elapsed_ms
    )
