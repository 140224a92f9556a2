"""
Schedule operations.

Read-only listing of pg-boss cron schedules. Generations without a
schedule table return an empty list rather than an error.
"""

from __future__ import annotations

from bossdesk.core.logging import get_logger
from bossdesk.models import Schedule
from bossdesk.ops.context import OperationContext
from bossdesk.ops.result import SERVICE_ERRORS, OperationResult, start_timer

logger = get_logger(__name__)


def list_schedules(ctx: OperationContext) -> OperationResult[list[Schedule]]:
    """All schedules ordered by name (then key, where the generation has keys)."""
    timer = start_timer()
    try:
        adapter = ctx.adapter()
        sql = adapter.fetch_schedules_sql()
        if sql is None:
            return OperationResult.ok(
                [],
                elapsed_ms=timer.elapsed_ms,
                metadata={"supported": False, "adapter_group": adapter.group.value},
            )
        schedules = [adapter.decode_schedule(row) for row in ctx.executor.execute(sql)]
    except SERVICE_ERRORS as exc:
        logger.warning("list_schedules_failed", schema=ctx.schema, error=str(exc))
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)
    except ValueError as exc:
        return OperationResult.fail("INVALID_DATA", f"Invalid data: {exc}", elapsed_ms=timer.elapsed_ms)

    return OperationResult.ok(schedules, elapsed_ms=timer.elapsed_ms)
