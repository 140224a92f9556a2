"""
Connectivity check.

Opens a round trip to the database, then runs schema detection. The caller
may cancel through a :class:`CancellationToken`; the token is observed
before connecting and again once the connection answered, and a
cancellation is reported as ``"Cancelled"`` instead of raised.
"""

from __future__ import annotations

from bossdesk.core.cancellation import CancellationToken
from bossdesk.core.errors import SchemaDetectionError
from bossdesk.core.logging import get_logger
from bossdesk.ops.context import OperationContext
from bossdesk.ops.responses import ConnectionCheck
from bossdesk.ops.result import SERVICE_ERRORS, OperationResult, start_timer

logger = get_logger(__name__)

PING_SQL = "SELECT 1"


def _cancelled(elapsed_ms: float) -> OperationResult[ConnectionCheck]:
    logger.info("connection_test_cancelled")
    return OperationResult.ok(
        ConnectionCheck(connected=False, message="Cancelled", cancelled=True, latency_ms=elapsed_ms),
        elapsed_ms=elapsed_ms,
    )


def test_connection(
    ctx: OperationContext, token: CancellationToken | None = None
) -> OperationResult[ConnectionCheck]:
    """Check the connection and report the detected schema revision.

    A reachable database whose schema cannot be detected is still
    ``connected``; the detection error becomes the message.
    """
    token = token or CancellationToken()
    timer = start_timer()

    if token.cancelled:
        return _cancelled(timer.elapsed_ms)

    try:
        ctx.executor.execute(PING_SQL)
    except SERVICE_ERRORS as exc:
        logger.warning("connection_test_failed", connection_id=ctx.connection_id, error=str(exc))
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)
    latency_ms = timer.elapsed_ms

    if token.cancelled:
        return _cancelled(timer.elapsed_ms)

    try:
        adapter = ctx.adapter()
    except SchemaDetectionError as exc:
        return OperationResult.ok(
            ConnectionCheck(connected=True, message=exc.message, latency_ms=latency_ms),
            warnings=[exc.hint] if exc.hint else [],
            elapsed_ms=timer.elapsed_ms,
        )
    except SERVICE_ERRORS as exc:
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)

    version = ctx.registry.detected_version(ctx.connection_id, ctx.schema)
    check = ConnectionCheck(
        connected=True,
        message="Connected",
        schema_version=version.value if version is not None else None,
        adapter_group=adapter.group.value,
        latency_ms=latency_ms,
    )
    logger.info(
        "connection_test_ok",
        connection_id=ctx.connection_id,
        schema=ctx.schema,
        version=check.schema_version,
        latency_ms=round(latency_ms, 2),
    )
    return OperationResult.ok(check, elapsed_ms=timer.elapsed_ms)


# Keep pytest from collecting the check as a test when imported into a test module
test_connection.__test__ = False

__all__ = ["PING_SQL", "test_connection"]
