"""
Operations layer: query services over a detected pg-boss schema.

- All functions accept ``OperationContext`` as first argument
- All functions return ``OperationResult[T]`` (never raise)
- Mutations honour ``dry_run`` and skip the write

Usage::

    from bossdesk.ops import OperationContext
    from bossdesk.ops.queues import list_queues

    ctx = OperationContext(executor=PostgresExecutor(config))
    result = list_queues(ctx)
    assert result.success
"""

from bossdesk.ops.context import OperationContext
from bossdesk.ops.result import OperationError, OperationResult, PagedResult

__all__ = [
    "OperationContext",
    "OperationError",
    "OperationResult",
    "PagedResult",
]
