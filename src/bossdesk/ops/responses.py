"""
Typed response objects for operations.

Each dataclass represents the *output* of a single operation beyond the
generic :class:`OperationResult` envelope.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bossdesk.models import DashboardStats, QueueStatus, ThroughputData, TimeRange


@dataclass(frozen=True, slots=True)
class BulkResult:
    """Outcome of a per-id bulk mutation.

    Every id is attempted; ``succeeded`` counts the ones that went through.
    """

    attempted: int
    succeeded: int
    failed_ids: list[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return 0 < self.succeeded < self.attempted


@dataclass(frozen=True, slots=True)
class AffectedRows:
    """Outcome of a queue-wide mutation."""

    queue: str
    action: str
    rows: int
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class DashboardSnapshot:
    """One dashboard refresh.

    Sub-queries run independently with no shared snapshot; a failed one
    leaves its slot ``None`` and its message in ``errors``.
    """

    queue: str
    time_range: TimeRange
    status: QueueStatus | None = None
    stats: DashboardStats | None = None
    throughput: ThroughputData | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.errors


@dataclass(frozen=True, slots=True)
class ConnectionCheck:
    """Result payload for :func:`bossdesk.ops.health.test_connection`."""

    connected: bool
    message: str
    schema_version: int | None = None
    adapter_group: str | None = None
    latency_ms: float = 0.0
    cancelled: bool = False
