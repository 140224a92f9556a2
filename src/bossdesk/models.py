"""Domain entities read from a pg-boss schema.

Manifesto:
    Every entity here is a read-derived snapshot, recomputed on each
    refresh. Only :class:`Job` has persisted transitions, and those are
    issued as single statements by :mod:`bossdesk.ops.jobs`; nothing in
    this module talks to the database.

Payloads (``data``, ``output``, schedule ``options``) stay opaque text.

Tags:
    bossdesk, models, dataclasses, pg-boss
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bossdesk.schema.columns import JobColumnMapping

# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


class JobState(str, Enum):
    CREATED = "created"
    RETRY = "retry"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class JobSearchField(str, Enum):
    """Which column a free-text job search matches against."""

    UUID = "uuid"
    INPUT_DATA = "input_data"
    OUTPUT_DATA = "output_data"

    @property
    def display_name(self) -> str:
        return {
            JobSearchField.UUID: "UUID",
            JobSearchField.INPUT_DATA: "Input Data",
            JobSearchField.OUTPUT_DATA: "Output Data",
        }[self]


class JobSortField(str, Enum):
    CREATED_ON = "created_on"
    STARTED_ON = "started_on"
    COMPLETED_ON = "completed_on"
    PRIORITY = "priority"
    STATE = "state"

    def column_name(self, mapping: JobColumnMapping) -> str:
        """Physical column for this sort key under *mapping*."""
        return getattr(mapping, self.value)


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    def toggled(self) -> SortOrder:
        return SortOrder.DESC if self is SortOrder.ASC else SortOrder.ASC


@dataclass(frozen=True, slots=True)
class Job:
    """One row of ``<schema>.job``.

    ``expire_in`` and ``retry_delay`` are in seconds regardless of how the
    installed generation stores them.
    """

    id: str
    name: str
    state: JobState
    priority: int
    data: str
    created_on: datetime
    started_on: datetime | None = None
    completed_on: datetime | None = None
    retry_count: int = 0
    retry_limit: int = 0
    output: str | None = None
    singleton_key: str | None = None
    singleton_on: datetime | None = None
    expire_in: int | None = None
    keep_until: datetime | None = None
    start_after: datetime | None = None
    retry_delay: int | None = None
    retry_backoff: bool | None = None


# ---------------------------------------------------------------------------
# Queues
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class QueueStats:
    created: int = 0
    retry: int = 0
    active: int = 0
    completed: int = 0
    failed: int = 0
    cancelled: int = 0

    @property
    def total(self) -> int:
        return (
            self.created + self.retry + self.active
            + self.completed + self.failed + self.cancelled
        )


@dataclass(frozen=True, slots=True)
class QueueConfig:
    """Per-queue policy from ``<schema>.queue``, normalized to seconds.

    ``deletion_seconds`` exists only on the newest generation.
    """

    retention_seconds: int | None = None
    deletion_seconds: int | None = None
    expire_seconds: int | None = None
    retry_limit: int | None = None
    policy: str | None = None

    @staticmethod
    def format_seconds(seconds: int | None) -> str | None:
        """Compact single-unit form: ``30s``, ``5m``, ``2h``, ``7d``."""
        if seconds is None:
            return None
        if seconds < 60:
            return f"{seconds}s"
        if seconds < 3600:
            return f"{seconds // 60}m"
        if seconds < 86400:
            return f"{seconds // 3600}h"
        return f"{seconds // 86400}d"


@dataclass(frozen=True, slots=True)
class Queue:
    name: str
    stats: QueueStats = field(default_factory=QueueStats)
    config: QueueConfig | None = None


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Schedule:
    name: str
    cron: str
    created_on: datetime
    updated_on: datetime
    key: str | None = None
    timezone: str | None = None
    data: str | None = None
    options: str | None = None

    @property
    def id(self) -> str:
        """``name`` alone, or ``name:key`` when the generation has keys."""
        if self.key:
            return f"{self.name}:{self.key}"
        return self.name


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class TimeRange(str, Enum):
    ONE_HOUR = "1h"
    THREE_HOURS = "3h"
    TWENTY_FOUR_HOURS = "24h"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"
    ALL = "all"

    @property
    def display_name(self) -> str:
        return _TIME_RANGE_NAMES[self]

    @property
    def duration(self) -> timedelta | None:
        """Window length, ``None`` for the unbounded range."""
        seconds = _TIME_RANGE_SECONDS[self]
        return timedelta(seconds=seconds) if seconds is not None else None

    @property
    def bucket_seconds(self) -> int:
        """Throughput bucket width; a function of the window only."""
        return _BUCKET_SECONDS[self]

    def start_date(self, now: datetime) -> datetime | None:
        duration = self.duration
        return now - duration if duration is not None else None


_TIME_RANGE_NAMES = {
    TimeRange.ONE_HOUR: "1 Hour",
    TimeRange.THREE_HOURS: "3 Hours",
    TimeRange.TWENTY_FOUR_HOURS: "24 Hours",
    TimeRange.SEVEN_DAYS: "7 Days",
    TimeRange.THIRTY_DAYS: "30 Days",
    TimeRange.ALL: "All Time",
}

_TIME_RANGE_SECONDS: dict[TimeRange, int | None] = {
    TimeRange.ONE_HOUR: 3600,
    TimeRange.THREE_HOURS: 3 * 3600,
    TimeRange.TWENTY_FOUR_HOURS: 24 * 3600,
    TimeRange.SEVEN_DAYS: 7 * 86400,
    TimeRange.THIRTY_DAYS: 30 * 86400,
    TimeRange.ALL: None,
}

_BUCKET_SECONDS = {
    TimeRange.ONE_HOUR: 300,
    TimeRange.THREE_HOURS: 900,
    TimeRange.TWENTY_FOUR_HOURS: 3600,
    TimeRange.SEVEN_DAYS: 86400,
    TimeRange.THIRTY_DAYS: 86400,
    TimeRange.ALL: 86400,
}


@dataclass(frozen=True, slots=True)
class RecentCompletionMetrics:
    """Jobs completed in the trailing 15 minutes."""

    completed_count: int = 0
    avg_processing_time: float | None = None


@dataclass(frozen=True, slots=True)
class QueueStatus:
    """Live counts, not time-windowed."""

    created_jobs: int = 0
    active_jobs: int = 0
    retry_jobs: int = 0
    estimated_completion: float | None = None

    @property
    def pending_jobs(self) -> int:
        return self.created_jobs + self.retry_jobs


@dataclass(frozen=True, slots=True)
class DashboardStats:
    total_jobs: int = 0
    completed_jobs: int = 0
    failed_jobs: int = 0
    cancelled_jobs: int = 0
    time_range: TimeRange = TimeRange.TWENTY_FOUR_HOURS
    avg_processing_time: float | None = None
    avg_wait_time: float | None = None
    avg_end_to_end_time: float | None = None

    @property
    def failure_rate(self) -> float:
        """Percentage of processed jobs that failed; 0 when none were processed."""
        processed = self.completed_jobs + self.failed_jobs
        if processed == 0:
            return 0.0
        return self.failed_jobs / processed * 100


COMPLETED = "Completed"
FAILED = "Failed"


@dataclass(frozen=True, slots=True)
class ThroughputDataPoint:
    timestamp: datetime  # bucket start
    category: str  # COMPLETED or FAILED
    count: int


@dataclass(frozen=True, slots=True)
class ThroughputData:
    points: tuple[ThroughputDataPoint, ...] = ()

    def categories(self) -> list[str]:
        seen: list[str] = []
        for point in self.points:
            if point.category not in seen:
                seen.append(point.category)
        return seen


def format_duration(seconds: float | None) -> str:
    """Human form for dashboard durations.

    >>> format_duration(None)
    '-'
    >>> format_duration(125)
    '2m 5s'
    >>> format_duration(11400)
    '3h 10m'
    """
    if seconds is None or seconds < 0:
        return "-"
    total = int(seconds)
    if total < 60:
        return f"{total}s"
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m" if minutes > 0 else f"{hours}h"
    if secs > 0:
        return f"{minutes}m {secs}s"
    return f"{minutes}m"


__all__ = [
    "COMPLETED",
    "FAILED",
    "DashboardStats",
    "Job",
    "JobSearchField",
    "JobSortField",
    "JobState",
    "Queue",
    "QueueConfig",
    "QueueStats",
    "QueueStatus",
    "RecentCompletionMetrics",
    "Schedule",
    "SortOrder",
    "ThroughputData",
    "ThroughputDataPoint",
    "TimeRange",
    "format_duration",
]
