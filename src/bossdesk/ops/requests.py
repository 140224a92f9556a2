"""
Typed request objects for operations.

Each dataclass represents the *input* contract for a single operation
function. Requests carry only validated, transport-agnostic data.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bossdesk.models import JobSearchField, JobSortField, JobState, SortOrder, TimeRange


@dataclass(frozen=True, slots=True)
class ListJobsRequest:
    """Request for :func:`bossdesk.ops.jobs.list_jobs`.

    Attributes:
        queue: Queue name (``$1`` in every job statement).
        state: Optional state filter.
        search_text: Free text; matched as ``%text%`` case-insensitively.
        search_field: Column the search text is matched against.
        sort_by: Logical sort key, mapped to the generation's column.
        sort_order: ``ASC`` or ``DESC``; NULLs always sort last.
        limit: Page size.
        offset: Rows to skip.
    """

    queue: str = ""
    state: JobState | None = None
    search_text: str | None = None
    search_field: JobSearchField = JobSearchField.UUID
    sort_by: JobSortField = JobSortField.CREATED_ON
    sort_order: SortOrder = SortOrder.DESC
    limit: int = 50
    offset: int = 0


@dataclass(frozen=True, slots=True)
class JobIdsRequest:
    """Request for the per-id bulk mutations in :mod:`bossdesk.ops.jobs`."""

    queue: str = ""
    job_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class QueueActionRequest:
    """Request for queue-wide mutations (retry-failed, purge, …)."""

    queue: str = ""


@dataclass(frozen=True, slots=True)
class DashboardRequest:
    """Request for :func:`bossdesk.ops.dashboard.refresh_dashboard`."""

    queue: str = ""
    time_range: TimeRange = TimeRange.TWENTY_FOUR_HOURS
