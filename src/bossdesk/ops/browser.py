"""
Queue browser session: paging, filters and dashboard state for one queue.

Holds what an interactive view keeps between refreshes (current page,
filters, sort, selection, dashboard range) and drives the stateless ops
functions. Filter changes reset to the first page. A refresh that finds
the current page past the end clamps to the last valid page and refetches.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime

from bossdesk.core.cancellation import CancellationToken
from bossdesk.core.logging import get_logger
from bossdesk.models import (
    DashboardStats,
    Job,
    JobSearchField,
    JobSortField,
    JobState,
    QueueStatus,
    SortOrder,
    ThroughputData,
    TimeRange,
)
from bossdesk.ops import dashboard
from bossdesk.ops.context import OperationContext
from bossdesk.ops.jobs import cancel_jobs, delete_jobs, list_jobs, retry_jobs
from bossdesk.ops.requests import JobIdsRequest, ListJobsRequest
from bossdesk.ops.responses import BulkResult
from bossdesk.ops.result import OperationError, OperationResult

logger = get_logger(__name__)


def total_pages(total_jobs: int, page_size: int) -> int:
    """Page count; an empty queue still has one (empty) page."""
    if total_jobs <= 0:
        return 1
    return math.ceil(total_jobs / page_size)


class QueueBrowser:
    def __init__(self, ctx: OperationContext, queue: str, *, page_size: int = 50):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.ctx = ctx
        self.queue = queue
        self.page_size = page_size

        self.state_filter: JobState | None = None
        self.search_text = ""
        self.search_field = JobSearchField.UUID
        self.sort_by = JobSortField.CREATED_ON
        self.sort_order = SortOrder.DESC
        self.current_page = 0

        self.jobs: list[Job] = []
        self.total_jobs = 0
        self.selected_ids: set[str] = set()
        self.error: OperationError | None = None

        self.time_range = TimeRange.TWENTY_FOUR_HOURS
        self.status = QueueStatus()
        self.stats = DashboardStats()
        self.throughput = ThroughputData()

    # -- paging ----------------------------------------------------------

    @property
    def total_pages(self) -> int:
        return total_pages(self.total_jobs, self.page_size)

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages - 1

    @property
    def has_previous_page(self) -> bool:
        return self.current_page > 0

    def _request(self) -> ListJobsRequest:
        return ListJobsRequest(
            queue=self.queue,
            state=self.state_filter,
            search_text=self.search_text or None,
            search_field=self.search_field,
            sort_by=self.sort_by,
            sort_order=self.sort_order,
            limit=self.page_size,
            offset=self.current_page * self.page_size,
        )

    def refresh_jobs(self) -> bool:
        """Fetch the current page; returns ``False`` and sets ``error`` on failure."""
        while True:
            result = list_jobs(self.ctx, self._request())
            if not result.success:
                self.error = result.error
                self.jobs = []
                self.total_jobs = 0
                return False

            self.error = None
            self.jobs = list(result.data or [])
            self.total_jobs = result.total

            if self.current_page < self.total_pages:
                return True
            # The job count shrank under us
            clamped = max(0, self.total_pages - 1)
            logger.debug("page_clamped", queue=self.queue, page=self.current_page, clamped=clamped)
            self.current_page = clamped

    def next_page(self) -> bool:
        if not self.has_next_page:
            return False
        self.current_page += 1
        return self.refresh_jobs()

    def previous_page(self) -> bool:
        if not self.has_previous_page:
            return False
        self.current_page -= 1
        return self.refresh_jobs()

    def go_to_page(self, page: int) -> bool:
        if not 0 <= page < self.total_pages:
            return False
        self.current_page = page
        return self.refresh_jobs()

    # -- filters ---------------------------------------------------------

    def set_state_filter(self, state: JobState | None) -> bool:
        self.state_filter = state
        self.current_page = 0
        return self.refresh_jobs()

    def set_search(self, text: str, field: JobSearchField = JobSearchField.UUID) -> bool:
        self.search_text = text
        self.search_field = field
        self.current_page = 0
        return self.refresh_jobs()

    def set_sorting(self, sort_by: JobSortField, order: SortOrder) -> bool:
        self.sort_by = sort_by
        self.sort_order = order
        return self.refresh_jobs()

    def toggle_sort_order(self) -> bool:
        self.sort_order = self.sort_order.toggled()
        return self.refresh_jobs()

    # -- selection + bulk ------------------------------------------------

    def select_all(self) -> None:
        self.selected_ids = {job.id for job in self.jobs}

    def clear_selection(self) -> None:
        self.selected_ids.clear()

    def _bulk(self, operation) -> OperationResult[BulkResult]:
        request = JobIdsRequest(queue=self.queue, job_ids=sorted(self.selected_ids))
        result = operation(self.ctx, request)
        if result.success:
            self.selected_ids.clear()
            self.refresh_jobs()
        return result

    def retry_selected(self) -> OperationResult[BulkResult]:
        return self._bulk(retry_jobs)

    def cancel_selected(self) -> OperationResult[BulkResult]:
        return self._bulk(cancel_jobs)

    def delete_selected(self) -> OperationResult[BulkResult]:
        return self._bulk(delete_jobs)

    # -- dashboard -------------------------------------------------------

    def refresh_status(self) -> bool:
        result = dashboard.get_queue_status(self.ctx, self.queue)
        if not result.success:
            self.error = result.error
            self.status = QueueStatus()
            return False
        self.status = result.data
        return True

    def refresh_dashboard(self, *, now: datetime | None = None) -> bool:
        result = dashboard.refresh_dashboard(
            self.ctx, dashboard.DashboardRequest(queue=self.queue, time_range=self.time_range), now=now
        )
        if not result.success:
            self.error = result.error
            return False
        snapshot = result.data
        self.stats = snapshot.stats or DashboardStats(time_range=self.time_range)
        self.throughput = snapshot.throughput or ThroughputData()
        self.status = snapshot.status or QueueStatus()
        return snapshot.complete

    def set_time_range(self, time_range: TimeRange, *, now: datetime | None = None) -> bool:
        """Refresh historical stats and throughput only.

        Live counts are kept; the drain estimate is recomputed from the new
        window's completion rate.
        """
        self.time_range = time_range
        stats = dashboard.get_dashboard_stats(self.ctx, self.queue, time_range, now=now)
        if not stats.success:
            self.error = stats.error
            self.stats = DashboardStats(time_range=time_range)
            return False
        self.stats = stats.data

        throughput = dashboard.get_throughput(self.ctx, self.queue, time_range, now=now)
        self.throughput = throughput.data if throughput.success else ThroughputData()

        if self.status.pending_jobs > 0 and self.stats.completed_jobs > 0:
            self.status = replace(
                self.status,
                estimated_completion=dashboard.estimate_from_window(
                    self.status.pending_jobs, self.stats.completed_jobs, time_range
                ),
            )
        return throughput.success

    # -- auto refresh ----------------------------------------------------

    def refresh(self, token: CancellationToken | None = None) -> None:
        """One auto-refresh cycle; stops between steps once *token* is cancelled."""
        for step in (self.refresh_jobs, self.refresh_status):
            if token is not None:
                token.raise_if_cancelled()
            step()
