"""Tests for bossdesk.ops.dashboard."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from bossdesk.core.errors import ExecutorError
from bossdesk.models import COMPLETED, DashboardStats, RecentCompletionMetrics, TimeRange
from bossdesk.ops.dashboard import (
    EPOCH,
    estimate_from_window,
    estimated_completion,
    get_dashboard_stats,
    get_queue_status,
    get_throughput,
    refresh_dashboard,
)
from bossdesk.ops.requests import DashboardRequest

NOW = datetime(2024, 6, 1, 12, 7, 30, tzinfo=UTC)
STATUS = "AS created_jobs"
RECENT = "15 minutes"
STATS = "AS total_jobs"
THROUGHPUT = "AS bucket"


class TestEstimates:
    def test_pending_times_mean(self):
        recent = RecentCompletionMetrics(completed_count=5, avg_processing_time=60.0)
        assert estimated_completion(10, recent) == 600

    @pytest.mark.parametrize(
        "recent",
        [
            RecentCompletionMetrics(),
            RecentCompletionMetrics(completed_count=0, avg_processing_time=60.0),
            RecentCompletionMetrics(completed_count=3, avg_processing_time=0.0),
            RecentCompletionMetrics(completed_count=3, avg_processing_time=None),
        ],
    )
    def test_no_estimate_without_sample(self, recent):
        assert estimated_completion(10, recent) is None

    def test_window_rate(self):
        # 120 completions in an hour = one every 30 s
        assert estimate_from_window(10, 120, TimeRange.ONE_HOUR) == pytest.approx(300)

    def test_window_rate_unbounded_or_empty(self):
        assert estimate_from_window(10, 120, TimeRange.ALL) is None
        assert estimate_from_window(0, 120, TimeRange.ONE_HOUR) is None
        assert estimate_from_window(10, 0, TimeRange.ONE_HOUR) is None


class TestFailureRate:
    def test_rate(self):
        assert DashboardStats(completed_jobs=95, failed_jobs=5).failure_rate == pytest.approx(5.0)

    def test_zero_processed(self):
        assert DashboardStats(total_jobs=4, cancelled_jobs=4).failure_rate == 0.0


class TestQueueStatus:
    def test_live_counts_and_estimate(self, ctx, executor):
        executor.on(STATUS, [(8, 3, 2)]).on(RECENT, [(5, Decimal("60"))])

        result = get_queue_status(ctx, "emails")

        assert result.success
        status = result.data
        assert (status.created_jobs, status.active_jobs, status.retry_jobs) == (8, 3, 2)
        assert status.pending_jobs == 10
        assert status.estimated_completion == 600

    def test_never_time_filtered(self, ctx, executor):
        executor.on(STATUS, [(0, 0, 0)])
        get_queue_status(ctx, "emails")
        (_, params), = executor.sql_containing(STATUS)
        assert params == ["emails"]

    def test_no_recent_completions(self, ctx, executor):
        executor.on(STATUS, [(4, 0, 0)]).on(RECENT, [(0, None)])
        assert get_queue_status(ctx, "emails").data.estimated_completion is None


class TestDashboardStats:
    def test_bounded_range_passes_start(self, ctx, executor):
        executor.on(STATS, [(100, 95, 5, 0, Decimal("1.5"), Decimal("0.25"), None)])

        result = get_dashboard_stats(ctx, "emails", TimeRange.TWENTY_FOUR_HOURS, now=NOW)

        stats = result.data
        assert stats.total_jobs == 100
        assert stats.failure_rate == pytest.approx(5.0)
        assert stats.avg_processing_time == 1.5
        assert stats.avg_end_to_end_time is None
        (sql, params), = executor.sql_containing(STATS)
        assert params == ["emails", NOW - timedelta(hours=24)]
        assert "$2" in sql

    def test_all_time_has_no_filter(self, ctx, executor):
        executor.on(STATS, [(0, 0, 0, 0, None, None, None)])
        get_dashboard_stats(ctx, "emails", TimeRange.ALL, now=NOW)
        (sql, params), = executor.sql_containing(STATS)
        assert params == ["emails"]
        assert "$2" not in sql


class TestThroughput:
    def test_series_is_normalized(self, ctx, executor):
        bucket = datetime(2024, 6, 1, 12, 5, tzinfo=UTC)
        executor.on(THROUGHPUT, [(bucket, "completed", 3)])

        result = get_throughput(ctx, "emails", TimeRange.ONE_HOUR, now=NOW)

        assert len(result.data.points) == 12
        assert result.data.categories() == [COMPLETED]
        (sql, params), = executor.sql_containing(THROUGHPUT)
        assert params == ["emails", datetime(2024, 6, 1, 11, 10, tzinfo=UTC)]
        assert "/ 300) * 300" in sql

    def test_leading_bucket_rows_are_kept(self, ctx, executor):
        executor.on(
            THROUGHPUT,
            [
                (datetime(2024, 6, 1, 11, 10, tzinfo=UTC), "completed", 4),
                (datetime(2024, 6, 1, 12, 5, tzinfo=UTC), "completed", 1),
            ],
        )

        result = get_throughput(ctx, "emails", TimeRange.ONE_HOUR, now=NOW)

        points = result.data.points
        assert sum(p.count for p in points) == 5
        assert points[0].count == 4
        (_, params), = executor.sql_containing(THROUGHPUT)
        assert params[1] == points[0].timestamp

    def test_all_time_starts_at_epoch(self, ctx, executor):
        get_throughput(ctx, "emails", TimeRange.ALL, now=NOW)
        (sql, params), = executor.sql_containing(THROUGHPUT)
        assert params == ["emails", EPOCH]
        assert "/ 86400) * 86400" in sql


class TestRefreshDashboard:
    def test_composes_every_slot(self, ctx, executor):
        executor.on(STATUS, [(1, 0, 0)])
        executor.on(STATS, [(10, 9, 1, 0, None, None, None)])

        result = refresh_dashboard(ctx, DashboardRequest(queue="emails", time_range=TimeRange.ONE_HOUR), now=NOW)

        snapshot = result.data
        assert snapshot.complete
        assert snapshot.stats.completed_jobs == 9
        assert snapshot.status.created_jobs == 1
        assert snapshot.throughput.points == ()

    def test_failed_slot_does_not_abort_others(self, ctx, executor):
        executor.on(STATS, ExecutorError("canceling statement due to statement timeout", sqlstate="57014"))
        executor.on(STATUS, [(2, 1, 0)])

        result = refresh_dashboard(ctx, DashboardRequest(queue="emails"), now=NOW)

        assert result.success
        snapshot = result.data
        assert not snapshot.complete
        assert snapshot.stats is None
        assert "statement timeout" in snapshot.errors["stats"]
        assert snapshot.status.created_jobs == 2
        assert result.warnings

    def test_detection_failure_fails_outright(self, ctx, executor):
        executor.on(".version", [(30,)])
        result = refresh_dashboard(ctx, DashboardRequest(queue="emails"), now=NOW)
        assert not result.success
        assert result.error.code == "UNSUPPORTED_VERSION"
