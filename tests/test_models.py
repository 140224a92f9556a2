"""Tests for bossdesk.models."""

from datetime import UTC, datetime, timedelta

import pytest

from bossdesk.models import (
    QueueConfig,
    QueueStatus,
    Schedule,
    SortOrder,
    ThroughputData,
    ThroughputDataPoint,
    TimeRange,
    format_duration,
)


class TestTimeRange:
    @pytest.mark.parametrize(
        "time_range, width",
        [
            (TimeRange.ONE_HOUR, 300),
            (TimeRange.THREE_HOURS, 900),
            (TimeRange.TWENTY_FOUR_HOURS, 3600),
            (TimeRange.SEVEN_DAYS, 86400),
            (TimeRange.THIRTY_DAYS, 86400),
            (TimeRange.ALL, 86400),
        ],
    )
    def test_bucket_width(self, time_range, width):
        assert time_range.bucket_seconds == width

    def test_start_date(self):
        now = datetime(2024, 6, 1, tzinfo=UTC)
        assert TimeRange.SEVEN_DAYS.start_date(now) == now - timedelta(days=7)
        assert TimeRange.ALL.start_date(now) is None
        assert TimeRange.ALL.duration is None

    def test_display_name(self):
        assert TimeRange.THREE_HOURS.display_name == "3 Hours"


class TestFormatting:
    @pytest.mark.parametrize(
        "seconds, text",
        [(None, "-"), (45, "45s"), (125, "2m 5s"), (120, "2m"), (11400, "3h 10m"), (7200, "2h")],
    )
    def test_format_duration(self, seconds, text):
        assert format_duration(seconds) == text

    @pytest.mark.parametrize(
        "seconds, text",
        [(None, None), (30, "30s"), (300, "5m"), (7200, "2h"), (604800, "7d")],
    )
    def test_format_seconds(self, seconds, text):
        assert QueueConfig.format_seconds(seconds) == text


class TestDerived:
    def test_pending_jobs(self):
        assert QueueStatus(created_jobs=3, active_jobs=9, retry_jobs=2).pending_jobs == 5

    def test_schedule_identity(self):
        when = datetime(2024, 1, 1, tzinfo=UTC)
        assert Schedule("a", "* * * * *", when, when).id == "a"
        assert Schedule("a", "* * * * *", when, when, key="k").id == "a:k"

    def test_sort_toggle(self):
        assert SortOrder.ASC.toggled() is SortOrder.DESC
        assert SortOrder.DESC.toggled() is SortOrder.ASC

    def test_throughput_categories_in_order(self):
        when = datetime(2024, 1, 1, tzinfo=UTC)
        data = ThroughputData(points=(
            ThroughputDataPoint(when, "Completed", 1),
            ThroughputDataPoint(when, "Failed", 0),
            ThroughputDataPoint(when + timedelta(hours=1), "Completed", 2),
        ))
        assert data.categories() == ["Completed", "Failed"]
