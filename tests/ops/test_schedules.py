"""Tests for bossdesk.ops.schedules."""

from datetime import UTC, datetime

from bossdesk.core.errors import ExecutorError
from bossdesk.ops.context import OperationContext
from bossdesk.ops.schedules import list_schedules
from tests._support.fakes import FakeExecutor

SCHEDULES = "FROM pgboss.schedule"
WHEN = datetime(2024, 1, 1, tzinfo=UTC)


class TestListSchedules:
    def test_keyed_schedules(self, ctx, executor):
        executor.on(SCHEDULES, [
            ("cleanup", "", "0 * * * *", "UTC", None, None, WHEN, WHEN),
            ("report", "eu", "0 3 * * *", "Europe/Berlin", '{"region": "eu"}', "{}", WHEN, WHEN),
        ])

        result = list_schedules(ctx)

        assert result.success
        assert [s.id for s in result.data] == ["cleanup", "report:eu"]
        assert result.data[1].timezone == "Europe/Berlin"

    def test_v10_has_no_key(self, registry):
        executor = FakeExecutor(version=25).on(SCHEDULES, [("nightly", "0 1 * * *", "UTC", None, None, WHEN, WHEN)])
        result = list_schedules(OperationContext(executor=executor, registry=registry))
        assert result.data[0].key is None
        assert "key" not in executor.sql_containing(SCHEDULES)[0][0]

    def test_camel_case_reports_unsupported(self, registry):
        executor = FakeExecutor(version=20)
        result = list_schedules(OperationContext(executor=executor, registry=registry))
        assert result.success
        assert result.data == []
        assert result.metadata["supported"] is False
        assert executor.sql_containing(SCHEDULES) == []

    def test_failure(self, ctx, executor):
        executor.on(SCHEDULES, ExecutorError("permission denied for table schedule", sqlstate="42501"))
        result = list_schedules(ctx)
        assert result.error.code == "QUERY_FAILED"
