"""Tests for bossdesk.ops.queues."""

from bossdesk.core.errors import ExecutorError
from bossdesk.ops.queues import get_queue, list_queues
from tests._support.fakes import FakeExecutor, queue_row

QUEUES = "GROUP BY name ORDER BY name"
CONFIG = "FROM pgboss.queue"


class TestListQueues:
    def test_counts_and_config_merge(self, ctx, executor):
        executor.on(QUEUES, [queue_row("emails", created=3, completed=10), queue_row("reports", failed=2)])
        executor.on(CONFIG, [("emails", 1209600, None, 900, 2, "standard")])

        result = list_queues(ctx)

        assert result.success
        emails, reports = result.data
        assert emails.name == "emails"
        assert emails.stats.total == 13
        assert emails.config.retention_seconds == 1209600
        assert emails.config.policy == "standard"
        assert reports.config is None

    def test_camel_case_skips_config_query(self, registry):
        from bossdesk.ops.context import OperationContext

        executor = FakeExecutor(version=22).on(QUEUES, [queue_row("emails", created=1)])
        ctx = OperationContext(executor=executor, registry=registry)

        result = list_queues(ctx)

        assert result.success
        assert result.data[0].config is None
        assert executor.sql_containing(CONFIG) == []

    def test_v10_retention_is_converted(self, registry):
        from bossdesk.ops.context import OperationContext

        executor = FakeExecutor(version=24)
        executor.on(QUEUES, [queue_row("emails")]).on(CONFIG, [("emails", 30, 60, 1, "short")])
        ctx = OperationContext(executor=executor, registry=registry)

        result = list_queues(ctx)

        assert result.data[0].config.retention_seconds == 1800

    def test_query_failure_envelope(self, ctx, executor):
        executor.on(QUEUES, ExecutorError("syntax error", sqlstate="42601"))

        result = list_queues(ctx)

        assert not result.success
        assert result.error.code == "QUERY_FAILED"
        assert result.error.details["sqlstate"] == "42601"

    def test_detection_failure_envelope(self, ctx, executor):
        executor.on(".version", ExecutorError("no such table", sqlstate="42P01"))

        result = list_queues(ctx)

        assert not result.success
        assert result.error.code == "VERSION_TABLE_NOT_FOUND"
        assert "hint" in result.error.details


class TestGetQueue:
    def test_found(self, ctx, executor):
        executor.on(QUEUES, [queue_row("a"), queue_row("b", active=4)])
        result = get_queue(ctx, "b")
        assert result.success
        assert result.data.stats.active == 4

    def test_not_found(self, ctx, executor):
        executor.on(QUEUES, [queue_row("a")])
        result = get_queue(ctx, "zzz")
        assert not result.success
        assert result.error.code == "NOT_FOUND"
