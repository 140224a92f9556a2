"""Tests for bossdesk.ops.result and bossdesk.ops.context."""

from datetime import UTC, datetime

from bossdesk.core.errors import (
    ConnectionFailedError,
    ErrorCategory,
    ExecutorError,
    NoVersionFoundError,
)
from bossdesk.models import JobState, TimeRange
from bossdesk.ops.context import OperationContext
from bossdesk.ops.responses import BulkResult
from bossdesk.ops.result import OperationResult, PagedResult, to_plain
from tests._support.fakes import FakeExecutor


class TestFromException:
    def test_sql_error_is_query_failed(self):
        result = OperationResult.from_exception(ExecutorError("bad", sqlstate="42601"))
        assert result.error.code == "QUERY_FAILED"
        assert result.error.category is ErrorCategory.DATABASE
        assert not result.error.retryable
        assert result.error.details == {"sqlstate": "42601"}

    def test_driver_error_without_sqlstate_is_connection(self):
        result = OperationResult.from_exception(ExecutorError("server closed the connection"))
        assert result.error.code == "CONNECTION_FAILED"
        assert result.error.retryable

    def test_os_error_is_connection(self):
        assert OperationResult.from_exception(OSError("reset")).error.code == "CONNECTION_FAILED"

    def test_typed_error_keeps_code_and_hint(self):
        result = OperationResult.from_exception(NoVersionFoundError("pgboss"))
        assert result.error.code == "NO_VERSION_FOUND"
        assert "version record" in result.error.details["hint"]

    def test_connection_failed_message(self):
        result = OperationResult.from_exception(ConnectionFailedError("timeout"))
        assert result.error.message == "Connection failed: timeout"


class TestSerialization:
    def test_to_plain(self):
        when = datetime(2024, 1, 1, tzinfo=UTC)
        assert to_plain({"state": JobState.FAILED, "at": when, "range": (TimeRange.ALL,)}) == {
            "state": "failed",
            "at": "2024-01-01T00:00:00+00:00",
            "range": ["all"],
        }

    def test_ok_to_dict(self):
        result = OperationResult.ok(BulkResult(attempted=2, succeeded=1, failed_ids=["b"]), warnings=["w"])
        d = result.to_dict()
        assert d["success"] is True
        assert d["data"] == {"attempted": 2, "succeeded": 1, "failed_ids": ["b"]}
        assert d["warnings"] == ["w"]

    def test_paged_to_dict(self):
        d = PagedResult.from_items([1, 2], total=5, limit=2, offset=2).to_dict()
        assert d["has_more"] is True
        assert d["total"] == 5

    def test_paged_result_is_generic_over_item_type(self):
        (item_type,) = PagedResult.__type_params__
        assert item_type.__name__ == "T"
        assert PagedResult[int].__origin__ is PagedResult


class TestContext:
    def test_defaults(self):
        ctx = OperationContext(executor=FakeExecutor())
        assert ctx.schema == "pgboss"
        assert ctx.connection_id == "default"
        assert not ctx.dry_run
        assert ctx.request_id

    def test_adapter_is_memoized(self, ctx, executor):
        assert ctx.adapter() is ctx.adapter()
        assert len(executor.sql_containing(".version")) == 1
