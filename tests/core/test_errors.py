"""Tests for bossdesk.core.errors."""

import pytest

from bossdesk.core.errors import (
    BossDeskError,
    ConnectionFailedError,
    DetectionConnectionError,
    ErrorCategory,
    ExecutorError,
    InvalidSchemaNameError,
    NoVersionFoundError,
    QueryFailedError,
    SchemaDetectionError,
    UnsupportedVersionError,
    VersionTableNotFoundError,
    is_retryable,
    wrap_executor_error,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            VersionTableNotFoundError("pgboss"),
            NoVersionFoundError("pgboss"),
            UnsupportedVersionError(19),
            DetectionConnectionError("timeout"),
        ],
    )
    def test_detection_errors(self, error):
        assert isinstance(error, SchemaDetectionError)
        assert error.category is ErrorCategory.DETECTION
        assert error.hint

    def test_codes(self):
        assert ConnectionFailedError("x").code == "CONNECTION_FAILED"
        assert QueryFailedError("x").code == "QUERY_FAILED"
        assert InvalidSchemaNameError("X").code == "INVALID_SCHEMA_NAME"
        assert UnsupportedVersionError(30).code == "UNSUPPORTED_VERSION"

    def test_unsupported_version_message(self):
        error = UnsupportedVersionError(30)
        assert "30" in error.message
        assert "20-27" in error.message
        assert "newer" in error.hint

    def test_to_dict(self):
        cause = RuntimeError("socket closed")
        d = ConnectionFailedError("timeout", cause=cause).to_dict()
        assert d["code"] == "CONNECTION_FAILED"
        assert d["category"] == "NETWORK"
        assert d["retryable"] is True
        assert d["cause"] == "socket closed"
        assert "hint" in d

    def test_cause_is_chained(self):
        cause = ValueError("inner")
        assert BossDeskError("outer", cause=cause).__cause__ is cause


class TestWrapExecutorError:
    def test_sqlstate_means_query_failed(self):
        wrapped = wrap_executor_error(ExecutorError("bad column", sqlstate="42703"))
        assert isinstance(wrapped, QueryFailedError)
        assert wrapped.sqlstate == "42703"

    def test_no_sqlstate_means_connection(self):
        assert isinstance(wrap_executor_error(ExecutorError("eof")), ConnectionFailedError)
        assert isinstance(wrap_executor_error(OSError("reset")), ConnectionFailedError)

    def test_typed_errors_pass_through(self):
        error = NoVersionFoundError("pgboss")
        assert wrap_executor_error(error) is error

    def test_undefined_table(self):
        assert ExecutorError("missing", sqlstate="42P01").is_undefined_table
        assert not ExecutorError("missing").is_undefined_table


class TestRetryable:
    def test_retryable(self):
        assert is_retryable(ConnectionFailedError("x"))
        assert is_retryable(TimeoutError())
        assert not is_retryable(QueryFailedError("x"))
        assert not is_retryable(ValueError())
