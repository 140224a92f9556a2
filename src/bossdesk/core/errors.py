"""
Structured error types for bossdesk.

Provides a small hierarchy of typed errors with metadata for retry decisions,
user-facing remediation hints, and root cause analysis through error chaining.

Manifesto:
    - **Typed Error Hierarchy:** Detection, connection, query and config
      failures are distinct types, not string matches
    - **Actionable:** Every error a user can act on carries a ``hint``
    - **Explicit Retry Semantics:** Each error knows if it's retryable;
      nothing inside the core retries on its own
    - **Error Chaining:** Preserve driver exceptions as ``cause``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        BossDeskError                          │
        │            (category, retryable, hint, cause)                 │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  ConnectionFailedError   QueryFailedError    ConfigError      │
        │  (NETWORK, retryable)    (DATABASE)          (CONFIG)         │
        │                                                   │           │
        │                                     InvalidSchemaNameError    │
        │                                                               │
        │  SchemaDetectionError (DETECTION)                             │
        │     ├── VersionTableNotFoundError                             │
        │     ├── NoVersionFoundError                                   │
        │     ├── UnsupportedVersionError                               │
        │     └── DetectionConnectionError                              │
        │                                                               │
        │  ExecutorError (raw driver failure, carries SQLSTATE)         │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = UnsupportedVersionError(19)
    >>> error.code
    'UNSUPPORTED_VERSION'
    >>> "too old" in error.hint
    True

Tags:
    error-handling, exception-hierarchy, detection, bossdesk
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# SQLSTATE for "relation does not exist"
UNDEFINED_TABLE = "42P01"


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    NETWORK = "NETWORK"           # Transport, auth, pool exhaustion
    DATABASE = "DATABASE"         # Malformed SQL, constraint, permission
    DETECTION = "DETECTION"       # Schema version could not be resolved
    CONFIG = "CONFIG"             # Invalid settings or identifiers
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


class BossDeskError(Exception):
    """
    Base exception for all bossdesk errors.

    Subclasses set ``default_category``, ``default_retryable`` and ``code``
    class attributes; instances may override category and retryable.

    Attributes:
        message: Human-readable description.
        category: :class:`ErrorCategory` for routing.
        retryable: Whether the caller may retry the whole operation.
        hint: Remediation suggestion shown next to the message.
        cause: Underlying exception, also chained as ``__cause__``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False
    code: str = "INTERNAL"

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        hint: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.hint = hint
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.hint:
            result["hint"] = self.hint
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# EXECUTOR BOUNDARY
# =============================================================================


class ExecutorError(Exception):
    """Raw failure reported by an executor.

    Executors translate driver exceptions into this type so the core never
    imports a driver. ``sqlstate`` is the five-character PostgreSQL error
    code when the server produced one, else ``None``.
    """

    def __init__(self, message: str, *, sqlstate: str | None = None):
        super().__init__(message)
        self.message = message
        self.sqlstate = sqlstate

    @property
    def is_undefined_table(self) -> bool:
        return self.sqlstate == UNDEFINED_TABLE


# =============================================================================
# QUERY SERVICE ERRORS
# =============================================================================


class ConnectionFailedError(BossDeskError):
    """Transport or authentication failure."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True
    code = "CONNECTION_FAILED"

    def __init__(self, reason: str, **kwargs: Any):
        kwargs.setdefault("hint", "Check your connection settings and database credentials.")
        super().__init__(f"Connection failed: {reason}", **kwargs)
        self.reason = reason


class QueryFailedError(BossDeskError):
    """Malformed SQL, constraint violation, or permission failure."""

    default_category = ErrorCategory.DATABASE
    code = "QUERY_FAILED"

    def __init__(self, reason: str, *, sqlstate: str | None = None, **kwargs: Any):
        super().__init__(f"Query failed: {reason}", **kwargs)
        self.reason = reason
        self.sqlstate = sqlstate


# =============================================================================
# DETECTION ERRORS
# =============================================================================


class SchemaDetectionError(BossDeskError):
    """Base for failures resolving the installed schema version."""

    default_category = ErrorCategory.DETECTION
    code = "DETECTION_FAILED"


class VersionTableNotFoundError(SchemaDetectionError):
    """The version table (or its namespace) does not exist."""

    code = "VERSION_TABLE_NOT_FOUND"

    def __init__(self, schema: str, **kwargs: Any):
        super().__init__(
            "pg-boss schema not found. Ensure pg-boss is initialized in the database.",
            hint="Verify that pg-boss has been initialized by running a job queue in your application.",
            **kwargs,
        )
        self.schema = schema


class NoVersionFoundError(SchemaDetectionError):
    """The version table exists but holds no rows."""

    code = "NO_VERSION_FOUND"

    def __init__(self, schema: str, **kwargs: Any):
        super().__init__(
            "Could not detect pg-boss schema version. The version table may be empty.",
            hint="Check that the version table exists and contains at least one version record.",
            **kwargs,
        )
        self.schema = schema


class UnsupportedVersionError(SchemaDetectionError):
    """The recorded version is outside the supported range."""

    code = "UNSUPPORTED_VERSION"

    def __init__(self, version: int, *, minimum: int = 20, maximum: int = 27, **kwargs: Any):
        if version < minimum:
            hint = (
                f"Your pg-boss installation (schema v{version}) is too old. "
                "Upgrade to pg-boss v7 or later."
            )
        else:
            hint = (
                f"Your pg-boss installation (schema v{version}) is newer than supported. "
                "bossdesk may need an update."
            )
        super().__init__(
            f"Unsupported pg-boss schema version {version}. "
            f"bossdesk supports versions {minimum}-{maximum} (pg-boss v7-v11+).",
            hint=hint,
            **kwargs,
        )
        self.version = version


class DetectionConnectionError(SchemaDetectionError):
    """Any other failure while running the detection query."""

    default_retryable = True
    code = "CONNECTION_FAILED"

    def __init__(self, reason: str, **kwargs: Any):
        super().__init__(
            f"Failed to connect: {reason}",
            hint="Check your connection settings and database credentials.",
            **kwargs,
        )
        self.reason = reason


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(BossDeskError):
    """Configuration error. Never retryable."""

    default_category = ErrorCategory.CONFIG
    code = "INVALID_CONFIGURATION"


class InvalidSchemaNameError(ConfigError):
    """Schema name is not a safe unquoted PostgreSQL identifier."""

    code = "INVALID_SCHEMA_NAME"

    def __init__(self, schema: str, **kwargs: Any):
        super().__init__(
            f"Invalid schema name: {schema!r}",
            hint=(
                "Schema names must start with a lowercase letter or underscore, and contain "
                "only lowercase letters, numbers, underscores, or dollar signs."
            ),
            **kwargs,
        )
        self.schema = schema


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def wrap_executor_error(error: Exception) -> BossDeskError:
    """Collapse an executor failure into the query-service two-way split.

    :class:`ExecutorError` with a SQLSTATE means the server answered, so the
    query failed. Anything else means the transport never got that far.
    """
    if isinstance(error, BossDeskError):
        return error
    if isinstance(error, ExecutorError) and error.sqlstate is not None:
        return QueryFailedError(error.message, sqlstate=error.sqlstate, cause=error)
    return ConnectionFailedError(str(error), cause=error)


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, BossDeskError):
        return error.retryable
    return isinstance(error, ConnectionError | TimeoutError)


__all__ = [
    "UNDEFINED_TABLE",
    "ErrorCategory",
    "BossDeskError",
    "ExecutorError",
    "ConnectionFailedError",
    "QueryFailedError",
    "SchemaDetectionError",
    "VersionTableNotFoundError",
    "NoVersionFoundError",
    "UnsupportedVersionError",
    "DetectionConnectionError",
    "ConfigError",
    "InvalidSchemaNameError",
    "wrap_executor_error",
    "is_retryable",
]
