"""
Protocol definitions for the database boundary.

Manifesto:
    Query services never import a driver. They depend on the shape of an
    executor: hand it SQL with ``$n`` placeholders plus positional params,
    get rows (or an affected-row count) back.

    - **Decoupling:** Services depend on shape, not implementation
    - **Testability:** A scripted fake satisfies the protocol in tests

Architecture:
    ::

        Executor Protocol:
        ┌────────────────────────────────────────────────────────┐
        │ execute(sql, params)        → list of row tuples       │
        │ execute_write(sql, params)  → affected row count       │
        │ close()                     → release pooled resources │
        └────────────────────────────────────────────────────────┘

        Implementations:
        ┌────────────────────────────────────────────────────────┐
        │ PostgresExecutor → psycopg2 ThreadedConnectionPool     │
        │ FakeExecutor     → tests/conftest.py                   │
        └────────────────────────────────────────────────────────┘

    Each call is its own short transaction. Failures surface as
    :class:`~bossdesk.core.errors.ExecutorError` (server answered, SQLSTATE
    attached) or :class:`~bossdesk.core.errors.ConnectionFailedError`.

Tags:
    protocol, executor, database, bossdesk
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Executor(Protocol):
    """Minimal synchronous SQL executor."""

    def execute(self, sql: str, params: Sequence[Any] = ()) -> list[tuple]:
        """Run a query and return every row. ``$1`` binds ``params[0]``."""
        ...

    def execute_write(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a mutation, commit it, and return the affected row count."""
        ...

    def close(self) -> None:
        """Release pooled resources. Idempotent."""
        ...


__all__ = ["Executor"]
