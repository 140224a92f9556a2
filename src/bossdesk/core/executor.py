"""PostgreSQL executor backed by a psycopg2 connection pool."""

from __future__ import annotations

import re
import threading
from collections.abc import Sequence
from typing import Any

import psycopg2
import psycopg2.pool

from bossdesk.core.connection import ConnectionConfig
from bossdesk.core.errors import ConnectionFailedError, ExecutorError
from bossdesk.core.logging import get_logger

logger = get_logger(__name__)

# ``$n`` not preceded by an identifier character (schema names may contain ``$``)
_POSITIONAL = re.compile(r"(?<![\w$])\$(\d+)")


def to_pyformat(sql: str, params: Sequence[Any]) -> tuple[str, dict[str, Any]]:
    """Rewrite ``$n`` placeholders into psycopg2 named parameters.

    A placeholder may appear more than once (``$2`` in every FILTER clause
    of the dashboard query), so positions become names rather than a
    reordered tuple. Literal ``%`` is doubled first.

    >>> to_pyformat("SELECT 1 WHERE a = $1 AND b = $1", ["x"])
    ('SELECT 1 WHERE a = %(p1)s AND b = %(p1)s', {'p1': 'x'})
    """
    escaped = sql.replace("%", "%%")
    rewritten = _POSITIONAL.sub(lambda m: f"%(p{m.group(1)})s", escaped)
    named = {f"p{index}": value for index, value in enumerate(params, start=1)}
    return rewritten, named


class PostgresExecutor:
    """
    Executor over a lazily created ``ThreadedConnectionPool``.

    Every call borrows a connection, runs one statement in its own
    transaction, and returns the connection. Driver errors carrying a
    SQLSTATE become :class:`ExecutorError`; failures to obtain a connection
    become :class:`ConnectionFailedError`.
    """

    def __init__(self, config: ConnectionConfig, *, pool_min: int = 1, pool_max: int = 5):
        self._config = config
        self._pool_min = pool_min
        self._pool_max = pool_max
        self._pool: Any = None
        self._lock = threading.Lock()

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    def _get_pool(self) -> Any:
        with self._lock:
            if self._pool is None:
                try:
                    self._pool = psycopg2.pool.ThreadedConnectionPool(
                        minconn=self._pool_min,
                        maxconn=self._pool_max,
                        **self._config.connect_kwargs(),
                    )
                except psycopg2.Error as e:
                    logger.warning(
                        "pool_create_failed",
                        host=self._config.host,
                        database=self._config.database,
                        error=str(e),
                    )
                    raise ConnectionFailedError(str(e).strip(), cause=e) from e
                logger.debug(
                    "pool_created",
                    host=self._config.host,
                    database=self._config.database,
                    maxconn=self._pool_max,
                )
            return self._pool

    def _getconn(self) -> Any:
        pool = self._get_pool()
        try:
            return pool.getconn()
        except psycopg2.Error as e:
            # PoolError (exhausted/closed) is a psycopg2.Error too
            raise ConnectionFailedError(str(e).strip(), cause=e) from e

    def _run(self, sql: str, params: Sequence[Any], *, fetch: bool) -> Any:
        query, named = to_pyformat(sql, params)
        conn = self._getconn()
        broken = False
        try:
            with conn.cursor() as cur:
                cur.execute(query, named)
                result = cur.fetchall() if fetch else cur.rowcount
            conn.commit()
            return result
        except psycopg2.Error as e:
            broken = bool(conn.closed)
            if not broken:
                conn.rollback()
            logger.debug("statement_failed", sqlstate=e.pgcode, error=str(e).strip())
            raise ExecutorError(str(e).strip(), sqlstate=e.pgcode) from e
        finally:
            if self._pool is not None:
                self._pool.putconn(conn, close=broken)

    def execute(self, sql: str, params: Sequence[Any] = ()) -> list[tuple]:
        return [tuple(row) for row in self._run(sql, params, fetch=True)]

    def execute_write(self, sql: str, params: Sequence[Any] = ()) -> int:
        rowcount = self._run(sql, params, fetch=False)
        return max(rowcount, 0)

    def close(self) -> None:
        with self._lock:
            if self._pool is not None:
                self._pool.closeall()
                self._pool = None

    def __enter__(self) -> PostgresExecutor:
        return self

    def __exit__(self, *args) -> None:
        self.close()


__all__ = ["PostgresExecutor", "to_pyformat"]
