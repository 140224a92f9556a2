"""
Adapter registry: one detected version and adapter per (connection, schema).

The registry is the only process-wide mutable state in bossdesk, so it is
an explicitly constructed object that callers pass down rather than a
module global. Tests build isolated instances.

Example:
    registry = AdapterRegistry()
    adapter = registry.get_adapter("prod", "pgboss", executor)
    registry.detected_version("prod", "pgboss")   # SchemaVersion(27)
    registry.clear("prod")                        # connection settings changed
"""

from __future__ import annotations

import threading

from bossdesk.core.connection import validate_schema_name
from bossdesk.core.logging import get_logger
from bossdesk.core.protocols import Executor
from bossdesk.schema.adapters import SchemaAdapter, adapter_for_group
from bossdesk.schema.detector import SchemaDetector
from bossdesk.schema.version import SchemaVersion

logger = get_logger(__name__)

CacheKey = tuple[str, str]


class AdapterRegistry:
    """Memoizing ``(connection_id, schema) → adapter`` map.

    Map access is guarded by one lock. Detection runs outside it under a
    per-key lock, so concurrent misses on the same key detect once while
    other keys are not blocked by a slow database.

    Each key carries a generation that :meth:`clear` and :meth:`clear_all`
    bump. A detection that started before an invalidation still answers its
    caller but is not cached.
    """

    def __init__(self, detector: SchemaDetector | None = None):
        self._detector = detector or SchemaDetector()
        self._lock = threading.Lock()
        self._adapters: dict[CacheKey, SchemaAdapter] = {}
        self._versions: dict[CacheKey, SchemaVersion] = {}
        self._key_locks: dict[CacheKey, threading.Lock] = {}
        self._generations: dict[CacheKey, int] = {}

    def get_adapter(self, connection_id: str, schema: str, executor: Executor) -> SchemaAdapter:
        key = (connection_id, validate_schema_name(schema))
        with self._lock:
            cached = self._adapters.get(key)
            if cached is not None:
                return cached
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                cached = self._adapters.get(key)
                generation = self._generations.get(key, 0)
            if cached is not None:
                return cached

            version = self._detector.detect(executor, schema)
            adapter = self.create_adapter(version, schema)
            with self._lock:
                stale = self._generations.get(key, 0) != generation
                if not stale:
                    self._versions[key] = version
                    self._adapters[key] = adapter
            if stale:
                logger.debug("adapter_cache_skipped", connection_id=connection_id, schema=schema, reason="cleared")
                return adapter
            logger.debug(
                "adapter_cached",
                connection_id=connection_id,
                schema=schema,
                version=version.value,
                adapter=type(adapter).__name__,
            )
            return adapter

    @staticmethod
    def create_adapter(version: SchemaVersion, schema: str = "pgboss") -> SchemaAdapter:
        """Pure construction; unknown versions get the newest adapter."""
        return adapter_for_group(version.adapter_group, schema)

    @staticmethod
    def is_supported(version: SchemaVersion) -> bool:
        return version.is_supported

    def detected_version(self, connection_id: str, schema: str) -> SchemaVersion | None:
        with self._lock:
            return self._versions.get((connection_id, schema))

    def _invalidate(self, keys) -> None:
        for key in keys:
            self._adapters.pop(key, None)
            self._versions.pop(key, None)
            self._generations[key] = self._generations.get(key, 0) + 1

    def clear(self, connection_id: str, schema: str | None = None) -> None:
        """Drop cached entries for a connection (every schema when *schema* is None)."""
        with self._lock:
            keys = [
                key for key in self._adapters.keys() | self._versions.keys() | self._key_locks.keys()
                if key[0] == connection_id and (schema is None or key[1] == schema)
            ]
            self._invalidate(keys)
        logger.debug("adapter_cache_cleared", connection_id=connection_id, schema=schema, entries=len(keys))

    def clear_all(self) -> None:
        with self._lock:
            self._invalidate(list(self._adapters.keys() | self._versions.keys() | self._key_locks.keys()))
        logger.debug("adapter_cache_reset")

    def __len__(self) -> int:
        with self._lock:
            return len(self._adapters)


__all__ = ["AdapterRegistry"]
