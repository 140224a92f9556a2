"""
Request-scoped context for operations.

Every operation function receives an :class:`OperationContext` as its first
argument. The context carries the executor, the adapter registry, which
connection and schema to speak to, and a dry-run flag for mutations.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from bossdesk.core.connection import DEFAULT_SCHEMA
from bossdesk.core.protocols import Executor
from bossdesk.schema.adapters import SchemaAdapter
from bossdesk.schema.registry import AdapterRegistry


@dataclass
class OperationContext:
    """Context passed to every operation function.

    Attributes:
        executor: Database executor satisfying :class:`bossdesk.core.protocols.Executor`.
        registry: Adapter cache shared by every operation on this process.
        connection_id: Registry cache key for the target database.
        schema: pg-boss schema (namespace) name.
        request_id: Unique ID for this operation invocation (auto-generated).
        caller: Origin of the request, ``"cli"`` or ``"sdk"``.
        dry_run: When ``True``, mutations report what they would do and skip the write.
        metadata: Arbitrary key/value pairs forwarded to logging.
    """

    executor: Executor
    registry: AdapterRegistry = field(default_factory=AdapterRegistry)
    connection_id: str = "default"
    schema: str = DEFAULT_SCHEMA
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    dry_run: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    def adapter(self) -> SchemaAdapter:
        """Detected adapter for this connection/schema (memoized by the registry)."""
        return self.registry.get_adapter(self.connection_id, self.schema, self.executor)
