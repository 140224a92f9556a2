"""Schema revision detection and per-generation SQL adapters."""

from bossdesk.schema.adapters import (
    CamelCaseAdapter,
    SchemaAdapter,
    SnakeCaseV10Adapter,
    SnakeCaseV11PlusAdapter,
    adapter_for_group,
)
from bossdesk.schema.detector import SchemaDetector
from bossdesk.schema.registry import AdapterRegistry
from bossdesk.schema.version import AdapterGroup, SchemaVersion

__all__ = [
    "AdapterGroup",
    "AdapterRegistry",
    "CamelCaseAdapter",
    "SchemaAdapter",
    "SchemaDetector",
    "SchemaVersion",
    "SnakeCaseV10Adapter",
    "SnakeCaseV11PlusAdapter",
    "adapter_for_group",
]
