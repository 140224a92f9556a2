"""Schema revision numbers and the adapter generations they map to.

pg-boss records its table layout revision as an integer in
``<schema>.version``. The layout changed in three steps that matter for
reading it, so each revision maps to one :class:`AdapterGroup`:

    ======  ==================  ==========================================
    Range   Group               Layout
    ======  ==================  ==========================================
    20-23   camelCase           camelCase columns, no queue/schedule table
    24-25   snakeCaseV10        snake_case, queue + schedule, expire_in
    26-27   snakeCaseV11Plus    expire_seconds, schedule key, config secs
    other   unknown             read with the newest generation's layout
    ======  ==================  ==========================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MIN_SUPPORTED = 20
MAX_SUPPORTED = 27


class AdapterGroup(str, Enum):
    CAMEL_CASE = "camelCase"
    SNAKE_CASE_V10 = "snakeCaseV10"
    SNAKE_CASE_V11_PLUS = "snakeCaseV11Plus"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _GROUP_NAMES[self]

    @property
    def effective(self) -> AdapterGroup:
        """The group whose layout is actually used (``UNKNOWN`` reads as newest)."""
        if self is AdapterGroup.UNKNOWN:
            return AdapterGroup.SNAKE_CASE_V11_PLUS
        return self

    @property
    def has_queue_table(self) -> bool:
        return self.effective is not AdapterGroup.CAMEL_CASE

    @property
    def has_schedule_table(self) -> bool:
        return self.effective is not AdapterGroup.CAMEL_CASE

    @property
    def schedule_has_key_column(self) -> bool:
        return self.effective is AdapterGroup.SNAKE_CASE_V11_PLUS

    @property
    def config_uses_seconds(self) -> bool:
        """Queue retention stored in seconds (v11+) rather than minutes (v10)."""
        return self.effective is AdapterGroup.SNAKE_CASE_V11_PLUS


_GROUP_NAMES = {
    AdapterGroup.CAMEL_CASE: "pg-boss v7-9 (camelCase)",
    AdapterGroup.SNAKE_CASE_V10: "pg-boss v10 (snake_case)",
    AdapterGroup.SNAKE_CASE_V11_PLUS: "pg-boss v11+ (snake_case)",
    AdapterGroup.UNKNOWN: "Unknown/Unsupported",
}


@dataclass(frozen=True, order=True, slots=True)
class SchemaVersion:
    """A detected ``<schema>.version`` value.

    >>> SchemaVersion(22).adapter_group
    <AdapterGroup.CAMEL_CASE: 'camelCase'>
    >>> SchemaVersion(30).adapter_group
    <AdapterGroup.UNKNOWN: 'unknown'>
    """

    value: int

    @property
    def adapter_group(self) -> AdapterGroup:
        if 20 <= self.value <= 23:
            return AdapterGroup.CAMEL_CASE
        if 24 <= self.value <= 25:
            return AdapterGroup.SNAKE_CASE_V10
        if 26 <= self.value <= 27:
            return AdapterGroup.SNAKE_CASE_V11_PLUS
        return AdapterGroup.UNKNOWN

    @property
    def is_supported(self) -> bool:
        return MIN_SUPPORTED <= self.value <= MAX_SUPPORTED

    @property
    def display_name(self) -> str:
        return f"Schema v{self.value}"

    def __str__(self) -> str:
        return str(self.value)


SCHEMA_20 = SchemaVersion(20)
SCHEMA_24 = SchemaVersion(24)
SCHEMA_26 = SchemaVersion(26)
SCHEMA_27 = SchemaVersion(27)


__all__ = [
    "MIN_SUPPORTED",
    "MAX_SUPPORTED",
    "AdapterGroup",
    "SchemaVersion",
    "SCHEMA_20",
    "SCHEMA_24",
    "SCHEMA_26",
    "SCHEMA_27",
]
