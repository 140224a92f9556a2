"""Tests for bossdesk.schema.version."""

import pytest

from bossdesk.schema.version import (
    MAX_SUPPORTED,
    MIN_SUPPORTED,
    SCHEMA_20,
    SCHEMA_27,
    AdapterGroup,
    SchemaVersion,
)


class TestAdapterGroupMapping:
    @pytest.mark.parametrize(
        "value, group",
        [
            (20, AdapterGroup.CAMEL_CASE),
            (23, AdapterGroup.CAMEL_CASE),
            (24, AdapterGroup.SNAKE_CASE_V10),
            (25, AdapterGroup.SNAKE_CASE_V10),
            (26, AdapterGroup.SNAKE_CASE_V11_PLUS),
            (27, AdapterGroup.SNAKE_CASE_V11_PLUS),
            (19, AdapterGroup.UNKNOWN),
            (28, AdapterGroup.UNKNOWN),
            (0, AdapterGroup.UNKNOWN),
        ],
    )
    def test_group_for_version(self, value, group):
        assert SchemaVersion(value).adapter_group is group

    def test_unknown_reads_as_newest(self):
        assert AdapterGroup.UNKNOWN.effective is AdapterGroup.SNAKE_CASE_V11_PLUS
        assert AdapterGroup.UNKNOWN.schedule_has_key_column

    def test_capabilities(self):
        assert not AdapterGroup.CAMEL_CASE.has_queue_table
        assert not AdapterGroup.CAMEL_CASE.has_schedule_table
        assert AdapterGroup.SNAKE_CASE_V10.has_schedule_table
        assert not AdapterGroup.SNAKE_CASE_V10.schedule_has_key_column
        assert not AdapterGroup.SNAKE_CASE_V10.config_uses_seconds
        assert AdapterGroup.SNAKE_CASE_V11_PLUS.config_uses_seconds

    def test_display_names(self):
        assert AdapterGroup.CAMEL_CASE.display_name == "pg-boss v7-9 (camelCase)"
        assert AdapterGroup.UNKNOWN.display_name == "Unknown/Unsupported"


class TestSchemaVersion:
    def test_supported_range(self):
        assert MIN_SUPPORTED == 20
        assert MAX_SUPPORTED == 27
        assert SCHEMA_20.is_supported
        assert SCHEMA_27.is_supported
        assert not SchemaVersion(19).is_supported
        assert not SchemaVersion(28).is_supported

    def test_ordering_and_equality(self):
        assert SchemaVersion(24) < SchemaVersion(26)
        assert SchemaVersion(27) == SCHEMA_27
        assert max(SchemaVersion(21), SchemaVersion(25)).value == 25

    def test_display(self):
        assert SchemaVersion(24).display_name == "Schema v24"
        assert str(SchemaVersion(24)) == "24"
