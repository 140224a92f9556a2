"""
Per-generation SQL builders for a pg-boss schema.

Manifesto:
    Queue, job and schedule services never spell a column name. They ask an
    adapter for SQL text plus the parameter order, and hand rows back to the
    same adapter to decode. The three pg-boss layouts differ in a handful of
    places only, so :class:`SchemaAdapter` carries every default and each
    generation overrides just where its layout diverges.

    - **Paired select/decode:** A select list is rendered from the same
      ``SelectField`` tuples the decoder walks, so positions cannot drift
    - **Positional parameters:** ``$1`` is always the queue name; optional
      filters take the next index only when present
    - **Safe identifiers:** The schema name is validated once, at construction

Architecture:
    ::

        SchemaAdapter (defaults, snake_case-agnostic)
            ├── CamelCaseAdapter         20-23  no queue/schedule table
            ├── SnakeCaseV10Adapter      24-25  retention in minutes
            └── SnakeCaseV11PlusAdapter  26-27  expire_seconds, schedule key

        adapter_for_group(group, schema) → concrete adapter
        (UNKNOWN → SnakeCaseV11PlusAdapter)

Examples:
    >>> adapter = SnakeCaseV10Adapter("pgboss")
    >>> adapter.count_jobs_sql(True, JobSearchField.UUID, "abc")
    'SELECT COUNT(*) FROM pgboss.job WHERE name = $1 AND state = $2 AND id::text ILIKE $3'

Tags:
    adapter, sql, pg-boss, schema-version, bossdesk
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any, NamedTuple

from bossdesk.core.connection import validate_schema_name
from bossdesk.models import (
    Job,
    JobSearchField,
    JobState,
    Queue,
    QueueConfig,
    QueueStats,
    Schedule,
    SortOrder,
)
from bossdesk.schema import columns
from bossdesk.schema.columns import JobColumnMapping, ScheduleColumnMapping
from bossdesk.schema.version import AdapterGroup

# =============================================================================
# DECODERS
# =============================================================================


def _text(value: Any) -> str | None:
    return None if value is None else str(value)


def _required_text(value: Any) -> str:
    return "" if value is None else str(value)


def _int(value: Any) -> int:
    return 0 if value is None else int(value)


def _opt_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _opt_bool(value: Any) -> bool | None:
    return None if value is None else bool(value)


def _seconds(value: Any) -> int | None:
    """Integer seconds from an interval, a numeric EXTRACT, or an int."""
    if value is None:
        return None
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    # EXTRACT(EPOCH ...) comes back as Decimal
    return int(value)


def _minutes_to_seconds(value: Any) -> int | None:
    return None if value is None else int(value) * 60


def _timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _required_timestamp(value: Any) -> datetime:
    decoded = _timestamp(value)
    if decoded is None:
        raise ValueError("required timestamp column is NULL")
    return decoded


def _job_state(value: Any) -> JobState:
    try:
        return JobState(str(value))
    except ValueError:
        return JobState.CREATED


class SelectField(NamedTuple):
    """One select-list entry and how to decode its column."""

    expression: str
    attribute: str
    decode: Callable[[Any], Any]


def render_select(fields: Sequence[SelectField]) -> str:
    return ", ".join(field.expression for field in fields)


def decode_row(fields: Sequence[SelectField], row: Sequence[Any]) -> dict[str, Any]:
    """Decode *row* positionally against *fields* into attribute kwargs."""
    if len(row) != len(fields):
        raise ValueError(f"expected {len(fields)} columns, got {len(row)}")
    return {field.attribute: field.decode(value) for field, value in zip(fields, row, strict=True)}


def has_search(search_field: JobSearchField | None, search_text: str | None) -> bool:
    """A search filter applies only when both a field and non-empty text are given."""
    return search_field is not None and bool(search_text)


# Per-queue state counters, shared by every generation
_QUEUE_FIELDS = (
    SelectField("name", "name", _required_text),
    SelectField("COUNT(*) FILTER (WHERE state = 'created') AS created", "created", _int),
    SelectField("COUNT(*) FILTER (WHERE state = 'retry') AS retry", "retry", _int),
    SelectField("COUNT(*) FILTER (WHERE state = 'active') AS active", "active", _int),
    SelectField("COUNT(*) FILTER (WHERE state = 'completed') AS completed", "completed", _int),
    SelectField("COUNT(*) FILTER (WHERE state = 'failed') AS failed", "failed", _int),
    SelectField("COUNT(*) FILTER (WHERE state = 'cancelled') AS cancelled", "cancelled", _int),
)


# =============================================================================
# BASE ADAPTER
# =============================================================================


class SchemaAdapter:
    """
    Default SQL builder shared by every generation.

    Subclasses set ``group``, ``versions``, ``job_columns`` and
    ``schedule_columns`` and override only the statements their layout
    changes. Every statement is qualified with the validated schema name.
    """

    group: AdapterGroup = AdapterGroup.UNKNOWN
    versions: range = range(0)
    job_columns: JobColumnMapping = columns.SNAKE_CASE
    schedule_columns: ScheduleColumnMapping | None = None

    def __init__(self, schema: str = "pgboss"):
        self.schema = validate_schema_name(schema)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(schema={self.schema!r})"

    @property
    def job_table(self) -> str:
        return f"{self.schema}.job"

    # -- select/decode pairs -------------------------------------------------

    def _expire_expression(self) -> str:
        return f"EXTRACT(EPOCH FROM {self.job_columns.expire_in})::int"

    def job_fields(self) -> tuple[SelectField, ...]:
        c = self.job_columns
        return (
            SelectField(f"{c.id}::text", "id", _required_text),
            SelectField(c.name, "name", _required_text),
            SelectField(c.state, "state", _job_state),
            SelectField(c.priority, "priority", _int),
            SelectField(f"{c.data}::text", "data", lambda v: "{}" if v is None else str(v)),
            SelectField(c.created_on, "created_on", _required_timestamp),
            SelectField(c.started_on, "started_on", _timestamp),
            SelectField(c.completed_on, "completed_on", _timestamp),
            SelectField(c.retry_count, "retry_count", _int),
            SelectField(c.retry_limit, "retry_limit", _int),
            SelectField(f"{c.output}::text", "output", _text),
            SelectField(c.singleton_key, "singleton_key", _text),
            SelectField(c.singleton_on, "singleton_on", _timestamp),
            SelectField(self._expire_expression(), "expire_in", _seconds),
            SelectField(c.keep_until, "keep_until", _timestamp),
            SelectField(c.start_after, "start_after", _timestamp),
            SelectField(c.retry_delay, "retry_delay", _seconds),
            SelectField(c.retry_backoff, "retry_backoff", _opt_bool),
        )

    def queue_fields(self) -> tuple[SelectField, ...]:
        return _QUEUE_FIELDS

    def queue_config_fields(self) -> tuple[SelectField, ...]:
        """Empty when the generation has no queue table."""
        return ()

    def schedule_fields(self) -> tuple[SelectField, ...]:
        c = self.schedule_columns
        if c is None:
            return ()
        fields = [SelectField(c.name, "name", _required_text)]
        if c.key is not None:
            fields.append(SelectField(c.key, "key", _text))
        fields += [
            SelectField(c.cron, "cron", _required_text),
            SelectField(c.timezone, "timezone", _text),
            SelectField(f"{c.data}::text", "data", _text),
            SelectField(f"{c.options}::text", "options", _text),
            SelectField(c.created_on, "created_on", _required_timestamp),
            SelectField(c.updated_on, "updated_on", _required_timestamp),
        ]
        return tuple(fields)

    def decode_job(self, row: Sequence[Any]) -> Job:
        return Job(**decode_row(self.job_fields(), row))

    def decode_queue(self, row: Sequence[Any]) -> Queue:
        values = decode_row(self.queue_fields(), row)
        name = values.pop("name")
        return Queue(name=name, stats=QueueStats(**values))

    def decode_queue_config(self, row: Sequence[Any]) -> tuple[str, QueueConfig]:
        values = decode_row(self.queue_config_fields(), row)
        name = values.pop("name")
        return name, QueueConfig(**values)

    def decode_schedule(self, row: Sequence[Any]) -> Schedule:
        return Schedule(**decode_row(self.schedule_fields(), row))

    # -- queues --------------------------------------------------------------

    def fetch_queues_sql(self) -> str:
        return (
            f"SELECT {render_select(self.queue_fields())} "
            f"FROM {self.job_table} GROUP BY name ORDER BY name"
        )

    def fetch_queue_config_sql(self) -> str | None:
        fields = self.queue_config_fields()
        if not fields:
            return None
        return f"SELECT {render_select(fields)} FROM {self.schema}.queue"

    # -- jobs ----------------------------------------------------------------

    def search_expression(self, field: JobSearchField) -> str:
        c = self.job_columns
        match field:
            case JobSearchField.UUID:
                return f"{c.id}::text"
            case JobSearchField.INPUT_DATA:
                return f"{c.data}::text"
            case JobSearchField.OUTPUT_DATA:
                return f"{c.output}::text"
        raise ValueError(f"unknown search field: {field!r}")

    def _job_where(
        self,
        has_state_filter: bool,
        search_field: JobSearchField | None,
        search_text: str | None,
    ) -> tuple[str, int]:
        """WHERE body plus the next free parameter index."""
        c = self.job_columns
        conditions = [f"{c.name} = $1"]
        index = 2
        if has_state_filter:
            conditions.append(f"{c.state} = ${index}")
            index += 1
        if has_search(search_field, search_text):
            conditions.append(f"{self.search_expression(search_field)} ILIKE ${index}")
            index += 1
        return " AND ".join(conditions), index

    def count_jobs_sql(
        self,
        has_state_filter: bool,
        search_field: JobSearchField | None = None,
        search_text: str | None = None,
    ) -> str:
        where, _ = self._job_where(has_state_filter, search_field, search_text)
        return f"SELECT COUNT(*) FROM {self.job_table} WHERE {where}"

    def fetch_jobs_sql(
        self,
        has_state_filter: bool,
        search_field: JobSearchField | None,
        search_text: str | None,
        sort_column: str,
        sort_direction: SortOrder | str,
    ) -> str:
        direction = SortOrder(sort_direction).value
        if sort_column not in self._sortable_columns():
            raise ValueError(f"not a sortable column: {sort_column!r}")
        where, index = self._job_where(has_state_filter, search_field, search_text)
        return (
            f"SELECT {render_select(self.job_fields())} "
            f"FROM {self.job_table} "
            f"WHERE {where} "
            f"ORDER BY {sort_column} {direction} NULLS LAST "
            f"LIMIT ${index} OFFSET ${index + 1}"
        )

    def _sortable_columns(self) -> set[str]:
        c = self.job_columns
        return {c.created_on, c.started_on, c.completed_on, c.priority, c.state}

    # -- mutations -----------------------------------------------------------

    def update_job_state_sql(self) -> str:
        """``$1`` new state, ``$2`` job id."""
        return f"UPDATE {self.job_table} SET state = $1 WHERE id = $2"

    def delete_job_sql(self) -> str:
        return f"DELETE FROM {self.job_table} WHERE id = $1"

    def retry_all_failed_sql(self) -> str:
        return f"UPDATE {self.job_table} SET state = 'retry' WHERE name = $1 AND state = 'failed'"

    def cancel_all_pending_sql(self) -> str:
        return (
            f"UPDATE {self.job_table} SET state = 'cancelled' "
            "WHERE name = $1 AND state IN ('created', 'retry')"
        )

    def purge_completed_sql(self) -> str:
        return f"DELETE FROM {self.job_table} WHERE name = $1 AND state = 'completed'"

    def purge_failed_sql(self) -> str:
        return f"DELETE FROM {self.job_table} WHERE name = $1 AND state = 'failed'"

    # -- schedules -----------------------------------------------------------

    def fetch_schedules_sql(self) -> str | None:
        c = self.schedule_columns
        if c is None:
            return None
        order = c.name if c.key is None else f"{c.name}, {c.key}"
        return (
            f"SELECT {render_select(self.schedule_fields())} "
            f"FROM {self.schema}.schedule ORDER BY {order}"
        )

    # -- dashboard -----------------------------------------------------------

    def queue_status_sql(self) -> str:
        return (
            "SELECT "
            "COUNT(*) FILTER (WHERE state = 'created') AS created_jobs, "
            "COUNT(*) FILTER (WHERE state = 'active') AS active_jobs, "
            "COUNT(*) FILTER (WHERE state = 'retry') AS retry_jobs "
            f"FROM {self.job_table} WHERE name = $1"
        )

    def dashboard_stats_sql(self, has_time_filter: bool) -> str:
        """``$1`` queue; ``$2`` window start only when *has_time_filter*."""
        c = self.job_columns
        tf = f" AND {c.created_on} >= $2" if has_time_filter else ""
        return (
            "SELECT "
            f"COUNT(*) FILTER (WHERE true{tf}) AS total_jobs, "
            f"COUNT(*) FILTER (WHERE state = 'completed'{tf}) AS completed_jobs, "
            f"COUNT(*) FILTER (WHERE state = 'failed'{tf}) AS failed_jobs, "
            f"COUNT(*) FILTER (WHERE state = 'cancelled'{tf}) AS cancelled_jobs, "
            f"AVG(EXTRACT(EPOCH FROM ({c.completed_on} - {c.started_on}))) "
            f"FILTER (WHERE {c.completed_on} IS NOT NULL AND {c.started_on} IS NOT NULL{tf}) "
            "AS avg_processing_time, "
            f"AVG(EXTRACT(EPOCH FROM ({c.started_on} - {c.created_on}))) "
            f"FILTER (WHERE {c.started_on} IS NOT NULL{tf}) AS avg_wait_time, "
            f"AVG(EXTRACT(EPOCH FROM ({c.completed_on} - {c.created_on}))) "
            f"FILTER (WHERE {c.completed_on} IS NOT NULL{tf}) AS avg_end_to_end_time "
            f"FROM {self.job_table} WHERE name = $1"
        )

    def throughput_sql(self, bucket_seconds: int) -> str:
        """One row per (bucket, state): ``$1`` queue, ``$2`` window start."""
        width = int(bucket_seconds)
        if width <= 0:
            raise ValueError("bucket_seconds must be positive")
        c = self.job_columns
        return (
            f"SELECT to_timestamp(floor(EXTRACT(EPOCH FROM {c.completed_on}) / {width}) * {width}) "
            "AS bucket, state, COUNT(*) AS count "
            f"FROM {self.job_table} "
            f"WHERE name = $1 AND {c.completed_on} >= $2 "
            "AND state IN ('completed', 'failed') "
            "GROUP BY bucket, state ORDER BY bucket, state"
        )

    def recent_completion_metrics_sql(self) -> str:
        c = self.job_columns
        return (
            "SELECT COUNT(*) AS completed_count, "
            f"AVG(EXTRACT(EPOCH FROM ({c.completed_on} - {c.started_on}))) AS avg_processing_time "
            f"FROM {self.job_table} "
            "WHERE name = $1 AND state = 'completed' "
            f"AND {c.completed_on} >= NOW() - INTERVAL '15 minutes' "
            f"AND {c.started_on} IS NOT NULL AND {c.completed_on} IS NOT NULL"
        )


# =============================================================================
# GENERATIONS
# =============================================================================


class CamelCaseAdapter(SchemaAdapter):
    """pg-boss v7-9: camelCase columns, no queue or schedule table."""

    group = AdapterGroup.CAMEL_CASE
    versions = range(20, 24)
    job_columns = columns.CAMEL_CASE
    schedule_columns = None


class SnakeCaseV10Adapter(SchemaAdapter):
    """pg-boss v10: snake_case columns, queue retention kept in minutes."""

    group = AdapterGroup.SNAKE_CASE_V10
    versions = range(24, 26)
    job_columns = columns.SNAKE_CASE
    schedule_columns = columns.SCHEDULE_SNAKE_CASE_V10

    def queue_config_fields(self) -> tuple[SelectField, ...]:
        return (
            SelectField("name", "name", _required_text),
            SelectField("retention_minutes", "retention_seconds", _minutes_to_seconds),
            SelectField("expire_seconds", "expire_seconds", _opt_int),
            SelectField("retry_limit", "retry_limit", _opt_int),
            SelectField("policy", "policy", _text),
        )


class SnakeCaseV11PlusAdapter(SchemaAdapter):
    """pg-boss v11+: integer ``expire_seconds``, keyed schedules, config in seconds."""

    group = AdapterGroup.SNAKE_CASE_V11_PLUS
    versions = range(26, 28)
    job_columns = columns.V11_PLUS
    schedule_columns = columns.SCHEDULE_SNAKE_CASE_V11_PLUS

    def _expire_expression(self) -> str:
        return self.job_columns.expire_in

    def queue_config_fields(self) -> tuple[SelectField, ...]:
        return (
            SelectField("name", "name", _required_text),
            SelectField("retention_seconds", "retention_seconds", _opt_int),
            SelectField("deletion_seconds", "deletion_seconds", _opt_int),
            SelectField("expire_seconds", "expire_seconds", _opt_int),
            SelectField("retry_limit", "retry_limit", _opt_int),
            SelectField("policy", "policy", _text),
        )


_ADAPTERS: dict[AdapterGroup, type[SchemaAdapter]] = {
    AdapterGroup.CAMEL_CASE: CamelCaseAdapter,
    AdapterGroup.SNAKE_CASE_V10: SnakeCaseV10Adapter,
    AdapterGroup.SNAKE_CASE_V11_PLUS: SnakeCaseV11PlusAdapter,
}


def adapter_for_group(group: AdapterGroup, schema: str = "pgboss") -> SchemaAdapter:
    """Construct the adapter for *group*; ``UNKNOWN`` gets the newest one."""
    return _ADAPTERS[group.effective](schema)


__all__ = [
    "SelectField",
    "render_select",
    "decode_row",
    "has_search",
    "SchemaAdapter",
    "CamelCaseAdapter",
    "SnakeCaseV10Adapter",
    "SnakeCaseV11PlusAdapter",
    "adapter_for_group",
]
