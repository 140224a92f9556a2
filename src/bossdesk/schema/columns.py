"""Logical field to physical column tables, one per naming generation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class JobColumnMapping:
    id: str
    name: str
    state: str
    priority: str
    data: str
    created_on: str
    started_on: str
    completed_on: str
    retry_count: str
    retry_limit: str
    output: str
    singleton_key: str
    singleton_on: str
    expire_in: str
    keep_until: str
    start_after: str
    retry_delay: str
    retry_backoff: str


@dataclass(frozen=True, slots=True)
class ScheduleColumnMapping:
    name: str
    cron: str
    timezone: str
    data: str
    options: str
    created_on: str
    updated_on: str
    key: str | None = None


# pg-boss v7-9
CAMEL_CASE = JobColumnMapping(
    id="id",
    name="name",
    state="state",
    priority="priority",
    data="data",
    created_on="createdon",
    started_on="startedon",
    completed_on="completedon",
    retry_count="retrycount",
    retry_limit="retrylimit",
    output="output",
    singleton_key="singletonkey",
    singleton_on="singletonon",
    expire_in="expirein",
    keep_until="keepuntil",
    start_after="startafter",
    retry_delay="retrydelay",
    retry_backoff="retrybackoff",
)

# pg-boss v10
SNAKE_CASE = JobColumnMapping(
    id="id",
    name="name",
    state="state",
    priority="priority",
    data="data",
    created_on="created_on",
    started_on="started_on",
    completed_on="completed_on",
    retry_count="retry_count",
    retry_limit="retry_limit",
    output="output",
    singleton_key="singleton_key",
    singleton_on="singleton_on",
    expire_in="expire_in",
    keep_until="keep_until",
    start_after="start_after",
    retry_delay="retry_delay",
    retry_backoff="retry_backoff",
)

# pg-boss v11+
V11_PLUS = JobColumnMapping(
    id="id",
    name="name",
    state="state",
    priority="priority",
    data="data",
    created_on="created_on",
    started_on="started_on",
    completed_on="completed_on",
    retry_count="retry_count",
    retry_limit="retry_limit",
    output="output",
    singleton_key="singleton_key",
    singleton_on="singleton_on",
    expire_in="expire_seconds",
    keep_until="keep_until",
    start_after="start_after",
    retry_delay="retry_delay",
    retry_backoff="retry_backoff",
)

SCHEDULE_SNAKE_CASE_V10 = ScheduleColumnMapping(
    name="name",
    cron="cron",
    timezone="timezone",
    data="data",
    options="options",
    created_on="created_on",
    updated_on="updated_on",
)

SCHEDULE_SNAKE_CASE_V11_PLUS = ScheduleColumnMapping(
    name="name",
    cron="cron",
    timezone="timezone",
    data="data",
    options="options",
    created_on="created_on",
    updated_on="updated_on",
    key="key",
)


__all__ = [
    "JobColumnMapping",
    "ScheduleColumnMapping",
    "CAMEL_CASE",
    "SNAKE_CASE",
    "V11_PLUS",
    "SCHEDULE_SNAKE_CASE_V10",
    "SCHEDULE_SNAKE_CASE_V11_PLUS",
]
