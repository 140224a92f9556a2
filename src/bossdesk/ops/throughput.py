"""
Throughput time series: raw bucket rows to a gap-free chart series.

The database groups completions into ``floor(epoch / width) * width``
buckets, one row per (bucket, state). :func:`normalize_throughput` then:

1. re-buckets defensively, summing counts that land on the same key;
2. picks the window: min..max of the data for ``all``, otherwise the
   ``duration / width`` buckets ending at the bucket containing ``now``;
3. emits one point per bucket per category, zero-filling gaps.

Categories come out Completed before Failed. A category with no raw rows
at all is dropped from every bucket instead of being zero-filled.

The query's lower bound is :func:`window_start`, the first bucket of that
window, so every fetched row lands inside the series.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

from bossdesk.models import (
    COMPLETED,
    FAILED,
    ThroughputDataPoint,
    TimeRange,
)

CATEGORY_ORDER = (COMPLETED, FAILED)

_STATE_CATEGORIES = {"completed": COMPLETED, "failed": FAILED}


def decode_throughput_rows(rows: Iterable[Sequence[Any]]) -> list[ThroughputDataPoint]:
    """``(bucket, state, count)`` rows to points; unknown states are skipped."""
    points = []
    for bucket, state, count in rows:
        category = _STATE_CATEGORIES.get(str(state))
        if category is None:
            continue
        timestamp = bucket if bucket.tzinfo is not None else bucket.replace(tzinfo=UTC)
        points.append(ThroughputDataPoint(timestamp=timestamp, category=category, count=int(count)))
    return points


def bucket_key(moment: datetime, width: int) -> int:
    return int(math.floor(moment.timestamp() / width) * width)


def window_keys(time_range: TimeRange, now: datetime) -> tuple[int, int] | None:
    """First and last bucket key of a bounded window, ``None`` for ``all``."""
    duration = time_range.duration
    if duration is None:
        return None
    width = time_range.bucket_seconds
    end = bucket_key(now, width)
    count = max(int(duration.total_seconds()) // width, 1)
    return end - (count - 1) * width, end


def window_start(time_range: TimeRange, now: datetime) -> datetime | None:
    """Lower bound for the throughput query; ``None`` for ``all``."""
    bounds = window_keys(time_range, now)
    if bounds is None:
        return None
    return datetime.fromtimestamp(bounds[0], UTC)


def normalize_throughput(
    points: Sequence[ThroughputDataPoint],
    time_range: TimeRange,
    now: datetime,
) -> list[ThroughputDataPoint]:
    """Regular, zero-filled series aligned to the caller's window."""
    if not points:
        return list(points)

    width = time_range.bucket_seconds
    bucketed: dict[int, dict[str, int]] = {}
    seen: set[str] = set()
    for point in points:
        counts = bucketed.setdefault(bucket_key(point.timestamp, width), {})
        counts[point.category] = counts.get(point.category, 0) + point.count
        seen.add(point.category)

    bounds = window_keys(time_range, now)
    if bounds is None:
        start, end = min(bucketed), max(bucketed)
    else:
        start, end = bounds
    if end < start:
        return list(points)

    categories = [c for c in CATEGORY_ORDER if c in seen]
    normalized: list[ThroughputDataPoint] = []
    for key in range(start, end + 1, width):
        timestamp = datetime.fromtimestamp(key, tz=UTC)
        counts = bucketed.get(key, {})
        for category in categories:
            normalized.append(
                ThroughputDataPoint(timestamp=timestamp, category=category, count=counts.get(category, 0))
            )
    return normalized


__all__ = [
    "CATEGORY_ORDER",
    "bucket_key",
    "decode_throughput_rows",
    "normalize_throughput",
    "window_keys",
    "window_start",
]
