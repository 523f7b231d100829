"""
trapdash.engine.aggregator — Event Time-Series Bucketing
==========================================================

Turns the raw event log (most recent N events, any order) into a gap-free
sequence of fixed-width buckets for the selected time range.

Pipeline (all pure, no I/O):

1. ``cutoff = now - window(range)``
2. Pick the bucket width for the range (5 min / 1 h / 1 day / 1 day).
3. Drop events older than the cutoff.
4. Pre-seed every aligned bucket key in ``[cutoff, now]`` with 0 so empty
   intervals still show up in the series.
5. Count each remaining event into its aligned bucket.  Events stamped
   after ``now`` (server clock ahead of ours) get their own bucket rather
   than being dropped or clamped.
6. Sort by key and attach a range-appropriate label.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, tzinfo

from trapdash.constants import BUCKET_MS, WINDOW_MS
from trapdash.models import Event, TimeBucket

__all__ = [
    "aggregate",
    "bucket_key",
    "bucket_size_ms",
    "counts",
    "cutoff_ms",
    "format_label",
    "labels",
]

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


# ---------------------------------------------------------------------------
# Range helpers
# ---------------------------------------------------------------------------
def _check_range(time_range: str) -> None:
    if time_range not in WINDOW_MS:
        raise ValueError(
            f"Invalid time range: {time_range}. Must be one of {tuple(WINDOW_MS)}"
        )


def cutoff_ms(time_range: str, now_ms: int) -> int:
    """Earliest timestamp (unix ms) included in *time_range*."""
    _check_range(time_range)
    return now_ms - WINDOW_MS[time_range]


def bucket_size_ms(time_range: str) -> int:
    """Bucket width for *time_range* in milliseconds (never 0)."""
    _check_range(time_range)
    return BUCKET_MS[time_range]


def bucket_key(t_ms: int, size_ms: int) -> int:
    """Align *t_ms* down to the start of its bucket."""
    return (t_ms // size_ms) * size_ms


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------
def _clock(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"


def format_label(key_ms: int, time_range: str, tz: tzinfo | None = None) -> str:
    """Label a bucket start for display.

    ``hour`` → ``3:05 PM``; ``day`` → ``Oct 19, 3:00 PM``;
    ``week``/``month`` → ``Oct 19``.  *tz* ``None`` means local time.
    """
    _check_range(time_range)
    dt = datetime.fromtimestamp(key_ms / 1000, tz=tz)
    date = f"{_MONTHS[dt.month - 1]} {dt.day}"
    if time_range == "hour":
        return _clock(dt)
    if time_range == "day":
        return f"{date}, {_clock(dt)}"
    return date


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------
def aggregate(
    events: Iterable[Event],
    time_range: str,
    now_ms: int,
    tz: tzinfo | None = None,
) -> list[TimeBucket]:
    """Bucket *events* for *time_range* ending at *now_ms*.

    Returns buckets in ascending key order.  Every aligned key in
    ``[cutoff, now]`` is present even when its count is 0, and every event
    at or after the cutoff is counted exactly once.
    """
    cutoff = cutoff_ms(time_range, now_ms)
    size = bucket_size_ms(time_range)

    buckets: dict[int, int] = {}
    t = cutoff
    while t <= now_ms:
        buckets[bucket_key(t, size)] = 0
        t += size

    for ev in events:
        ts_ms = ev.ts * 1000
        if ts_ms < cutoff:
            continue
        key = bucket_key(ts_ms, size)
        buckets[key] = buckets.get(key, 0) + 1

    return [
        TimeBucket(bucket_start=key, count=buckets[key],
                   label=format_label(key, time_range, tz))
        for key in sorted(buckets)
    ]


def labels(buckets: Iterable[TimeBucket]) -> list[str]:
    return [b.label for b in buckets]


def counts(buckets: Iterable[TimeBucket]) -> list[int]:
    return [b.count for b in buckets]
