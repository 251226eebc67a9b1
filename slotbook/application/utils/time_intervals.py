from __future__ import annotations

import re
from typing import Iterable

from slotbook.application.exceptions import FormatError
from slotbook.domain.entities.time_interval import MINUTES_PER_DAY, Interval

_HHMM = re.compile(r"^(\d{1,2}):(\d{1,2})$")


def _extract_hhmm(value: str) -> str:
    """Reduce ISO timestamps and HH:MM:SS(.fff) strings to their HH:MM part."""
    text = value.strip()
    t_index = text.find("T")
    if t_index != -1:
        return text[t_index + 1 : t_index + 6]
    parts = text.split(":")
    if len(parts) >= 2:
        return f"{parts[0]}:{parts[1]}"
    return text


def parse_time_of_day(value: str) -> int:
    """Parse "HH:MM" (or an ISO timestamp / "HH:MM:SS") into minutes since midnight."""
    if value is None or not str(value).strip():
        raise FormatError("Empty time value")

    candidate = _extract_hhmm(str(value))
    match = _HHMM.match(candidate)
    if not match:
        raise FormatError(f"Invalid time value: {value!r}")

    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise FormatError(f"Time out of range: {value!r}")
    return hour * 60 + minute


def format_time_of_day(minutes: int) -> str:
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def as_time_of_day(value: int | str) -> int:
    if isinstance(value, int):
        return value
    return parse_time_of_day(value)


def normalize_end(start: int, end: int) -> int:
    # An end of 00:00 after a non-midnight start means the end of the same day.
    if end == 0 and start != 0:
        return MINUTES_PER_DAY
    return end


def make_interval(start: int | str, end: int | str) -> Interval:
    start_minutes = as_time_of_day(start)
    return Interval(start_minutes, normalize_end(start_minutes, as_time_of_day(end)))


def expand(ranges: Iterable[Interval], granularity: int) -> list[Interval]:
    """Split ranges into consecutive `granularity`-minute intervals.

    A trailing remainder shorter than `granularity` is dropped. Duplicates are
    removed; output order follows input order, callers sort.
    """
    if granularity <= 0:
        raise ValueError("granularity must be positive")

    seen: set[tuple[int, int]] = set()
    expanded: list[Interval] = []
    for rng in ranges:
        if not rng.is_proper:
            continue
        current = rng.start
        while current + granularity <= rng.end:
            key = (current, current + granularity)
            if key not in seen:
                seen.add(key)
                expanded.append(Interval(*key))
            current += granularity
    return expanded


def contains(outer: Interval, inner: Interval) -> bool:
    if inner.end <= inner.start:
        return False
    return inner.start >= outer.start and inner.end <= outer.end


def sort_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    return sorted(intervals, key=lambda i: (i.start, i.end))
