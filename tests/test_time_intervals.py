"""
Tests for minute-of-day parsing, formatting and interval arithmetic.
"""

from __future__ import annotations

import pytest

from slotbook.application.exceptions import FormatError
from slotbook.application.utils.time_intervals import (
    contains,
    expand,
    format_time_of_day,
    make_interval,
    parse_time_of_day,
    sort_intervals,
)
from slotbook.domain.entities.time_interval import Interval


def test_format_parse_roundtrip_every_minute():
    """Every valid HH:MM string survives parse then format unchanged."""
    for minutes in range(1440):
        text = f"{minutes // 60:02d}:{minutes % 60:02d}"
        assert format_time_of_day(parse_time_of_day(text)) == text


def test_parse_accepts_seconds_iso_and_short_hours():
    assert parse_time_of_day("09:30:15") == 570
    assert parse_time_of_day("09:30:15.250") == 570
    assert parse_time_of_day("2025-03-10T14:45:00Z") == 885
    assert parse_time_of_day("2025-03-10T14:45:00+04:00") == 885
    assert parse_time_of_day("9:05") == 545


@pytest.mark.parametrize("value", ["", "   ", "24:00", "12:60", "ab:cd", "noon", "-1:30"])
def test_parse_rejects_malformed_or_out_of_range(value):
    with pytest.raises(FormatError):
        parse_time_of_day(value)


def test_format_wraps_at_midnight():
    assert format_time_of_day(1440) == "00:00"
    assert format_time_of_day(1455) == "00:15"


def test_make_interval_treats_midnight_end_as_end_of_day():
    assert make_interval("23:45", "00:00") == Interval(1425, 1440)
    assert make_interval("00:00", "00:00") == Interval(0, 0)


def test_expand_drops_trailing_remainder():
    """A 70-minute range yields four 15-minute slots; the 10-minute tail is not offered."""
    expanded = expand([make_interval("09:00", "10:10")], 15)

    assert [i.label() for i in expanded] == ["09:00-09:15", "09:15-09:30", "09:30-09:45", "09:45-10:00"]
    assert all(i.minutes == 15 for i in expanded)


def test_expand_output_never_overlaps_and_is_deduplicated():
    ranges = [make_interval("09:00", "10:00"), make_interval("09:30", "10:30"), make_interval("09:00", "09:30")]
    expanded = sort_intervals(expand(ranges, 15))

    assert len(expanded) == len(set(expanded))
    for previous, current in zip(expanded, expanded[1:]):
        assert previous.end <= current.start
    assert expanded[0] == Interval(540, 555)
    assert expanded[-1] == Interval(615, 630)


def test_expand_skips_improper_ranges():
    assert expand([Interval(600, 600), Interval(660, 600)], 15) == []


def test_expand_rejects_non_positive_granularity():
    with pytest.raises(ValueError):
        expand([Interval(540, 600)], 0)


def test_contains_boundaries():
    outer = Interval(540, 555)

    assert contains(outer, Interval(540, 555))
    assert contains(outer, Interval(545, 550))
    assert not contains(outer, Interval(550, 570))
    assert not contains(outer, Interval(530, 545))


def test_contains_rejects_zero_length_and_inverted_inner():
    outer = Interval(540, 600)

    assert contains(outer, Interval(550, 550)) is False
    assert contains(outer, Interval(560, 550)) is False
