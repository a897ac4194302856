"""Tests for date and time helpers."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import pytest

from taskdeck.utils.datetime_utils import (
    is_same_local_day,
    now_local,
    parse_due_date,
    within_trailing_window,
)


def test_now_local_is_aware():
    assert now_local().tzinfo is not None


def test_same_local_day():
    morning = datetime(2025, 5, 2, 8, 0).astimezone()
    evening = datetime(2025, 5, 2, 22, 0).astimezone()
    next_day = datetime(2025, 5, 3, 0, 1).astimezone()
    assert is_same_local_day(morning, evening)
    assert not is_same_local_day(evening, next_day)


def test_trailing_window_boundaries():
    ref = datetime(2025, 5, 10, 12, 0, tzinfo=timezone.utc)
    assert within_trailing_window(ref - timedelta(days=7), ref, 7)
    assert not within_trailing_window(ref - timedelta(days=7, microseconds=1), ref, 7)


def test_parse_bare_date_is_end_of_day():
    parsed = parse_due_date("2025-01-31")
    assert (parsed.year, parsed.month, parsed.day) == (2025, 1, 31)
    assert (parsed.hour, parsed.minute, parsed.second) == (23, 59, 59)
    assert parsed.tzinfo is not None


@pytest.mark.parametrize("value", ["2025-01-31", "20250131", " 2025-01-31 "])
def test_parse_date_forms_are_end_of_day(value):
    parsed = parse_due_date(value)
    assert parsed.date() == date(2025, 1, 31)
    assert parsed.time() == time(23, 59, 59)


def test_parse_datetime_with_space_separator():
    parsed = parse_due_date("2025-01-31 08:00")
    assert (parsed.hour, parsed.minute) == (8, 0)


def test_parse_datetime_keeps_offset():
    parsed = parse_due_date("2025-01-31T09:15+05:00")
    assert parsed.utcoffset() == timedelta(hours=5)
    assert parsed.hour == 9


@pytest.mark.parametrize("value", ["tomorrow", "31/01/2025", ""])
def test_parse_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_due_date(value)
