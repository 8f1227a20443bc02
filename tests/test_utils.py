"""
Unit tests for date helpers and display formatting.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from tests.conftest import all_day_event, timed_event
from weekwidget.core.utils import (
    format_due,
    format_iso_for_api,
    format_time_range,
    parse_api_date,
    parse_iso_from_api,
    start_of_day,
)

UTC = timezone.utc
TODAY = date(2026, 10, 20)


@pytest.mark.parametrize("due, label", [
    (None, ""),
    (date(2026, 10, 20), "Today"),
    (date(2026, 10, 21), "Tomorrow"),
    (date(2026, 10, 19), "Yesterday"),
    (date(2026, 11, 3), "03 Nov"),
    (date(2027, 1, 4), "04 Jan 2027"),
])
def test_format_due(due, label):
    assert format_due(due, TODAY) == label


def test_api_timestamps_are_utc():
    plus_two = timezone(timedelta(hours=2))
    assert format_iso_for_api(datetime(2026, 10, 19, 2, 0, tzinfo=plus_two)) == "2026-10-19T00:00:00Z"


def test_parse_api_timestamp():
    parsed = parse_iso_from_api("2026-10-19T09:00:00Z")
    assert parsed == datetime(2026, 10, 19, 9, tzinfo=UTC)


def test_parse_api_date_ignores_time_part():
    assert parse_api_date("2026-10-20T00:00:00.000Z") == date(2026, 10, 20)
    assert parse_api_date("2026-10-20") == date(2026, 10, 20)
    assert parse_api_date(None) is None


def test_start_of_day_is_aware():
    assert start_of_day(TODAY, UTC) == datetime(2026, 10, 20, tzinfo=UTC)


class TestFormatTimeRange:

    def test_same_day(self):
        event = timed_event("a", datetime(2026, 10, 19, 9, tzinfo=UTC), datetime(2026, 10, 19, 10, 30, tzinfo=UTC))
        assert format_time_range(event, UTC) == "09:00 - 10:30"

    def test_over_midnight(self):
        event = timed_event("a", datetime(2026, 10, 19, 22, tzinfo=UTC), datetime(2026, 10, 20, 1, tzinfo=UTC))
        assert format_time_range(event, UTC) == "22:00 - Tue 20 Oct 01:00"

    def test_single_all_day(self):
        assert format_time_range(all_day_event("a", date(2026, 10, 21), date(2026, 10, 22))) == "All day"

    def test_multi_day_all_day(self):
        event = all_day_event("a", date(2026, 10, 21), date(2026, 10, 24))
        assert format_time_range(event) == "All day, 21 Oct - 23 Oct"


def test_local_start_of_day_uses_that_days_offset(berlin_local_time):
    assert start_of_day(date(2026, 10, 20)).utcoffset() == timedelta(hours=2)
    assert start_of_day(date(2026, 10, 26)).utcoffset() == timedelta(hours=1)
    assert start_of_day(date(2026, 10, 26)).hour == 0
