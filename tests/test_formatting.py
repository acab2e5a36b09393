from datetime import date, datetime, timedelta, timezone

from tripmap.api.formatting import (
    format_day_label,
    format_hours,
    format_planned_datetime,
    format_time_only,
    parse_timestamp,
)


def test_parse_timestamp_variants():
    assert parse_timestamp("2025-03-02T09:00") == datetime(2025, 3, 2, 9, 0)
    assert parse_timestamp(date(2025, 3, 2)) == datetime(2025, 3, 2)
    assert parse_timestamp("") is None
    assert parse_timestamp("   ") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(12345) is None


def test_parse_timestamp_keeps_written_wall_clock():
    aware = datetime(2025, 3, 2, 11, 0, tzinfo=timezone(timedelta(hours=2)))
    assert parse_timestamp(aware) == datetime(2025, 3, 2, 11, 0)
    assert parse_timestamp("2025-03-02T11:00+02:00") == datetime(2025, 3, 2, 11, 0)
    assert parse_timestamp("2025-03-02T01:00+05:00") == datetime(2025, 3, 2, 1, 0)


def test_format_planned_datetime():
    assert format_planned_datetime(datetime(2025, 3, 2, 9, 0)) == "Mar 2, 2025, 9:00 AM"
    assert format_planned_datetime(datetime(2025, 12, 31, 0, 5)) == "Dec 31, 2025, 12:05 AM"


def test_format_time_only():
    assert format_time_only(datetime(2025, 3, 2, 13, 30)) == "1:30 PM"
    assert format_time_only(datetime(2025, 3, 2, 12, 0)) == "12:00 PM"
    assert format_time_only(None) == ""


def test_format_day_label():
    assert format_day_label(1, date(2025, 3, 2)) == "Day 1 - Sunday, Mar 2"


def test_format_hours():
    assert format_hours(2.0) == "2"
    assert format_hours(1.5) == "1.5"
