from datetime import datetime, time, timedelta, timezone

import pytest

from inkroute.utils.date_parsing import parse_date, parse_time


@pytest.mark.parametrize('value', [
    datetime(2024, 12, 25, 14, 30),
    datetime(2024, 12, 25, 14, 30, 5, 123456),
    datetime(2025, 1, 2, 8, 0, tzinfo=timezone.utc),
    datetime(2025, 3, 9, 23, 59, 59, tzinfo=timezone(timedelta(hours=-5))),
])
def test_iso_round_trip(value):
    assert parse_date(value.isoformat()) == value


def test_iso_with_z_suffix():
    assert parse_date('2024-12-25T14:30:00Z') == datetime(2024, 12, 25, 14, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize('value, microsecond', [
    ('2024-06-12T10:00:00.5Z', 500000),
    ('2024-06-12T10:00:00.12Z', 120000),
    ('2024-06-12T10:00:00.1234567Z', 123456),
])
def test_iso_with_short_or_long_fraction(value, microsecond):
    assert parse_date(value) == datetime(2024, 6, 12, 10, 0, 0, microsecond, tzinfo=timezone.utc)


def test_explicit_formats():
    assert parse_date('12/25/2024') == datetime(2024, 12, 25)
    assert parse_date('12/25/24') == datetime(2024, 12, 25)
    assert parse_date('December 25, 2024') == datetime(2024, 12, 25)
    assert parse_date('Dec 25, 2024', '2:00 PM') == datetime(2024, 12, 25, 14, 0)


def test_yearless_dates_roll_forward(now):
    assert parse_date('Dec 25', now=now) == datetime(2024, 12, 25)
    assert parse_date('March 3', now=now) == datetime(2025, 3, 3)
    assert parse_date('6/12', now=now) == datetime(2024, 6, 12)


def test_relative_dates(now):
    assert parse_date('today', now=now) == datetime(2024, 6, 12)
    assert parse_date('tomorrow', now=now) == datetime(2024, 6, 13)
    assert parse_date('tomorrow', '2:00 PM', now=now) == datetime(2024, 6, 13, 14, 0)
    assert parse_date('next week', now=now) == datetime(2024, 6, 19)
    assert parse_date('next month', now=now) == datetime(2024, 7, 12)


def test_weekday_names_resolve_to_next_occurrence(now):
    assert parse_date('Friday', now=now) == datetime(2024, 6, 14)
    assert parse_date('monday', now=now) == datetime(2024, 6, 17)
    assert parse_date('wednesday', now=now) == datetime(2024, 6, 12)
    assert parse_date('next Wednesday', now=now) == datetime(2024, 6, 19)


def test_unparseable_dates():
    assert parse_date(None) is None
    assert parse_date('   ') is None
    assert parse_date('someday soon') is None


@pytest.mark.parametrize('value,expected', [
    ('2:00 PM', time(14, 0)),
    ('14:00', time(14, 0)),
    ('9am', time(9, 0)),
    ('9 p.m.', time(21, 0)),
    ('11:45am', time(11, 45)),
])
def test_parse_time(value, expected):
    assert parse_time(value) == expected


def test_parse_time_rejects_text():
    assert parse_time('noonish') is None
    assert parse_time(None) is None
