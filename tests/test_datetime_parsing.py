"""Tests for timeline timestamp normalization."""
from datetime import date, datetime, timedelta, timezone

import pytest

from fortyweeks.utils.datetime_parsing import TIMELINE_DATETIME_FORMATS, normalize_timestamp


def test_accepted_formats_are_unchanged():
    assert TIMELINE_DATETIME_FORMATS == [
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%d",
    ]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2030-01-02 03:04:05", "2030-01-02T03:04:05Z"),
        ("2030-01-02T03:04:05", "2030-01-02T03:04:05Z"),
        ("2030-01-02", "2030-01-02T00:00:00Z"),
        ("  2030-01-02 03:04:05  ", "2030-01-02T03:04:05Z"),
    ],
)
def test_string_formats(raw, expected):
    assert normalize_timestamp(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2030-01-02T10:00:00+02:00", "2030-01-02T08:00:00Z"),
        ("2030-01-01T23:30:00-01:00", "2030-01-02T00:30:00Z"),
        ("2030-01-02T03:04:05Z", "2030-01-02T03:04:05Z"),
        ("2030-01-02T03:04:05.123456Z", "2030-01-02T03:04:05Z"),
    ],
)
def test_offset_strings_become_utc(raw, expected):
    assert normalize_timestamp(raw) == expected


@pytest.mark.parametrize("raw", ["garbage", " x ", "2030/01/02", "", "   "])
def test_unparseable_strings_come_back_verbatim(raw):
    assert normalize_timestamp(raw) == raw


def test_datetime_and_date_values():
    aware = datetime(2030, 1, 2, 12, 0, tzinfo=timezone(timedelta(hours=5)))
    assert normalize_timestamp(aware) == "2030-01-02T07:00:00Z"
    assert normalize_timestamp(datetime(2030, 1, 2, 3, 4, 5, 999)) == "2030-01-02T03:04:05Z"
    assert normalize_timestamp(date(2030, 1, 2)) == "2030-01-02T00:00:00Z"
    assert normalize_timestamp(None) == ""
