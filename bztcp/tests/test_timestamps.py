"""
Tests for bztcp.protocol.timestamps
"""
import locale
from datetime import datetime, timedelta, timezone

import pytest

from bztcp.config import ConfigurationError
from bztcp.core.types import DecodeError
from bztcp.protocol.timestamps import format_timestamp, parse_timestamp

MST = timezone(timedelta(hours=-7), "MST")
IST = timezone(timedelta(hours=5, minutes=30), "IST")


def test_reference_layout():
    dt = datetime(2006, 1, 2, 15, 4, 5, tzinfo=MST)
    assert format_timestamp(dt) == "Mon Jan  2 2006 15:04:05 GMT-0700 (MST)"


def test_two_digit_day_is_not_padded():
    dt = datetime(2024, 3, 15, 9, 30, 0, tzinfo=timezone.utc)
    assert format_timestamp(dt) == "Fri Mar 15 2024 09:30:00 GMT+0000 (UTC)"


def test_positive_offset_with_minutes():
    dt = datetime(2024, 3, 1, 23, 59, 59, tzinfo=IST)
    assert format_timestamp(dt) == "Fri Mar  1 2024 23:59:59 GMT+0530 (IST)"


def test_naive_datetime_rejected():
    with pytest.raises(ValueError, match="timezone-aware"):
        format_timestamp(datetime(2006, 1, 2, 15, 4, 5))


def test_parse_reference_layout():
    dt = parse_timestamp("Mon Jan  2 2006 15:04:05 GMT-0700 (MST)")
    assert dt == datetime(2006, 1, 2, 15, 4, 5, tzinfo=MST)
    assert dt.utcoffset() == timedelta(hours=-7)


def test_parse_without_zone_abbreviation():
    dt = parse_timestamp("Fri Mar 15 2024 09:30:00 GMT+0000")
    assert dt == datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


def test_format_then_parse_preserves_instant():
    dt = datetime(2024, 3, 1, 23, 59, 59, tzinfo=IST)
    assert parse_timestamp(format_timestamp(dt)) == dt


@pytest.mark.parametrize(
    "text",
    [
        "",
        "2024-03-15T09:30:00Z",
        "Mon Jan  2 2006 15:04:05 (MST)",
        "Mon Jan\n 2 2006 15:04:05 GMT-0700 (MST)",
        "Mon Jan  2 2006 15:04:05 GMT-0700 (MST)\n(PDT)",
        "Mon Foo  2 2006 15:04:05 GMT-0700 (MST)",
        "Mon Feb 30 2006 15:04:05 GMT-0700 (MST)",
        "Mon Jan  2 2006 15:04:05 GMT+2500",
    ],
)
def test_parse_invalid_raises(text):
    with pytest.raises(DecodeError, match="Invalid timestamp"):
        parse_timestamp(text)


def test_parse_keeps_zone_abbreviation():
    dt = parse_timestamp("Mon Jan  2 2006 15:04:05 GMT-0700 (MST)")
    assert dt.tzname() == "MST"
    assert format_timestamp(dt) == "Mon Jan  2 2006 15:04:05 GMT-0700 (MST)"


def test_custom_layout_round_trip():
    layout = "%Y-%m-%d"
    with pytest.raises(ConfigurationError, match="%m"):
        parse_timestamp("2006-01-02", layout)

    layout = "%d %b %Y %H:%M:%S %z"
    dt = datetime(2006, 1, 2, 15, 4, 5, tzinfo=MST)
    text = format_timestamp(dt, layout)
    assert text == "02 Jan 2006 15:04:05 -0700"
    assert parse_timestamp(text, layout) == dt


@pytest.fixture
def german_time_locale():
    saved = locale.setlocale(locale.LC_TIME)
    for name in ("de_DE.UTF-8", "de_DE.utf8", "de_DE"):
        try:
            locale.setlocale(locale.LC_TIME, name)
            break
        except locale.Error:
            continue
    else:
        pytest.skip("no German locale installed")
    yield
    locale.setlocale(locale.LC_TIME, saved)


def test_names_are_english_under_any_locale(german_time_locale):
    dt = datetime(2024, 3, 5, 9, 30, 0, tzinfo=timezone.utc)
    assert datetime(2024, 3, 5).strftime("%a %b") != "Tue Mar"
    assert format_timestamp(dt) == "Tue Mar  5 2024 09:30:00 GMT+0000 (UTC)"
    assert parse_timestamp("Tue Mar  5 2024 09:30:00 GMT+0000 (UTC)") == dt
