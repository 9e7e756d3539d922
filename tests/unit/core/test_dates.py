"""Unit tests for provider date decoding."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from xero_client.dates import (
    DateParseError,
    format_xero_date,
    parse_optional_date,
    parse_optional_datetime,
    parse_xero_date,
    parse_xero_datetime,
)


def test_legacy_milliseconds() -> None:
    parsed = parse_xero_datetime("/Date(1518685950940+0000)/")
    assert parsed == datetime(2018, 2, 15, 9, 12, 30, 940000, tzinfo=timezone.utc)
    assert parse_xero_date("/Date(1518685950940)/") == date(2018, 2, 15)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2024-03-01T10:15:00", datetime(2024, 3, 1, 10, 15, tzinfo=timezone.utc)),
        ("2024-03-01T10:15:00Z", datetime(2024, 3, 1, 10, 15, tzinfo=timezone.utc)),
        (
            "2024-03-01T10:15:00.1234567",
            datetime(2024, 3, 1, 10, 15, 0, 123456, tzinfo=timezone.utc),
        ),
        (
            "2024-03-01T10:15:00+13:00",
            datetime(2024, 3, 1, 10, 15, tzinfo=timezone(timedelta(hours=13))),
        ),
        ("2024-03-01", datetime(2024, 3, 1, tzinfo=timezone.utc)),
    ],
)
def test_iso_variants(raw: str, expected: datetime) -> None:
    assert parse_xero_datetime(raw) == expected


def test_date_drops_time_part() -> None:
    assert parse_xero_date("2024-03-01T23:59:59") == date(2024, 3, 1)
    assert parse_xero_date("2024-03-01") == date(2024, 3, 1)


def test_failure_carries_field_and_raw() -> None:
    with pytest.raises(DateParseError) as excinfo:
        parse_xero_date("31/12/2024", field="DueDate")
    assert excinfo.value.field == "DueDate"
    assert excinfo.value.raw == "31/12/2024"
    assert isinstance(excinfo.value, ValueError)


def test_optional_variants() -> None:
    assert parse_optional_date(None) is None
    assert parse_optional_date("") is None
    assert parse_optional_datetime(None) is None
    assert parse_optional_date("2024-01-02") == date(2024, 1, 2)


def test_format_round_trip() -> None:
    assert format_xero_date(date(2024, 1, 2)) == "2024-01-02"
    assert format_xero_date(datetime(2024, 1, 2, 5, 6, tzinfo=timezone.utc)) == "2024-01-02"
