from datetime import date, datetime, timedelta, timezone

import pytest

from ticketsuite.datetimes import (
    format_date,
    format_rfc3339,
    normalize_field_value,
    try_parse_datetime,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2025-10-30", datetime(2025, 10, 30, tzinfo=timezone.utc)),
        (
            "2024-01-01T10:30:00.000+0000",
            datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc),
        ),
        (
            "2024-01-01T10:30:00.123+0200",
            datetime(2024, 1, 1, 10, 30, 0, 123000, tzinfo=timezone(timedelta(hours=2))),
        ),
        ("2024-01-01T10:30:00Z", datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc)),
        (
            "2024-01-01T10:30:00-05:00",
            datetime(2024, 1, 1, 10, 30, tzinfo=timezone(timedelta(hours=-5))),
        ),
        (
            "2024-01-01T10:30:00.123456789Z",
            datetime(2024, 1, 1, 10, 30, 0, 123456, tzinfo=timezone.utc),
        ),
        ("15:30:00", datetime(1, 1, 1, 15, 30, tzinfo=timezone.utc)),
        ("15:30", datetime(1, 1, 1, 15, 30, tzinfo=timezone.utc)),
    ],
)
def test_accepted_layouts(value, expected):
    parsed, ok = try_parse_datetime(value)

    assert ok is True
    assert parsed == expected


@pytest.mark.parametrize(
    "value",
    ["", "not a date", "2024-13-01", "2024/01/01", "10/30/2025", "2024-01-01T10:30:00", None, 42],
)
def test_rejected_values_report_not_found(value):
    assert try_parse_datetime(value) == (None, False)


def test_format_rfc3339_uses_z_for_utc():
    assert format_rfc3339(datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc)) == "2024-01-01T10:30:00Z"


def test_format_rfc3339_keeps_offset():
    value = datetime(2024, 1, 1, 10, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))

    assert format_rfc3339(value) == "2024-01-01T10:30:00+05:30"


def test_format_rfc3339_treats_naive_as_utc():
    assert format_rfc3339(datetime(2024, 6, 1)) == "2024-06-01T00:00:00Z"


def test_format_rfc3339_pads_small_years():
    assert format_rfc3339(datetime(1, 1, 1, 15, 30, tzinfo=timezone.utc)) == "0001-01-01T15:30:00Z"


def test_format_date():
    assert format_date(date(2025, 3, 7)) == "2025-03-07"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2025-10-30", "2025-10-30T00:00:00Z"),
        ("2024-01-01T10:30:00.000+0000", "2024-01-01T10:30:00Z"),
        ("2024-01-01T10:30:00.000-0700", "2024-01-01T10:30:00-07:00"),
        ("Sprint 1", "Sprint 1"),
        ("", ""),
        (42, 42),
        (None, None),
        ({"value": "2024-01-01"}, {"value": "2024-01-01"}),
    ],
)
def test_normalize_field_value(value, expected):
    assert normalize_field_value(value) == expected


def test_normalize_is_stable():
    once = normalize_field_value("2024-01-01T10:30:00.000+0000")

    assert normalize_field_value(once) == once
