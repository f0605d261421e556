"""Permissive date/time coercion for tracker payloads.

The tracker returns timestamps in several shapes depending on the field and
the server edition:

- ``2025-10-30`` (date pickers, ``duedate``)
- ``2024-01-01T10:30:00.000+0000`` (vendor offset format, no colon)
- ``2024-01-01T10:30:00.000Z`` / ``2024-01-01T10:30:00+02:00`` (RFC 3339)
- ``15:30:00`` / ``15:30`` (time-tracking style values)

``try_parse_datetime`` walks a fixed ordered list of layouts and returns the
first successful parse. A miss is a normal outcome reported through the
boolean, never an exception.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any

_DATE = r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
_HM = r"(?P<hour>\d{2}):(?P<minute>\d{2})"
_HMS = _HM + r":(?P<second>\d{2})"


@dataclass(frozen=True)
class _Layout:
    name: str
    pattern: re.Pattern[str]


# Order matters: the first layout that matches wins.
LAYOUTS: tuple[_Layout, ...] = (
    _Layout("date", re.compile(_DATE)),
    _Layout(
        "vendor_offset",
        re.compile(_DATE + "T" + _HMS + r"\.(?P<fraction>\d{3})(?P<offset>[+-]\d{4})"),
    ),
    _Layout(
        "rfc3339",
        re.compile(_DATE + "T" + _HMS + r"(?:\.(?P<fraction>\d{1,9}))?(?P<offset>Z|[+-]\d{2}:\d{2})"),
    ),
    _Layout("rfc3339_no_fraction", re.compile(_DATE + "T" + _HMS + r"(?P<offset>Z)")),
    _Layout(
        "rfc3339_nano",
        re.compile(_DATE + "T" + _HMS + r"\.(?P<fraction>\d{1,9})(?P<offset>Z|[+-]\d{2}:\d{2})"),
    ),
    _Layout("time", re.compile(_HMS)),
    _Layout("time_short", re.compile(_HM)),
)


def _parse_offset(token: str | None) -> timezone:
    if not token or token == "Z":
        return timezone.utc
    sign = -1 if token[0] == "-" else 1
    digits = token[1:].replace(":", "")
    delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:4]))
    if not delta:
        return timezone.utc
    return timezone(sign * delta)


def _build(parts: dict[str, str | None]) -> datetime:
    fraction = parts.get("fraction") or ""
    return datetime(
        # Time-only layouts anchor to 0001-01-01, the smallest date datetime allows.
        int(parts.get("year") or 1),
        int(parts.get("month") or 1),
        int(parts.get("day") or 1),
        int(parts.get("hour") or 0),
        int(parts.get("minute") or 0),
        int(parts.get("second") or 0),
        int(fraction[:6].ljust(6, "0")) if fraction else 0,
        tzinfo=_parse_offset(parts.get("offset")),
    )


def try_parse_datetime(value: str) -> tuple[datetime | None, bool]:
    """Parse ``value`` against the known layouts.

    Returns ``(timestamp, True)`` on the first match and ``(None, False)``
    for empty or unrecognised input. Zone-less layouts are read as UTC.
    """
    if not value or not isinstance(value, str):
        return None, False
    for layout in LAYOUTS:
        match = layout.pattern.fullmatch(value)
        if match is None:
            continue
        try:
            return _build(match.groupdict()), True
        except ValueError:
            # Shape matched but a component is out of range (e.g. month 13).
            continue
    return None, False


def format_rfc3339(value: datetime) -> str:
    """Render ``value`` as RFC 3339 with seconds precision.

    Zero offsets render as ``Z``; naive values are treated as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    offset = value.utcoffset() or timedelta(0)
    stamp = f"{format_date(value)}T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    if not offset:
        return stamp + "Z"
    total = int(offset.total_seconds())
    sign = "-" if total < 0 else "+"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{stamp}{sign}{hours:02d}:{minutes:02d}"


def format_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def normalize_field_value(value: Any) -> Any:
    """Rewrite a recognised date/time string to canonical RFC 3339.

    Non-strings, empty strings and strings that are not date-like are
    returned unchanged.
    """
    if not isinstance(value, str) or not value:
        return value
    parsed, ok = try_parse_datetime(value)
    if ok and parsed is not None:
        return format_rfc3339(parsed)
    return value


__all__ = [
    "LAYOUTS",
    "format_date",
    "format_rfc3339",
    "normalize_field_value",
    "try_parse_datetime",
]
