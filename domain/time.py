"""
Domain time utilities (pure).

Instant-to-calendar-date conversions shared by the date normalizer, plus the
local "submit time" rendering used on reallocation requests.

All instants are interpreted in UTC unless a zone is passed explicitly.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Day 0 of the serial date system used by common spreadsheet tools.
SPREADSHEET_EPOCH = date(1899, 12, 30)


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces that a timestamp is timezone-aware with UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValueError(f"{name} must be a UTC timestamp (offset 0)")


def instant_to_date(value: datetime) -> date:
    """
    Calendar date of an instant.

    Timezone-aware values are converted to UTC first; naive values keep their
    wall-clock date.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        return value.date()
    return value.astimezone(timezone.utc).date()


def date_from_epoch_millis(millis: float) -> date:
    """
    UTC calendar date of a millisecond epoch timestamp.

    Raises OverflowError when the instant is outside the representable range.
    """

    return (UNIX_EPOCH + timedelta(milliseconds=millis)).date()


def date_from_spreadsheet_serial(serial: float) -> date:
    """Calendar date for a spreadsheet serial day count (fractions are the time of day)."""

    return SPREADSHEET_EPOCH + timedelta(days=int(serial // 1))


def format_local_timestamp(instant: datetime, zone_name: str) -> str:
    """
    Render a UTC instant as `DD/MM/YYYY, HH:MM:SS` in the given IANA zone.

    This is the shape stored on reallocation requests and issues.
    """

    require_utc_timestamp("instant", instant)
    local = instant.astimezone(ZoneInfo(zone_name))
    return local.strftime("%d/%m/%Y, %H:%M:%S")


__all__ = [
    "SPREADSHEET_EPOCH",
    "UNIX_EPOCH",
    "date_from_epoch_millis",
    "date_from_spreadsheet_serial",
    "format_local_timestamp",
    "instant_to_date",
    "require_utc_timestamp",
]
