"""
Domain: date normalization.

Upstream records carry dates in whatever shape their origin produced: manual
grid entry, spreadsheet import, or a prior-system export. This module turns
any of those shapes into a canonical calendar date (`datetime.date`) and back
into display strings.

Interpretation precedence (first match wins):

1. None, empty, zero, or a placeholder token       -> EMPTY_OR_PLACEHOLDER
2. date / datetime instance                        -> accepted as-is
3. number > 1e11                                   -> epoch milliseconds (UTC)
4. number or digits in [19000101, 21001231]        -> compact YYYYMMDD
5. number or digits in [30000, 80000]              -> spreadsheet serial
6. any other number or digits                      -> epoch milliseconds (UTC)
7. YYYY-MM-DD
8. DD-MM-YYYY
9. DD.MM.YYYY
10. a/b/c                                          -> day/month/year
11. anything else                                  -> free-form formats

Slash dates are always day-first. "03/04/2025" is the 3rd of April; no
attempt is made to infer month-first input.

A month/day combination that does not exist (day 32, month 13, 30 February)
is rejected with INVALID_CALENDAR_DATE instead of rolling over into the next
month.

`parse_date` never raises. Failures come back as `DateParseFailure` values
(which are falsy) so callers can treat them as "no date" uniformly.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from .time import (
    date_from_epoch_millis,
    date_from_spreadsheet_serial,
    instant_to_date,
)

EPOCH_MILLIS_THRESHOLD = 100_000_000_000
COMPACT_MIN = 19000101
COMPACT_MAX = 21001231
SERIAL_MIN = 30000
SERIAL_MAX = 80000

PLACEHOLDER_TOKENS = frozenset(
    {
        "dd/mm/yyyy",
        "mm/dd/yyyy",
        "yyyy-mm-dd",
        "dd-mm-yyyy",
        "dd.mm.yyyy",
        "n/a",
        "na",
        "none",
        "null",
        "tbc",
        "tba",
        "-",
    }
)

_DIGITS_RE = re.compile(r"[0-9]+")
_ISO_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_DASHED_RE = re.compile(r"(\d{2})-(\d{2})-(\d{4})")
_DOTTED_RE = re.compile(r"(\d{2})\.(\d{2})\.(\d{4})")
# Trailing text after the year (usually a time of day) is ignored.
_SLASH_RE = re.compile(r"\s*(\d+)\s*/\s*(\d+)\s*/\s*(\d+)(?:\D.*)?", re.DOTALL)
_BROWSER_DATE_RE = re.compile(r"([A-Za-z]{3} [A-Za-z]{3} \d{1,2} \d{4})(?:\s.*)?", re.DOTALL)

_FREE_FORM_FORMATS = (
    "%d %b %Y",
    "%d %B %Y",
    "%d-%b-%Y",
    "%d-%B-%Y",
    "%b %d %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%a %b %d %Y",
    "%A, %d %B %Y",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%d %b %Y %H:%M",
    "%d %B %Y %H:%M",
)

CalendarDate = date


class DateInputKind(str, Enum):
    INSTANT = "INSTANT"
    EPOCH_MILLIS = "EPOCH_MILLIS"
    COMPACT_NUMERIC = "COMPACT_NUMERIC"
    SPREADSHEET_SERIAL = "SPREADSHEET_SERIAL"
    ISO_STRING = "ISO_STRING"
    DASHED_STRING = "DASHED_STRING"
    DOTTED_STRING = "DOTTED_STRING"
    SLASH_STRING = "SLASH_STRING"
    FREE_FORM = "FREE_FORM"
    UNPARSEABLE = "UNPARSEABLE"


class DateParseFailureReason(str, Enum):
    EMPTY_OR_PLACEHOLDER = "EMPTY_OR_PLACEHOLDER"
    INVALID_INSTANT = "INVALID_INSTANT"
    INVALID_CALENDAR_DATE = "INVALID_CALENDAR_DATE"
    UNRECOGNIZED = "UNRECOGNIZED"


@dataclass(frozen=True, slots=True)
class DateParseFailure:
    """
    Why a raw value could not be turned into a calendar date.

    Falsy, so `if parsed:` reads naturally at call sites.
    """

    reason: DateParseFailureReason
    raw: Any = None
    detail: str = ""

    def __bool__(self) -> bool:
        return False


ParsedDate = Union[date, DateParseFailure]


class DateStyle(str, Enum):
    ISO = "ISO"  # YYYY-MM-DD
    DAY_FIRST = "DAY_FIRST"  # DD/MM/YYYY


def _is_number(raw: Any) -> bool:
    return isinstance(raw, (int, float)) and not isinstance(raw, bool)


def _is_finite(value: float) -> bool:
    # ints of any size are finite; math.isfinite would overflow on huge ones
    return not isinstance(value, float) or math.isfinite(value)


def _is_blank(raw: Any) -> bool:
    if raw is None:
        return True
    if _is_number(raw):
        return raw == 0
    if isinstance(raw, str):
        text = raw.strip()
        if not text or text.lower() in PLACEHOLDER_TOKENS:
            return True
        return bool(_DIGITS_RE.fullmatch(text)) and not text.strip("0")
    return False


def _classify_number(value: float) -> DateInputKind:
    if value == 0:
        return DateInputKind.UNPARSEABLE
    if not _is_finite(value):
        return DateInputKind.EPOCH_MILLIS
    if value > EPOCH_MILLIS_THRESHOLD:
        return DateInputKind.EPOCH_MILLIS
    if COMPACT_MIN <= value <= COMPACT_MAX:
        return DateInputKind.COMPACT_NUMERIC
    if SERIAL_MIN <= value <= SERIAL_MAX:
        return DateInputKind.SPREADSHEET_SERIAL
    return DateInputKind.EPOCH_MILLIS


def _classify_digits(text: str) -> DateInputKind:
    # More significant digits than the threshold has is always past it.
    if len(text.lstrip("0")) > len(str(EPOCH_MILLIS_THRESHOLD)):
        return DateInputKind.EPOCH_MILLIS
    return _classify_number(int(text.lstrip("0") or "0"))


def classify_date_input(raw: Any) -> DateInputKind:
    """
    Decide which interpretation `parse_date` will apply to `raw`.

    This is the precedence list from the module docstring; it looks only at
    the shape of the input, never at whether the resulting date is valid.
    """

    if isinstance(raw, bool) or _is_blank(raw):
        return DateInputKind.UNPARSEABLE
    if isinstance(raw, date):
        return DateInputKind.INSTANT
    if _is_number(raw):
        return _classify_number(raw)
    if not isinstance(raw, str):
        return DateInputKind.UNPARSEABLE

    text = raw.strip()
    if _DIGITS_RE.fullmatch(text):
        return _classify_digits(text)
    if _ISO_RE.fullmatch(text):
        return DateInputKind.ISO_STRING
    if _DASHED_RE.fullmatch(text):
        return DateInputKind.DASHED_STRING
    if _DOTTED_RE.fullmatch(text):
        return DateInputKind.DOTTED_STRING
    if text.count("/") == 2 and _SLASH_RE.fullmatch(text):
        return DateInputKind.SLASH_STRING
    return DateInputKind.FREE_FORM


def _failure(reason: DateParseFailureReason, raw: Any, detail: str = "") -> DateParseFailure:
    return DateParseFailure(reason=reason, raw=raw, detail=detail)


def _build_date(raw: Any, year: int, month: int, day: int) -> ParsedDate:
    try:
        return date(year, month, day)
    except (ValueError, OverflowError) as exc:
        return _failure(DateParseFailureReason.INVALID_CALENDAR_DATE, raw, str(exc))


def _instant_date(raw: Any, value: datetime) -> ParsedDate:
    try:
        return instant_to_date(value)
    except (OverflowError, ValueError) as exc:
        # UTC conversion can step outside years 1..9999
        return _failure(DateParseFailureReason.INVALID_INSTANT, raw, str(exc))


def _as_number(raw: Any) -> float:
    if _is_number(raw):
        return raw
    return int(str(raw).strip().lstrip("0") or "0")


def _parse_instant(raw: Any) -> ParsedDate:
    if isinstance(raw, datetime):
        return _instant_date(raw, raw)
    return raw


def _parse_epoch_millis(raw: Any) -> ParsedDate:
    try:
        value = _as_number(raw)
        if not _is_finite(value):
            return _failure(DateParseFailureReason.INVALID_INSTANT, raw, "not a finite number")
        return date_from_epoch_millis(value)
    except (OverflowError, ValueError) as exc:
        return _failure(DateParseFailureReason.INVALID_INSTANT, raw, str(exc))


def _parse_compact(raw: Any) -> ParsedDate:
    value = int(_as_number(raw))
    return _build_date(raw, value // 10000, (value % 10000) // 100, value % 100)


def _parse_serial(raw: Any) -> ParsedDate:
    return date_from_spreadsheet_serial(_as_number(raw))


def _parse_iso(raw: Any) -> ParsedDate:
    year, month, day = _ISO_RE.fullmatch(raw.strip()).groups()
    return _build_date(raw, int(year), int(month), int(day))


def _parse_dashed(raw: Any) -> ParsedDate:
    day, month, year = _DASHED_RE.fullmatch(raw.strip()).groups()
    return _build_date(raw, int(year), int(month), int(day))


def _parse_dotted(raw: Any) -> ParsedDate:
    day, month, year = _DOTTED_RE.fullmatch(raw.strip()).groups()
    return _build_date(raw, int(year), int(month), int(day))


def _parse_slash(raw: Any) -> ParsedDate:
    parts = _SLASH_RE.fullmatch(raw.strip()).groups()
    try:
        day, month, year = (int(part) for part in parts)
    except ValueError as exc:  # past int()'s digit limit
        return _failure(DateParseFailureReason.INVALID_CALENDAR_DATE, raw, str(exc))
    if year < 100:
        year += 2000
    return _build_date(raw, year, month, day)


def _parse_free_form(raw: Any) -> ParsedDate:
    text = raw.strip()
    try:
        instant = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        instant = None
    if instant is not None:
        return _instant_date(raw, instant)

    for fmt in _FREE_FORM_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    # Browser-style instant strings: "Sat Feb 15 2025 09:30:00 GMT+1100 (...)"
    match = _BROWSER_DATE_RE.fullmatch(text)
    if match:
        try:
            return datetime.strptime(match.group(1), "%a %b %d %Y").date()
        except ValueError as exc:
            return _failure(DateParseFailureReason.INVALID_CALENDAR_DATE, raw, str(exc))

    return _failure(DateParseFailureReason.UNRECOGNIZED, raw, "no known date format matched")


_PARSERS: Dict[DateInputKind, Callable[[Any], ParsedDate]] = {
    DateInputKind.INSTANT: _parse_instant,
    DateInputKind.EPOCH_MILLIS: _parse_epoch_millis,
    DateInputKind.COMPACT_NUMERIC: _parse_compact,
    DateInputKind.SPREADSHEET_SERIAL: _parse_serial,
    DateInputKind.ISO_STRING: _parse_iso,
    DateInputKind.DASHED_STRING: _parse_dashed,
    DateInputKind.DOTTED_STRING: _parse_dotted,
    DateInputKind.SLASH_STRING: _parse_slash,
    DateInputKind.FREE_FORM: _parse_free_form,
}


def parse_date(raw: Any) -> ParsedDate:
    """
    Parse any supported date representation into a calendar date.

    Returns a `DateParseFailure` instead of raising when the value is empty,
    a placeholder, an invalid instant, a non-existent calendar date, or an
    unrecognized shape.
    """

    kind = classify_date_input(raw)
    if kind is DateInputKind.UNPARSEABLE:
        if _is_blank(raw):
            return _failure(DateParseFailureReason.EMPTY_OR_PLACEHOLDER, raw)
        return _failure(DateParseFailureReason.UNRECOGNIZED, raw, f"unsupported type {type(raw).__name__}")
    return _PARSERS[kind](raw)


def coerce_date(raw: Any) -> Optional[date]:
    """`parse_date`, with every failure collapsed to None ("no date")."""

    parsed = parse_date(raw)
    return parsed if isinstance(parsed, date) else None


def format_date(value: date, style: DateStyle = DateStyle.ISO) -> str:
    if style is DateStyle.DAY_FIRST:
        return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def normalize_date_string(raw: Any, style: DateStyle = DateStyle.DAY_FIRST) -> str:
    """Re-render any parseable input in `style`; unparseable input becomes ''."""

    parsed = coerce_date(raw)
    return format_date(parsed, style) if parsed is not None else ""


def add_days(value: date, delta: int) -> date:
    return value + timedelta(days=delta)


def add_months(value: date, delta: int) -> date:
    """
    First day of the month `delta` months away from `value`.

    Day-of-month is never preserved; scheduling views only step between
    month boundaries.
    """

    index = value.year * 12 + (value.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


def duration_days(start: Any, end: Any) -> Optional[int]:
    """
    Whole days from `start` to `end`.

    Either argument may be a date or any raw input `parse_date` accepts.
    Returns None when either side does not parse, or when `end` is before
    `start` (a negative duration is "not yet meaningful", not an error).
    """

    start_date = coerce_date(start)
    end_date = coerce_date(end)
    if start_date is None or end_date is None:
        return None
    diff = (end_date - start_date).days
    return diff if diff >= 0 else None


def week_start(value: date) -> date:
    """Monday on or before `value`."""

    return value - timedelta(days=value.weekday())


__all__ = [
    "CalendarDate",
    "DateInputKind",
    "DateParseFailure",
    "DateParseFailureReason",
    "DateStyle",
    "PLACEHOLDER_TOKENS",
    "ParsedDate",
    "add_days",
    "add_months",
    "classify_date_input",
    "coerce_date",
    "duration_days",
    "format_date",
    "normalize_date_string",
    "parse_date",
    "week_start",
]
