"""
Domain: time-bucketed inventory levels.

Given arrival events (vehicle received into a yard), departure events
(vehicle handed over), and the live count of what is in the yard now, this
module reconstructs what the level was at the end of each of the previous N
periods.

The current total is ground truth. Earlier levels are inferred by undoing the
net change of every later period:

    level[i] = max(0, current_total - sum(net[i+1:]))

The clamp absorbs inconsistencies between the event log and the live count
(for example events that pre-date the log's coverage). A negative inventory
is never reported.

Records whose date does not parse are left out of every period.

Pure functions only. Caller records are read, never retained or mutated.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

from .date_normalizer import add_months, coerce_date, week_start

DEFAULT_WINDOW_WEEKS = 10

ARRIVAL_FIELDS: Tuple[str, ...] = ("receivedAt",)
DEPARTURE_FIELDS: Tuple[str, ...] = ("handoverAt", "createdAt")


@dataclass(frozen=True, slots=True)
class PeriodBucket:
    """
    One period `[start, end)` of a level series.

    `level` is the inferred inventory level for the period and is never
    negative.
    """

    start: date
    end: date
    arrivals: int
    departures: int
    net_change: int
    level: int

    @property
    def label(self) -> str:
        """Short axis label, `MM/DD` of the period start."""

        return f"{self.start.month:02d}/{self.start.day:02d}"

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end


# Weekly series are the common case; same shape, Monday-anchored 7-day periods.
WeekBucket = PeriodBucket


def record_date(record: Any, fields: Sequence[str]) -> Any:
    """
    Raw date value of a record: the first of `fields` that is not None.

    Mappings are read by key, anything else by attribute.
    """

    for field in fields:
        if isinstance(record, Mapping):
            value = record.get(field)
        else:
            value = getattr(record, field, None)
        if value is not None:
            return value
    return None


def count_unplaced(records: Iterable[Any], fields: Sequence[str]) -> int:
    """Number of records whose date is missing or does not parse."""

    return sum(1 for record in records if coerce_date(record_date(record, fields)) is None)


def reconstruct_levels(net_changes: Sequence[int], current_total: int) -> List[int]:
    """Walk levels backward from `current_total`, clamping each at zero."""

    levels: List[int] = []
    later = 0
    for net in reversed(net_changes):
        levels.append(max(0, current_total - later))
        later += net
    levels.reverse()
    return levels


def _count_per_period(
    records: Iterable[Any],
    fields: Sequence[str],
    starts: Sequence[date],
    ends: Sequence[date],
) -> List[int]:
    counts = [0] * len(starts)
    for record in records:
        day = coerce_date(record_date(record, fields))
        if day is None:
            continue
        index = bisect_right(starts, day) - 1
        if index >= 0 and day < ends[index]:
            counts[index] += 1
    return counts


def _level_series(
    starts: List[date],
    ends: List[date],
    arrivals: Iterable[Any],
    departures: Iterable[Any],
    current_total: int,
    arrival_fields: Sequence[str],
    departure_fields: Sequence[str],
) -> List[PeriodBucket]:
    arrived = _count_per_period(arrivals, arrival_fields, starts, ends)
    departed = _count_per_period(departures, departure_fields, starts, ends)
    nets = [a - d for a, d in zip(arrived, departed)]
    levels = reconstruct_levels(nets, current_total)

    return [
        PeriodBucket(
            start=starts[i],
            end=ends[i],
            arrivals=arrived[i],
            departures=departed[i],
            net_change=nets[i],
            level=levels[i],
        )
        for i in range(len(starts))
    ]


def weekly_levels(
    arrivals: Iterable[Any],
    departures: Iterable[Any],
    current_total: int,
    window_weeks: int,
    anchor: date,
    *,
    arrival_fields: Sequence[str] = ARRIVAL_FIELDS,
    departure_fields: Sequence[str] = DEPARTURE_FIELDS,
) -> List[WeekBucket]:
    """
    Weekly level series ending with the week that contains `anchor`.

    Weeks start on Monday. The result has exactly `window_weeks` entries,
    oldest first (empty when `window_weeks` is not positive).
    """

    if window_weeks <= 0:
        return []

    latest = week_start(anchor)
    starts = [latest - timedelta(days=7 * (window_weeks - 1 - i)) for i in range(window_weeks)]
    ends = [start + timedelta(days=7) for start in starts]
    return _level_series(
        starts, ends, arrivals, departures, current_total, arrival_fields, departure_fields
    )


def half_month_start(value: date) -> date:
    """The 1st or the 15th on or before `value`."""

    return value.replace(day=15 if value.day >= 15 else 1)


def next_half_month_start(start: date) -> date:
    if start.day < 15:
        return start.replace(day=15)
    return add_months(start, 1)


def previous_half_month_start(start: date) -> date:
    if start.day >= 15:
        return start.replace(day=1)
    return add_months(start, -1).replace(day=15)


def half_monthly_levels(
    arrivals: Iterable[Any],
    departures: Iterable[Any],
    current_total: int,
    window_periods: int,
    anchor: date,
    *,
    arrival_fields: Sequence[str] = ARRIVAL_FIELDS,
    departure_fields: Sequence[str] = DEPARTURE_FIELDS,
) -> List[PeriodBucket]:
    """
    Level series over half-month periods (1st to 14th, 15th to month end).

    Same reconstruction as `weekly_levels`, ending with the period that
    contains `anchor`.
    """

    if window_periods <= 0:
        return []

    starts = [half_month_start(anchor)]
    while len(starts) < window_periods:
        starts.append(previous_half_month_start(starts[-1]))
    starts.reverse()
    ends = [next_half_month_start(start) for start in starts]
    return _level_series(
        starts, ends, arrivals, departures, current_total, arrival_fields, departure_fields
    )


__all__ = [
    "ARRIVAL_FIELDS",
    "DEFAULT_WINDOW_WEEKS",
    "DEPARTURE_FIELDS",
    "PeriodBucket",
    "WeekBucket",
    "count_unplaced",
    "half_month_start",
    "half_monthly_levels",
    "next_half_month_start",
    "previous_half_month_start",
    "reconstruct_levels",
    "record_date",
    "weekly_levels",
]
