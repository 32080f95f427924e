"""
Domain: planned production pace.

The production plan is a step function of builds-per-week over half-month
steps (the 1st and the 15th of each month) between a fixed start and end
month.

Rules implemented here:
- Step index of a date: 2 per whole month after the start, +1 from the 15th.
  Indexes are clamped to [0, step_count].
- Point values are builds per week, clamped to 1..5.
- The extra vans a plan adds before the last forecast production date is
  the sum over points (sorted by step) of
      ceil(max(0, days_until_last_forecast) / 7) * (value - previous value)
  where the first point's delta is its own value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .date_normalizer import add_months, coerce_date
from .schedule import ScheduleRow

SCHEDULE_START = date(2025, 7, 1)
SCHEDULE_END = date(2026, 12, 1)

MIN_POINT_VALUE = 1
MAX_POINT_VALUE = 5

PRODUCTION_COMMENCED = "Production Commenced Regent"


def _month_offset(value: date, start: date) -> int:
    return (value.year - start.year) * 12 + (value.month - start.month)


def step_count(start: date = SCHEDULE_START, end: date = SCHEDULE_END) -> int:
    return _month_offset(end, start) * 2


def half_month_index(value: date, start: date = SCHEDULE_START, end: date = SCHEDULE_END) -> int:
    half = 1 if value.day >= 15 else 0
    index = _month_offset(value, start) * 2 + half
    return min(max(index, 0), step_count(start, end))


def date_from_half_month_index(index: int, start: date = SCHEDULE_START, end: date = SCHEDULE_END) -> date:
    clamped = min(max(index, 0), step_count(start, end))
    base = add_months(start, clamped // 2)
    return base.replace(day=15 if clamped % 2 == 1 else 1)


def clamp_point_value(value: int) -> int:
    return min(max(int(value), MIN_POINT_VALUE), MAX_POINT_VALUE)


@dataclass(frozen=True, slots=True)
class SchedulePoint:
    point_id: str
    date: date
    value: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", clamp_point_value(self.value))


def sort_points(points: Iterable[SchedulePoint]) -> List[SchedulePoint]:
    return sorted(points, key=lambda point: half_month_index(point.date))


def default_points(first_date: date) -> List[SchedulePoint]:
    return [
        SchedulePoint("point-1", first_date, 1),
        SchedulePoint("point-2", date(2026, 6, 1), 2),
    ]


def schedule_delta_total(points: Iterable[SchedulePoint], last_forecast_date: Optional[date]) -> int:
    """Extra vans built before `last_forecast_date` by the plan's pace changes."""

    ordered = sort_points(points)
    if last_forecast_date is None or not ordered:
        return 0

    total = 0
    previous: Optional[SchedulePoint] = None
    for point in ordered:
        days = (last_forecast_date - point.date).days
        weeks = max(0, math.ceil(days / 7))
        delta = point.value - previous.value if previous is not None else point.value
        total += weeks * delta
        previous = point
    return total


def last_forecast_date(rows: Sequence[ScheduleRow]) -> Optional[date]:
    for row in reversed(rows):
        parsed = coerce_date(row.forecast_production_date)
        if parsed is not None:
            return parsed
    return None


def first_schedule_point_date(rows: Sequence[ScheduleRow], default: date = SCHEDULE_START) -> date:
    """
    Forecast date of the row right after the last row whose production has
    commenced; `default` when there is no such row or it has no date.
    """

    for position in range(len(rows) - 1, -1, -1):
        if PRODUCTION_COMMENCED in rows[position].regent_production:
            following = position + 1
            if following >= len(rows):
                return default
            return coerce_date(rows[following].forecast_production_date) or default
    return default


__all__ = [
    "SCHEDULE_END",
    "SCHEDULE_START",
    "SchedulePoint",
    "clamp_point_value",
    "date_from_half_month_index",
    "default_points",
    "first_schedule_point_date",
    "half_month_index",
    "last_forecast_date",
    "schedule_delta_total",
    "sort_points",
    "step_count",
]
