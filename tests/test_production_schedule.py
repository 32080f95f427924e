"""
Tests for `domain/production_schedule.py`.
"""

from __future__ import annotations

from datetime import date

from domain.production_schedule import (
    PRODUCTION_COMMENCED,
    SchedulePoint,
    date_from_half_month_index,
    default_points,
    first_schedule_point_date,
    half_month_index,
    last_forecast_date,
    schedule_delta_total,
    sort_points,
    step_count,
)
from domain.schedule import ScheduleRow


def test_step_count_covers_start_to_end() -> None:
    assert step_count() == 34


def test_half_month_index() -> None:
    assert half_month_index(date(2025, 7, 1)) == 0
    assert half_month_index(date(2025, 7, 14)) == 0
    assert half_month_index(date(2025, 7, 15)) == 1
    assert half_month_index(date(2025, 8, 1)) == 2
    assert half_month_index(date(2024, 1, 1)) == 0
    assert half_month_index(date(2030, 1, 1)) == 34


def test_date_from_half_month_index() -> None:
    assert date_from_half_month_index(0) == date(2025, 7, 1)
    assert date_from_half_month_index(3) == date(2025, 8, 15)
    assert date_from_half_month_index(-5) == date(2025, 7, 1)
    assert date_from_half_month_index(100) == date(2026, 12, 1)


def test_point_values_are_clamped() -> None:
    assert SchedulePoint("p", date(2025, 7, 1), 9).value == 5
    assert SchedulePoint("p", date(2025, 7, 1), 0).value == 1


def test_sort_points_by_step() -> None:
    late = SchedulePoint("late", date(2026, 1, 15), 2)
    early = SchedulePoint("early", date(2025, 8, 1), 3)

    assert [p.point_id for p in sort_points([late, early])] == ["early", "late"]


def test_default_points() -> None:
    points = default_points(date(2025, 9, 15))

    assert [(p.point_id, p.date, p.value) for p in points] == [
        ("point-1", date(2025, 9, 15), 1),
        ("point-2", date(2026, 6, 1), 2),
    ]


def test_schedule_delta_total() -> None:
    points = [
        SchedulePoint("b", date(2025, 7, 15), 3),
        SchedulePoint("a", date(2025, 7, 1), 1),
    ]

    # a: 28 days -> 4 weeks * 1; b: 14 days -> 2 weeks * (3 - 1).
    assert schedule_delta_total(points, date(2025, 7, 29)) == 8


def test_schedule_delta_rounds_partial_weeks_up_and_ignores_later_points() -> None:
    points = [
        SchedulePoint("a", date(2025, 7, 1), 1),
        SchedulePoint("b", date(2025, 8, 1), 4),
    ]

    assert schedule_delta_total(points, date(2025, 7, 10)) == 2
    assert schedule_delta_total(points, None) == 0
    assert schedule_delta_total([], date(2025, 7, 10)) == 0


def test_last_forecast_date_skips_blank_rows() -> None:
    rows = [
        ScheduleRow(1, forecast_production_date="01/08/2025"),
        ScheduleRow(2, forecast_production_date="15/08/2025"),
        ScheduleRow(3),
    ]

    assert last_forecast_date(rows) == date(2025, 8, 15)
    assert last_forecast_date([]) is None


def test_first_schedule_point_date_follows_last_commenced_row() -> None:
    rows = [
        ScheduleRow(1, regent_production=PRODUCTION_COMMENCED, forecast_production_date="01/08/2025"),
        ScheduleRow(2, regent_production=PRODUCTION_COMMENCED, forecast_production_date="01/09/2025"),
        ScheduleRow(3, forecast_production_date="15/09/2025"),
        ScheduleRow(4, forecast_production_date="01/10/2025"),
    ]

    assert first_schedule_point_date(rows) == date(2025, 9, 15)


def test_first_schedule_point_date_defaults() -> None:
    default = date(2025, 7, 1)

    assert first_schedule_point_date([ScheduleRow(1)], default) == default
    assert first_schedule_point_date(
        [ScheduleRow(1, regent_production=PRODUCTION_COMMENCED)], default
    ) == default
