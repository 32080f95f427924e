"""
Tests for `services/schedule_service.py`.

Covers:
- Grid visibility and search.
- Signed order series, completed count, dealer mix.
- Monthly order breakdown and category shares with stock filters.
- Production pace delta with default and explicit plans.
"""

from __future__ import annotations

from datetime import date

from domain.production_schedule import PRODUCTION_COMMENCED, SchedulePoint
from domain.schedule import ScheduleRow
from services import schedule_service
from services.schedule_service import (
    Breakdown,
    StockFilter,
    completed_count,
    dealer_options,
    dealer_order_mix,
    dealer_signed_order_series,
    order_breakdown_by_month,
    order_breakdown_summary,
    production_delta_total,
    save_schedule_row,
    schedule_summary,
    visible_rows,
)

ROWS = [
    ScheduleRow(
        1,
        forecast_production_date="01/08/2025",
        regent_production="Finished",
        chassis_number="C1",
        vehicle="Ford Transit",
        model="SRV22.1",
        dealer="Geelong",
        customer="Stock",
        signed_order_received="05/01/2025",
        vehicle_order_date="10/01/2025",
    ),
    ScheduleRow(
        2,
        forecast_production_date="15/08/2025",
        regent_production=PRODUCTION_COMMENCED,
        chassis_number="C2",
        vehicle="LDV Deliver 9",
        model="SRV19.1",
        dealer="Frankston",
        customer="J Smith",
        signed_order_received="20/01/2025",
    ),
    ScheduleRow(
        3,
        forecast_production_date="01/09/2025",
        chassis_number="C3",
        vehicle="Ford",
        model="SRV22.3",
        dealer="Frankston",
        customer="Stock",
        signed_order_received="03/02/2025",
    ),
    # No chassis: counted in the dealer series but not in order breakdowns.
    ScheduleRow(
        4,
        forecast_production_date="15/09/2025",
        vehicle="Ford",
        dealer="Frankston",
        signed_order_received="03/02/2025",
    ),
    ScheduleRow(
        5,
        forecast_production_date="01/10/2025",
        chassis_number="C5",
        vehicle="Mercedes",
        dealer="Geelong",
        signed_order_received="not yet",
    ),
]


def test_visible_rows_hide_unassigned_near_term_rows() -> None:
    rows = ROWS + [ScheduleRow(6, forecast_production_date="01/08/2025")]

    visible = visible_rows(rows, date(2025, 7, 1))
    assert [row.row_number for row in visible] == [1, 2, 3, 4, 5]

    searched = visible_rows(rows, date(2025, 7, 1), "frank")
    assert [row.row_number for row in searched] == [2, 3, 4]


def test_dealer_options_and_signed_order_series() -> None:
    assert dealer_options(ROWS) == ["Frankston", "Geelong"]

    series = dealer_signed_order_series(ROWS, "Frankston")
    assert [(point.label, point.count) for point in series] == [("20/01/2025", 1), ("03/02/2025", 2)]


def test_completed_count() -> None:
    assert completed_count(ROWS) == 1


def test_dealer_order_mix() -> None:
    mix = dealer_order_mix(ROWS)

    assert [m.dealer for m in mix] == ["Frankston", "Geelong"]
    frankston, geelong = mix
    assert (frankston.total, frankston.ldv, frankston.ford) == (3, 1, 2)
    assert (frankston.srv223, frankston.ford_other) == (1, 1)
    assert (geelong.total, geelong.ford, geelong.srv221, geelong.ldv) == (2, 1, 1, 0)


def test_order_breakdown_by_month() -> None:
    monthly = order_breakdown_by_month(ROWS)

    assert [(m.month, m.counts) for m in monthly] == [
        ("2025-01", {"LDV": 1, "Ford": 1}),
        ("2025-02", {"LDV": 0, "Ford": 1}),
    ]


def test_order_breakdown_by_month_with_stock_filter_and_models() -> None:
    stock = order_breakdown_by_month(ROWS, Breakdown.VEHICLE, StockFilter.STOCK)
    assert [(m.month, m.counts["Ford"]) for m in stock] == [("2025-01", 1), ("2025-02", 1)]

    non_stock = order_breakdown_by_month(ROWS, Breakdown.MODEL, StockFilter.NON_STOCK)
    assert [(m.month, m.counts) for m in non_stock] == [
        ("2025-01", {"SRV19.1": 1, "SRV22.1": 0, "SRV22.2": 0, "SRV22.3": 0}),
    ]


def test_order_breakdown_summary() -> None:
    summary = order_breakdown_summary(ROWS)

    assert summary.total == 3
    assert list(summary.shares) == ["LDV", "Ford"]
    assert (summary.shares["Ford"].count, summary.shares["Ford"].percent) == (2, 67)
    assert (summary.shares["LDV"].count, summary.shares["LDV"].percent) == (1, 33)
    assert summary.missing_vehicle_count == 2
    assert summary.missing_by_vehicle_type == {"ford": 1, "ldv": 1, "other": 0}


def test_order_breakdown_summary_of_nothing() -> None:
    summary = order_breakdown_summary([], Breakdown.MODEL)

    assert summary.total == 0
    assert all(share.percent == 0 for share in summary.shares.values())


def test_production_delta_total() -> None:
    # Default plan starts at the row after the last commenced row (01/09/2025);
    # the last forecast is 01/10/2025: 30 days -> 5 weeks at 1 van.
    assert production_delta_total(ROWS) == 5
    assert production_delta_total(ROWS, [SchedulePoint("a", date(2025, 9, 1), 3)]) == 15
    assert production_delta_total([]) == 0


def test_schedule_summary_defaults_to_first_dealer() -> None:
    summary = schedule_summary(ROWS, dealer="Nobody")

    assert summary.dealers == ["Frankston", "Geelong"]
    assert [p.count for p in summary.signed_orders] == [1, 2]
    assert summary.completed == 1
    assert summary.delta_total == 5


def test_schedule_summary_for_selected_dealer() -> None:
    summary = schedule_summary(ROWS, dealer="Geelong")

    assert [p.label for p in summary.signed_orders] == ["05/01/2025"]


def test_schedule_summary_of_empty_schedule() -> None:
    summary = schedule_summary([])

    assert summary.dealers == []
    assert summary.signed_orders == []
    assert summary.dealer_mix == []
    assert summary.delta_total == 0


def test_save_schedule_row_recalculates_before_saving(monkeypatch) -> None:
    saved = []
    monkeypatch.setattr(schedule_service.schedule_repository, "upsert_schedule_row", saved.append)

    row = save_schedule_row(ScheduleRow(9, forecast_production_date="2025-12-29"))

    assert saved == [row]
    assert row.forecast_production_date == "29/12/2025"
    assert row.latest_vehicle_order == "02/07/2025"
