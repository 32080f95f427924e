"""
Campervan schedule service.

Loading and saving schedule rows, plus the summaries shown beside the grid:
signed orders per dealer over time, completed builds, per-dealer vehicle and
model mix, and the monthly order breakdown by vehicle or model.

Order breakdowns only count rows that have a chassis number and a parseable
signed-order date.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from domain.category_share import CategoryShare, category_share
from domain.date_normalizer import DateStyle, coerce_date, format_date
from domain.production_schedule import (
    SchedulePoint,
    default_points,
    first_schedule_point_date,
    last_forecast_date,
    schedule_delta_total,
)
from domain.schedule import (
    MODEL_CATEGORIES,
    VEHICLE_CATEGORIES,
    ScheduleRow,
    is_completed,
    is_hidden_row,
    is_stock_order,
    matches_search,
    model_category,
    recalc_row,
    vehicle_category,
)
from repositories import schedule_repository

logger = logging.getLogger(__name__)


class Breakdown(str, Enum):
    VEHICLE = "vehicle"
    MODEL = "model"


class StockFilter(str, Enum):
    ALL = "all"
    STOCK = "stock"
    NON_STOCK = "non-stock"


@dataclass(frozen=True, slots=True)
class SignedOrderPoint:
    date: date
    count: int

    @property
    def label(self) -> str:
        return format_date(self.date, DateStyle.DAY_FIRST)


@dataclass(frozen=True, slots=True)
class DealerOrderMix:
    dealer: str
    total: int = 0
    ldv: int = 0
    ford: int = 0
    srv221: int = 0
    srv222: int = 0
    srv223: int = 0
    ford_other: int = 0


@dataclass(frozen=True, slots=True)
class MonthlyOrderCount:
    month: str
    counts: Dict[str, int]


@dataclass(frozen=True, slots=True)
class OrderBreakdownSummary:
    shares: Dict[str, CategoryShare]
    total: int
    missing_vehicle_count: int
    missing_by_vehicle_type: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ScheduleSummary:
    dealers: List[str]
    signed_orders: List[SignedOrderPoint]
    completed: int
    dealer_mix: List[DealerOrderMix]
    monthly: List[MonthlyOrderCount]
    breakdown: OrderBreakdownSummary
    delta_total: int


def breakdown_categories(breakdown: Breakdown) -> Tuple[str, ...]:
    return VEHICLE_CATEGORIES if breakdown is Breakdown.VEHICLE else MODEL_CATEGORIES


def _category(row: ScheduleRow, breakdown: Breakdown) -> str:
    return vehicle_category(row) if breakdown is Breakdown.VEHICLE else model_category(row)


def load_schedule_rows() -> List[ScheduleRow]:
    return schedule_repository.list_schedule_rows()


def save_schedule_row(row: ScheduleRow) -> ScheduleRow:
    """Recalculate derived columns and persist the row. Returns the saved row."""

    recalculated = recalc_row(row)
    schedule_repository.upsert_schedule_row(recalculated)
    logger.info("Saved schedule row", extra={"row_number": recalculated.row_number})
    return recalculated


def delete_schedule_row(row_number: int) -> None:
    schedule_repository.delete_schedule_row(row_number)
    logger.info("Deleted schedule row", extra={"row_number": row_number})


def visible_rows(rows: Sequence[ScheduleRow], today: date, search: Optional[str] = None) -> List[ScheduleRow]:
    term = search or ""
    return [row for row in rows if not is_hidden_row(row, today) and matches_search(row, term)]


def dealer_options(rows: Sequence[ScheduleRow]) -> List[str]:
    return sorted({row.dealer.strip() for row in rows if row.dealer.strip()})


def dealer_signed_order_series(rows: Sequence[ScheduleRow], dealer: str) -> List[SignedOrderPoint]:
    """Signed orders per day for one dealer, oldest first."""

    counts: Dict[date, int] = {}
    for row in rows:
        if row.dealer.strip() != dealer:
            continue
        signed = coerce_date(row.signed_order_received)
        if signed is None:
            continue
        counts[signed] = counts.get(signed, 0) + 1
    return [SignedOrderPoint(day, counts[day]) for day in sorted(counts)]


def completed_count(rows: Sequence[ScheduleRow]) -> int:
    return sum(1 for row in rows if is_completed(row))


def dealer_order_mix(rows: Sequence[ScheduleRow]) -> List[DealerOrderMix]:
    """Per-dealer vehicle mix, with Ford builds split by model. Largest dealer first."""

    totals: Dict[str, Dict[str, int]] = {}
    for row in rows:
        dealer = row.dealer.strip()
        if not dealer:
            continue
        entry = totals.setdefault(
            dealer,
            {"total": 0, "ldv": 0, "ford": 0, "srv221": 0, "srv222": 0, "srv223": 0, "ford_other": 0},
        )
        entry["total"] += 1

        vehicle = vehicle_category(row)
        if vehicle == "LDV":
            entry["ldv"] += 1
        elif vehicle == "Ford":
            entry["ford"] += 1
            model = row.model.strip().upper()
            if "SRV22.1" in model:
                entry["srv221"] += 1
            elif "SRV22.2" in model:
                entry["srv222"] += 1
            elif "SRV22.3" in model:
                entry["srv223"] += 1
            else:
                entry["ford_other"] += 1

    mix = [DealerOrderMix(dealer=dealer, **counts) for dealer, counts in totals.items()]
    return sorted(mix, key=lambda item: item.total, reverse=True)


def _order_rows(rows: Sequence[ScheduleRow], stock_filter: StockFilter) -> List[Tuple[ScheduleRow, date]]:
    selected: List[Tuple[ScheduleRow, date]] = []
    for row in rows:
        if not row.chassis_number.strip():
            continue
        signed = coerce_date(row.signed_order_received)
        if signed is None:
            continue
        stock = is_stock_order(row)
        if stock_filter is StockFilter.STOCK and not stock:
            continue
        if stock_filter is StockFilter.NON_STOCK and stock:
            continue
        selected.append((row, signed))
    return selected


def order_breakdown_by_month(
    rows: Sequence[ScheduleRow],
    breakdown: Breakdown = Breakdown.VEHICLE,
    stock_filter: StockFilter = StockFilter.ALL,
) -> List[MonthlyOrderCount]:
    """Signed orders per `YYYY-MM` month and category, oldest month first. "Other" is not counted."""

    categories = breakdown_categories(breakdown)
    months: Dict[str, Dict[str, int]] = {}
    for row, signed in _order_rows(rows, stock_filter):
        key = f"{signed.year:04d}-{signed.month:02d}"
        counts = months.setdefault(key, {category: 0 for category in categories})
        category = _category(row, breakdown)
        if category in counts:
            counts[category] += 1
    return [MonthlyOrderCount(month, months[month]) for month in sorted(months)]


def order_breakdown_summary(
    rows: Sequence[ScheduleRow],
    breakdown: Breakdown = Breakdown.VEHICLE,
    stock_filter: StockFilter = StockFilter.ALL,
) -> OrderBreakdownSummary:
    """
    Category shares of signed orders, plus orders still missing a vehicle
    order date (by vehicle type).
    """

    selected = [row for row, _ in _order_rows(rows, stock_filter)]
    categories = breakdown_categories(breakdown)
    shares = category_share(selected, lambda row: _category(row, breakdown), categories)

    missing = {"ford": 0, "ldv": 0, "other": 0}
    for row in selected:
        if row.vehicle_order_date.strip():
            continue
        vehicle = vehicle_category(row)
        key = "ldv" if vehicle == "LDV" else "ford" if vehicle == "Ford" else "other"
        missing[key] += 1

    return OrderBreakdownSummary(
        shares={category: shares[category] for category in categories},
        total=len(selected),
        missing_vehicle_count=sum(missing.values()),
        missing_by_vehicle_type=missing,
    )


def production_delta_total(rows: Sequence[ScheduleRow], points: Optional[Sequence[SchedulePoint]] = None) -> int:
    """Extra builds from the production pace plan (default plan when `points` is None)."""

    if points is None:
        points = default_points(first_schedule_point_date(rows))
    return schedule_delta_total(points, last_forecast_date(rows))


def schedule_summary(
    rows: Sequence[ScheduleRow],
    dealer: Optional[str] = None,
    breakdown: Breakdown = Breakdown.VEHICLE,
    stock_filter: StockFilter = StockFilter.ALL,
) -> ScheduleSummary:
    """
    Everything the schedule overview shows. `dealer` defaults to the first
    dealer alphabetically when missing or unknown.
    """

    dealers = dealer_options(rows)
    selected_dealer = dealer if dealer in dealers else (dealers[0] if dealers else None)
    return ScheduleSummary(
        dealers=dealers,
        signed_orders=dealer_signed_order_series(rows, selected_dealer) if selected_dealer else [],
        completed=completed_count(rows),
        dealer_mix=dealer_order_mix(rows),
        monthly=order_breakdown_by_month(rows, breakdown, stock_filter),
        breakdown=order_breakdown_summary(rows, breakdown, stock_filter),
        delta_total=production_delta_total(rows),
    )


__all__ = [
    "Breakdown",
    "DealerOrderMix",
    "MonthlyOrderCount",
    "OrderBreakdownSummary",
    "ScheduleSummary",
    "SignedOrderPoint",
    "StockFilter",
    "completed_count",
    "dealer_options",
    "delete_schedule_row",
    "dealer_order_mix",
    "dealer_signed_order_series",
    "load_schedule_rows",
    "order_breakdown_by_month",
    "order_breakdown_summary",
    "production_delta_total",
    "save_schedule_row",
    "schedule_summary",
    "visible_rows",
]
