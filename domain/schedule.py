"""
Domain: campervan production schedule rows.

Rules implemented here:
- Every date column is stored canonically as DD/MM/YYYY; input that does not
  parse is stored as an empty string.
- Latest order dates are derived from the forecast production date:
  - latest vehicle order        = forecast - 180 days
  - latest EUR parts order      = forecast - 60 days
  - latest Longtree parts order = forecast - 90 days
- Duration is planned end minus planned start in days, blank when either date
  is missing or the end is before the start.
- A row is hidden from the grid when its forecast production date is less than
  three months out and neither a chassis nor a dealer has been assigned.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Any, Dict, Mapping, Optional, Tuple

from .date_normalizer import DateStyle, add_days, coerce_date, duration_days, format_date, normalize_date_string

LATEST_VEHICLE_ORDER_DAYS = 180
LATEST_EUR_PARTS_ORDER_DAYS = 60
LATEST_LONGTREE_PARTS_ORDER_DAYS = 90

HIDE_WITHIN_MONTHS = 3

COMPLETED_STATUSES = frozenset({"finished", "ready for dispatch"})

VEHICLE_CATEGORIES = ("LDV", "Ford")
MODEL_CATEGORIES = ("SRV19.1", "SRV22.1", "SRV22.2", "SRV22.3")
OTHER = "Other"


@dataclass(frozen=True, slots=True)
class ScheduleRow:
    """
    One row of the campervan schedule grid.

    Field names are snake_case; the store keeps the camelCase names listed in
    `STORE_KEYS`.
    """

    row_number: int
    forecast_production_date: str = ""
    regent_production: str = ""
    chassis_number: str = ""
    vin_number: str = ""
    vehicle: str = ""
    model: str = ""
    dealer: str = ""
    customer: str = ""
    latest_vehicle_order: str = ""
    vehicle_order_date: str = ""
    latest_eur_parts_order: str = ""
    eur_parts_order_date: str = ""
    eur_parts_eta: str = ""
    latest_longtree_parts_order: str = ""
    longtree_parts_order_date: str = ""
    longtree_parts_eta: str = ""
    signed_order_received: str = ""
    vehicle_planned_eta: str = ""
    production_planned_start_date: str = ""
    production_planned_end_date: str = ""
    duration: Optional[int] = None

    @staticmethod
    def from_mapping(data: Mapping[str, Any], row_number: Optional[int] = None) -> "ScheduleRow":
        """
        Build a row from a store record (camelCase keys; snake_case also accepted).

        `row_number`, when given, wins over any row number inside `data`.
        """

        values: Dict[str, Any] = {}
        for name, key in STORE_KEYS.items():
            raw = data.get(key)
            if raw is None:
                raw = data.get(name)
            values[name] = raw

        number = row_number if row_number is not None else _as_int(values.pop("row_number"))
        values.pop("row_number", None)
        duration = _as_int(values.pop("duration"))
        text_values = {name: "" if raw is None else str(raw).strip() for name, raw in values.items()}
        return ScheduleRow(row_number=number or 0, duration=duration, **text_values)

    def to_mapping(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for name, key in STORE_KEYS.items():
            value = getattr(self, name)
            payload[key] = "" if value is None else value
        return payload


STORE_KEYS: Dict[str, str] = {
    "row_number": "rowNumber",
    "forecast_production_date": "forecastProductionDate",
    "regent_production": "regentProduction",
    "chassis_number": "chassisNumber",
    "vin_number": "vinNumber",
    "vehicle": "vehicle",
    "model": "model",
    "dealer": "dealer",
    "customer": "customer",
    "latest_vehicle_order": "latestVehicleOrder",
    "vehicle_order_date": "vehicleOrderDate",
    "latest_eur_parts_order": "latestEurPartsOrder",
    "eur_parts_order_date": "eurPartsOrderDate",
    "eur_parts_eta": "eurPartsEta",
    "latest_longtree_parts_order": "latestLongtreePartsOrder",
    "longtree_parts_order_date": "longtreePartsOrderDate",
    "longtree_parts_eta": "longtreePartsEta",
    "signed_order_received": "signedOrderReceived",
    "vehicle_planned_eta": "vehiclePlannedEta",
    "production_planned_start_date": "productionPlannedStartDate",
    "production_planned_end_date": "productionPlannedEndDate",
    "duration": "duration",
}

# Date columns a user may enter. Latest-order columns are derived, not entered.
DATE_FIELDS: Tuple[str, ...] = (
    "forecast_production_date",
    "vehicle_order_date",
    "eur_parts_order_date",
    "eur_parts_eta",
    "longtree_parts_order_date",
    "longtree_parts_eta",
    "signed_order_received",
    "vehicle_planned_eta",
    "production_planned_start_date",
    "production_planned_end_date",
)


@dataclass(frozen=True, slots=True)
class ScheduleColumn:
    field: str
    label: str
    kind: str = "text"
    read_only: bool = False


SCHEDULE_COLUMNS: Tuple[ScheduleColumn, ...] = (
    ScheduleColumn("forecast_production_date", "Forecast Production Date", "date"),
    ScheduleColumn("regent_production", "Regent Production"),
    ScheduleColumn("chassis_number", "Chassis Number"),
    ScheduleColumn("vin_number", "Vin Number"),
    ScheduleColumn("vehicle", "Vehicle"),
    ScheduleColumn("model", "Model"),
    ScheduleColumn("dealer", "Dealer"),
    ScheduleColumn("customer", "Customer"),
    ScheduleColumn(
        "latest_vehicle_order",
        "Lastest Vehicle Order (Forecast Production Date - 180)",
        "date",
        read_only=True,
    ),
    ScheduleColumn("vehicle_order_date", "Vehicle Order Date", "date"),
    ScheduleColumn("longtree_parts_order_date", "Longtree Parts Order Date", "date"),
    ScheduleColumn("signed_order_received", "Signed Order Received", "date"),
)

_HEADER_STRIP_RE = re.compile(r"[^a-z0-9]")


def normalize_header(value: str) -> str:
    return _HEADER_STRIP_RE.sub("", value.lower())


def _build_header_map() -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    for field in fields(ScheduleRow):
        mapping[normalize_header(field.name)] = field.name
        mapping[normalize_header(STORE_KEYS[field.name])] = field.name
    for column in SCHEDULE_COLUMNS:
        mapping[normalize_header(column.label)] = column.field
    return mapping


_HEADER_MAP = _build_header_map()


def header_to_key(header: str) -> Optional[str]:
    """ScheduleRow field for a spreadsheet header, matched on letters and digits only."""

    return _HEADER_MAP.get(normalize_header(header))


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(float(text))
    except ValueError:
        return None


def _shifted(forecast: Optional[date], days: int) -> str:
    if forecast is None:
        return ""
    return format_date(add_days(forecast, -days), DateStyle.DAY_FIRST)


def recalc_row(row: ScheduleRow) -> ScheduleRow:
    """Canonicalize date columns and recompute every derived column."""

    normalized = {name: normalize_date_string(getattr(row, name)) for name in DATE_FIELDS}
    forecast = coerce_date(normalized["forecast_production_date"])
    return replace(
        row,
        **normalized,
        latest_vehicle_order=_shifted(forecast, LATEST_VEHICLE_ORDER_DAYS),
        latest_eur_parts_order=_shifted(forecast, LATEST_EUR_PARTS_ORDER_DAYS),
        latest_longtree_parts_order=_shifted(forecast, LATEST_LONGTREE_PARTS_ORDER_DAYS),
        duration=duration_days(
            normalized["production_planned_start_date"],
            normalized["production_planned_end_date"],
        ),
    )


def add_months_keep_day(value: date, months: int) -> date:
    """Same day-of-month `months` away, clamped to the last day of a shorter month."""

    index = value.year * 12 + (value.month - 1) + months
    year, month = index // 12, index % 12 + 1
    return date(year, month, min(value.day, calendar.monthrange(year, month)[1]))


def is_hidden_row(row: ScheduleRow, today: date) -> bool:
    forecast = coerce_date(row.forecast_production_date)
    if forecast is None:
        return False
    cutoff = add_months_keep_day(today, HIDE_WITHIN_MONTHS)
    return forecast < cutoff and not row.chassis_number.strip() and not row.dealer.strip()


def matches_search(row: ScheduleRow, term: str) -> bool:
    term = term.strip().lower()
    if not term:
        return True
    parts = [str(row.row_number)] + [getattr(row, column.field) for column in SCHEDULE_COLUMNS]
    text = " ".join(str(part) for part in parts if part).lower()
    return term in text


def is_completed(row: ScheduleRow) -> bool:
    return row.regent_production.strip().lower() in COMPLETED_STATUSES


def is_stock_order(row: ScheduleRow) -> bool:
    return "stock" in row.customer.strip().lower()


def vehicle_category(row: ScheduleRow) -> str:
    vehicle = row.vehicle.strip().lower()
    if "ldv" in vehicle:
        return "LDV"
    if "ford" in vehicle:
        return "Ford"
    return OTHER


def model_category(row: ScheduleRow) -> str:
    model = row.model.strip().upper()
    for category in MODEL_CATEGORIES:
        if category in model:
            return category
    return OTHER


__all__ = [
    "DATE_FIELDS",
    "MODEL_CATEGORIES",
    "OTHER",
    "SCHEDULE_COLUMNS",
    "STORE_KEYS",
    "ScheduleColumn",
    "ScheduleRow",
    "VEHICLE_CATEGORIES",
    "add_months_keep_day",
    "header_to_key",
    "is_completed",
    "is_hidden_row",
    "is_stock_order",
    "matches_search",
    "model_category",
    "normalize_header",
    "recalc_row",
    "vehicle_category",
]
