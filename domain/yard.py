"""
Domain: dealer yards, handovers and PGI (post goods issue) records.

Rules implemented here:
- Dealers are keyed by a slug: lowercase, "&" spelled "and", every other run
  of non-alphanumerics collapsed to "-", no leading or trailing "-".
- Chassis numbers are compared upper-cased.
- A yard entry is either "Stock" (dealer-owned) or "Customer" (sold, waiting
  for its customer). Blank or unknown types count as Customer.
- "Waiting for receiving": PGI issued for the dealer (within the configured
  window), not yet received into the yard, and not already handed over.

This module contains only pure domain entities; the raw store layout it reads
is `{chassis: record}` per dealer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, List, Mapping, Optional

from .category_share import category_share
from .date_normalizer import coerce_date
from .time_buckets import record_date

STOCK = "Stock"
CUSTOMER = "Customer"

# Placeholder key the store keeps under every dealer's yard node.
YARD_MARKER_KEY = "dealer-chassis"

PGI_DATE_FIELDS = ("pgiAt", "pgiDate", "issuedAt", "createdAt")

_SLUG_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _first_present(record: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


def normalize_dealer_slug(name: Optional[str]) -> str:
    slug = _text(name).lower().replace("&", "and")
    return _SLUG_SEPARATOR_RE.sub("-", slug).strip("-")


def normalize_chassis(value: Any) -> str:
    return _text(value).strip().upper()


def normalize_stock_type(value: Any) -> str:
    text = _text(value).strip().lower()
    if not text:
        return CUSTOMER
    if "stock" in text:
        return STOCK
    return CUSTOMER


@dataclass(frozen=True, slots=True)
class YardEntry:
    chassis: str
    received_at: Any
    stock_type: str


@dataclass(frozen=True, slots=True)
class HandoverEntry:
    chassis: str
    handover_at: Any


@dataclass(frozen=True, slots=True)
class PgiRecord:
    chassis: str
    dealer_slug: str
    pgi_at: Any


@dataclass(frozen=True, slots=True)
class YardInventory:
    stock: int
    customer: int
    total: int
    stock_pct: int
    customer_pct: int


def yard_entries_from_rows(yard: Mapping[str, Any]) -> List[YardEntry]:
    entries: List[YardEntry] = []
    for chassis, record in (yard or {}).items():
        if chassis == YARD_MARKER_KEY:
            continue
        record = record if isinstance(record, Mapping) else {}
        raw_type = record.get("type")
        if raw_type is None:
            raw_type = record.get("Type")
        entries.append(
            YardEntry(
                chassis=normalize_chassis(chassis),
                received_at=record.get("receivedAt"),
                stock_type=normalize_stock_type(raw_type),
            )
        )
    return entries


def handover_entries_from_rows(handover: Mapping[str, Any]) -> List[HandoverEntry]:
    entries: List[HandoverEntry] = []
    for chassis, record in (handover or {}).items():
        record = record if isinstance(record, Mapping) else {}
        entries.append(
            HandoverEntry(
                chassis=normalize_chassis(chassis),
                handover_at=record_date(record, ("handoverAt", "createdAt")),
            )
        )
    return entries


def pgi_records_from_rows(pgi: Mapping[str, Any]) -> List[PgiRecord]:
    """
    PGI records keyed by chassis. A chassis field inside the record wins
    over the key.
    """

    records: List[PgiRecord] = []
    for key, record in (pgi or {}).items():
        record = record if isinstance(record, Mapping) else {}
        chassis = _first_present(record, ("chassis", "Chassis", "CHASSIS"))
        dealer = record.get("dealer") or record.get("Dealer") or ""
        records.append(
            PgiRecord(
                chassis=normalize_chassis(key if chassis is None else chassis),
                dealer_slug=normalize_dealer_slug(dealer),
                pgi_at=record_date(record, PGI_DATE_FIELDS),
            )
        )
    return records


def yard_inventory(entries: Iterable[YardEntry]) -> YardInventory:
    shares = category_share(entries, lambda entry: entry.stock_type, (STOCK, CUSTOMER))
    stock = shares[STOCK]
    customer = shares[CUSTOMER]
    return YardInventory(
        stock=stock.count,
        customer=customer.count,
        total=stock.count + customer.count,
        stock_pct=stock.percent,
        customer_pct=customer.percent,
    )


def waiting_for_receiving(
    pgi_records: Iterable[PgiRecord],
    dealer_slug: str,
    yard: Iterable[YardEntry],
    handover: Iterable[HandoverEntry],
    as_of: date,
    range_days: int = 180,
) -> int:
    """
    Count vans on the road to `dealer_slug`.

    With a positive `range_days`, only PGI dated within that many days of
    `as_of` count; a PGI with no parseable date is then left out.
    """

    in_yard = {entry.chassis for entry in yard}
    handed_over = {entry.chassis for entry in handover}
    threshold = as_of - timedelta(days=range_days)

    count = 0
    for record in pgi_records:
        if record.dealer_slug != dealer_slug or not record.chassis:
            continue
        if range_days > 0:
            issued = coerce_date(record.pgi_at)
            if issued is None or issued < threshold:
                continue
        if record.chassis in in_yard or record.chassis in handed_over:
            continue
        count += 1
    return count


__all__ = [
    "CUSTOMER",
    "HandoverEntry",
    "PgiRecord",
    "STOCK",
    "YardEntry",
    "YardInventory",
    "handover_entries_from_rows",
    "normalize_chassis",
    "normalize_dealer_slug",
    "normalize_stock_type",
    "pgi_records_from_rows",
    "waiting_for_receiving",
    "yard_entries_from_rows",
    "yard_inventory",
]
