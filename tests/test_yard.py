"""
Tests for `domain/yard.py`.

Covers:
- Dealer slug and stock type normalization.
- Building yard, handover and PGI entries from raw store mappings.
- Yard inventory split and the "waiting for receiving" count.
"""

from __future__ import annotations

from datetime import date

import pytest

from domain.yard import (
    CUSTOMER,
    STOCK,
    HandoverEntry,
    YardEntry,
    handover_entries_from_rows,
    normalize_dealer_slug,
    normalize_stock_type,
    pgi_records_from_rows,
    waiting_for_receiving,
    yard_entries_from_rows,
    yard_inventory,
)

AS_OF = date(2025, 7, 1)


@pytest.mark.parametrize(
    ("name", "slug"),
    [
        ("Frankston", "frankston"),
        ("ST James", "st-james"),
        ("  Smith & Sons  ", "smith-and-sons"),
        ("Green RV -- Geelong!", "green-rv-geelong"),
        (None, ""),
    ],
)
def test_normalize_dealer_slug(name, slug) -> None:
    assert normalize_dealer_slug(name) == slug


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Stock", STOCK),
        ("dealer stock", STOCK),
        ("Customer", CUSTOMER),
        ("retail", CUSTOMER),
        ("", CUSTOMER),
        (None, CUSTOMER),
    ],
)
def test_normalize_stock_type(value, expected) -> None:
    assert normalize_stock_type(value) == expected


def test_yard_entries_skip_marker_and_upper_case_chassis() -> None:
    yard = {
        "dealer-chassis": {"placeholder": True},
        "abc123": {"receivedAt": "2025-06-01", "type": "Stock"},
        "XYZ789": {"receivedAt": "2025-06-20", "Type": "customer"},
    }

    entries = yard_entries_from_rows(yard)

    assert entries == [
        YardEntry("ABC123", "2025-06-01", STOCK),
        YardEntry("XYZ789", "2025-06-20", CUSTOMER),
    ]


def test_handover_entries_fall_back_to_created_at() -> None:
    handover = {"c1": {"handoverAt": "2025-06-01"}, "c2": {"createdAt": "2025-06-02"}, "c3": None}

    entries = handover_entries_from_rows(handover)

    assert entries == [
        HandoverEntry("C1", "2025-06-01"),
        HandoverEntry("C2", "2025-06-02"),
        HandoverEntry("C3", None),
    ]


def test_pgi_records_prefer_inner_chassis_and_normalize_dealer() -> None:
    pgi = {
        "key-1": {"chassis": "abc123", "dealer": "ST James", "pgiAt": "2025-06-15"},
        "def456": {"Dealer": "Frankston", "createdAt": "2025-06-10"},
    }

    records = pgi_records_from_rows(pgi)

    assert [(r.chassis, r.dealer_slug, r.pgi_at) for r in records] == [
        ("ABC123", "st-james", "2025-06-15"),
        ("DEF456", "frankston", "2025-06-10"),
    ]


def test_yard_inventory_percentages() -> None:
    entries = [YardEntry(f"C{i}", None, STOCK) for i in range(3)] + [YardEntry("C9", None, CUSTOMER)]

    inventory = yard_inventory(entries)

    assert (inventory.stock, inventory.customer, inventory.total) == (3, 1, 4)
    assert (inventory.stock_pct, inventory.customer_pct) == (75, 25)


def test_yard_inventory_of_empty_yard() -> None:
    inventory = yard_inventory([])

    assert (inventory.total, inventory.stock_pct, inventory.customer_pct) == (0, 0, 0)


def test_waiting_for_receiving() -> None:
    pgi = pgi_records_from_rows(
        {
            "A1": {"dealer": "Frankston", "pgiAt": "2025-06-01"},  # waiting
            "A2": {"dealer": "Frankston", "pgiAt": "2025-06-02"},  # already in yard
            "A3": {"dealer": "Frankston", "pgiAt": "2025-06-03"},  # already handed over
            "A4": {"dealer": "Frankston", "pgiAt": "2024-01-01"},  # older than 180 days
            "A5": {"dealer": "Geelong", "pgiAt": "2025-06-04"},    # other dealer
            "A6": {"dealer": "Frankston"},                          # no date
        }
    )
    yard = [YardEntry("A2", "2025-06-10", STOCK)]
    handover = [HandoverEntry("A3", "2025-06-20")]

    assert waiting_for_receiving(pgi, "frankston", yard, handover, AS_OF) == 1
    # Without a window every undated or old PGI counts too.
    assert waiting_for_receiving(pgi, "frankston", yard, handover, AS_OF, range_days=0) == 3
