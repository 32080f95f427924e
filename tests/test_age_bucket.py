"""
Tests for `domain/age_bucket.py`.

Covers contract rules:
- Age is whole calendar days from the record date to the reference date.
- Future-dated records are age 0, never negative.
- Range bounds are inclusive at both ends; the last default range is unbounded.
- Records with missing or unparseable dates count in no range.
"""

from __future__ import annotations

from datetime import date

import pytest

from domain.age_bucket import (
    DEFAULT_YARD_AGE_RANGES,
    AgeRange,
    age_bucket_counts,
    age_in_days,
    range_for_age,
    validate_partition,
)

REFERENCE = date(2025, 7, 1)


def test_age_in_days_counts_calendar_days() -> None:
    assert age_in_days("2025-06-01", REFERENCE) == 30
    assert age_in_days(REFERENCE, REFERENCE) == 0


def test_future_dates_have_age_zero() -> None:
    assert age_in_days("2025-07-10", REFERENCE) == 0


def test_unparseable_dates_have_no_age() -> None:
    assert age_in_days("not a date", REFERENCE) is None
    assert age_in_days(None, REFERENCE) is None


@pytest.mark.parametrize(
    ("age_days", "label"),
    [
        (0, "0–30"),
        (30, "0–30"),
        (31, "31–90"),
        (90, "31–90"),
        (91, "91–180"),
        (180, "91–180"),
        (181, "180+"),
        (5000, "180+"),
    ],
)
def test_default_ranges_are_inclusive_at_boundaries(age_days: int, label: str) -> None:
    age_range = range_for_age(age_days, DEFAULT_YARD_AGE_RANGES)

    assert age_range is not None
    assert age_range.label == label


def test_default_ranges_form_a_partition() -> None:
    validate_partition(DEFAULT_YARD_AGE_RANGES)


def test_partition_rejects_gaps_and_overlaps() -> None:
    with pytest.raises(ValueError):
        validate_partition([AgeRange("a", 0, 10), AgeRange("b", 12, 20)])

    with pytest.raises(ValueError):
        validate_partition([AgeRange("a", 0, 10), AgeRange("b", 10, 20)])

    with pytest.raises(ValueError):
        validate_partition([AgeRange("a", 0, None), AgeRange("b", 10, 20)])

    with pytest.raises(ValueError):
        validate_partition([AgeRange("a", 1, 10)])

    with pytest.raises(ValueError):
        validate_partition([])


def test_age_range_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        AgeRange("bad", 10, 5)

    with pytest.raises(ValueError):
        AgeRange("bad", -1, 5)


def test_age_bucket_counts() -> None:
    records = [
        {"receivedAt": "2025-06-25"},  # 6 days
        {"receivedAt": "2025-07-05"},  # future -> 0 days
        {"receivedAt": "2025-05-01"},  # 61 days
        {"receivedAt": "2024-01-01"},  # 547 days
        {"receivedAt": "garbage"},
        {"receivedAt": None},
    ]

    counts = age_bucket_counts(records, DEFAULT_YARD_AGE_RANGES, REFERENCE)

    assert [r.label for r in counts] == ["0–30", "31–90", "91–180", "180+"]
    assert list(counts.values()) == [2, 1, 0, 1]


def test_bounded_last_range_leaves_old_records_out() -> None:
    ranges = [AgeRange("fresh", 0, 7), AgeRange("week+", 8, 30)]
    records = [{"receivedAt": "2025-06-30"}, {"receivedAt": "2025-01-01"}]

    counts = age_bucket_counts(records, ranges, REFERENCE)

    assert list(counts.values()) == [1, 0]
