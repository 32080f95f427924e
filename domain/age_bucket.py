"""
Domain: age ranges and record age calculation.

Rules implemented here:
- Age is measured in whole calendar days:
  age_days = reference_date - record_date
- A record dated in the future has age 0, never a negative age.
- Ranges are inclusive at both ends, e.g. the default yard ranges:
  - "0–30":   age_days ∈ [   0,  30 ]
  - "31–90":  age_days ∈ [  31,  90 ]
  - "91–180": age_days ∈ [  91, 180 ]
  - "180+":   age_days ≥ 181
- A record whose date is missing or unparseable falls into no range.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from .date_normalizer import coerce_date
from .time_buckets import record_date


@dataclass(frozen=True, slots=True)
class AgeRange:
    """
    Inclusive day-count interval. `max_days=None` means unbounded.
    """

    label: str
    min_days: int
    max_days: Optional[int] = None

    def __post_init__(self) -> None:
        if self.min_days < 0:
            raise ValueError("min_days must be >= 0")
        if self.max_days is not None and self.max_days < self.min_days:
            raise ValueError("max_days must be >= min_days")

    def contains(self, age_days: int) -> bool:
        if age_days < self.min_days:
            return False
        return self.max_days is None or age_days <= self.max_days


DEFAULT_YARD_AGE_RANGES: Tuple[AgeRange, ...] = (
    AgeRange("0–30", 0, 30),
    AgeRange("31–90", 31, 90),
    AgeRange("91–180", 91, 180),
    AgeRange("180+", 181, None),
)


def validate_partition(ranges: Sequence[AgeRange]) -> None:
    """
    Check that `ranges`, in the given order, start at 0 and are contiguous.

    Raises ValueError on a gap, an overlap, or an unbounded range that is not
    last. A bounded last range is allowed (older records then count nowhere).
    """

    if not ranges:
        raise ValueError("at least one age range is required")
    if ranges[0].min_days != 0:
        raise ValueError("the first age range must start at 0 days")

    for previous, current in zip(ranges, ranges[1:]):
        if previous.max_days is None:
            raise ValueError(f"age range '{previous.label}' is unbounded but is not last")
        if current.min_days != previous.max_days + 1:
            raise ValueError(
                f"age ranges '{previous.label}' and '{current.label}' leave a gap or overlap"
            )


validate_partition(DEFAULT_YARD_AGE_RANGES)


def age_in_days(raw: Any, reference: date) -> Optional[int]:
    """
    Whole days between the record date `raw` and `reference`, clamped at 0.

    Returns None when `raw` is not a parseable date.
    """

    day = coerce_date(raw)
    if day is None:
        return None
    return max(0, (reference - day).days)


def range_for_age(age_days: int, ranges: Sequence[AgeRange]) -> Optional[AgeRange]:
    for age_range in ranges:
        if age_range.contains(age_days):
            return age_range
    return None


def age_bucket_counts(
    records: Iterable[Any],
    ranges: Sequence[AgeRange],
    reference: date,
    date_fields: Sequence[str] = ("receivedAt",),
) -> Dict[AgeRange, int]:
    """
    Count records per age range, in the caller's range order.

    Every range is present in the result, with 0 when nothing falls in it.
    """

    counts: Dict[AgeRange, int] = {age_range: 0 for age_range in ranges}
    for record in records:
        age_days = age_in_days(record_date(record, date_fields), reference)
        if age_days is None:
            continue
        age_range = range_for_age(age_days, ranges)
        if age_range is not None:
            counts[age_range] += 1
    return counts


__all__ = [
    "AgeRange",
    "DEFAULT_YARD_AGE_RANGES",
    "age_bucket_counts",
    "age_in_days",
    "range_for_age",
    "validate_partition",
]
