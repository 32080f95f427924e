"""
Domain: category counts and percentage shares.

Percentages are whole numbers rounded half-up (12.5% -> 13%). An empty input
yields 0% everywhere; there is never a division by zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, Hashable, Iterable, Sequence


@dataclass(frozen=True, slots=True)
class CategoryShare:
    count: int
    percent: int


def percent_of(part: int, total: int) -> int:
    if total <= 0:
        return 0
    share = Decimal(part) * 100 / Decimal(total)
    return int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def category_share(
    records: Iterable[Any],
    category_of: Callable[[Any], Hashable],
    categories: Sequence[Hashable] = (),
) -> Dict[Hashable, CategoryShare]:
    """
    Group records by `category_of` and report each group's count and share.

    `categories` are always present in the result (count 0 if unseen) and come
    first, in the given order; other categories follow in first-seen order.
    """

    counts: Dict[Hashable, int] = {category: 0 for category in categories}
    total = 0
    for record in records:
        category = category_of(record)
        counts[category] = counts.get(category, 0) + 1
        total += 1

    return {
        category: CategoryShare(count=count, percent=percent_of(count, total))
        for category, count in counts.items()
    }


__all__ = ["CategoryShare", "category_share", "percent_of"]
