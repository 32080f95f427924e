"""
Dealer snapshot service.

Builds one overview card per configured dealer: vans waiting for receiving,
yard age ranges, stock vs customer split, and the weekly stock level trend.

`build_dealer_snapshots` is pure and works on raw store mappings;
`load_dealer_snapshots` fetches those mappings from the repositories first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from domain.age_bucket import DEFAULT_YARD_AGE_RANGES, AgeRange, age_bucket_counts, validate_partition
from domain.time_buckets import WeekBucket, weekly_levels
from domain.yard import (
    YardInventory,
    handover_entries_from_rows,
    normalize_dealer_slug,
    pgi_records_from_rows,
    waiting_for_receiving,
    yard_entries_from_rows,
    yard_inventory,
)
from repositories import dealer_repository
from services.settings import DashboardSettings, load_settings, today_local

logger = logging.getLogger(__name__)

# Aggregate pseudo-dealers the config store keeps alongside real dealers.
AGGREGATE_SLUGS = frozenset({"alldealers", "selfowned"})


@dataclass(frozen=True, slots=True)
class YardRangeCount:
    label: str
    count: int


@dataclass(frozen=True, slots=True)
class DealerSnapshot:
    slug: str
    name: str
    waiting_count: int
    yard_ranges: List[YardRangeCount]
    yard_inventory: YardInventory
    stock_trend: List[WeekBucket]


def build_dealer_snapshot(
    slug: str,
    config: Mapping[str, Any],
    yard_rows: Mapping[str, Any],
    handover_rows: Mapping[str, Any],
    pgi_records: Sequence[Any],
    as_of: date,
    settings: DashboardSettings,
    age_ranges: Sequence[AgeRange] = DEFAULT_YARD_AGE_RANGES,
) -> DealerSnapshot:
    validate_partition(age_ranges)
    yard = yard_entries_from_rows(yard_rows)
    handover = handover_entries_from_rows(handover_rows)

    ranges = age_bucket_counts(
        [{"receivedAt": entry.received_at} for entry in yard],
        age_ranges,
        as_of,
    )
    trend = weekly_levels(
        [{"receivedAt": entry.received_at} for entry in yard],
        [{"handoverAt": entry.handover_at} for entry in handover],
        current_total=len(yard),
        window_weeks=settings.stock_trend_weeks,
        anchor=as_of,
    )

    return DealerSnapshot(
        slug=slug,
        name=str(config.get("name") or slug),
        waiting_count=waiting_for_receiving(
            pgi_records, slug, yard, handover, as_of, range_days=settings.pgi_range_days
        ),
        yard_ranges=[YardRangeCount(age_range.label, count) for age_range, count in ranges.items()],
        yard_inventory=yard_inventory(yard),
        stock_trend=trend,
    )


def build_dealer_snapshots(
    configs: Mapping[str, Any],
    yardstock: Mapping[str, Any],
    handover: Mapping[str, Any],
    pgi_rows: Mapping[str, Any],
    as_of: date,
    settings: DashboardSettings,
) -> List[DealerSnapshot]:
    """
    Snapshots for every configured dealer, in config order.

    A config's own `slug` field wins over its key. Aggregate entries
    ("alldealers", "selfowned") are left out.
    """

    pgi_records = pgi_records_from_rows(pgi_rows)
    snapshots: List[DealerSnapshot] = []
    for key, config in (configs or {}).items():
        config = config if isinstance(config, Mapping) else {}
        slug = normalize_dealer_slug(config.get("slug") or key)
        if slug in AGGREGATE_SLUGS:
            continue
        snapshots.append(
            build_dealer_snapshot(
                slug,
                config,
                yardstock.get(slug) or {},
                handover.get(slug) or {},
                pgi_records,
                as_of,
                settings,
            )
        )
    return snapshots


def search_snapshots(snapshots: Sequence[DealerSnapshot], query: Optional[str]) -> List[DealerSnapshot]:
    term = (query or "").strip().lower()
    if not term:
        return list(snapshots)
    return [snapshot for snapshot in snapshots if term in snapshot.name.lower()]


def split_self_owned(
    snapshots: Sequence[DealerSnapshot],
    self_owned_names: Sequence[str],
) -> Tuple[List[DealerSnapshot], List[DealerSnapshot]]:
    """Split into (self-owned, other) dealers, matching names by slug."""

    self_owned_slugs = {normalize_dealer_slug(name) for name in self_owned_names}
    own = [snapshot for snapshot in snapshots if snapshot.slug in self_owned_slugs]
    other = [snapshot for snapshot in snapshots if snapshot.slug not in self_owned_slugs]
    return own, other


def load_dealer_snapshots(
    settings: Optional[DashboardSettings] = None,
    as_of: Optional[date] = None,
) -> List[DealerSnapshot]:
    """
    Fetch dealer data from the store and build snapshots.

    Raises:
    - RuntimeError if any repository call fails.
    """

    settings = settings or load_settings()
    as_of = as_of or today_local(settings)

    configs = dealer_repository.list_dealer_configs()
    yardstock = dealer_repository.list_yardstock()
    handover = dealer_repository.list_handovers()
    pgi_rows = dealer_repository.list_pgi_records()

    snapshots = build_dealer_snapshots(configs, yardstock, handover, pgi_rows, as_of, settings)
    logger.info(
        "Built dealer snapshots",
        extra={"dealer_count": len(snapshots), "as_of": as_of.isoformat()},
    )
    return snapshots


__all__ = [
    "DealerSnapshot",
    "YardRangeCount",
    "build_dealer_snapshot",
    "build_dealer_snapshots",
    "load_dealer_snapshots",
    "search_snapshots",
    "split_self_owned",
]
