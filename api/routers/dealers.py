"""
Dealer API Endpoints.

Dealer overview cards: waiting-for-receiving counts, yard ageing, stock mix and
weekly stock level trend.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from api.models import (
    DealerSnapshotResponse,
    DealerSnapshotsResponse,
    StockTrendPoint,
    YardInventoryResponse,
    YardRangeResponse,
)
from services.dealer_snapshot_service import (
    DealerSnapshot,
    load_dealer_snapshots,
    search_snapshots,
    split_self_owned,
)
from services.settings import load_settings, today_local

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(snapshot: DealerSnapshot) -> DealerSnapshotResponse:
    inventory = snapshot.yard_inventory
    return DealerSnapshotResponse(
        slug=snapshot.slug,
        name=snapshot.name,
        waiting_count=snapshot.waiting_count,
        yard_ranges=[YardRangeResponse(label=r.label, count=r.count) for r in snapshot.yard_ranges],
        yard_inventory=YardInventoryResponse(
            stock=inventory.stock,
            customer=inventory.customer,
            total=inventory.total,
            stock_pct=inventory.stock_pct,
            customer_pct=inventory.customer_pct,
        ),
        stock_trend=[
            StockTrendPoint(week=bucket.label, week_start=bucket.start, level=bucket.level)
            for bucket in snapshot.stock_trend
        ],
    )


@router.get(
    "/dealers/snapshots",
    response_model=DealerSnapshotsResponse,
    summary="Dealer Overview Cards",
    description="One card per configured dealer, split into self-owned and other dealers."
)
def get_dealer_snapshots(
    search: Optional[str] = Query(None, description="Case-insensitive dealer name filter"),
):
    """
    Build dealer overview cards from the latest yard, handover and PGI data.

    **Example usage:**
    - All dealers: `GET /api/v1/dealers/snapshots`
    - Filter by name: `GET /api/v1/dealers/snapshots?search=frank`
    """
    try:
        settings = load_settings()
        as_of = today_local(settings)
        snapshots = search_snapshots(load_dealer_snapshots(settings, as_of), search)
        own, other = split_self_owned(snapshots, settings.self_owned_dealers)

        return DealerSnapshotsResponse(
            self_owned=[_to_response(s) for s in own],
            other=[_to_response(s) for s in other],
            as_of=as_of,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to build dealer snapshots")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to build dealer snapshots: {str(e)}"
        )
