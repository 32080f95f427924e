"""
Schedule API Endpoints.

Campervan schedule grid rows, row edits, and the summary charts.
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response

from api.models import (
    CategoryShareResponse,
    DealerOrderMixResponse,
    MonthlyOrderResponse,
    ScheduleRowModel,
    ScheduleRowsResponse,
    ScheduleRowUpdate,
    ScheduleSummaryResponse,
    SignedOrderPointResponse,
)
from domain.schedule import ScheduleRow
from services.csv_export_service import generate_schedule_csv, schedule_template_csv
from services.schedule_service import (
    Breakdown,
    StockFilter,
    delete_schedule_row,
    load_schedule_rows,
    save_schedule_row,
    schedule_summary,
    visible_rows,
)
from services.settings import load_settings, today_local

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/schedule/rows",
    response_model=ScheduleRowsResponse,
    summary="List Schedule Rows",
    description="Visible schedule rows, optionally filtered by a search term."
)
def list_rows(
    search: Optional[str] = Query(None, description="Matches row number or any grid column"),
):
    """
    Rows whose forecast production date is less than three months away and
    that have neither a chassis nor a dealer are hidden.
    """
    try:
        rows = load_schedule_rows()
        today = today_local(load_settings())
        visible = visible_rows(rows, today, search)
        unfiltered = visible_rows(rows, today)
        return ScheduleRowsResponse(
            rows=[ScheduleRowModel(**asdict(row)) for row in visible],
            total_count=len(visible),
            hidden_count=len(rows) - len(unfiltered),
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to list schedule rows")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list schedule rows: {str(e)}"
        )


@router.put(
    "/schedule/rows/{row_number}",
    response_model=ScheduleRowModel,
    summary="Save Schedule Row",
    description="Save a row's editable columns; derived columns are recalculated."
)
def update_row(row_number: int, update: ScheduleRowUpdate):
    if row_number < 1:
        raise HTTPException(status_code=400, detail="row_number must be >= 1")
    try:
        saved = save_schedule_row(ScheduleRow(row_number=row_number, **update.model_dump()))
        return ScheduleRowModel(**asdict(saved))

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to save schedule row %s", row_number)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to save schedule row: {str(e)}"
        )


@router.delete(
    "/schedule/rows/{row_number}",
    summary="Delete Schedule Row",
)
def delete_row(row_number: int):
    try:
        delete_schedule_row(row_number)
        return {"row_number": row_number, "message": "Schedule row deleted"}

    except Exception as e:
        logger.exception("Failed to delete schedule row %s", row_number)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete schedule row: {str(e)}"
        )


@router.get(
    "/schedule/export.csv",
    summary="Export Schedule",
    description="CSV download of every schedule row with the grid's column labels."
)
def export_rows():
    try:
        return Response(
            content=generate_schedule_csv(load_schedule_rows()),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="campervan_schedule.csv"'},
        )

    except Exception as e:
        logger.exception("Failed to export schedule")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to export schedule: {str(e)}"
        )


@router.get(
    "/schedule/template.csv",
    summary="Schedule Import Template",
    description="Column headers and one sample row for preparing a bulk import."
)
def download_template():
    return Response(
        content=schedule_template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="campervan_schedule_template.csv"'},
    )


@router.get(
    "/schedule/summary",
    response_model=ScheduleSummaryResponse,
    summary="Schedule Summary",
    description="Signed orders per dealer, completed builds, dealer mix and order breakdowns."
)
def get_summary(
    dealer: Optional[str] = Query(None, description="Dealer for the signed order series"),
    breakdown: str = Query("vehicle", description="'vehicle' or 'model'"),
    stock: str = Query("all", description="'all', 'stock' or 'non-stock'"),
):
    """
    **Example usage:**
    - `GET /api/v1/schedule/summary?dealer=Frankston&breakdown=model&stock=non-stock`
    """
    try:
        try:
            breakdown_type = Breakdown(breakdown)
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid breakdown. Must be 'vehicle' or 'model', got '{breakdown}'"
            )
        try:
            stock_filter = StockFilter(stock)
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid stock filter. Must be 'all', 'stock' or 'non-stock', got '{stock}'"
            )

        rows = load_schedule_rows()
        summary = schedule_summary(rows, dealer, breakdown_type, stock_filter)

        return ScheduleSummaryResponse(
            dealers=summary.dealers,
            selected_dealer=dealer if dealer in summary.dealers else (summary.dealers[0] if summary.dealers else None),
            signed_orders=[
                SignedOrderPointResponse(date=point.label, count=point.count)
                for point in summary.signed_orders
            ],
            completed=summary.completed,
            dealer_mix=[DealerOrderMixResponse(**asdict(mix)) for mix in summary.dealer_mix],
            monthly=[MonthlyOrderResponse(month=m.month, counts=m.counts) for m in summary.monthly],
            breakdown=[
                CategoryShareResponse(name=name, count=share.count, percent=share.percent)
                for name, share in summary.breakdown.shares.items()
            ],
            breakdown_total=summary.breakdown.total,
            missing_vehicle_count=summary.breakdown.missing_vehicle_count,
            missing_by_vehicle_type=summary.breakdown.missing_by_vehicle_type,
            delta_total=summary.delta_total,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to build schedule summary")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to build schedule summary: {str(e)}"
        )
