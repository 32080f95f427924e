"""
Reallocation API Endpoints.

Submit dealer reallocation requests, mark them done, record issues, and export
them as CSV.
"""

import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response

from api.models import (
    DealerMovesResponse,
    IssueModel,
    IssueRequest,
    RejectedRowResponse,
    ReallocationListResponse,
    ReallocationResponse,
    ReallocationSubmitRequest,
    ReallocationSubmitResponse,
)
from domain.reallocation import ReallocationRequest, RequestFilter, filter_requests, reallocation_stats
from repositories.reallocation_repository import list_reallocations
from services.csv_export_service import generate_reallocation_csv
from services.reallocation_service import (
    ReallocationNotFound,
    ReallocationRow,
    mark_done,
    record_issue,
    submit_reallocations,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_filter(status: str) -> RequestFilter:
    try:
        return RequestFilter(status)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Must be 'all', 'pending' or 'done', got '{status}'"
        )


def _to_response(request: ReallocationRequest) -> ReallocationResponse:
    return ReallocationResponse(
        chassis=request.chassis,
        original_dealer=request.original_dealer,
        reallocated_to=request.reallocated_to,
        status=request.status,
        submit_time=request.submit_time,
        model=request.model,
        customer=request.customer,
        signed_plans_received=request.signed_plans_received,
        issue=IssueModel(type=request.issue.type, timestamp=request.issue.timestamp) if request.issue else None,
        completed=request.is_completed,
    )


@router.get(
    "/reallocations",
    response_model=ReallocationListResponse,
    summary="List Reallocation Requests",
    description="Reallocation requests with pending/done totals and per-dealer move counts."
)
def list_requests(
    status: str = Query("all", description="'all', 'pending' or 'done'"),
):
    request_filter = _parse_filter(status)
    try:
        requests = list_reallocations()
        # Totals always cover every request, whatever the filter.
        stats = reallocation_stats(requests)
        return ReallocationListResponse(
            requests=[_to_response(r) for r in filter_requests(requests, request_filter)],
            total_pending=stats.total_pending,
            total_done=stats.total_done,
            dealer_stats={
                dealer: DealerMovesResponse(moved_from=moves.moved_from, moved_to=moves.moved_to)
                for dealer, moves in stats.dealer_stats.items()
            },
        )

    except Exception as e:
        logger.exception("Failed to list reallocations")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list reallocations: {str(e)}"
        )


@router.post(
    "/reallocations",
    response_model=ReallocationSubmitResponse,
    summary="Submit Reallocation Requests",
    description="Submit one or more chassis for reallocation. Dispatched or unsigned vans are rejected."
)
def submit_requests(request: ReallocationSubmitRequest):
    """
    **Example request:**
    ```json
    {"rows": [{"chassis": "ABC123", "target_dealer": "Geelong"}]}
    ```
    """
    try:
        result = submit_reallocations(
            [ReallocationRow(chassis=row.chassis, target_dealer=row.target_dealer) for row in request.rows]
        )
        return ReallocationSubmitResponse(
            submitted=[_to_response(r) for r in result.submitted],
            rejected=[RejectedRowResponse(chassis=r.chassis, reason=r.reason) for r in result.rejected],
            message=f"Successfully submitted {len(result.submitted)} reallocation request(s)!",
        )

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to submit reallocations")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to submit reallocations: {str(e)}"
        )


@router.post(
    "/reallocations/{chassis}/complete",
    summary="Mark Reallocation Done",
)
def complete_request(chassis: str):
    try:
        mark_done(chassis)
        return {"chassis": chassis, "status": "completed", "message": "Reallocation marked as completed"}

    except ReallocationNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception("Failed to complete reallocation %s", chassis)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update status: {str(e)}"
        )


@router.post(
    "/reallocations/{chassis}/issue",
    response_model=IssueModel,
    summary="Record Reallocation Issue",
)
def add_issue(chassis: str, request: IssueRequest):
    try:
        issue = record_issue(chassis, request.issue_type)
        return IssueModel(type=issue.type, timestamp=issue.timestamp)

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ReallocationNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception("Failed to record issue for %s", chassis)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to record issue: {str(e)}"
        )


@router.get(
    "/reallocations/export.csv",
    summary="Export Reallocation Requests",
    description="CSV download of reallocation requests matching the status filter."
)
def export_requests(
    status: str = Query("all", description="'all', 'pending' or 'done'"),
):
    request_filter = _parse_filter(status)
    try:
        content = generate_reallocation_csv(filter_requests(list_reallocations(), request_filter))
        filename = f"reallocation_requests_{request_filter.value}_{date.today().isoformat()}.csv"
        return Response(
            content=content,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    except Exception as e:
        logger.exception("Failed to export reallocations")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to export reallocations: {str(e)}"
        )
