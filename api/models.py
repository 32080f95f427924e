"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Dealer Models
# ============================================================================

class YardRangeResponse(BaseModel):
    label: str
    count: int


class YardInventoryResponse(BaseModel):
    stock: int
    customer: int
    total: int
    stock_pct: int
    customer_pct: int


class StockTrendPoint(BaseModel):
    """Stock level at the end of one week."""
    week: str  # "MM/DD" of the week's Monday
    week_start: date
    level: int


class DealerSnapshotResponse(BaseModel):
    slug: str
    name: str
    waiting_count: int
    yard_ranges: List[YardRangeResponse]
    yard_inventory: YardInventoryResponse
    stock_trend: List[StockTrendPoint]


class DealerSnapshotsResponse(BaseModel):
    """Dealer cards split into self-owned and other dealers."""
    self_owned: List[DealerSnapshotResponse]
    other: List[DealerSnapshotResponse]
    as_of: date

    class Config:
        json_schema_extra = {
            "example": {
                "self_owned": [
                    {
                        "slug": "frankston",
                        "name": "Frankston",
                        "waiting_count": 3,
                        "yard_ranges": [{"label": "0–30", "count": 4}],
                        "yard_inventory": {
                            "stock": 3,
                            "customer": 1,
                            "total": 4,
                            "stock_pct": 75,
                            "customer_pct": 25
                        },
                        "stock_trend": [{"week": "01/20", "week_start": "2025-01-20", "level": 4}]
                    }
                ],
                "other": [],
                "as_of": "2025-01-22"
            }
        }


# ============================================================================
# Schedule Models
# ============================================================================

class ScheduleRowModel(BaseModel):
    """One campervan schedule row. Date columns are DD/MM/YYYY strings."""
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


class ScheduleRowUpdate(BaseModel):
    """
    Editable columns of a schedule row. Derived columns (latest order dates,
    duration) are recalculated on save and cannot be set.
    """
    forecast_production_date: str = ""
    regent_production: str = ""
    chassis_number: str = ""
    vin_number: str = ""
    vehicle: str = ""
    model: str = ""
    dealer: str = ""
    customer: str = ""
    vehicle_order_date: str = ""
    eur_parts_order_date: str = ""
    eur_parts_eta: str = ""
    longtree_parts_order_date: str = ""
    longtree_parts_eta: str = ""
    signed_order_received: str = ""
    vehicle_planned_eta: str = ""
    production_planned_start_date: str = ""
    production_planned_end_date: str = ""

    class Config:
        json_schema_extra = {
            "example": {
                "forecast_production_date": "15/02/2026",
                "chassis_number": "ABC123",
                "dealer": "Frankston",
                "signed_order_received": "2025-10-01"
            }
        }


class ScheduleRowsResponse(BaseModel):
    rows: List[ScheduleRowModel]
    total_count: int
    hidden_count: int


class SignedOrderPointResponse(BaseModel):
    date: str  # DD/MM/YYYY
    count: int


class CategoryShareResponse(BaseModel):
    name: str
    count: int
    percent: int


class MonthlyOrderResponse(BaseModel):
    month: str  # YYYY-MM
    counts: Dict[str, int]


class DealerOrderMixResponse(BaseModel):
    dealer: str
    total: int
    ldv: int
    ford: int
    srv221: int
    srv222: int
    srv223: int
    ford_other: int


class ScheduleSummaryResponse(BaseModel):
    dealers: List[str]
    selected_dealer: Optional[str] = None
    signed_orders: List[SignedOrderPointResponse]
    completed: int
    dealer_mix: List[DealerOrderMixResponse]
    monthly: List[MonthlyOrderResponse]
    breakdown: List[CategoryShareResponse]
    breakdown_total: int
    missing_vehicle_count: int
    missing_by_vehicle_type: Dict[str, int]
    delta_total: int


# ============================================================================
# Reallocation Models
# ============================================================================

class IssueModel(BaseModel):
    type: str
    timestamp: str


class ReallocationResponse(BaseModel):
    chassis: str
    original_dealer: str
    reallocated_to: str
    status: str
    submit_time: str
    model: str = ""
    customer: str = ""
    signed_plans_received: str = ""
    issue: Optional[IssueModel] = None
    completed: bool


class DealerMovesResponse(BaseModel):
    moved_from: int
    moved_to: int


class ReallocationListResponse(BaseModel):
    requests: List[ReallocationResponse]
    total_pending: int
    total_done: int
    dealer_stats: Dict[str, DealerMovesResponse]


class ReallocationRowRequest(BaseModel):
    chassis: str = Field(..., min_length=1, description="Chassis number of the van to move")
    target_dealer: str = Field(..., description="Dealer the van should be reallocated to")


class ReallocationSubmitRequest(BaseModel):
    """Batch of reallocation rows to submit."""
    rows: List[ReallocationRowRequest] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "rows": [
                    {"chassis": "ABC123", "target_dealer": "Geelong"}
                ]
            }
        }


class RejectedRowResponse(BaseModel):
    chassis: str
    reason: str


class ReallocationSubmitResponse(BaseModel):
    submitted: List[ReallocationResponse]
    rejected: List[RejectedRowResponse]
    message: str


class IssueRequest(BaseModel):
    issue_type: str = Field(..., description="'SAP Issue', 'Invoice Issue' or 'Dispatched Status Issue'")


# ============================================================================
# Date Models
# ============================================================================

class DateParseRequest(BaseModel):
    """Raw value to classify and parse. Strings, numbers and null are accepted."""
    value: Any = None

    class Config:
        json_schema_extra = {
            "example": {"value": "15/02/2025"}
        }


class DateParseResponse(BaseModel):
    kind: str
    parsed: Optional[date] = None
    display: str = ""  # DD/MM/YYYY, empty when unparsed
    failure_reason: Optional[str] = None
    detail: str = ""
