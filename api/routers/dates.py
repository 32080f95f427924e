"""
Date API Endpoints.

Diagnostic endpoint showing how a raw value is interpreted as a date.
"""

from fastapi import APIRouter

from api.models import DateParseRequest, DateParseResponse
from domain.date_normalizer import DateStyle, classify_date_input, format_date, parse_date

router = APIRouter()


@router.post(
    "/dates/parse",
    response_model=DateParseResponse,
    summary="Parse Date Value",
    description="Classify a raw value and parse it the way imported records are parsed."
)
def parse_date_value(request: DateParseRequest):
    """
    **Example request:** `{"value": "15/02/2025"}` returns kind `SLASH_STRING`,
    parsed `2025-02-15`, display `15/02/2025`.

    Unparseable values are not an error; the response carries the failure
    reason instead.
    """
    kind = classify_date_input(request.value)
    parsed = parse_date(request.value)
    if parsed:
        return DateParseResponse(
            kind=kind.value,
            parsed=parsed,
            display=format_date(parsed, DateStyle.DAY_FIRST),
        )
    return DateParseResponse(
        kind=kind.value,
        failure_reason=parsed.reason.value,
        detail=parsed.detail,
    )
