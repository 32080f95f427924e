"""
CSV export service for reallocation requests and the campervan schedule.

Security:
- CSV Injection Prevention: Sanitizes all free-text fields to prevent formula execution
- Security Logging: Logs when dangerous characters are stripped
"""

from __future__ import annotations

import csv
import logging
from io import StringIO
from typing import Iterable, List

from domain.reallocation import ReallocationRequest
from domain.schedule import SCHEDULE_COLUMNS, ScheduleRow

logger = logging.getLogger(__name__)

REALLOCATION_HEADERS = [
    "Chassis",
    "From Dealer",
    "To Dealer",
    "Van Status",
    "Signed Plans",
    "Submit Time",
    "Request Status",
    "Issue Type",
    "Issue Time",
]


# Leading characters that make spreadsheet apps evaluate a cell as a formula.
FORMULA_PREFIXES = "=+-@\t\r"


def sanitize_csv_field(value: str | None, field_name: str = "unknown") -> str:
    """
    Strip formula-triggering prefixes from an exported value.

    Dealer names, customers and statuses are typed by users, so a value such as
    `=HYPERLINK(...)` would run as a formula when the export is opened in
    Excel or Sheets. Each strip is logged as a warning with the field name and
    the before/after values (truncated to 100 characters).

    Example:
        sanitize_csv_field("=HYPERLINK(...)", "dealer")   # "HYPERLINK(...)", logged
        sanitize_csv_field("Frankston", "dealer")         # "Frankston", not logged
    """
    if value is None:
        return ""

    original = str(value).strip()
    text = original.lstrip(FORMULA_PREFIXES)

    if text != original:
        logger.warning(
            f"Formula prefix stripped from CSV field '{field_name}'",
            extra={
                "field_name": field_name,
                "stripped_characters": original[: len(original) - len(text)],
                "original_value": original[:100],
                "sanitized_value": text[:100],
                "modification_type": "csv_injection_prevention",
            },
        )

    return text


def _reallocation_row(request: ReallocationRequest) -> List[str]:
    return [
        sanitize_csv_field(request.chassis, "chassis"),
        sanitize_csv_field(request.original_dealer, "original_dealer"),
        sanitize_csv_field(request.reallocated_to, "reallocated_to"),
        "Done" if request.is_completed else sanitize_csv_field(request.status, "status"),
        sanitize_csv_field(request.signed_plans_received, "signed_plans_received") or "N/A",
        # Submit and issue times are generated locally as DD/MM/YYYY, HH:MM:SS.
        request.submit_time,
        "Completed" if request.is_completed else "Pending",
        sanitize_csv_field(request.issue.type, "issue_type") if request.issue else "None",
        request.issue.timestamp if request.issue else "N/A",
    ]


def generate_reallocation_csv(requests: Iterable[ReallocationRequest]) -> str:
    """
    CSV of reallocation requests, one row per chassis.

    Example:
        csv_content = generate_reallocation_csv(filter_requests(requests, RequestFilter.PENDING))
        return Response(content=csv_content, media_type="text/csv")
    """

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(REALLOCATION_HEADERS)
    for request in requests:
        writer.writerow(_reallocation_row(request))
    return output.getvalue()


def generate_schedule_csv(rows: Iterable[ScheduleRow]) -> str:
    """CSV of schedule rows with the grid's column labels as headers."""

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(["Row Number"] + [column.label for column in SCHEDULE_COLUMNS])
    for row in rows:
        writer.writerow(
            [str(row.row_number)]
            + [sanitize_csv_field(getattr(row, column.field), column.field) for column in SCHEDULE_COLUMNS]
        )
    return output.getvalue()


SCHEDULE_TEMPLATE_SAMPLE = [
    "15/02/2025",
    "Scheduled",
    "CHS-001",
    "VIN-001",
    "Campervan",
    "Model X",
    "Sample Dealer",
    "Sample Customer",
    "",  # derived on import
    "19/08/2024",
    "17/11/2024",
    "01/10/2024",
]


def schedule_template_csv() -> str:
    """Grid headers plus one sample row, for users preparing a bulk import."""

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow([column.label for column in SCHEDULE_COLUMNS])
    writer.writerow(SCHEDULE_TEMPLATE_SAMPLE)
    return output.getvalue()


__all__ = [
    "REALLOCATION_HEADERS",
    "generate_reallocation_csv",
    "generate_schedule_csv",
    "sanitize_csv_field",
    "schedule_template_csv",
]
