"""
Schedule repository (persistence).

Campervan schedule rows live in `campervan_schedule` keyed by row number,
with the row's columns in a jsonb `payload` using camelCase keys. Derived
columns are computed by the caller before saving.
"""

from __future__ import annotations

from typing import List

from domain.schedule import ScheduleRow
from repositories.client import check_response, get_supabase, select_all

_SCHEDULE_TABLE: str = "campervan_schedule"


def _row_to_payload(row: ScheduleRow) -> dict:
    return {"row_number": row.row_number, "payload": row.to_mapping()}


def list_schedule_rows() -> List[ScheduleRow]:
    """All schedule rows ordered by row number."""

    rows = select_all(_SCHEDULE_TABLE, "row_number, payload", order_by="row_number")
    return [
        ScheduleRow.from_mapping(row.get("payload") or {}, row_number=row["row_number"])
        for row in rows
    ]


def upsert_schedule_row(row: ScheduleRow) -> None:
    """
    Insert or replace one schedule row.

    Raises:
    - RuntimeError if Supabase returns an error response.
    """

    response = (
        get_supabase()
        .table(_SCHEDULE_TABLE)
        .upsert(_row_to_payload(row), on_conflict="row_number")
        .execute()
    )
    check_response(response, f"save schedule row {row.row_number}")


def upsert_schedule_rows(rows: List[ScheduleRow]) -> None:
    """
    Insert or replace many rows in one request. Empty list is a no-op.

    The whole batch fails together; callers that need error isolation fall
    back to `upsert_schedule_row` per row.
    """

    if not rows:
        return
    response = (
        get_supabase()
        .table(_SCHEDULE_TABLE)
        .upsert([_row_to_payload(row) for row in rows], on_conflict="row_number")
        .execute()
    )
    check_response(response, f"bulk save {len(rows)} schedule rows")


def delete_schedule_row(row_number: int) -> None:
    response = get_supabase().table(_SCHEDULE_TABLE).delete().eq("row_number", row_number).execute()
    check_response(response, f"delete schedule row {row_number}")


__all__ = [
    "delete_schedule_row",
    "list_schedule_rows",
    "upsert_schedule_row",
    "upsert_schedule_rows",
]
