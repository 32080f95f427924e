"""
Reallocation repository (persistence).

Tables:
- reallocations:     chassis (unique), payload (jsonb: status, originalDealer, ...)
- reallocation_mail: outbound notification queue (recipients, subject, text, html);
                     a mail worker outside this service sends and deletes them.
- production_vans:   chassis, payload (jsonb with the production spreadsheet's
                     headers: Dealer, Model, Regent Production, ...)
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from domain.reallocation import COMPLETED, Issue, ReallocationRequest
from repositories.client import check_response, get_supabase, select_all

_REALLOCATIONS_TABLE: str = "reallocations"
_MAIL_TABLE: str = "reallocation_mail"
_VANS_TABLE: str = "production_vans"


def _get_payload(chassis: str) -> Dict[str, Any] | None:
    response = (
        get_supabase()
        .table(_REALLOCATIONS_TABLE)
        .select("payload")
        .eq("chassis", chassis)
        .limit(1)
        .execute()
    )
    rows = check_response(response, f"fetch reallocation {chassis}")
    if not rows:
        return None
    return dict(rows[0].get("payload") or {})


def _update_payload(chassis: str, payload: Dict[str, Any]) -> None:
    response = (
        get_supabase()
        .table(_REALLOCATIONS_TABLE)
        .update({"payload": payload})
        .eq("chassis", chassis)
        .execute()
    )
    check_response(response, f"update reallocation {chassis}")


def list_reallocations() -> List[ReallocationRequest]:
    rows = select_all(_REALLOCATIONS_TABLE, "chassis, payload", order_by="chassis")
    return [
        ReallocationRequest.from_mapping(row["chassis"], row.get("payload") or {})
        for row in rows
        if row.get("chassis")
    ]


def save_reallocation(request: ReallocationRequest) -> None:
    """Insert or replace the request for its chassis."""

    response = (
        get_supabase()
        .table(_REALLOCATIONS_TABLE)
        .upsert({"chassis": request.chassis, "payload": request.to_mapping()}, on_conflict="chassis")
        .execute()
    )
    check_response(response, f"save reallocation {request.chassis}")


def mark_reallocation_completed(chassis: str) -> bool:
    """
    Set the request's status to completed.

    Returns False when no request exists for `chassis`.
    """

    payload = _get_payload(chassis)
    if payload is None:
        return False
    payload["status"] = COMPLETED
    _update_payload(chassis, payload)
    return True


def record_reallocation_issue(chassis: str, issue: Issue) -> bool:
    """
    Attach `issue` to the request, replacing any earlier issue.

    Returns False when no request exists for `chassis`.
    """

    payload = _get_payload(chassis)
    if payload is None:
        return False
    payload["issue"] = {"type": issue.type, "timestamp": issue.timestamp}
    _update_payload(chassis, payload)
    return True


def queue_reallocation_mail(recipients: Sequence[str], subject: str, html: str, text: str = "") -> None:
    response = (
        get_supabase()
        .table(_MAIL_TABLE)
        .insert({"recipients": list(recipients), "subject": subject, "text": text, "html": html})
        .execute()
    )
    check_response(response, "queue reallocation mail")


def list_production_vans() -> List[Dict[str, Any]]:
    """Production spreadsheet records, each with its headers as keys."""

    vans: List[Dict[str, Any]] = []
    for row in select_all(_VANS_TABLE, "chassis, payload"):
        van = dict(row.get("payload") or {})
        van.setdefault("Chassis", row.get("chassis") or "")
        vans.append(van)
    return vans


__all__ = [
    "list_production_vans",
    "list_reallocations",
    "mark_reallocation_completed",
    "queue_reallocation_mail",
    "record_reallocation_issue",
    "save_reallocation",
]
