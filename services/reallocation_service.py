"""
Reallocation workflow service.

Submitting a batch of reallocation rows:
1. Look up each chassis in the production van list (case-insensitive).
2. Skip rows with no van, no target dealer, or a blocking reason
   (dispatched / unsigned).
3. Save one request per accepted chassis and queue a notification mail.

Marking done and recording an issue update the stored request; an issue also
queues a notification. Mail is skipped (and logged) when no recipients are
configured.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Sequence

from domain.reallocation import (
    ISSUE_TYPES,
    BlockReason,
    Issue,
    ReallocationRequest,
    ReallocationStats,
    build_request,
    reallocation_stats,
    submission_block_reason,
)
from domain.time import format_local_timestamp
from repositories import reallocation_repository
from services.settings import DashboardSettings, load_settings

logger = logging.getLogger(__name__)


class ReallocationNotFound(Exception):
    """Raised when no reallocation request exists for a chassis."""
    pass


@dataclass(frozen=True, slots=True)
class ReallocationRow:
    chassis: str
    target_dealer: str


@dataclass(frozen=True, slots=True)
class RejectedRow:
    chassis: str
    reason: str


@dataclass(slots=True)
class SubmissionResult:
    submitted: List[ReallocationRequest] = field(default_factory=list)
    rejected: List[RejectedRow] = field(default_factory=list)


def _submit_time(settings: DashboardSettings, now: Optional[datetime]) -> str:
    return format_local_timestamp(now or datetime.now(timezone.utc), settings.timezone)


def find_van(vans: Sequence[Mapping[str, Any]], chassis: str) -> Optional[Mapping[str, Any]]:
    wanted = chassis.strip().lower()
    if not wanted:
        return None
    for van in vans:
        if str(van.get("Chassis") or "").strip().lower() == wanted:
            return van
    return None


def _queue_mail(settings: DashboardSettings, subject: str, html: str, text: str = "") -> None:
    if not settings.mail_recipients:
        logger.info("No reallocation mail recipients configured; skipping mail", extra={"subject": subject})
        return
    reallocation_repository.queue_reallocation_mail(settings.mail_recipients, subject, html, text)


def submit_reallocations(
    rows: Sequence[ReallocationRow],
    settings: Optional[DashboardSettings] = None,
    now: Optional[datetime] = None,
) -> SubmissionResult:
    """
    Validate and save a batch of reallocation rows.

    Raises:
    - ValueError if no row can be submitted.
    - RuntimeError if a repository call fails.
    """

    settings = settings or load_settings()
    vans = reallocation_repository.list_production_vans()
    submit_time = _submit_time(settings, now)
    result = SubmissionResult()

    for row in rows:
        van = find_van(vans, row.chassis)
        if van is None:
            result.rejected.append(RejectedRow(row.chassis, "Chassis number not found"))
            continue
        if not row.target_dealer.strip():
            result.rejected.append(RejectedRow(row.chassis, "No dealer selected"))
            continue
        reason: Optional[BlockReason] = submission_block_reason(van)
        if reason is not None:
            result.rejected.append(RejectedRow(row.chassis, reason.value))
            continue
        result.submitted.append(build_request(row.chassis.strip(), van, row.target_dealer.strip(), submit_time))

    if not result.submitted:
        raise ValueError("Please enter valid chassis numbers and select dealers for at least one row")

    for request in result.submitted:
        reallocation_repository.save_reallocation(request)
        _queue_mail(
            settings,
            subject=f"New Reallocation Request: Chassis {request.chassis}",
            text=f"Chassis number {request.chassis} has been requested to dealer {request.reallocated_to}.",
            html=(
                f"Chassis number <strong>{request.chassis}</strong> has been requested to dealer "
                f"<strong>{request.reallocated_to}</strong>."
            ),
        )
        logger.info(
            "Reallocation submitted",
            extra={"chassis": request.chassis, "from_dealer": request.original_dealer, "to_dealer": request.reallocated_to},
        )

    return result


def mark_done(chassis: str) -> None:
    if not reallocation_repository.mark_reallocation_completed(chassis):
        raise ReallocationNotFound(f"Reallocation not found: {chassis}")
    logger.info("Reallocation marked as completed", extra={"chassis": chassis})


def record_issue(
    chassis: str,
    issue_type: str,
    settings: Optional[DashboardSettings] = None,
    now: Optional[datetime] = None,
) -> Issue:
    """
    Record an issue against a request and notify.

    Raises:
    - ValueError for an unknown issue type.
    - ReallocationNotFound if the chassis has no request.
    """

    if issue_type not in ISSUE_TYPES:
        raise ValueError(f"Unknown issue type: {issue_type!r}. Expected one of {', '.join(ISSUE_TYPES)}")

    settings = settings or load_settings()
    issue = Issue(type=issue_type, timestamp=_submit_time(settings, now))
    if not reallocation_repository.record_reallocation_issue(chassis, issue):
        raise ReallocationNotFound(f"Reallocation not found: {chassis}")

    _queue_mail(
        settings,
        subject=f"Chassis {chassis} New Issue",
        html=f"Chassis number <strong>{chassis}</strong> has been marked as <strong>{issue_type}</strong>.",
    )
    logger.info("Reallocation issue recorded", extra={"chassis": chassis, "issue_type": issue_type})
    return issue


def load_stats() -> ReallocationStats:
    return reallocation_stats(reallocation_repository.list_reallocations())


__all__ = [
    "ReallocationNotFound",
    "ReallocationRow",
    "RejectedRow",
    "SubmissionResult",
    "find_van",
    "load_stats",
    "mark_done",
    "record_issue",
    "submit_reallocations",
]
