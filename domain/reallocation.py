"""
Domain: dealer reallocation requests.

A reallocation moves a scheduled van (by chassis) from its current dealer to
another dealer. The store keeps one record per chassis:

    reallocation/{chassis} -> {status, originalDealer, reallocatedTo, ...}

Rules implemented here:
- A van whose production status is "finished" has been dispatched and cannot
  be reallocated.
- A van whose "Signed Plans Received" is "no" cannot be reallocated.
- A request is done once its status is "completed"; any other status
  (usually the van's production status at submit time) is pending.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

COMPLETED = "completed"
UNKNOWN = "Unknown"

ISSUE_TYPES = ("SAP Issue", "Invoice Issue", "Dispatched Status Issue")


class RequestFilter(str, Enum):
    ALL = "all"
    PENDING = "pending"
    DONE = "done"


class BlockReason(str, Enum):
    DISPATCHED = "The van was dispatched - cannot reallocate"
    NOT_SIGNED = "Cannot submit - van is not signed"


@dataclass(frozen=True, slots=True)
class Issue:
    type: str
    timestamp: str

    @staticmethod
    def from_mapping(data: Any) -> Optional["Issue"]:
        if not isinstance(data, Mapping) or not data.get("type"):
            return None
        return Issue(type=str(data["type"]), timestamp=str(data.get("timestamp") or ""))


@dataclass(frozen=True, slots=True)
class ReallocationRequest:
    """
    One reallocation request, keyed by chassis.

    `status` is "completed" once done; until then it holds the van's
    production status captured at submit time.
    """

    chassis: str
    original_dealer: str
    reallocated_to: str
    status: str
    submit_time: str = ""
    model: str = ""
    customer: str = ""
    signed_plans_received: str = ""
    issue: Optional[Issue] = None

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED

    @staticmethod
    def from_mapping(chassis: str, data: Mapping[str, Any]) -> "ReallocationRequest":
        def text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        return ReallocationRequest(
            chassis=chassis,
            original_dealer=text("originalDealer"),
            reallocated_to=text("reallocatedTo"),
            status=text("status"),
            submit_time=text("submitTime"),
            model=text("model"),
            customer=text("customer"),
            signed_plans_received=text("signedPlansReceived"),
            issue=Issue.from_mapping(data.get("issue")),
        )

    def to_mapping(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "status": self.status,
            "originalDealer": self.original_dealer,
            "reallocatedTo": self.reallocated_to,
            "submitTime": self.submit_time,
            "model": self.model,
            "customer": self.customer,
            "signedPlansReceived": self.signed_plans_received,
        }
        if self.issue is not None:
            payload["issue"] = {"type": self.issue.type, "timestamp": self.issue.timestamp}
        return payload


@dataclass(frozen=True, slots=True)
class DealerMoves:
    moved_from: int = 0
    moved_to: int = 0


@dataclass(frozen=True, slots=True)
class ReallocationStats:
    total_pending: int
    total_done: int
    dealer_stats: Dict[str, DealerMoves] = field(default_factory=dict)


def _van_text(van: Mapping[str, Any], key: str) -> str:
    value = van.get(key)
    return "" if value is None else str(value)


def submission_block_reason(van: Mapping[str, Any]) -> Optional[BlockReason]:
    """
    Why the van (a schedule record with spreadsheet headers) cannot be
    reallocated, or None when it can.
    """

    if _van_text(van, "Regent Production").strip().lower() == "finished":
        return BlockReason.DISPATCHED
    if _van_text(van, "Signed Plans Received").strip().lower() == "no":
        return BlockReason.NOT_SIGNED
    return None


def build_request(
    chassis: str,
    van: Mapping[str, Any],
    target_dealer: str,
    submit_time: str,
) -> ReallocationRequest:
    return ReallocationRequest(
        chassis=chassis,
        original_dealer=_van_text(van, "Dealer") or UNKNOWN,
        reallocated_to=target_dealer or UNKNOWN,
        status=_van_text(van, "Regent Production") or UNKNOWN,
        submit_time=submit_time,
        model=_van_text(van, "Model"),
        customer=_van_text(van, "Customer"),
        signed_plans_received=_van_text(van, "Signed Plans Received"),
    )


def reallocation_stats(requests: Iterable[ReallocationRequest]) -> ReallocationStats:
    pending = 0
    done = 0
    moves: Dict[str, List[int]] = {}

    for request in requests:
        if request.is_completed:
            done += 1
        else:
            pending += 1
        if request.original_dealer:
            moves.setdefault(request.original_dealer, [0, 0])[0] += 1
        if request.reallocated_to:
            moves.setdefault(request.reallocated_to, [0, 0])[1] += 1

    return ReallocationStats(
        total_pending=pending,
        total_done=done,
        dealer_stats={dealer: DealerMoves(*counts) for dealer, counts in moves.items()},
    )


def filter_requests(
    requests: Iterable[ReallocationRequest],
    request_filter: RequestFilter = RequestFilter.ALL,
) -> List[ReallocationRequest]:
    if request_filter is RequestFilter.PENDING:
        return [request for request in requests if not request.is_completed]
    if request_filter is RequestFilter.DONE:
        return [request for request in requests if request.is_completed]
    return list(requests)


__all__ = [
    "BlockReason",
    "COMPLETED",
    "DealerMoves",
    "ISSUE_TYPES",
    "Issue",
    "ReallocationRequest",
    "ReallocationStats",
    "RequestFilter",
    "build_request",
    "filter_requests",
    "reallocation_stats",
    "submission_block_reason",
]
