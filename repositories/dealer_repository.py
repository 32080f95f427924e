"""
Dealer repository (persistence).

Reads dealer configuration, yard stock, handovers and PGI records. Rows are
returned in the nested mapping shape the domain builders in `domain.yard`
expect; no business rules (ageing, waiting counts) belong here.

Tables:
- dealer_configs: slug, payload (jsonb: name, ...)
- yardstock:      dealer_slug, chassis, payload (jsonb: receivedAt, type, ...)
- handover:       dealer_slug, chassis, payload (jsonb: handoverAt, createdAt, ...)
- pgi_records:    chassis, payload (jsonb: dealer, pgiAt, ...)
"""

from __future__ import annotations

from typing import Any, Dict

from repositories.client import select_all

_DEALER_CONFIGS_TABLE: str = "dealer_configs"
_YARDSTOCK_TABLE: str = "yardstock"
_HANDOVER_TABLE: str = "handover"
_PGI_TABLE: str = "pgi_records"


def _payload(row: Dict[str, Any]) -> Dict[str, Any]:
    payload = row.get("payload")
    return dict(payload) if isinstance(payload, dict) else {}


def _group_by_dealer(table: str) -> Dict[str, Dict[str, Any]]:
    grouped: Dict[str, Dict[str, Any]] = {}
    for row in select_all(table, "dealer_slug, chassis, payload"):
        slug = row.get("dealer_slug") or ""
        chassis = row.get("chassis") or ""
        grouped.setdefault(slug, {})[chassis] = _payload(row)
    return grouped


def list_dealer_configs() -> Dict[str, Dict[str, Any]]:
    """Dealer configs keyed by slug."""

    return {row["slug"]: _payload(row) for row in select_all(_DEALER_CONFIGS_TABLE, "slug, payload") if row.get("slug")}


def list_yardstock() -> Dict[str, Dict[str, Any]]:
    """Yard records as `{dealer_slug: {chassis: record}}`."""

    return _group_by_dealer(_YARDSTOCK_TABLE)


def list_handovers() -> Dict[str, Dict[str, Any]]:
    """Handover records as `{dealer_slug: {chassis: record}}`."""

    return _group_by_dealer(_HANDOVER_TABLE)


def list_pgi_records() -> Dict[str, Dict[str, Any]]:
    """PGI records keyed by chassis."""

    return {row["chassis"]: _payload(row) for row in select_all(_PGI_TABLE, "chassis, payload") if row.get("chassis")}


__all__ = [
    "list_dealer_configs",
    "list_handovers",
    "list_pgi_records",
    "list_yardstock",
]
