"""
Dashboard settings.

Read from environment variables (a `.env` file at the project root is loaded
by `repositories.client`, and again here so settings work without a database):

- DASHBOARD_TIMEZONE:       IANA zone for "today" and submit times (default Australia/Melbourne)
- STOCK_TREND_WEEKS:        weeks in each dealer's stock level trend (default 10)
- PGI_RANGE_DAYS:           look-back for "waiting for receiving" (default 180; 0 disables)
- SELF_OWNED_DEALERS:       comma-separated dealer names shown as self-owned
- REALLOCATION_MAIL_TO:     comma-separated notification recipients (empty disables mail)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Tuple
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

from domain.time_buckets import DEFAULT_WINDOW_WEEKS

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DEFAULT_TIMEZONE = "Australia/Melbourne"
DEFAULT_PGI_RANGE_DAYS = 180
DEFAULT_SELF_OWNED_DEALERS = ("Frankston", "Geelong", "Launceston", "ST James", "Traralgon")


@dataclass(frozen=True, slots=True)
class DashboardSettings:
    timezone: str = DEFAULT_TIMEZONE
    stock_trend_weeks: int = DEFAULT_WINDOW_WEEKS
    pgi_range_days: int = DEFAULT_PGI_RANGE_DAYS
    self_owned_dealers: Tuple[str, ...] = DEFAULT_SELF_OWNED_DEALERS
    mail_recipients: Tuple[str, ...] = ()


def _split_list(value: str | None) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}") from e


def load_settings() -> DashboardSettings:
    """
    Build settings from the environment.

    Raises:
    - RuntimeError for a non-integer numeric setting or an unknown timezone.
    """

    timezone = os.getenv("DASHBOARD_TIMEZONE") or DEFAULT_TIMEZONE
    try:
        ZoneInfo(timezone)
    except (KeyError, ValueError) as e:
        raise RuntimeError(f"Unknown DASHBOARD_TIMEZONE: {timezone!r}") from e

    self_owned = _split_list(os.getenv("SELF_OWNED_DEALERS")) or DEFAULT_SELF_OWNED_DEALERS

    return DashboardSettings(
        timezone=timezone,
        stock_trend_weeks=_int_env("STOCK_TREND_WEEKS", DEFAULT_WINDOW_WEEKS),
        pgi_range_days=_int_env("PGI_RANGE_DAYS", DEFAULT_PGI_RANGE_DAYS),
        self_owned_dealers=self_owned,
        mail_recipients=_split_list(os.getenv("REALLOCATION_MAIL_TO")),
    )


def now_local(settings: DashboardSettings) -> datetime:
    return datetime.now(ZoneInfo(settings.timezone))


def today_local(settings: DashboardSettings) -> date:
    """Calendar date in the dashboard's timezone."""

    return now_local(settings).date()


__all__ = ["DashboardSettings", "load_settings", "now_local", "today_local"]
