"""
Supabase client initialization.

This module contains *only* the database connection setup. The client is
created on first use by `get_supabase()`, so modules that import repositories
(API, tests) load without credentials until a query actually runs.

Environment variables required:
- SUPABASE_URL: Your Supabase project URL
- SUPABASE_KEY: Your Supabase API key (use a server-side key only on the backend)
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv

# The dependency is `supabase` (supabase-py). If your editor can't resolve it,
# install it in your environment: `pip install supabase`.
from supabase import Client, create_client  # type: ignore[import-not-found]

# Load environment variables from the .env file at the project root.
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Supabase caps a single select at 1000 rows by default.
PAGE_SIZE = 1000


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Return the shared Supabase client, creating it on first call.

    Raises:
    - RuntimeError if SUPABASE_URL or SUPABASE_KEY is not set.
    """

    url: str | None = os.getenv("SUPABASE_URL")
    key: str | None = os.getenv("SUPABASE_KEY")

    if not url:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_URL. "
            "Set SUPABASE_URL to your Supabase project URL."
        )

    if not key:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_KEY. "
            "Set SUPABASE_KEY to your Supabase API key."
        )

    return create_client(url, key)


def check_response(response: Any, action: str) -> List[Dict[str, Any]]:
    """
    Raise RuntimeError when `response` carries an error; otherwise return its rows.
    """

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to {action}: {error}")
    return getattr(response, "data", None) or []


def select_all(table: str, columns: str = "*", order_by: str | None = None) -> List[Dict[str, Any]]:
    """
    Fetch every row of `table`, paging past the per-request row cap.
    """

    rows: List[Dict[str, Any]] = []
    offset = 0
    while True:
        query = get_supabase().table(table).select(columns)
        if order_by is not None:
            query = query.order(order_by)
        query = query.range(offset, offset + PAGE_SIZE - 1)
        page_rows = check_response(query.execute(), f"list {table}")
        if not page_rows:
            break
        rows.extend(page_rows)
        if len(page_rows) < PAGE_SIZE:
            break
        offset += PAGE_SIZE
    return rows


__all__ = ["PAGE_SIZE", "check_response", "get_supabase", "select_all"]
