"""
Database validation tests.

This module checks a live Supabase project and verifies that:
1. Connection credentials work
2. Required tables exist and can be queried

The whole module is skipped when SUPABASE_URL / SUPABASE_KEY are not set, so
the unit test suite runs without a database. Run it on its own to validate a
new environment before importing data.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file before anything else
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

pytestmark = pytest.mark.skipif(
    not (os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_KEY")),
    reason="SUPABASE_URL and SUPABASE_KEY are required for database validation",
)

REQUIRED_TABLES = [
    "dealer_configs",
    "yardstock",
    "handover",
    "pgi_records",
    "campervan_schedule",
    "reallocations",
    "reallocation_mail",
    "production_vans",
]


def test_environment_variables_set() -> None:
    """Verify the Supabase URL looks like a project URL."""

    supabase_url = os.getenv("SUPABASE_URL") or ""
    assert supabase_url.startswith("https://"), "SUPABASE_URL should start with https://"

    print(f"\n[OK] Environment variables set")
    print(f"  SUPABASE_URL: {supabase_url[:30]}...")


def test_supabase_client_initialization() -> None:
    """Test that Supabase client can be initialized."""

    from repositories.client import get_supabase

    try:
        assert get_supabase() is not None
        print("\n[OK] Supabase client initialized successfully")
    except RuntimeError as e:
        pytest.fail(f"Failed to initialize Supabase client: {e}")


@pytest.mark.parametrize("table", REQUIRED_TABLES)
def test_table_exists(table: str) -> None:
    """Verify each table the dashboard reads or writes exists."""

    from repositories.client import get_supabase

    try:
        get_supabase().table(table).select("*").limit(0).execute()
        print(f"\n[OK] '{table}' table exists")
    except Exception as e:
        pytest.fail(
            f"'{table}' table does not exist or cannot be accessed: {e}\n"
            f"You need to create this table in Supabase."
        )
