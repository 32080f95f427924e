#!/usr/bin/env python3
"""
Reallocation Export Script

Exports dealer reallocation requests from the Supabase database to CSV, using
the same columns as the dashboard's CSV download.

Usage:
    python export_reallocations.py
    python export_reallocations.py --status pending --output pending.csv
"""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import List

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.reallocation import ReallocationRequest, RequestFilter, filter_requests, reallocation_stats
from repositories.reallocation_repository import list_reallocations
from services.csv_export_service import REALLOCATION_HEADERS, generate_reallocation_csv


def default_output_path(request_filter: RequestFilter, today: date) -> str:
    return f"reallocation_requests_{request_filter.value}_{today.isoformat()}.csv"


def export_reallocations_to_csv(
    requests: List[ReallocationRequest],
    output_path: str,
) -> None:
    """
    Write reallocation requests to a CSV file.

    Raises:
        ValueError: If requests list is empty
    """
    if not requests:
        raise ValueError("No reallocation requests to export")

    print(f"Exporting {len(requests)} requests to {output_path}")
    print(f"CSV will contain {len(REALLOCATION_HEADERS)} columns")

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        f.write(generate_reallocation_csv(requests))

    print(f"✓ Successfully exported {len(requests)} requests")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Export dealer reallocation requests from Supabase database to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export all requests
  python export_reallocations.py

  # Export only pending requests
  python export_reallocations.py --status pending --output pending.csv
        """
    )

    parser.add_argument(
        "--status",
        choices=[f.value for f in RequestFilter],
        default=RequestFilter.ALL.value,
        help="Which requests to export (default: all)"
    )

    parser.add_argument(
        "--output",
        "-o",
        help="Path to output CSV file (default: reallocation_requests_<status>_<date>.csv)"
    )

    args = parser.parse_args(argv)
    request_filter = RequestFilter(args.status)
    output_path = args.output or default_output_path(request_filter, date.today())

    try:
        print("Fetching reallocation requests from database...")
        print(f"  Status filter: {request_filter.value}")
        print()

        all_requests = list_reallocations()
        requests = filter_requests(all_requests, request_filter)

        if not requests:
            print("No reallocation requests found matching the specified filter")
            return 1

        export_reallocations_to_csv(requests, output_path)

        stats = reallocation_stats(all_requests)
        print()
        print("=" * 60)
        print("EXPORT SUMMARY")
        print("=" * 60)
        print(f"Requests exported:  {len(requests)}")
        print(f"Pending (all):      {stats.total_pending}")
        print(f"Done (all):         {stats.total_done}")
        print("=" * 60)

        return 0

    except Exception as e:
        print(f"\nFATAL ERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
