#!/usr/bin/env python3
"""
Campervan Schedule CSV Import

Loads a spreadsheet export of the campervan schedule into Supabase:
- Headers are matched on letters and digits only, so "Chassis Number",
  "chassisNumber" and "CHASSIS_NUMBER" all land in the same column
- Date columns are normalized to DD/MM/YYYY and derived columns recalculated
- Rows are saved in batches; a failed batch is retried row by row
- A summary is printed and per-row problems are written to a JSON log

Rows are numbered by their position in the file (first data row is row 1), so
an import replaces the schedule rows with the same numbers. Blank lines are
ignored and do not take a number.

Usage:
    python ingest_schedule_csv.py path/to/schedule.csv
    python ingest_schedule_csv.py path/to/schedule.csv --batch-size 500 --dry-run
"""

from __future__ import annotations

import argparse
import csv
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

# Add parent directory to path to import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.schedule import ScheduleRow, header_to_key, recalc_row
from repositories.schedule_repository import upsert_schedule_row, upsert_schedule_rows

# Columns the import never takes from the file.
IGNORED_KEYS = frozenset({"row_number", "duration"})


@dataclass
class IngestionResult:
    """Counters and per-row problems collected during one import."""
    total_rows: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    unmapped_headers: list[str] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)

    def add_error(self, row_number: int, message: str, **details) -> None:
        self.errors.append({"row_num": row_number, "error": message, **details})


@dataclass(frozen=True)
class CsvLine:
    line_num: int
    row_number: int
    values: list[str]


def map_headers(headers: list[str]) -> tuple[list[str | None], list[str]]:
    """
    Match each header to a ScheduleRow field.

    Returns the field per column (None when nothing matches) and the
    non-blank headers that matched nothing.
    """
    keys = [header_to_key(header) for header in headers]
    unmapped = [header for header, key in zip(headers, keys) if key is None and header.strip()]
    return keys, unmapped


def has_schedule_values(values: list[str], keys: list[str | None]) -> bool:
    return any(key is not None and value.strip() for key, value in zip(keys, values))


def create_row_from_values(values: list[str], keys: list[str | None], row_number: int) -> ScheduleRow:
    """Recalculated ScheduleRow for one CSV line. Derived columns in the file are overwritten."""
    columns = {
        key: value.strip()
        for key, value in zip(keys, values)
        if key is not None and key not in IGNORED_KEYS
    }
    return recalc_row(ScheduleRow(row_number=row_number, **columns))


def iter_csv_lines(reader) -> Iterator[CsvLine]:
    """Non-blank data lines with their file line and schedule row numbers."""
    row_number = 0
    for line_num, values in enumerate(reader, start=2):  # line 1 is the header
        if not any(value.strip() for value in values):
            continue
        row_number += 1
        yield CsvLine(line_num, row_number, values)


def save_batch(batch: list[ScheduleRow], dry_run: bool = False) -> tuple[int, list[dict]]:
    """
    Save a batch in one request; if that fails, save each row on its own so a
    single bad row does not sink the rest.

    Returns the number of saved rows and an error entry per failed row.
    """
    if not batch or dry_run:
        return len(batch), []

    try:
        upsert_schedule_rows(batch)
        return len(batch), []
    except Exception as batch_error:
        print(f"  Batch of {len(batch)} rows failed ({batch_error}); retrying rows one at a time")

    saved = 0
    errors: list[dict] = []
    for row in batch:
        try:
            upsert_schedule_row(row)
        except Exception as e:
            errors.append({"row_num": row.row_number, "error": str(e), "chassis_number": row.chassis_number})
        else:
            saved += 1
    return saved, errors


def _flush(result: IngestionResult, batch: list[ScheduleRow], dry_run: bool) -> None:
    saved, errors = save_batch(batch, dry_run)
    result.successful += saved
    result.failed += len(errors)
    result.errors.extend(errors)


def ingest_csv(csv_path: str, batch_size: int = 250, dry_run: bool = False) -> IngestionResult:
    """
    Import schedule rows from `csv_path`.

    Raises:
        FileNotFoundError: the file does not exist
        ValueError: the file is empty or no header matches a schedule column
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    print(f"Importing {path.name} (batch size {batch_size}{', dry run' if dry_run else ''})")

    result = IngestionResult()
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.reader(f)
        headers = next(reader, None)
        if not headers:
            raise ValueError("CSV file is empty or malformed")

        keys, result.unmapped_headers = map_headers(headers)
        if all(key is None for key in keys):
            raise ValueError("CSV has no columns matching the campervan schedule")

        batch: list[ScheduleRow] = []
        for line in iter_csv_lines(reader):
            result.total_rows += 1

            if not has_schedule_values(line.values, keys):
                result.skipped += 1
                result.add_error(
                    line.row_number,
                    "Row has no values in schedule columns",
                    line_num=line.line_num,
                    csv_row=line.values,
                )
                continue

            try:
                batch.append(create_row_from_values(line.values, keys, line.row_number))
            except Exception as e:
                result.failed += 1
                result.add_error(
                    line.row_number,
                    f"Failed to create schedule row: {e}",
                    line_num=line.line_num,
                    csv_row=line.values,
                )
                continue

            if len(batch) >= batch_size:
                _flush(result, batch, dry_run)
                batch = []
                print(f"  {result.total_rows} rows read, {result.successful} saved")

        _flush(result, batch, dry_run)

    return result


def print_summary(result: IngestionResult) -> None:
    rule = "-" * 50
    print()
    print(rule)
    print("Schedule import")
    print(rule)
    print(f"Rows read:    {result.total_rows}")
    print(f"Saved:        {result.successful}")
    print(f"Failed:       {result.failed}")
    print(f"Skipped:      {result.skipped}")
    if result.unmapped_headers:
        print(f"Ignored columns: {', '.join(result.unmapped_headers)}")

    for error in result.errors[:5]:
        print(f"  row {error.get('row_num', '?')}: {error['error']}")
    hidden = len(result.errors) - 5
    if hidden > 0:
        print(f"  (+{hidden} more in the error log)")
    print(rule)


def write_error_log(errors: list[dict], output_path: str) -> None:
    Path(output_path).write_text(json.dumps(errors, indent=2, default=str), encoding="utf-8")
    print(f"Error log written to {output_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Import campervan schedule rows from a CSV export into Supabase",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python ingest_schedule_csv.py schedule.csv
  python ingest_schedule_csv.py schedule.csv --dry-run
  python ingest_schedule_csv.py schedule.csv --batch-size 500 --error-log errors.json
        """
    )
    parser.add_argument("csv_path", help="CSV export of the schedule")
    parser.add_argument("--batch-size", type=int, default=250, help="Rows saved per request (default: 250)")
    parser.add_argument("--dry-run", action="store_true", help="Parse and recalculate only; save nothing")
    parser.add_argument(
        "--error-log",
        default="schedule_ingestion_errors.json",
        help="Where to write per-row problems (default: schedule_ingestion_errors.json)"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Exit code 0 when every readable row was saved, 1 otherwise."""
    args = build_parser().parse_args(argv)

    try:
        result = ingest_csv(args.csv_path, batch_size=args.batch_size, dry_run=args.dry_run)
    except KeyboardInterrupt:
        print("\nImport interrupted")
        return 130
    except Exception as e:
        print(f"Import failed: {e}", file=sys.stderr)
        return 1

    print_summary(result)
    if result.errors:
        write_error_log(result.errors, args.error_log)
    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
