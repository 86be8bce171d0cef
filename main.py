"""
Sales Sheet Import - command-line entry point.

Runs the ingestion pipeline on one source and prints the result:

1. Validate configuration
2. Load the source (CSV/XLSX file, or CSV from an http(s) URL)
3. Detect the header row (or use --header-row) and extract sales records
4. Print records, totals and the validation report
5. Optionally export the records to .csv or .xlsx

Usage:
    python main.py SOURCE [--sheet NAME] [--header-row N] [--candidates]
                          [--output PATH] [--debug]
    python main.py --write-sample PATH

Examples:
    python main.py data/sales.xlsx                      # First sheet, detected header
    python main.py data/sales.xlsx --sheet 2024 -r 3    # Sheet "2024", header on row 3
    python main.py "https://docs.google.com/spreadsheets/d/<id>/edit#gid=0"
    python main.py --write-sample sample.xlsx           # Write a template workbook
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd

from salesboard.config import validate_config
from salesboard.errors import IngestionError, SourceError
from salesboard.header_detector import candidates_report
from salesboard.logger import get_logger, set_console_level
from salesboard.pipeline import IngestionResult, ingest_file, ingest_url
from salesboard.sample import sample_csv_text, write_sample_workbook
from salesboard.summary import calculate_totals, records_to_frame, report_to_dict, validate_records

logger = get_logger("main")

EXIT_OK = 0
EXIT_INGESTION_ERROR = 1
EXIT_SOURCE_ERROR = 2


def log(message: str, level: str = "INFO") -> None:
    """Simple logging function."""
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] [{level}] {message}")


def is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def export_records(result: IngestionResult, output_path: Path | str) -> Path:
    """
    Write the records of an ingestion result to disk.

    Args:
        result: Successful ingestion result.
        output_path: Target path; .xlsx writes a workbook, anything else CSV.

    Returns:
        Path of the written file.
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    df = records_to_frame(result.records)

    if output.suffix.lower() == ".xlsx":
        with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
            df.to_excel(writer, sheet_name="Records", index=False)
            pd.DataFrame([calculate_totals(result.records)]).to_excel(
                writer, sheet_name="Totals", index=False
            )
    else:
        # BOM-prefixed UTF-8
        df.to_csv(output, index=False, encoding="utf-8-sig")

    return output


def write_sample(path: Path | str) -> Path:
    """Write the template as .xlsx, or as BOM-prefixed CSV for any other suffix."""
    target = Path(path)
    if target.suffix.lower() == ".xlsx":
        return write_sample_workbook(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(sample_csv_text(with_bom=True), encoding="utf-8")
    return target


def run_import(
    source: str,
    sheet_name: str | None = None,
    header_row: int | None = None,
    show_candidates: bool = False,
    output_path: Path | str | None = None,
) -> IngestionResult:
    """
    Import one source and print its records.

    Args:
        source: File path or http(s) URL.
        sheet_name: Workbook sheet to read. If None, uses the first sheet.
        header_row: Zero-based header row override. If None, detects it.
        show_candidates: Print the ranked header candidates.
        output_path: Optional export path for the records.

    Returns:
        The ingestion result.

    Raises:
        IngestionError: If the pipeline cannot produce records.
        SourceError: If the source cannot be read or fetched.
    """
    start_time = datetime.now()
    log("=" * 60)
    log("SALES SHEET IMPORT")
    log("=" * 60)

    log("Step 1: Validating configuration...")
    is_valid, errors = validate_config()
    if not is_valid:
        for error in errors:
            log(f"Configuration error: {error}", "WARN")

    log(f"Step 2: Loading {source}...")
    if is_url(source):
        result = ingest_url(source, manual_header_row=header_row)
    else:
        result = ingest_file(source, sheet_name=sheet_name, manual_header_row=header_row)

    if result.sheet_name:
        log(f"  Sheet: {result.sheet_name} (available: {', '.join(result.sheet_names)})")

    header = result.header
    mode = "manual" if result.manual else "detected"
    log(f"Step 3: Header row {header.row_index} ({mode}, confidence {header.confidence:.0%})")
    log(f"  Headers: {', '.join(header.headers)}")

    if show_candidates and result.candidates:
        print(candidates_report(result.candidates).to_string(index=False))

    log(f"Step 4: {len(result.records)} record(s) from {result.row_count} row(s)")
    print(records_to_frame(result.records).to_string(index=False))

    totals = calculate_totals(result.records)
    log(
        f"  Totals: lastYear={totals['lastYear']:,.0f} target={totals['target']:,.0f} "
        f"actual={totals['actual']:,.0f} yoyGrowth={totals['yoyGrowth']}% "
        f"achievementRate={totals['achievementRate']}%"
    )

    report = report_to_dict(validate_records(result.records))
    for message in report["errors"]:
        log(message, "ERROR")
    for message in report["warnings"]:
        log(message, "WARN")
    for message in report["info"]:
        log(message)

    if output_path:
        written = export_records(result, output_path)
        log(f"Step 5: Exported records to {written}")

    elapsed = (datetime.now() - start_time).total_seconds()
    log(f"Execution time: {elapsed:.1f} seconds")
    return result


def main(argv: list[str] | None = None) -> int:
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description="Sales Sheet Import - detect headers and extract sales records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py data/sales.csv                 # Detect header, print records
  python main.py data/sales.xlsx --sheet Q3     # Read sheet "Q3"
  python main.py data/sales.csv -r 2            # Header is on row 2 (zero-based)
  python main.py data/sales.csv -o out.xlsx     # Export records
  python main.py --write-sample sample.csv      # Write a template
        """
    )

    parser.add_argument(
        "source",
        nargs="?",
        default=None,
        help="Path to a .csv/.xlsx file or an http(s) URL"
    )
    parser.add_argument(
        "--sheet", "-s",
        type=str,
        default=None,
        help="Sheet name (optional, first sheet if not provided)"
    )
    parser.add_argument(
        "--header-row", "-r",
        type=int,
        default=None,
        help="Zero-based header row (optional, detected if not provided)"
    )
    parser.add_argument(
        "--candidates",
        action="store_true",
        help="Print the ranked header candidates"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Export records to .csv or .xlsx"
    )
    parser.add_argument(
        "--write-sample",
        type=str,
        default=None,
        metavar="PATH",
        help="Write a sample sheet (.csv or .xlsx) and exit"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show DEBUG messages on the console"
    )

    args = parser.parse_args(argv)

    if args.debug:
        set_console_level(logging.DEBUG)

    if args.write_sample:
        try:
            written = write_sample(args.write_sample)
        except OSError as e:
            log(f"Could not write sample: {e}", "ERROR")
            return EXIT_SOURCE_ERROR
        log(f"Sample written to {written}")
        return EXIT_OK

    if not args.source:
        parser.error("SOURCE is required unless --write-sample is given")

    try:
        run_import(
            args.source,
            sheet_name=args.sheet,
            header_row=args.header_row,
            show_candidates=args.candidates,
            output_path=args.output,
        )
    except IngestionError as e:
        logger.error(f"{e.kind}: {e}")
        log(f"Import failed: {e}", "ERROR")
        for key, value in e.details.items():
            if key != "preview":
                log(f"  {key}: {value}", "ERROR")
        return EXIT_INGESTION_ERROR
    except (SourceError, OSError, ValueError) as e:
        logger.error(f"Source error: {e}")
        log(f"Could not read source: {e}", "ERROR")
        for attempt in getattr(e, "attempts", []):
            log(f"  {attempt}", "ERROR")
        return EXIT_SOURCE_ERROR

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
