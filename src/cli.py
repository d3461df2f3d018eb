"""
Command Line Interface

Usage:
    sales-reports extract --api
    sales-reports extract --csv exports/orders.csv
    sales-reports process
    sales-reports export products [--output PATH]
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from src.aggregation import load_report
from src.config import get_settings
from src.config.logging import bind_run_context, configure_logging
from src.export import ExportType, export_csv
from src.ingestion import WooCommerceError
from src.pipeline import (
    ReportValidationError,
    extract_from_api,
    extract_from_csv,
    run_processing,
    save_extracted,
)

logger = structlog.get_logger(__name__)


def cmd_extract(args: argparse.Namespace) -> int:
    if args.csv:
        orders = extract_from_csv(args.csv)
        method = "CSV"
    else:
        orders = asyncio.run(extract_from_api())
        method = "API"

    path = save_extracted(orders, method=method, path=args.output)
    print(f"Extracted {len(orders)} orders to {path}")
    return 0


def cmd_process(args: argparse.Namespace) -> int:
    result = run_processing(raw_path=args.input, report_path=args.output)
    metadata = result.report.metadata
    print(
        f"Processed {metadata.order_count} orders "
        f"({result.normalization.rejected_count} rejected), "
        f"revenue {metadata.total_revenue} {metadata.currency}"
    )
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    export_type = ExportType(args.type)
    report = load_report(args.report)
    output = Path(args.output or get_settings().data_lake.processed_path)
    if output.suffix.lower() != ".csv":
        output = output / export_type.filename
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(export_csv(report, export_type), encoding="utf-8")
    print(f"Exported {export_type.value} to {output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sales-reports", description="Sales report pipeline")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Extract raw orders")
    source = extract.add_mutually_exclusive_group(required=True)
    source.add_argument("--api", action="store_true", help="Fetch orders from the WooCommerce REST API")
    source.add_argument("--csv", metavar="PATH", help="Read a WooCommerce CSV export")
    extract.add_argument("--output", default=None, help="Raw orders file to write")
    extract.set_defaults(func=cmd_extract)

    process = subparsers.add_parser("process", help="Build the sales report from raw orders")
    process.add_argument("--input", default=None, help="Raw orders file to read")
    process.add_argument("--output", default=None, help="Report file to write")
    process.set_defaults(func=cmd_process)

    export = subparsers.add_parser("export", help="Export a report collection as CSV")
    export.add_argument("type", choices=[t.value for t in ExportType])
    export.add_argument("--report", default=None, help="Report file to read")
    export.add_argument("--output", default=None, help="CSV file or directory to write")
    export.set_defaults(func=cmd_export)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    with bind_run_context(args.command):
        try:
            return args.func(args)
        except FileNotFoundError as e:
            logger.error("Input file missing", error=str(e))
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except (WooCommerceError, ReportValidationError) as e:
            logger.error("Command failed", error=str(e))
            print(f"Error: {e}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
