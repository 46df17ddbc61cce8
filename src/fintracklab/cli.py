"""
Command-line interface for FinTrackLab.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, is_dataclass, replace

import numpy as np
import pandas as pd

from fintracklab import __version__
from fintracklab.core.errors import ConfigError, RecordError
from fintracklab.core.results import DateRange
from fintracklab.core.settings import TrackerSettings
from fintracklab.core.utils import is_month_key
from fintracklab.dashboard import DashboardDataManager
from fintracklab.formatting import format_frame
from fintracklab.io import (
    dumps_backup,
    example_book,
    export_investment_csv,
    export_metal_csv,
    load_backup,
)
from fintracklab.metals import calculate_metal_stats

log = logging.getLogger(__name__)


class TrackerEncoder(json.JSONEncoder):
    """JSON encoder that handles dataclasses, numpy values and pandas objects."""

    def default(self, obj):
        if is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, np.generic):
            return obj.item()
        elif isinstance(obj, pd.Period):
            return str(obj)
        elif isinstance(obj, pd.DataFrame):
            return obj.to_dict("records")
        elif isinstance(obj, pd.Series):
            return obj.to_dict()
        return super().default(obj)


def _write_json(data, output: str | None) -> None:
    """Write JSON to ``output`` or stdout."""
    if output:
        with open(output, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, cls=TrackerEncoder, ensure_ascii=False)
            f.write("\n")
    else:
        json.dump(data, sys.stdout, indent=2, cls=TrackerEncoder, ensure_ascii=False)
        sys.stdout.write("\n")


def _settings(args) -> TrackerSettings:
    settings = TrackerSettings.from_env()
    if getattr(args, "log_level", None):
        settings = replace(settings, log_level=args.log_level)
    return settings


def _load(path: str):
    book = load_backup(path)
    log.info(
        "loaded %d investment and %d metal records from %s",
        len(book.all_records()),
        len(book.all_metal_records()),
        path,
    )
    return book


def cmd_dashboard(args) -> int:
    """Compute dashboard series from a backup and print or save them."""
    settings = args.settings
    book = _load(args.input)
    date_range = DateRange(args.start, args.end)

    manager = DashboardDataManager(settings=settings)
    view = manager.get_view(book.records_by_type, book.records_by_metal_type, date_range)

    if args.format == "table":
        text = format_frame(view.to_frame(), settings.currency_symbol)
        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(text + "\n")
        else:
            print(text)
    else:
        _write_json(view, args.output)

    if args.output:
        print(f"Dashboard saved to {args.output}")
    return 0


def cmd_metal_stats(args) -> int:
    """Print per-metal statistics, optionally as of a month."""
    if args.month is not None and not is_month_key(args.month):
        raise ConfigError(f"--month must be YYYY-MM, got {args.month!r}")
    book = _load(args.input)
    grouped = book.records_by_metal_type
    stats = {
        metal_type: calculate_metal_stats(
            records,
            upto_month=args.month,
            records_by_type=grouped if args.month else None,
        )
        for metal_type, records in grouped.items()
    }
    _write_json(stats, None)
    return 0


def cmd_export_csv(args) -> int:
    """Flatten backup records to CSV."""
    book = _load(args.input)
    if args.kind == "metals":
        count = export_metal_csv(book.all_metal_records(), args.output)
    else:
        count = export_investment_csv(book.all_records(), args.output)
    print(f"Exported {count} {args.kind} records to {args.output}")
    return 0


def cmd_example(_) -> int:
    """Print a sample backup JSON."""
    sys.stdout.write(dumps_backup(example_book()))
    sys.stdout.write("\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fintracklab", description="FinTrackLab - Monthly investment and metal tracker"
    )
    parser.add_argument("--version", action="version", version=f"FinTrackLab {__version__}")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: FINTRACKLAB_LOG_LEVEL or WARNING)",
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True, help="Available commands")

    example_parser = subparsers.add_parser("example", help="Print a sample backup JSON")
    example_parser.set_defaults(func=cmd_example)

    dashboard_parser = subparsers.add_parser(
        "dashboard", help="Compute dashboard series from a backup"
    )
    dashboard_parser.add_argument("-i", "--input", required=True, help="Backup JSON file")
    dashboard_parser.add_argument("-o", "--output", help="Output file (default: stdout)")
    dashboard_parser.add_argument("--start", help="First displayed month (YYYY-MM)")
    dashboard_parser.add_argument("--end", help="Last displayed month (YYYY-MM)")
    dashboard_parser.add_argument(
        "--format", choices=["json", "table"], default="json", help="Output format"
    )
    dashboard_parser.epilog = """
Date range:
  --start/--end only select which months are shown. Every month is computed
  from the complete history, so a month's figures do not depend on the range.
    """
    dashboard_parser.set_defaults(func=cmd_dashboard)

    stats_parser = subparsers.add_parser("metal-stats", help="Per-metal statistics")
    stats_parser.add_argument("-i", "--input", required=True, help="Backup JSON file")
    stats_parser.add_argument("--month", help="Only consider records up to this month (YYYY-MM)")
    stats_parser.set_defaults(func=cmd_metal_stats)

    export_parser = subparsers.add_parser("export-csv", help="Export records to CSV")
    export_parser.add_argument("-i", "--input", required=True, help="Backup JSON file")
    export_parser.add_argument("-o", "--output", required=True, help="Output CSV file")
    export_parser.add_argument(
        "--kind", choices=["investments", "metals"], default="investments", help="Record family"
    )
    export_parser.set_defaults(func=cmd_export_csv)

    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse ``argv`` and execute the command; returns the exit code."""
    args = build_parser().parse_args(argv)
    try:
        args.settings = _settings(args)
        logging.basicConfig(
            level=args.settings.logging_level,
            format="%(levelname)s %(name)s: %(message)s",
        )
        return args.func(args)
    except (ConfigError, RecordError, OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main() -> None:
    """Main CLI entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
