"""
Command-line access to a persisted usage series.

Usage:
    usagerecon load exports/*.csv --store usage.csv      # merge exports in
    usagerecon show --store usage.csv                      # hourly, full range
    usagerecon show --granularity daily --start 2024-03-01 --end 2024-03-31
    usagerecon show --format csv > hourly.csv              # filtered slice
    usagerecon clear --store usage.csv
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

import pandas as pd

from . import canon, pipeline, summary
from .config import config_from_env
from .exceptions import UsageError
from .persist import CsvRecordStore
from .store import TimeSeriesStore

log = logging.getLogger("usagerecon")

DEFAULT_STORE = "usage-records.csv"


def _print_view(store: TimeSeriesStore, args: argparse.Namespace) -> None:
    view = store.with_range(args.start, args.end).view(args.granularity, args.window)
    if args.format == "text":
        print(summary.status_text(view))
    elif args.format == "json":
        print(json.dumps(summary.summarise_view(view), indent=2))
    else:
        out = view.records.copy()
        if len(view.rolling):
            out = out.join(view.rolling, how="left")
        out.index = pd.DatetimeIndex(out.index).tz_convert(store.config.time_zone)
        out.to_csv(sys.stdout)


def _cmd_load(args: argparse.Namespace, records: CsvRecordStore) -> int:
    result = pipeline.ingest_files(args.files, records, config=args.config)
    for failure in result.failures:
        print(failure.reason, file=sys.stderr)
    _print_view(result.store, args)
    return 0 if result.ok else 2


def _cmd_show(args: argparse.Namespace, records: CsvRecordStore) -> int:
    _print_view(pipeline.load(records, config=args.config), args)
    return 0


def _cmd_clear(args: argparse.Namespace, records: CsvRecordStore) -> int:
    pipeline.clear(records, config=args.config)
    print("Data cleared. Load CSV files to begin.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="usagerecon", description="Reconcile utility interval exports"
    )
    parser.add_argument("--store", default=DEFAULT_STORE, help="Record store CSV path")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    view_args = argparse.ArgumentParser(add_help=False)
    view_args.add_argument(
        "--granularity", choices=canon.GRANULARITIES, default="hourly"
    )
    view_args.add_argument("--start", help="First civil date (YYYY-MM-DD)")
    view_args.add_argument("--end", help="Last civil date (YYYY-MM-DD)")
    view_args.add_argument("--window", type=int, help="Rolling window size")
    view_args.add_argument("--format", choices=("text", "json", "csv"), default="text")

    p_load = sub.add_parser("load", parents=[view_args], help="Merge export files")
    p_load.add_argument("files", nargs="+")
    p_load.set_defaults(func=_cmd_load)

    p_show = sub.add_parser("show", parents=[view_args], help="Show stored series")
    p_show.set_defaults(func=_cmd_show)

    p_clear = sub.add_parser("clear", help="Delete stored records")
    p_clear.set_defaults(func=_cmd_clear)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    args.config = config_from_env()
    try:
        return args.func(args, CsvRecordStore(args.store))
    except UsageError as exc:
        log.error("%s", exc)
        return 1
