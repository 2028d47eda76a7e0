#!/usr/bin/env python3
"""Inspect and maintain a dealership catalog file from the command line.

Usage
-----
Point the tool at a catalog (defaults come from ``AUTOLOT_*`` env vars)::

    python scripts/catalog_tool.py query --make Toyota --sort price-high
    python scripts/catalog_tool.py query --search "camry 2022" --json
    python scripts/catalog_tool.py dedup
    python scripts/catalog_tool.py import-file listings.json --dry-run

Options::

    --catalog FILE       Catalog JSON file (default: $AUTOLOT_CATALOG_PATH)
    --no-seed            Do not merge the built-in demo vehicles
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from autolot import AutolotConfig, AutolotError, Dealership, FilterSet, Range, VehicleRecord  # noqa: E402
from autolot.ingestion.reconcile import reconcile  # noqa: E402
from autolot.ingestion.source import parse_candidates  # noqa: E402


def _range(low: float | None, high: float | None) -> Range | None:
    if low is None and high is None:
        return None
    return Range(min=low, max=high)


def _row(record: VehicleRecord) -> str:
    return (
        f"  {record.id:<22} {record.year} {record.make} {record.model:<18}"
        f" ${record.price:>10,.0f}  {record.mileage:>8,} mi  {record.condition}/{record.body_type}"
    )


def _emit(records: list[VehicleRecord], json_mode: bool) -> None:
    if json_mode:
        payload = [record.model_dump(mode="json", by_alias=True) for record in records]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return
    for record in records:
        print(_row(record))
    print(f"{len(records)} vehicle(s)")


# ── commands ─────────────────────────────────────────────────


async def cmd_query(lot: Dealership, args: argparse.Namespace) -> int:
    filters = FilterSet.validate_or_raise(
        {
            "make": args.make,
            "condition": args.condition,
            "type": args.body_type,
            "transmission": args.transmission,
            "fuel_type": args.fuel_type,
            "price_range": _range(args.min_price, args.max_price),
            "year_range": _range(args.min_year, args.max_year),
            "mileage_range": _range(None, args.max_mileage),
        }
    )
    _emit(lot.browse(filters, search_text=args.search, sort_key=args.sort), args.json_mode)
    return 0


async def cmd_dedup(lot: Dealership, args: argparse.Namespace) -> int:
    removed = lot.remove_duplicates()
    print(f"Removed {removed} duplicate vehicle(s)")
    return 0


async def cmd_import_file(lot: Dealership, args: argparse.Namespace) -> int:
    path = Path(args.file)
    raw: Any = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = raw.get("vehicles", [])
    candidates = parse_candidates(raw, source=path.name)
    print(f"Read {len(candidates)} listing(s) from {path}")

    if args.dry_run:
        result = reconcile(lot.store.snapshot(), candidates, strict=args.strict)
        for record in result.to_import:
            print(f"  new: {record.year} {record.make} {record.model} vin={record.vin}")
        print(f"{len(result.to_import)} listing(s) would be imported, {len(result.skipped)} already in stock")
        return 0

    report = lot.import_vehicles(candidates, strict=args.strict)
    _emit(list(report.imported), args.json_mode)
    print(f"Imported {len(report.imported)}, skipped {report.skipped}", file=sys.stderr)
    return 0


_COMMANDS = {
    "query": cmd_query,
    "dedup": cmd_dedup,
    "import-file": cmd_import_file,
}


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect and maintain a dealership catalog file.")
    parser.add_argument("--catalog", help="Catalog JSON file (default: $AUTOLOT_CATALOG_PATH)")
    parser.add_argument("--no-seed", action="store_true", help="Do not merge the built-in demo vehicles")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    q = sub.add_parser("query", help="Filter, search and sort available vehicles")
    q.add_argument("--make")
    q.add_argument("--condition", choices=["new", "used", "all"])
    q.add_argument("--type", dest="body_type")
    q.add_argument("--transmission")
    q.add_argument("--fuel", dest="fuel_type")
    q.add_argument("--min-price", type=float)
    q.add_argument("--max-price", type=float)
    q.add_argument("--min-year", type=int)
    q.add_argument("--max-year", type=int)
    q.add_argument("--max-mileage", type=int)
    q.add_argument("--search", default="", help="Substring matched against 'make model year'")
    q.add_argument("--sort", default="price-low", choices=["price-low", "price-high", "year-new", "year-old", "mileage-low"])

    sub.add_parser("dedup", help="Remove later records that repeat an earlier VIN")

    imp = sub.add_parser("import-file", help="Import listings from a JSON file")
    imp.add_argument("file", help="JSON list of listings, or an object with a 'vehicles' list")
    imp.add_argument("--dry-run", action="store_true", help="Only report which listings are new")
    imp.add_argument("--strict", action="store_true", help="Reject listings with unparseable numbers")
    return parser


async def main() -> int:
    args = _parser().parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.catalog:
        overrides["catalog_path"] = args.catalog
    if args.no_seed:
        overrides["seed_enabled"] = False
    config = AutolotConfig.from_env(**overrides)

    try:
        async with Dealership(config) as lot:
            return await _COMMANDS[args.command](lot, args)
    except (AutolotError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
