"""
Layer discovery command line.

Queries every ArcGIS REST service URL in the catalog. Entries pointing at a
root service (no /<layerId> suffix) are pinned to /<layerId> when the
service has a single layer, or expanded into one entry per sublayer.

Usage:
    discover-layers                          # dry-run, shows what would change
    discover-layers --write                  # writes the catalog
    discover-layers --dataset blm_acec       # only expand one entry
    discover-layers --catalog path/to/catalog.json --concurrency 2 --write
"""

import argparse
import asyncio
import sys
from pathlib import Path

from catalog_discovery.core.config import get_settings
from catalog_discovery.core.logging import configure_logging
from catalog_discovery.jobs.discover_job import DiscoveryReport, run_discovery
from catalog_discovery.services.catalog_store import CatalogError, load_catalog, write_catalog
from catalog_discovery.services.expansion import ExpansionResult

RULE = "=" * 51


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discover-layers",
        description="Expand root ArcGIS service entries of a catalog into one entry per sublayer.",
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Catalog JSON file (default: DISCOVERY_CATALOG_PATH or data/catalog.json)",
    )
    parser.add_argument(
        "--write",
        action="store_true",
        help="Write the updated catalog (default: dry-run)",
    )
    parser.add_argument(
        "--dataset",
        action="append",
        dest="datasets",
        metavar="ID",
        help="Only process this dataset id (repeatable)",
    )
    parser.add_argument("--concurrency", type=int, help="Services queried in parallel")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING for console output)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    return parser


def print_progress(batch: int, total: int, results: list[ExpansionResult]) -> None:
    for result in results:
        print(f"  [{batch}/{total}] {result.parent_id}: {result.status.value} -> {len(result.records)} record(s)")


def print_report(report: DiscoveryReport) -> None:
    summary = report.summary

    if report.warnings:
        print("\n  Warnings:")
        for warning in report.warnings:
            print(f"    ! {warning}")

    print(f"\n{RULE}")
    print("  SUMMARY")
    print(RULE)
    print(f"  Before:   {summary.before} dataset(s)")
    print(f"  After:    {summary.after} dataset(s)")
    print(f"  Added:    {len(summary.added_ids)} sublayer entries")
    print(f"  Removed:  {len(summary.removed_ids)} root-level entries")
    print(f"  Expanded: {summary.expanded}, pinned: {summary.pinned}, failed: {summary.failed}")
    if summary.duplicate_ids:
        print(f"  Duplicates dropped: {len(summary.duplicate_ids)}")

    if report.new_entries:
        print("\n  New entries:")
        for entry in report.new_entries:
            print(f"    + {entry.get('id')}  ->  {entry.get('public_web_service')}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    overrides: dict = {}
    if args.concurrency is not None:
        overrides["concurrency"] = max(1, args.concurrency)
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.json_logs:
        overrides["json_logs"] = True
    if overrides:
        settings = settings.model_copy(update=overrides)

    log_level = settings.log_level if (args.log_level or settings.json_logs) else "WARNING"
    configure_logging(json_logs=settings.json_logs, log_level=log_level)

    catalog_path = args.catalog or Path(settings.catalog_path)

    print(RULE)
    print("  GIS Catalog - Layer Discovery")
    print(f"  Mode: {'WRITE (will update ' + catalog_path.name + ')' if args.write else 'DRY-RUN (preview only)'}")
    print(RULE)

    try:
        catalog = load_catalog(catalog_path)
    except CatalogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    datasets = catalog["datasets"]
    only_ids = set(args.datasets) if args.datasets else None
    print(f"\nLoaded {len(datasets)} dataset(s) from {catalog_path}")

    report = asyncio.run(
        run_discovery(datasets, settings, only_ids=only_ids, on_batch_complete=print_progress)
    )

    print(f"{report.passthrough_count} dataset(s) left unchanged (sublayer URL, no URL, or not selected)")
    print(f"{report.to_process_count} dataset(s) pointed to root services")

    if report.nothing_to_do:
        print("\nNothing to discover. Catalog is already fully expanded.")
        return 0

    print_report(report)

    if args.write:
        catalog["datasets"] = report.records
        write_catalog(catalog_path, catalog)
        print(f"\nWrote updated {catalog_path} ({len(report.records)} datasets)")
    else:
        print("\nDry run complete. Use --write to save changes.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
