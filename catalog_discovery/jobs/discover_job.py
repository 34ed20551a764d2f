"""
Discover Job - expand root service entries of a catalog.

1. Partition: classify every record's service URL; records pointing at a
   root service are processed, everything else passes through.
2. Expand: the batch scheduler runs the expansion engine over the root
   records.
3. Reconcile: expansions are spliced into the original order and ids are
   deduplicated.
4. Summarize: before/after counts and the ids that were added or removed.

Running the job over its own output changes nothing, because every
expanded or pinned record already points at a specific sublayer.
"""

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field

import httpx
import structlog

from catalog_discovery.core.config import DiscoverySettings, get_settings
from catalog_discovery.core.logging import run_context
from catalog_discovery.core.models import ExpansionStatus, Record
from catalog_discovery.jobs.scheduler import BatchCallback, BatchScheduler
from catalog_discovery.services.arcgis.client import ArcGISServiceClient
from catalog_discovery.services.arcgis.url_parser import classify_service_url
from catalog_discovery.services.expansion import ExpansionEngine, ExpansionResult
from catalog_discovery.services.reconciler import reconcile

logger = structlog.get_logger()


@dataclass
class DiscoverySummary:
    """Counts computed from id sets of the input and output catalogs."""
    before: int = 0
    after: int = 0
    added_ids: list[str] = field(default_factory=list)
    removed_ids: list[str] = field(default_factory=list)
    duplicate_ids: list[str] = field(default_factory=list)
    expanded: int = 0
    pinned: int = 0
    failed: int = 0
    unchanged: int = 0


@dataclass
class DiscoveryReport:
    """Outcome of one discovery run."""
    records: list[Record]
    passthrough_count: int = 0
    to_process_count: int = 0
    summary: DiscoverySummary = field(default_factory=DiscoverySummary)
    warnings: list[str] = field(default_factory=list)
    results: list[ExpansionResult] = field(default_factory=list)

    @property
    def nothing_to_do(self) -> bool:
        return self.to_process_count == 0

    @property
    def new_entries(self) -> list[Record]:
        added = set(self.summary.added_ids)
        return [r for r in self.records if str(r.get("id", "")) in added]


def needs_discovery(record: Record, only_ids: Collection[str] | None = None) -> bool:
    """True if the record points at a root service and is selected by only_ids."""
    if only_ids is not None and str(record.get("id", "")) not in only_ids:
        return False
    return classify_service_url(record.get("public_web_service")).is_root


def partition_catalog(
    records: Sequence[Record],
    only_ids: Collection[str] | None = None,
) -> tuple[list[Record], list[Record]]:
    """
    Split records into (passthrough, to_process).

    Args:
        records: Catalog records
        only_ids: If given, only root records with these ids are processed

    Returns:
        Records left alone, and records pointing at a root service
    """
    passthrough: list[Record] = []
    to_process: list[Record] = []

    for record in records:
        if needs_discovery(record, only_ids):
            to_process.append(record)
        else:
            passthrough.append(record)

    return passthrough, to_process


def summarize(
    original: Sequence[Record],
    final: Sequence[Record],
    results: Sequence[ExpansionResult],
    duplicate_ids: Sequence[str],
) -> DiscoverySummary:
    original_ids = [str(r["id"]) for r in original if "id" in r]
    final_ids = [str(r["id"]) for r in final if "id" in r]
    original_set, final_set = set(original_ids), set(final_ids)

    statuses = [r.status for r in results]
    return DiscoverySummary(
        before=len(original),
        after=len(final),
        added_ids=[i for i in final_ids if i not in original_set],
        removed_ids=list(dict.fromkeys(i for i in original_ids if i not in final_set)),
        duplicate_ids=list(duplicate_ids),
        expanded=statuses.count(ExpansionStatus.EXPANDED),
        pinned=statuses.count(ExpansionStatus.PINNED),
        failed=statuses.count(ExpansionStatus.FAILED),
        unchanged=statuses.count(ExpansionStatus.UNCHANGED),
    )


async def run_discovery(
    records: Sequence[Record],
    settings: DiscoverySettings | None = None,
    http_client: httpx.AsyncClient | None = None,
    only_ids: Collection[str] | None = None,
    on_batch_complete: BatchCallback | None = None,
) -> DiscoveryReport:
    """
    Run layer discovery over catalog records.

    Args:
        records: Catalog `datasets` array; not modified
        settings: Timeouts, retries, concurrency and pacing
        http_client: Shared httpx client (tests inject a mock transport)
        only_ids: Restrict processing to these dataset ids
        on_batch_complete: Progress callback, see BatchScheduler

    Returns:
        DiscoveryReport with the final records, summary and all warnings
    """
    settings = settings or get_settings()
    records = list(records)

    with run_context() as run_id:
        log = logger.bind(component="DiscoverJob")

        passthrough, to_process = partition_catalog(records, only_ids)
        log.info(
            "Partitioned catalog",
            run_id=run_id,
            passthrough=len(passthrough),
            to_process=len(to_process),
        )

        report = DiscoveryReport(
            records=records,
            passthrough_count=len(passthrough),
            to_process_count=len(to_process),
        )
        if not to_process:
            log.info("Nothing to discover, catalog is already fully expanded")
            report.summary = summarize(records, records, [], [])
            return report

        async with ArcGISServiceClient(settings, client=http_client) as client:
            scheduler = BatchScheduler(
                ExpansionEngine(client),
                settings,
                on_batch_complete=on_batch_complete,
            )
            results = await scheduler.run(to_process)

        expansions: dict[str, list[Record]] = {}
        for result in results:
            expansions.setdefault(result.parent_id, result.records)

        reconciled = reconcile(records, expansions, is_root=lambda r: needs_discovery(r, only_ids))

        report.records = reconciled.records
        report.results = results
        report.warnings = [w for result in results for w in result.warnings]
        report.warnings.extend(
            f"Duplicate id \"{dup}\", keeping first occurrence" for dup in reconciled.duplicate_ids
        )
        report.summary = summarize(records, reconciled.records, results, reconciled.duplicate_ids)

        log.info(
            "Discovery complete",
            before=report.summary.before,
            after=report.summary.after,
            added=len(report.summary.added_ids),
            removed=len(report.summary.removed_ids),
            warnings=len(report.warnings),
        )
        return report
