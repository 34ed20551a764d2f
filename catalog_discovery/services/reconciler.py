"""
Merge/Dedup Reconciler.

Splices expansion results back into the original catalog order and drops
duplicate ids. Duplicates show up when discovery is re-run over a catalog
that already contains expanded children, or when two layer names slugify
to the same child id.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

import structlog

from catalog_discovery.core.models import Record

logger = structlog.get_logger()


@dataclass
class ReconcileResult:
    records: list[Record]
    duplicate_ids: list[str] = field(default_factory=list)


def splice_expansions(
    original: Sequence[Record],
    expansions_by_parent_id: Mapping[str, Sequence[Record]],
    is_root: Callable[[Record], bool] | None = None,
) -> list[Record]:
    """
    Replace each expanded root record with its expansion, in place.

    Records without an expansion are kept as they are.

    Args:
        original: Catalog records in their original order
        expansions_by_parent_id: Replacement records keyed by root id
        is_root: Selects the records that were expanded; others sharing a
            root's id (a pinned sublayer, say) are kept. Default: any record
            with an expansion for its id.
    """
    merged: list[Record] = []
    for record in original:
        expansion = expansions_by_parent_id.get(str(record.get("id", "")))
        if expansion is not None and "id" in record and (is_root is None or is_root(record)):
            merged.extend(expansion)
        else:
            merged.append(record)
    return merged


def dedupe_by_id(records: Sequence[Record]) -> tuple[list[Record], list[str]]:
    """
    Keep the first record for every id.

    Records without an id are always kept.

    Returns:
        (deduplicated records, ids that were dropped, once per collision)
    """
    seen_ids: set[str] = set()
    deduped: list[Record] = []
    duplicates: list[str] = []

    for record in records:
        if "id" not in record:
            deduped.append(record)
            continue

        record_id = str(record["id"])
        if record_id in seen_ids:
            logger.warning("Duplicate id, keeping first occurrence", dataset_id=record_id)
            duplicates.append(record_id)
            continue

        seen_ids.add(record_id)
        deduped.append(record)

    return deduped, duplicates


def reconcile(
    original: Sequence[Record],
    expansions_by_parent_id: Mapping[str, Sequence[Record]],
    is_root: Callable[[Record], bool] | None = None,
) -> ReconcileResult:
    """Splice expansions into the original order, then deduplicate by id."""
    merged = splice_expansions(original, expansions_by_parent_id, is_root)
    records, duplicates = dedupe_by_id(merged)
    return ReconcileResult(records=records, duplicate_ids=duplicates)
