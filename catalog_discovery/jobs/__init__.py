"""
Jobs for catalog layer discovery.

- discover_job: partition, expand, reconcile and summarize a catalog
- scheduler: batched, bounded-concurrency driver for the expansion engine
"""

from catalog_discovery.jobs.discover_job import (
    DiscoveryReport,
    DiscoverySummary,
    needs_discovery,
    partition_catalog,
    run_discovery,
)
from catalog_discovery.jobs.scheduler import BatchScheduler

__all__ = [
    "BatchScheduler",
    "DiscoveryReport",
    "DiscoverySummary",
    "needs_discovery",
    "partition_catalog",
    "run_discovery",
]
