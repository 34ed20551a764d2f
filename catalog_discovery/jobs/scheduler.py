"""
Batch Scheduler - runs the expansion engine over root service records.

Records are processed in fixed-size batches: every record of a batch is
expanded concurrently, the whole batch is awaited, then the scheduler
pauses before starting the next one so upstream servers are not flooded.
"""

import asyncio
from collections.abc import Callable

import structlog

from catalog_discovery.core.config import DiscoverySettings, get_settings
from catalog_discovery.core.models import Record
from catalog_discovery.services.expansion import ExpansionEngine, ExpansionResult

logger = structlog.get_logger()

BatchCallback = Callable[[int, int, list[ExpansionResult]], None]


class BatchScheduler:
    """Bounded-concurrency, order-preserving driver for ExpansionEngine."""

    def __init__(
        self,
        engine: ExpansionEngine,
        settings: DiscoverySettings | None = None,
        on_batch_complete: BatchCallback | None = None,
    ):
        self.engine = engine
        self.settings = settings or get_settings()
        self.on_batch_complete = on_batch_complete
        self.log = logger.bind(component="BatchScheduler")

    def batches(self, records: list[Record]) -> list[list[Record]]:
        size = self.settings.concurrency
        return [records[i:i + size] for i in range(0, len(records), size)]

    async def run(self, records: list[Record]) -> list[ExpansionResult]:
        """
        Expand all records, batch by batch.

        Returns:
            One ExpansionResult per input record, in input order
        """
        batches = self.batches(records)
        results: list[ExpansionResult] = []

        for index, batch in enumerate(batches, 1):
            self.log.debug("Starting batch", batch=index, total=len(batches), size=len(batch))

            # gather keeps results in batch input order
            batch_results = await asyncio.gather(*(self.engine.expand(record) for record in batch))
            results.extend(batch_results)

            if self.on_batch_complete is not None:
                self.on_batch_complete(index, len(batches), list(batch_results))

            if index < len(batches) and self.settings.batch_delay > 0:
                await asyncio.sleep(self.settings.batch_delay)

        return results
