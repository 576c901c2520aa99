"""Hand a taken batch to the processing callback."""

import logging
from typing import Awaitable, Callable, Generic, List, TypeVar

from .collection import CollectedBatch

logger = logging.getLogger(__name__)

# Errors a flush callback may raise without taking the batching loop down.
BATCH_PROCESS_ERRORS = (ConnectionError, TimeoutError, OSError, RuntimeError, ValueError, TypeError, LookupError)

T = TypeVar("T")

ProcessBatch = Callable[[List[T]], Awaitable[None]]


class BatchExecutor(Generic[T]):
    def __init__(self, process_batch: ProcessBatch, name: str):
        self.process_batch = process_batch
        self.name = name
        self.batches_processed = 0

    async def execute(self, batch: CollectedBatch[T], reason: str) -> None:
        """
        Process one batch; empty batches are ignored.

        Raises:
            Any error from ``BATCH_PROCESS_ERRORS`` after logging it
        """
        if not batch.items:
            return
        logger.debug("%s: flushing %d item(s) collected over %.3fs (%s)", self.name, len(batch), batch.age_seconds, reason)
        try:
            await self.process_batch(batch.items)
        except BATCH_PROCESS_ERRORS:
            logger.exception("%s: batch of %d item(s) failed", self.name, len(batch))
            raise
        self.batches_processed += 1
