"""Size-or-time batching for asynchronously produced items."""

import asyncio
import logging
from typing import Generic, Iterable, Optional, TypeVar

from .batching_helpers import BATCH_PROCESS_ERRORS, BatchCollector, BatchExecutor, BatchTimer
from .batching_helpers.collection import ItemWeight
from .batching_helpers.executor import ProcessBatch

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BatchManager(Generic[T]):
    """
    Collects items and hands them to ``process_batch`` when either the size
    threshold is reached or ``batch_time_seconds`` have passed since the first
    item of the batch arrived, whichever comes first. ``weight`` lets one item
    count as several toward the size threshold.

    A batch whose processing raises one of ``BATCH_PROCESS_ERRORS`` is logged
    and dropped; batching continues with the next item.
    """

    def __init__(
        self,
        batch_size: int,
        batch_time_seconds: float,
        process_batch: ProcessBatch,
        name: str = "BatchManager",
        weight: Optional[ItemWeight] = None,
    ):
        self.name = name
        self._lock = asyncio.Lock()
        self._collector = BatchCollector[T](batch_size, name, weight)
        self._executor = BatchExecutor[T](process_batch, name)
        self._timer = BatchTimer(batch_time_seconds, self._flush_on_deadline, name)

    @property
    def pending(self) -> int:
        return len(self._collector)

    @property
    def batches_processed(self) -> int:
        return self._executor.batches_processed

    async def add_item(self, item: T) -> None:
        async with self._lock:
            full = self._collector.add(item)
            if full:
                await self._flush_locked("size threshold reached")
            else:
                self._timer.arm()

    async def add_items(self, items: Iterable[T]) -> None:
        for item in items:
            await self.add_item(item)

    async def flush(self) -> None:
        """Process whatever is pending now."""
        async with self._lock:
            await self._flush_locked("manual flush")

    async def close(self) -> None:
        await self.flush()
        self._timer.disarm()
        await self._timer.join()

    async def _flush_on_deadline(self) -> None:
        async with self._lock:
            await self._flush_locked("time threshold reached")

    async def _flush_locked(self, reason: str) -> None:
        self._timer.disarm()
        if not len(self._collector):
            return
        batch = self._collector.take()
        try:
            await self._executor.execute(batch, reason)
        except BATCH_PROCESS_ERRORS:  # policy_guard: allow-silent-handler
            logger.warning("%s: dropped batch of %d item(s) after processing error", self.name, len(batch))

    async def __aenter__(self) -> "BatchManager[T]":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type:
            logger.error("%s exit: %s: %s", self.name, exc_type.__name__, exc_val)
        await self.close()


__all__ = ["BatchManager"]
