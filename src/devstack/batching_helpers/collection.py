"""Accumulate items and track how long the open batch has been filling."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

ItemWeight = Callable[[T], int]


def _unit_weight(item: object) -> int:
    return 1


@dataclass(frozen=True)
class CollectedBatch(Generic[T]):
    items: List[T]
    age_seconds: float

    def __len__(self) -> int:
        return len(self.items)


class BatchCollector(Generic[T]):
    """
    Holds the open batch. The batch is full once the summed item weights reach
    ``batch_size``; with the default weight that is simply the item count.
    """

    def __init__(self, batch_size: int, name: str, weight: Optional[ItemWeight] = None):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.batch_size = batch_size
        self.name = name
        self.weight = weight or _unit_weight
        self._items: List[T] = []
        self.filled = 0
        self.opened_at: Optional[float] = None

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: T) -> bool:
        """Append ``item``; True once the batch is full."""
        if not self._items:
            self.opened_at = time.monotonic()
        self._items.append(item)
        self.filled += max(0, self.weight(item))
        full = self.filled >= self.batch_size
        if full:
            logger.debug("%s: batch full at %d item(s), weight %d", self.name, len(self._items), self.filled)
        return full

    def take(self) -> CollectedBatch[T]:
        """Hand over the open batch and start an empty one."""
        age = time.monotonic() - self.opened_at if self.opened_at is not None else 0.0
        batch = CollectedBatch(items=self._items, age_seconds=age)
        self._items = []
        self.filled = 0
        self.opened_at = None
        return batch
