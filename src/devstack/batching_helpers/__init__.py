"""Helper modules for BatchManager."""

from .collection import BatchCollector, CollectedBatch
from .executor import BATCH_PROCESS_ERRORS, BatchExecutor
from .timer import BatchTimer

__all__ = ["BATCH_PROCESS_ERRORS", "BatchCollector", "BatchExecutor", "BatchTimer", "CollectedBatch"]
