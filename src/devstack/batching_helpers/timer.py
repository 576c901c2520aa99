"""One-shot flush deadline for the open batch."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .executor import BATCH_PROCESS_ERRORS

logger = logging.getLogger(__name__)


class BatchTimer:
    """Calls ``on_expiry`` once, ``delay_seconds`` after being armed."""

    def __init__(self, delay_seconds: float, on_expiry: Callable[[], Awaitable[None]], name: str):
        self.delay_seconds = delay_seconds
        self.on_expiry = on_expiry
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self) -> None:
        if not self.armed:
            self._task = asyncio.create_task(self._expire_later(), name=f"{self.name}-timer")

    async def _expire_later(self) -> None:
        await asyncio.sleep(self.delay_seconds)
        try:
            await self.on_expiry()
        except BATCH_PROCESS_ERRORS:  # policy_guard: allow-silent-handler
            logger.exception("%s: timed flush failed", self.name)

    def _foreign_pending_task(self) -> Optional[asyncio.Task]:
        # the expiry callback disarms the timer from inside its own task
        task = self._task
        if task is None or task.done() or task is asyncio.current_task():
            return None
        return task

    def disarm(self) -> None:
        task = self._foreign_pending_task()
        if task is not None:
            task.cancel()

    async def join(self) -> None:
        """Wait for a disarmed timer task to finish unwinding."""
        task = self._foreign_pending_task()
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:  # policy_guard: allow-silent-handler
            logger.debug("%s: timer cancelled", self.name)
