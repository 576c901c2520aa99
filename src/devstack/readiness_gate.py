"""
Readiness Gate

Blocks the start of a dependent process until a polled HTTP endpoint reports
ready. The gate never gives up on its own; callers that need a deadline wrap
``wait`` in ``asyncio.wait_for`` or cancel the owning task.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .process_models import HealthCheckSpec
from .readiness_gate_helpers import HttpReadinessProbe, ProbeOutcome, ProbeResult

logger = logging.getLogger(__name__)

Probe = Callable[[], Awaitable[ProbeResult]]
Sleeper = Callable[[float], Awaitable[None]]

__all__ = ["ReadinessGate", "ProbeOutcome", "ProbeResult"]


class ReadinessGate:
    """Poll a health endpoint at a fixed interval until it reports ready."""

    def __init__(
        self,
        spec: HealthCheckSpec,
        *,
        probe: Optional[Probe] = None,
        sleep: Sleeper = asyncio.sleep,
        name: str = "readiness",
    ):
        """
        Initialize the gate.

        Args:
            spec: Health check declaration (URL, expected field/value, interval)
            probe: Callable performing one poll; defaults to an HTTP GET probe
            sleep: Awaitable used between polls
            name: Label used in log messages
        """
        self.spec = spec
        self.name = name
        self._probe = probe or HttpReadinessProbe(spec)
        self._sleep = sleep
        self.attempts = 0

    async def wait(self) -> int:
        """
        Poll until ready.

        Returns:
            Number of polls issued, including the successful one
        """
        logger.info("[%s] waiting for %s to report %s=%s", self.name, self.spec.url, self.spec.expected_field, self.spec.expected_value)
        while True:
            self.attempts += 1
            result = await self._probe()
            if result.ready:
                logger.info("[%s] ready after %d poll(s)", self.name, self.attempts)
                return self.attempts
            self._log_failure(result)
            await self._sleep(self.spec.poll_interval)

    def _log_failure(self, result: ProbeResult) -> None:
        if result.outcome is ProbeOutcome.CONNECTION_ERROR:
            logger.info(
                "[%s] attempt %d: cannot reach %s (%s), retrying in %ss",
                self.name,
                self.attempts,
                self.spec.url,
                result.detail,
                self.spec.poll_interval,
            )
        else:
            logger.info(
                "[%s] attempt %d: not ready yet (HTTP %s, %s), retrying in %ss",
                self.name,
                self.attempts,
                result.status,
                result.detail,
                self.spec.poll_interval,
            )
