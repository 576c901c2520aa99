"""
Port Reconciler

Frees local ports before a listener (re)starts by terminating whatever process
is currently bound to them. This keeps repeated `devstack up` runs idempotent
when a crashed previous session left listeners behind.

Usage:
    from devstack.port_reconciler import PortReconciler

    await PortReconciler().reclaim([PortBinding(4400), PortBinding(4401)])
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Iterable, List, Optional

from .process_models import PortBinding
from .port_reconciler_helpers import ReclaimReport, find_port_owners, terminate_port_owner
from .port_reconciler_helpers.port_discovery import load_psutil

logger = logging.getLogger(__name__)

GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS = 3.0
FORCE_KILL_TIMEOUT_SECONDS = 2.0
POST_KILL_WAIT_SECONDS = 1.0


class PortReconciler:
    """Best-effort reclaim of local ports; an unbound port is not an error."""

    def __init__(
        self,
        *,
        graceful_timeout: float = GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS,
        force_timeout: float = FORCE_KILL_TIMEOUT_SECONDS,
        settle_seconds: float = POST_KILL_WAIT_SECONDS,
        psutil_module: Any = None,
    ) -> None:
        self.graceful_timeout = graceful_timeout
        self.force_timeout = force_timeout
        self.settle_seconds = settle_seconds
        self._psutil = psutil_module

    async def reclaim(self, bindings: Iterable[PortBinding]) -> ReclaimReport:
        """Terminate owners of ``bindings`` and wait briefly before returning."""
        targets = _dedupe(bindings)
        if not targets:
            return ReclaimReport(bindings=[])
        report = await asyncio.to_thread(self._reclaim_blocking, targets)
        await asyncio.sleep(self.settle_seconds)
        return report

    def reclaim_sync(self, bindings: Iterable[PortBinding]) -> ReclaimReport:
        """Synchronous variant for CLI entry points without a running loop."""
        return asyncio.run(self.reclaim(bindings))

    def _reclaim_blocking(self, targets: List[PortBinding]) -> ReclaimReport:
        report = ReclaimReport(bindings=targets)
        psutil = self._psutil or load_psutil()
        rendered = " ".join(str(binding) for binding in targets)

        try:
            owners = find_port_owners(targets, exclude_pid=os.getpid(), psutil_module=psutil)
        except (OSError, RuntimeError) as exc:  # Best-effort cleanup operation  # policy_guard: allow-silent-handler
            logger.warning("Could not inspect ports %s: %s", rendered, exc)
            report.failures.append(f"inspect: {exc}")
            return report

        if not owners:
            logger.info("Ports %s already free", rendered)
            return report

        for owner in owners:
            if owner.pid in report.terminated_pids:
                continue
            stopped = terminate_port_owner(
                owner,
                psutil_module=psutil,
                graceful_timeout=self.graceful_timeout,
                force_timeout=self.force_timeout,
            )
            if stopped:
                report.terminated_pids.append(owner.pid)
            else:
                report.failures.append(f"{owner.binding}: PID {owner.pid} could not be stopped")

        logger.info("Reclaimed ports %s (terminated PIDs: %s)", rendered, report.terminated_pids or "none")
        return report


def _dedupe(bindings: Iterable[PortBinding]) -> List[PortBinding]:
    seen: List[PortBinding] = []
    for binding in bindings:
        if binding not in seen:
            seen.append(binding)
    return seen


def parse_bindings(raw_values: Iterable[str], default_protocol: Optional[str] = None) -> List[PortBinding]:
    """Parse CLI port arguments such as ``4400`` or ``4400/tcp``."""
    parsed = []
    for raw in raw_values:
        text = str(raw)
        if default_protocol and "/" not in text:
            text = f"{text}/{default_protocol}"
        parsed.append(PortBinding.parse(text))
    return parsed


__all__ = ["PortReconciler", "ReclaimReport", "parse_bindings"]
