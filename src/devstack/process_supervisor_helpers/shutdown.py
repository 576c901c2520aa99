"""Terminate supervised process groups: SIGTERM, grace period, then SIGKILL."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from typing import Iterable, List

from .types import ProcessRecord

logger = logging.getLogger(__name__)


async def terminate_running(records: Iterable[ProcessRecord], grace_seconds: float) -> List[str]:
    """
    Stop every still-running child.

    Returns:
        Names of processes that needed SIGKILL.
    """
    running = [rec for rec in records if rec.process is not None and rec.process.returncode is None]
    if not running:
        return []

    logger.info("Stopping %d process(es): %s", len(running), ", ".join(rec.name for rec in running))
    for rec in running:
        rec.stopped_by_supervisor = True
        _signal_group(rec, signal.SIGTERM)

    waiters = {asyncio.ensure_future(rec.process.wait()): rec for rec in running}  # type: ignore[union-attr]
    _, pending = await asyncio.wait(waiters.keys(), timeout=grace_seconds)

    killed: List[str] = []
    for future in pending:
        rec = waiters[future]
        logger.warning("%s did not exit within %ss; sending SIGKILL", rec.name, grace_seconds)
        _signal_group(rec, signal.SIGKILL)
        killed.append(rec.name)
    if pending:
        await asyncio.wait(pending)
    return killed


def _signal_group(rec: ProcessRecord, sig: signal.Signals) -> None:
    proc = rec.process
    if proc is None or proc.returncode is not None:
        return
    try:
        os.killpg(proc.pid, sig)
        return
    except ProcessLookupError:  # policy_guard: allow-silent-handler
        return
    except PermissionError as exc:  # policy_guard: allow-silent-handler
        logger.warning("Failed to signal process group for %s: %s", rec.name, exc)
    try:
        proc.send_signal(sig)
    except ProcessLookupError:  # policy_guard: allow-silent-handler
        pass
