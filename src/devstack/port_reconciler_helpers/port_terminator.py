"""Terminate port owners gracefully, escalating to SIGKILL."""

from __future__ import annotations

import logging
from typing import Any

from .types import PortOwner

logger = logging.getLogger(__name__)


def terminate_port_owner(
    owner: PortOwner,
    *,
    psutil_module: Any,
    graceful_timeout: float,
    force_timeout: float,
) -> bool:
    """
    Stop a single port owner.

    Returns:
        True when the process is gone (terminated, killed or already exited),
        False when it could not be stopped.
    """
    psutil = psutil_module
    try:
        proc = psutil.Process(owner.pid)
        logger.info("Killing %s (PID %s) holding port %s", owner.name or "process", owner.pid, owner.binding)
        proc.terminate()
    except psutil.NoSuchProcess:  # Expected exception, process race condition  # policy_guard: allow-silent-handler
        logger.debug("PID %s exited before termination", owner.pid)
        return True
    except psutil.AccessDenied:  # policy_guard: allow-silent-handler
        logger.warning("Access denied terminating PID %s on port %s", owner.pid, owner.binding)
        return False

    try:
        proc.wait(timeout=graceful_timeout)
    except psutil.TimeoutExpired:  # policy_guard: allow-silent-handler
        logger.info("PID %s did not exit within %ss; sending SIGKILL", owner.pid, graceful_timeout)
    except psutil.NoSuchProcess:  # policy_guard: allow-silent-handler
        return True
    else:
        return True

    return _force_kill(proc, owner, psutil, force_timeout)


def _force_kill(proc: Any, owner: PortOwner, psutil: Any, force_timeout: float) -> bool:
    try:
        proc.kill()
        proc.wait(timeout=force_timeout)
    except psutil.NoSuchProcess:  # Expected exception, process race condition  # policy_guard: allow-silent-handler
        return True
    except psutil.AccessDenied:  # policy_guard: allow-silent-handler
        logger.warning("Access denied force killing PID %s on port %s", owner.pid, owner.binding)
        return False
    except psutil.TimeoutExpired:  # policy_guard: allow-silent-handler
        logger.warning("PID %s still alive after force kill timeout", owner.pid)
        return False
    return True
