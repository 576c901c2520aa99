"""Locate processes bound to local ports via psutil's connection tables."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..process_models import PortBinding
from .types import PortOwner

logger = logging.getLogger(__name__)


def load_psutil() -> Any:
    """Import psutil or raise a helpful error."""
    try:
        import psutil
    except ImportError as import_exc:
        raise RuntimeError("psutil is required to reclaim ports but is not installed") from import_exc
    return psutil


def find_port_owners(
    bindings: Iterable[PortBinding],
    *,
    exclude_pid: Optional[int] = None,
    psutil_module: Any = None,
) -> List[PortOwner]:
    """Return one owner entry per (pid, binding) pair currently holding a socket on a binding."""
    psutil = psutil_module or load_psutil()
    wanted: Dict[tuple[int, str], PortBinding] = {(b.port, b.protocol.value): b for b in bindings}
    if not wanted:
        return []

    owners: Dict[tuple[int, PortBinding], PortOwner] = {}
    for protocol in sorted({key[1] for key in wanted}):
        for conn in _connections(psutil, protocol):
            binding = wanted.get((_local_port(conn), protocol))
            pid = getattr(conn, "pid", None)
            if binding is None or pid is None or pid == exclude_pid:
                continue
            owners.setdefault((pid, binding), PortOwner(pid=pid, binding=binding, name=_process_name(psutil, pid)))

    return list(owners.values())


def _connections(psutil: Any, kind: str) -> List[Any]:
    try:
        return list(psutil.net_connections(kind=kind))
    except psutil.AccessDenied:  # policy_guard: allow-silent-handler
        # macOS refuses the system-wide table to unprivileged users
        logger.debug("System-wide %s connection table denied; scanning per process", kind)
        return _per_process_connections(psutil, kind)


def _per_process_connections(psutil: Any, kind: str) -> List[Any]:
    found: List[Any] = []
    for proc in psutil.process_iter(["pid"]):
        reader = getattr(proc, "net_connections", None) or getattr(proc, "connections", None)
        if reader is None:
            continue
        try:
            for conn in reader(kind=kind):
                found.append(_with_pid(conn, proc.pid))
        except (psutil.AccessDenied, psutil.NoSuchProcess):  # policy_guard: allow-silent-handler
            continue
    return found


class _PidConnection:
    def __init__(self, conn: Any, pid: int) -> None:
        self.laddr = getattr(conn, "laddr", None)
        self.status = getattr(conn, "status", None)
        self.pid = pid


def _with_pid(conn: Any, pid: int) -> Any:
    if getattr(conn, "pid", None) is not None:
        return conn
    return _PidConnection(conn, pid)


def _local_port(conn: Any) -> Optional[int]:
    laddr = getattr(conn, "laddr", None)
    if not laddr:
        return None
    port = getattr(laddr, "port", None)
    if port is None and isinstance(laddr, tuple) and len(laddr) >= 2:
        port = laddr[1]
    return port


def _process_name(psutil: Any, pid: int) -> Optional[str]:
    try:
        return psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied):  # policy_guard: allow-silent-handler
        return None
