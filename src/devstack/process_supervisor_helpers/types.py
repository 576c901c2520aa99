"""Runtime state tracked per supervised process."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..process_models import ProcessSpec


class ProcessState(Enum):
    PENDING = "pending"
    WAITING = "waiting"
    STARTING = "starting"
    RUNNING = "running"
    EXITED = "exited"
    FAILED = "failed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({ProcessState.EXITED, ProcessState.FAILED, ProcessState.BLOCKED, ProcessState.CANCELLED})


@dataclass
class ProcessRecord:
    """Mutable lifecycle record; timestamps come from ``time.monotonic``."""

    spec: ProcessSpec
    state: ProcessState = ProcessState.PENDING
    pid: Optional[int] = None
    started_at: Optional[float] = None
    exited_at: Optional[float] = None
    returncode: Optional[int] = None
    blocked_by: Optional[str] = None
    error: Optional[str] = None
    stopped_by_supervisor: bool = False
    process: Optional[asyncio.subprocess.Process] = field(default=None, repr=False)
    started: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    finished: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def succeeded(self) -> bool:
        return self.state is ProcessState.EXITED and self.returncode == 0

    def mark_terminal(self, state: ProcessState, *, error: Optional[str] = None) -> None:
        """Settle a record that will never (or no longer) run."""
        self.state = state
        if error:
            self.error = error
        self.started.set()
        self.finished.set()


@dataclass
class SupervisorReport:
    records: Dict[str, ProcessRecord]
    stop_requested: bool = False

    @property
    def blocked(self) -> List[str]:
        return [name for name, rec in self.records.items() if rec.state is ProcessState.BLOCKED]

    @property
    def failed(self) -> List[str]:
        failed = []
        for name, rec in self.records.items():
            if rec.state is ProcessState.FAILED:
                failed.append(name)
            elif rec.state is ProcessState.EXITED and rec.returncode != 0 and not rec.stopped_by_supervisor:
                failed.append(name)
        return failed

    @property
    def succeeded(self) -> bool:
        return not self.failed and not self.blocked
