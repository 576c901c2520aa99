"""Type definitions for port reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..process_models import PortBinding


@dataclass(frozen=True)
class PortOwner:
    """A process holding a socket on a reclaimed port."""

    pid: int
    binding: PortBinding
    name: Optional[str] = None


@dataclass
class ReclaimReport:
    """Outcome of a reclaim pass; failures never abort the pass."""

    bindings: List[PortBinding]
    terminated_pids: List[int] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.failures
