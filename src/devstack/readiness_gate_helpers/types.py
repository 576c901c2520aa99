"""Type definitions for readiness probing."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ProbeOutcome(Enum):
    """Classification of a single readiness poll"""

    READY = "ready"
    NOT_READY = "not_ready"
    CONNECTION_ERROR = "connection_error"


@dataclass(frozen=True)
class ProbeResult:
    """Single readiness poll result"""

    outcome: ProbeOutcome
    status: Optional[int] = None
    detail: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.outcome is ProbeOutcome.READY
