"""Helper modules for ReadinessGate."""

from .http_probe import HttpReadinessProbe
from .types import ProbeOutcome, ProbeResult

__all__ = ["HttpReadinessProbe", "ProbeOutcome", "ProbeResult"]
