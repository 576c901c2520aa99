"""Signal kinds and per-resource telemetry records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class Signal(Enum):
    TRACES = "traces"
    METRICS = "metrics"
    LOGS = "logs"

    @property
    def code(self) -> int:
        return _SIGNAL_CODES[self]

    @property
    def resource_key(self) -> str:
        """Top-level OTLP/JSON key holding resource entries for this signal."""
        return _RESOURCE_KEYS[self]

    @property
    def scope_key(self) -> str:
        return _SCOPE_KEYS[self]

    @property
    def item_key(self) -> str:
        return _ITEM_KEYS[self]

    @classmethod
    def from_code(cls, code: int) -> "Signal":
        for signal, value in _SIGNAL_CODES.items():
            if value == code:
                return signal
        raise ValueError(f"Unknown signal code {code}")


_SIGNAL_CODES = {Signal.TRACES: 1, Signal.METRICS: 2, Signal.LOGS: 3}
_RESOURCE_KEYS = {Signal.TRACES: "resourceSpans", Signal.METRICS: "resourceMetrics", Signal.LOGS: "resourceLogs"}
_SCOPE_KEYS = {Signal.TRACES: "scopeSpans", Signal.METRICS: "scopeMetrics", Signal.LOGS: "scopeLogs"}
_ITEM_KEYS = {Signal.TRACES: "spans", Signal.METRICS: "metrics", Signal.LOGS: "logRecords"}


@dataclass
class TelemetryRecord:
    """
    One OTLP resource entry.

    ``resource`` is the OTLP ``resource`` object (``{"attributes": [...]}``);
    ``body`` holds the remaining keys of the entry (scope lists, schemaUrl).
    """

    signal: Signal
    resource: Dict[str, Any]
    body: Dict[str, Any]
    received_at: float = field(default=0.0)

    @property
    def item_count(self) -> int:
        count = 0
        for scope in self.body.get(self.signal.scope_key) or []:
            if isinstance(scope, dict):
                count += len(scope.get(self.signal.item_key) or [])
        return count

    def to_resource_entry(self) -> Dict[str, Any]:
        entry = {"resource": self.resource}
        entry.update(self.body)
        return entry
