"""Declarative process, port and health-check definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple, Union

from .config.errors import ConfigurationError

MIN_PORT = 1
MAX_PORT = 65535


class CompletionCondition(Enum):
    """Condition a dependency must reach before its dependent may start."""

    PROCESS_COMPLETED_SUCCESSFULLY = "process_completed_successfully"
    PROCESS_COMPLETED = "process_completed"
    PROCESS_STARTED = "process_started"

    @classmethod
    def parse(cls, raw: Union[str, "CompletionCondition"]) -> "CompletionCondition":
        if isinstance(raw, CompletionCondition):
            return raw
        try:
            return cls(str(raw).strip())
        except ValueError as exc:
            allowed = ", ".join(member.value for member in cls)
            raise ConfigurationError.invalid_value("condition", raw, f"Allowed: {allowed}") from exc


class PortProtocol(Enum):
    TCP = "tcp"
    UDP = "udp"


@dataclass(frozen=True)
class PortBinding:
    """A local port that must be free before a listener starts."""

    port: int
    protocol: PortProtocol = PortProtocol.TCP

    def __post_init__(self) -> None:
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigurationError.invalid_value("port", self.port, "Port must be an integer")
        if not MIN_PORT <= self.port <= MAX_PORT:
            raise ConfigurationError.invalid_value("port", self.port, f"Port must be within {MIN_PORT}-{MAX_PORT}")

    @classmethod
    def parse(cls, raw: Union[str, int, "PortBinding"]) -> "PortBinding":
        """Parse ``4400``, ``"4400"`` or ``"4400/udp"``."""
        if isinstance(raw, PortBinding):
            return raw
        if isinstance(raw, int) and not isinstance(raw, bool):
            return cls(raw)
        text = str(raw).strip()
        port_text, _, proto_text = text.partition("/")
        try:
            port = int(port_text)
        except ValueError as exc:
            raise ConfigurationError.invalid_format("port", text, "PORT or PORT/tcp or PORT/udp") from exc
        try:
            protocol = PortProtocol(proto_text.lower()) if proto_text else PortProtocol.TCP
        except ValueError as exc:
            raise ConfigurationError.invalid_format("port", text, "PORT or PORT/tcp or PORT/udp") from exc
        return cls(port, protocol)

    def __str__(self) -> str:
        return f"{self.port}/{self.protocol.value}"


@dataclass(frozen=True)
class HealthCheckSpec:
    """Polled readiness probe gating a process start."""

    url: str
    expected_field: str = "status"
    expected_value: str = "ok"
    poll_interval: float = 5.0
    request_timeout: float = 5.0
    verify_tls: bool = False

    def __post_init__(self) -> None:
        if not self.url:
            raise ConfigurationError.missing_value("readiness.url")
        if self.poll_interval < 0:
            raise ConfigurationError.invalid_value("readiness.poll_interval", self.poll_interval, "Must be non-negative")
        if self.request_timeout <= 0:
            raise ConfigurationError.invalid_value("readiness.request_timeout", self.request_timeout, "Must be positive")


@dataclass(frozen=True)
class Dependency:
    name: str
    condition: CompletionCondition = CompletionCondition.PROCESS_COMPLETED_SUCCESSFULLY


@dataclass(frozen=True)
class ProcessSpec:
    """A named child process and its start constraints."""

    name: str
    command: str
    depends_on: FrozenSet[Dependency] = field(default_factory=frozenset)
    env: Dict[str, str] = field(default_factory=dict, hash=False, compare=False)
    working_dir: Optional[str] = None
    reclaim_ports: Tuple[PortBinding, ...] = ()
    readiness: Optional[HealthCheckSpec] = None
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str):
            raise ConfigurationError.missing_value("process name")
        if not self.command or not str(self.command).strip():
            raise ConfigurationError.missing_value("command", f"process {self.name!r}")

    @property
    def dependency_names(self) -> FrozenSet[str]:
        return frozenset(dep.name for dep in self.depends_on)


__all__ = [
    "CompletionCondition",
    "Dependency",
    "HealthCheckSpec",
    "PortBinding",
    "PortProtocol",
    "ProcessSpec",
]
