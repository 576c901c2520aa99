"""OpenTelemetry SDK settings handed explicitly to child processes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Mapping

from .config import ConfigurationError, env_str

DEFAULT_ENDPOINT = "http://localhost:4401"
DEFAULT_PROTOCOL = "http/json"
DEFAULT_SERVICE_NAME = "backstage-dev"
DEFAULT_RESOURCE_ATTRIBUTES = {
    "deployment.environment": "development",
    "service.namespace": "backstage-dev",
}

_SUPPORTED_PROTOCOLS = {"grpc", "http/protobuf", "http/json"}


def parse_resource_attributes(raw: str) -> Dict[str, str]:
    """Parse ``key=value,key=value`` into an ordered mapping."""
    attributes: Dict[str, str] = {}
    for item in raw.split(","):
        entry = item.strip()
        if not entry:
            continue
        key, sep, value = entry.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError.invalid_format("OTEL_RESOURCE_ATTRIBUTES", raw, "comma-separated key=value pairs")
        attributes[key.strip()] = value.strip()
    return attributes


def format_resource_attributes(attributes: Mapping[str, str]) -> str:
    return ",".join(f"{key}={value}" for key, value in attributes.items())


@dataclass(frozen=True)
class TelemetryEnvironment:
    """Where instrumented apps send telemetry and how they identify themselves."""

    endpoint: str = DEFAULT_ENDPOINT
    protocol: str = DEFAULT_PROTOCOL
    service_name: str = DEFAULT_SERVICE_NAME
    resource_attributes: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_RESOURCE_ATTRIBUTES))

    def __post_init__(self) -> None:
        if self.protocol not in _SUPPORTED_PROTOCOLS:
            raise ConfigurationError.invalid_value(
                "OTEL_EXPORTER_OTLP_PROTOCOL", self.protocol, f"Allowed: {', '.join(sorted(_SUPPORTED_PROTOCOLS))}"
            )

    @classmethod
    def from_env(cls) -> "TelemetryEnvironment":
        raw_attributes = env_str("OTEL_RESOURCE_ATTRIBUTES")
        return cls(
            endpoint=env_str("OTEL_EXPORTER_OTLP_ENDPOINT", or_value=DEFAULT_ENDPOINT) or DEFAULT_ENDPOINT,
            protocol=env_str("OTEL_EXPORTER_OTLP_PROTOCOL", or_value=DEFAULT_PROTOCOL) or DEFAULT_PROTOCOL,
            service_name=env_str("OTEL_SERVICE_NAME", or_value=DEFAULT_SERVICE_NAME) or DEFAULT_SERVICE_NAME,
            resource_attributes=(
                parse_resource_attributes(raw_attributes) if raw_attributes else dict(DEFAULT_RESOURCE_ATTRIBUTES)
            ),
        )

    def for_service(self, service_name: str) -> "TelemetryEnvironment":
        return replace(self, service_name=service_name)

    def to_env(self) -> Dict[str, str]:
        return {
            "OTEL_EXPORTER_OTLP_ENDPOINT": self.endpoint,
            "OTEL_EXPORTER_OTLP_PROTOCOL": self.protocol,
            "OTEL_SERVICE_NAME": self.service_name,
            "OTEL_RESOURCE_ATTRIBUTES": format_resource_attributes(self.resource_attributes),
        }


__all__ = [
    "TelemetryEnvironment",
    "format_resource_attributes",
    "parse_resource_attributes",
]
