from __future__ import annotations

import pytest

from devstack.config import ConfigurationError
from devstack.telemetry_environment import TelemetryEnvironment, format_resource_attributes, parse_resource_attributes


def test_defaults_to_env():
    assert TelemetryEnvironment().to_env() == {
        "OTEL_EXPORTER_OTLP_ENDPOINT": "http://localhost:4401",
        "OTEL_EXPORTER_OTLP_PROTOCOL": "http/json",
        "OTEL_SERVICE_NAME": "backstage-dev",
        "OTEL_RESOURCE_ATTRIBUTES": "deployment.environment=development,service.namespace=backstage-dev",
    }


def test_from_env(monkeypatch):
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4318")
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_PROTOCOL", "http/protobuf")
    monkeypatch.setenv("OTEL_RESOURCE_ATTRIBUTES", "team=dx, tier = web")
    monkeypatch.delenv("OTEL_SERVICE_NAME", raising=False)

    telemetry = TelemetryEnvironment.from_env()

    assert telemetry.endpoint == "http://collector:4318"
    assert telemetry.protocol == "http/protobuf"
    assert telemetry.service_name == "backstage-dev"
    assert telemetry.resource_attributes == {"team": "dx", "tier": "web"}


def test_for_service_keeps_other_fields():
    telemetry = TelemetryEnvironment(endpoint="http://x:1").for_service("frontend")

    assert telemetry.service_name == "frontend"
    assert telemetry.endpoint == "http://x:1"


def test_rejects_unknown_protocol():
    with pytest.raises(ConfigurationError, match="OTEL_EXPORTER_OTLP_PROTOCOL"):
        TelemetryEnvironment(protocol="carrier-pigeon")


def test_attribute_parsing():
    assert parse_resource_attributes("a=1,,b=") == {"a": "1", "b": ""}
    assert format_resource_attributes({"a": "1", "b": "2"}) == "a=1,b=2"
    with pytest.raises(ConfigurationError):
        parse_resource_attributes("novalue")
