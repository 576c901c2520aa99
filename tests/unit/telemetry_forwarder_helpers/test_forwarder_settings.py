from __future__ import annotations

import pytest

from devstack.config import ConfigurationError
from devstack.telemetry_forwarder_helpers import ForwarderSettings, get_forwarder_settings


def test_defaults():
    settings = get_forwarder_settings()

    assert settings.framed_port == 4400
    assert settings.http_port == 4401
    assert settings.upstream_endpoint == "http://localhost:14318"
    assert settings.batch_size == 1000
    assert settings.batch_timeout == 5.0
    assert settings.max_frame_bytes == 4 * 1024 * 1024
    assert settings.resource_attributes == {
        "deployment.environment": "development",
        "service.namespace": "backstage-dev",
    }


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DEVSTACK_FORWARDER_BATCH_SIZE", "10")
    monkeypatch.setenv("DEVSTACK_FORWARDER_UPSTREAM", "http://collector:4318/")
    monkeypatch.setenv("DEVSTACK_FORWARDER_DEBUG_VERBOSITY", "detailed")
    monkeypatch.setenv("DEVSTACK_FORWARDER_RESOURCE_ATTRIBUTES", "team=portal")

    settings = get_forwarder_settings()

    assert settings.batch_size == 10
    assert settings.upstream_endpoint == "http://collector:4318"
    assert settings.debug_verbosity == "detailed"
    assert settings.resource_attributes == {"team": "portal"}


def test_rejects_unknown_verbosity():
    with pytest.raises(ConfigurationError):
        ForwarderSettings(debug_verbosity="verbose")
