"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from devstack.config import reset_default_values
from devstack.release_pipeline_helpers import get_release_defaults
from devstack.telemetry_forwarder_helpers import get_forwarder_settings
from tests.helpers.psutil_stub import build_psutil_stub
from tests.helpers.recording_runner import RecordingRunner


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Run each test away from any developer .env file and with fresh settings caches."""
    monkeypatch.chdir(tmp_path)
    for name in ("DEVSTACK_MANAGED", "DEVSTACK_LOG_DIR", "DEVSTACK_LOG_LEVEL", "DEVSTACK_STACK_FILE", "DEVSTACK_DOCTOR_TOOLS", "LOG_APPEND"):
        monkeypatch.delenv(name, raising=False)
    reset_default_values()
    get_forwarder_settings.cache_clear()
    get_release_defaults.cache_clear()
    yield
    reset_default_values()
    get_forwarder_settings.cache_clear()
    get_release_defaults.cache_clear()


@pytest.fixture
def psutil_stub():
    return build_psutil_stub()


@pytest.fixture
def recording_runner():
    return RecordingRunner()
