from __future__ import annotations

import pytest

from devstack.errors import DevstackError, StepFailedError
from devstack.release_pipeline_helpers import (
    CREDENTIALS_COMMAND,
    ReleaseOptions,
    extract_password,
    login_to_registry,
)
from tests.helpers.recording_runner import RecordingRunner

OPTIONS = ReleaseOptions(version="1.0.0")
HOST = OPTIONS.registry_host


def test_extract_password_from_list_or_object():
    assert extract_password('[{"username": "giteaAdmin", "password": "s3cret"}]') == "s3cret"
    assert extract_password('{"password": "s3cret"}') == "s3cret"


@pytest.mark.parametrize("raw", ["", "not json", "[]", '[{"username": "x"}]'])
def test_extract_password_rejects_unusable_output(raw):
    with pytest.raises(DevstackError):
        extract_password(raw)


def test_login_with_idpbuilder_pipes_password_on_stdin():
    runner = RecordingRunner(outputs={tuple(CREDENTIALS_COMMAND): '[{"password": "s3cret"}]'})

    used_idpbuilder = login_to_registry(OPTIONS, runner, which=lambda tool: f"/usr/bin/{tool}")

    assert used_idpbuilder
    assert runner.calls == [
        CREDENTIALS_COMMAND,
        ["docker", "login", "-u", "giteaAdmin", "--password-stdin", HOST],
    ]
    assert runner.inputs[1] == "s3cret\n"
    assert all("s3cret" not in arg for call in runner.calls for arg in call)


def test_without_idpbuilder_warns_and_tolerates_login_failure(caplog):
    runner = RecordingRunner(failures={("docker", "login", HOST): 1})

    used_idpbuilder = login_to_registry(OPTIONS, runner, which=lambda tool: None)

    assert not used_idpbuilder
    assert runner.calls == [["docker", "login", HOST]]
    assert "idpbuilder not found" in caplog.text


def test_idpbuilder_failure_propagates():
    runner = RecordingRunner(failures={tuple(CREDENTIALS_COMMAND): 3})

    with pytest.raises(StepFailedError) as excinfo:
        login_to_registry(OPTIONS, runner, which=lambda tool: "/usr/bin/idpbuilder")

    assert excinfo.value.exit_code == 3
