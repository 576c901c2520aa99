from devstack.errors import DevstackError, StepFailedError, ToolNotFoundError, UpstreamUnavailableError, UsageError


def test_usage_error_carries_hint():
    exc = UsageError("VERSION is required", usage_hint="Run 'devstack build-push --help' for usage")

    assert exc.exit_code == 1
    assert exc.usage_hint.startswith("Run ")


def test_step_failed_propagates_returncode():
    exc = StepFailedError("Pushing image", 125, ["docker", "push", "img:1"])

    assert exc.exit_code == 125
    assert str(exc) == "Step 'Pushing image' failed with exit code 125: docker push img:1"


def test_step_failed_without_code_still_fails():
    assert StepFailedError("odd", 0).exit_code == 1


def test_tool_not_found_message():
    exc = ToolNotFoundError("kargo", "Install kargo CLI")

    assert str(exc) == "kargo CLI not found\nInstall kargo CLI"
    assert isinstance(exc, DevstackError)


def test_upstream_unavailable():
    exc = UpstreamUnavailableError("http://localhost:14318/v1/logs", reason="HTTP 503: busy", status=503)

    assert exc.status == 503
    assert "unavailable: HTTP 503" in str(exc)
