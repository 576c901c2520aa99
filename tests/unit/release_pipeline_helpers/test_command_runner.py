from __future__ import annotations

import pytest

from devstack.errors import StepFailedError, ToolNotFoundError
from devstack.release_pipeline_helpers import CommandRunner


def test_captures_stdout_and_feeds_stdin():
    result = CommandRunner().run("echo", ["cat"], input_text="hello\n", capture=True)

    assert result.returncode == 0
    assert result.stdout == "hello\n"


def test_nonzero_exit_raises_with_returncode():
    with pytest.raises(StepFailedError) as excinfo:
        CommandRunner().run("Failing step", ["sh", "-c", "exit 7"])

    assert excinfo.value.exit_code == 7
    assert "Failing step" in str(excinfo.value)


def test_nonzero_exit_without_check_returns_result():
    result = CommandRunner().run("Tolerated", ["sh", "-c", "exit 4"], check=False, interactive=False)

    assert result.returncode == 4


def test_missing_executable():
    with pytest.raises(ToolNotFoundError) as excinfo:
        CommandRunner().run("Missing", ["devstack-no-such-tool"])

    assert excinfo.value.tool == "devstack-no-such-tool"


def test_runs_in_cwd(tmp_path):
    (tmp_path / "marker.txt").write_text("x")

    result = CommandRunner(cwd=str(tmp_path)).run("ls", ["ls"], capture=True)

    assert "marker.txt" in result.stdout
