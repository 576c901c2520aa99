from __future__ import annotations

import importlib
from unittest.mock import AsyncMock, MagicMock, patch

import orjson
import pytest

from devstack import __version__, cli
from devstack.errors import StepFailedError


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("devstack.cli.setup_logging"):
        yield


def _write_stack(tmp_path, processes):
    path = tmp_path / "stack.json"
    path.write_bytes(orjson.dumps({"processes": processes}))
    return str(path)


class TestParser:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--version"])

        assert excinfo.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_command_required(self, capsys):
        assert cli.main([]) == 1
        assert "required" in capsys.readouterr().err

    def test_unknown_flag_exits_one(self, capsys):
        assert cli.main(["up", "--bogus"]) == 1

        err = capsys.readouterr().err
        assert "--bogus" in err
        assert "devstack --help" in err

    def test_missing_positional_exits_one(self):
        assert cli.main(["wait-ready"]) == 1

    def test_bad_option_type_exits_one(self):
        assert cli.main(["up", "--grace", "soon"]) == 1

    def test_up_options(self):
        args = cli.build_parser().parse_args(["up", "--stack", "s.json", "--log-dir", "logs", "--grace", "3"])

        assert (args.stack, args.log_dir, args.grace) == ("s.json", "logs", 3.0)


class TestUp:
    def test_successful_stack_exits_zero(self, tmp_path):
        stack = _write_stack(tmp_path, {"first": "true", "second": {"command": "true", "depends_on": ["first"]}})

        assert cli.main(["up", "--stack", stack]) == 0

    def test_failed_process_exits_one(self, tmp_path):
        stack = _write_stack(tmp_path, {"first": "exit 3", "second": {"command": "true", "depends_on": ["first"]}})

        assert cli.main(["up", "--stack", stack]) == 1

    def test_invalid_stack_is_configuration_error(self, tmp_path):
        stack = _write_stack(tmp_path, {"a": {"command": "true", "depends_on": ["a"]}})

        assert cli.main(["up", "--stack", stack]) == 1


class TestCommands:
    def test_script_passes_extra_args(self):
        with patch("devstack.cli.run_script") as run_script:
            assert cli.main(["docker-run", "extra"]) == 0

        run_script.assert_called_once_with("docker-run", ["extra"])

    def test_script_failure_exit_code(self):
        with patch("devstack.cli.run_script", side_effect=StepFailedError("build step 1", 4, ["npx", "nx"])):
            assert cli.main(["build"]) == 4

    def test_build_push_usage_error_exits_one(self, capsys):
        assert cli.main(["build-push"]) == 1
        assert "VERSION is required" in capsys.readouterr().err

    def test_build_push_help(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["build-push", "--help"])

        assert excinfo.value.code == 0

    def test_doctor_reports_missing_tools(self):
        with patch("devstack.cli.check_tools", return_value={"git": "/usr/bin/git", "kubectl": None}):
            assert cli.main(["doctor"]) == 1
        with patch("devstack.cli.check_tools", return_value={"git": "/usr/bin/git"}):
            assert cli.main(["doctor"]) == 0

    def test_doctor_tool_list_from_environment(self, monkeypatch):
        monkeypatch.setenv("DEVSTACK_DOCTOR_TOOLS", "git,kargo")
        with patch("devstack.cli.check_tools", return_value={"git": "/usr/bin/git", "kargo": "/usr/bin/kargo"}) as check_tools:
            assert cli.main(["doctor"]) == 0

        check_tools.assert_called_once_with(("git", "kargo"))

    def test_info_prints_banner(self, capsys):
        with patch("devstack.cli.render_banner", return_value="=== banner ==="):
            assert cli.main(["info"]) == 0

        assert capsys.readouterr().out.strip() == "=== banner ==="

    def test_reclaim_ports_invalid_port(self):
        assert cli.main(["reclaim-ports", "http"]) == 1

    def test_reclaim_ports_delegates(self):
        reconciler = MagicMock()
        with patch("devstack.cli.PortReconciler", return_value=reconciler):
            assert cli.main(["reclaim-ports", "4400", "4401/tcp"]) == 0

        bindings = reconciler.reclaim_sync.call_args.args[0]
        assert [str(binding) for binding in bindings] == ["4400/tcp", "4401/tcp"]

    def test_keyboard_interrupt(self):
        with patch("devstack.cli.run_script", side_effect=KeyboardInterrupt):
            assert cli.main(["nx-graph"]) == 130

    def test_forward_bind_failure_exits_one(self):
        forwarder = MagicMock()
        forwarder.serve_forever = AsyncMock(side_effect=OSError(98, "Address already in use"))
        with patch("devstack.cli.TelemetryForwarder", return_value=forwarder):
            assert cli.main(["forward"]) == 1


class TestImports:
    @pytest.mark.parametrize(
        "module",
        [
            "devstack.process_supervisor",
            "devstack.process_supervisor_helpers.launcher",
            "devstack.process_supervisor_helpers.dependency_waiter",
            "devstack.release_pipeline",
            "devstack.release_pipeline_helpers.command_runner",
            "devstack.release_pipeline_helpers.registry_login",
            "devstack.project_scripts",
            "devstack.shell_banner",
        ],
    )
    def test_helper_packages_import(self, module):
        assert importlib.import_module(module).__name__ == module
