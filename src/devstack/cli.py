"""Command-line entry point: ``devstack <command>``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence

from . import __version__
from .config import ConfigurationError, env_list
from .errors import DevstackError, StepFailedError, ToolNotFoundError, UsageError
from .logging_config import setup_logging
from .port_reconciler import PortReconciler, parse_bindings
from .process_models import HealthCheckSpec
from .process_supervisor import ProcessSupervisor
from .project_scripts import SCRIPTS, run_script
from .readiness_gate import ReadinessGate
from .release_pipeline import main as release_main
from .shell_banner import render_banner
from .stack_config import load_stack
from .telemetry_forwarder import TelemetryForwarder
from .tool_check import DOCTOR_TOOLS, check_tools

logger = logging.getLogger("devstack.cli")

RELEASE_COMMAND = "build-push"
INTERRUPTED_EXIT_CODE = 130


class _UsageRaisingParser(argparse.ArgumentParser):
    """Subcommand parsers inherit this class, so every usage error exits 1 instead of 2."""

    def error(self, message: str):  # type: ignore[override]
        raise UsageError(message, usage_hint="Run 'devstack --help' for usage")


def build_parser() -> argparse.ArgumentParser:
    parser = _UsageRaisingParser(prog="devstack", description="Local development environment orchestration")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    up = commands.add_parser("up", help="Start every process of the stack")
    up.add_argument("--stack", metavar="FILE", help="Stack declaration (default: $DEVSTACK_STACK_FILE or config/devstack.json)")
    up.add_argument("--log-dir", metavar="DIR", help="Also write each process's output to DIR/<name>.log")
    up.add_argument("--grace", type=float, default=10.0, help="Seconds to wait after SIGTERM before SIGKILL")

    for script in SCRIPTS.values():
        script_parser = commands.add_parser(script.name, help=script.description)
        script_parser.add_argument("args", nargs="*", help="Extra arguments for the final step")

    commands.add_parser(RELEASE_COMMAND, help="Build and push the backend image (see build-push --help)", add_help=False)
    commands.add_parser("forward", help="Run the local telemetry forwarder")

    wait_ready = commands.add_parser("wait-ready", help="Block until a health endpoint reports ready")
    wait_ready.add_argument("url")
    wait_ready.add_argument("--field", default="status")
    wait_ready.add_argument("--value", default="ok")
    wait_ready.add_argument("--interval", type=float, default=5.0)
    wait_ready.add_argument("--timeout", type=float, default=5.0, help="Per-request timeout in seconds")
    wait_ready.add_argument("--verify-tls", action="store_true")

    reclaim = commands.add_parser("reclaim-ports", help="Terminate whatever holds the given local ports")
    reclaim.add_argument("ports", nargs="+", metavar="PORT[/PROTO]")

    commands.add_parser("info", help="Show the environment summary")
    commands.add_parser("doctor", help="Check that required external tools are installed")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args_list: List[str] = list(sys.argv[1:] if argv is None else argv)

    # build-push owns its argument grammar (unknown flags exit 1, not argparse's 2)
    if args_list and args_list[0] == RELEASE_COMMAND:
        setup_logging(user_friendly=True)
        return release_main(args_list[1:])

    try:
        return _dispatch(build_parser().parse_args(args_list))
    except KeyboardInterrupt:
        return INTERRUPTED_EXIT_CODE
    except (ToolNotFoundError, UsageError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if isinstance(exc, UsageError) and exc.usage_hint:
            print(exc.usage_hint, file=sys.stderr)
        return exc.exit_code
    except StepFailedError as exc:
        logger.error("%s", exc)
        return exc.exit_code
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return exc.exit_code
    except DevstackError as exc:
        logger.error("%s", exc)
        return exc.exit_code
    except OSError as exc:
        logger.error("%s", exc)
        return 1


def _dispatch(args: argparse.Namespace) -> int:
    command = args.command
    if command == "up":
        return _run_up(args)
    if command == "forward":
        setup_logging(service_name="otel-forwarder")
        asyncio.run(TelemetryForwarder().serve_forever())
        return 0
    if command == "wait-ready":
        setup_logging(user_friendly=True)
        spec = HealthCheckSpec(
            url=args.url,
            expected_field=args.field,
            expected_value=args.value,
            poll_interval=args.interval,
            request_timeout=args.timeout,
            verify_tls=args.verify_tls,
        )
        asyncio.run(ReadinessGate(spec).wait())
        return 0
    if command == "reclaim-ports":
        setup_logging(user_friendly=True)
        PortReconciler().reclaim_sync(parse_bindings(args.ports))
        return 0
    if command == "info":
        print(render_banner())
        return 0
    if command == "doctor":
        setup_logging(user_friendly=True)
        status = check_tools(env_list("DEVSTACK_DOCTOR_TOOLS", or_value=DOCTOR_TOOLS) or DOCTOR_TOOLS)
        return 0 if all(status.values()) else 1
    if command in SCRIPTS:
        setup_logging(user_friendly=True)
        run_script(command, args.args)
        return 0
    raise UsageError(f"Unknown command: {command}")


def _run_up(args: argparse.Namespace) -> int:
    setup_logging(service_name="devstack")
    stack = load_stack(args.stack)
    logger.info("Using stack %s: %s", stack.source, ", ".join(stack.names))
    supervisor = ProcessSupervisor(
        stack.processes,
        telemetry_env=stack.telemetry,
        log_dir=args.log_dir,
        shutdown_grace_seconds=args.grace,
    )
    report = asyncio.run(supervisor.run())
    return 0 if report.succeeded else 1


__all__ = ["build_parser", "main"]
