"""
Process Supervisor

Starts a declared set of named processes honoring their ``depends_on``
conditions, relays their output into one tagged log stream, and tears every
started process group down on stop or signal.

Usage:
    supervisor = ProcessSupervisor(specs, telemetry_env=TelemetryEnvironment())
    report = await supervisor.run()
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import time
from pathlib import Path
from typing import IO, Callable, Dict, List, Mapping, Optional, Sequence

from . import dependency_graph
from .port_reconciler import PortReconciler
from .process_models import HealthCheckSpec, ProcessSpec
from .process_supervisor_helpers import (
    OutputRelay,
    ProcessRecord,
    ProcessState,
    SupervisorReport,
    build_child_env,
    spawn_process,
    terminate_running,
    wait_for_dependencies,
)
from .readiness_gate import ReadinessGate
from .telemetry_environment import TelemetryEnvironment

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_GRACE_SECONDS = 10.0
_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)

ReadinessGateFactory = Callable[[HealthCheckSpec, str], ReadinessGate]


def _default_gate_factory(spec: HealthCheckSpec, name: str) -> ReadinessGate:
    return ReadinessGate(spec, name=name)


class ProcessSupervisor:
    """Coordinates the lifecycle of every declared process."""

    def __init__(
        self,
        specs: Sequence[ProcessSpec],
        *,
        base_env: Optional[Mapping[str, str]] = None,
        telemetry_env: Optional[TelemetryEnvironment] = None,
        port_reconciler: Optional[PortReconciler] = None,
        readiness_gate_factory: Optional[ReadinessGateFactory] = None,
        log_dir: Optional[Path] = None,
        shutdown_grace_seconds: float = DEFAULT_SHUTDOWN_GRACE_SECONDS,
        install_signal_handlers: bool = True,
    ):
        """
        Validate declarations and prepare runtime records.

        Raises:
            ConfigurationError: Duplicate or unknown process names
            DependencyCycleError: Cyclic ``depends_on`` declarations
        """
        self.specs = list(specs)
        self.start_order = dependency_graph.validate(self.specs)
        self.base_env = dict(os.environ if base_env is None else base_env)
        self.telemetry_env = telemetry_env
        self.port_reconciler = port_reconciler or PortReconciler()
        self.readiness_gate_factory = readiness_gate_factory or _default_gate_factory
        self.log_dir = Path(log_dir) if log_dir else None
        self.shutdown_grace_seconds = shutdown_grace_seconds
        self.install_signal_handlers = install_signal_handlers

        self.records: Dict[str, ProcessRecord] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._log_handles: List[IO[str]] = []
        self._stop_event: Optional[asyncio.Event] = None
        self._stop_requested = False
        self._label_width = max((len(spec.name) for spec in self.specs), default=0)

    def request_stop(self) -> None:
        """Ask a running supervisor to terminate every child and return."""
        if self._stop_requested:
            return
        self._stop_requested = True
        logger.info("Stop requested; shutting down supervised processes")
        if self._stop_event is not None:
            self._stop_event.set()

    async def run(self) -> SupervisorReport:
        """Start everything, wait for completion or stop, and report per-process outcomes."""
        indexed = dependency_graph.index_specs(self.specs)
        self.records = {name: ProcessRecord(spec=indexed[name]) for name in self.start_order}
        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()

        loop = asyncio.get_running_loop()
        installed = self._install_signal_handlers(loop)
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        logger.info("Starting %d process(es) in order: %s", len(self.records), ", ".join(self.start_order))
        try:
            self._tasks = {name: asyncio.create_task(self._run_one(rec), name=f"devstack:{name}") for name, rec in self.records.items()}
            all_done = asyncio.ensure_future(asyncio.gather(*self._tasks.values(), return_exceptions=True))
            stop_waiter = asyncio.ensure_future(self._stop_event.wait())
            await asyncio.wait({all_done, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)

            if not all_done.done():
                await self._shutdown()
            stop_waiter.cancel()
            results = await all_done
            self._log_unexpected(results)
        except asyncio.CancelledError:
            self.request_stop()
            await self._shutdown()
            raise
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            self._close_log_handles()

        report = SupervisorReport(records=dict(self.records), stop_requested=self._stop_requested)
        self._log_summary(report)
        return report

    async def _run_one(self, record: ProcessRecord) -> None:
        spec = record.spec
        try:
            record.state = ProcessState.WAITING
            blocker = await wait_for_dependencies(record, self.records)
            if blocker is not None:
                record.blocked_by = blocker
                logger.error("Not starting %s: dependency %s", spec.name, blocker)
                record.mark_terminal(ProcessState.BLOCKED)
                return
            if self._stop_requested:
                record.mark_terminal(ProcessState.CANCELLED)
                return

            record.state = ProcessState.STARTING
            if spec.reclaim_ports:
                await self.port_reconciler.reclaim(spec.reclaim_ports)
            if spec.readiness is not None:
                await self.readiness_gate_factory(spec.readiness, spec.name).wait()
            if self._stop_requested:
                record.mark_terminal(ProcessState.CANCELLED)
                return

            await self._start_and_wait(record)
        except (OSError, RuntimeError) as exc:
            logger.error("Cannot start %s: %s", spec.name, exc)
            record.mark_terminal(ProcessState.FAILED, error=str(exc))
        except asyncio.CancelledError:
            if not record.is_terminal:
                record.mark_terminal(ProcessState.CANCELLED)
            raise

    async def _start_and_wait(self, record: ProcessRecord) -> None:
        spec = record.spec
        env = build_child_env(spec, self.base_env, self.telemetry_env)
        try:
            process = await spawn_process(spec, env)
        except OSError as exc:
            logger.error("Failed to start %s: %s", spec.name, exc)
            record.mark_terminal(ProcessState.FAILED, error=str(exc))
            return

        record.process = process
        record.pid = process.pid
        record.started_at = time.monotonic()
        record.state = ProcessState.RUNNING
        record.started.set()
        logger.info("Started %s (PID %s)", spec.name, process.pid)

        log_handle = self._open_log(spec.name)
        relays = [
            OutputRelay(spec.name, stream, label_width=self._label_width, log_handle=log_handle)
            for stream in (process.stdout, process.stderr)
            if stream is not None
        ]
        relay_tasks = [asyncio.create_task(relay.run()) for relay in relays]

        returncode = await process.wait()
        if relay_tasks:
            await asyncio.gather(*relay_tasks, return_exceptions=True)

        record.exited_at = time.monotonic()
        record.returncode = returncode
        record.state = ProcessState.EXITED
        record.finished.set()
        if returncode == 0 or record.stopped_by_supervisor:
            logger.info("%s exited with code %s", spec.name, returncode)
        else:
            logger.error("%s exited with code %s", spec.name, returncode)

    async def _shutdown(self) -> None:
        for name, task in self._tasks.items():
            record = self.records[name]
            if record.process is None and not task.done():
                task.cancel()
        await terminate_running(self.records.values(), self.shutdown_grace_seconds)


    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> List[signal.Signals]:
        if not self.install_signal_handlers:
            return []
        installed = []
        for sig in _STOP_SIGNALS:
            try:
                loop.add_signal_handler(sig, self.request_stop)
            except (NotImplementedError, RuntimeError, ValueError) as exc:  # policy_guard: allow-silent-handler
                logger.debug("Cannot install handler for %s: %s", sig.name, exc)
                continue
            installed.append(sig)
        return installed

    def _open_log(self, name: str) -> Optional[IO[str]]:
        if self.log_dir is None:
            return None
        handle = open(self.log_dir / f"{name}.log", "a", encoding="utf-8")
        self._log_handles.append(handle)
        return handle

    def _close_log_handles(self) -> None:
        while self._log_handles:
            self._log_handles.pop().close()

    def _log_unexpected(self, results: Sequence[object]) -> None:
        for name, result in zip(self._tasks, results):
            if isinstance(result, BaseException) and not isinstance(result, asyncio.CancelledError):
                logger.error("Supervision of %s failed: %s", name, result, exc_info=result)
                record = self.records[name]
                if not record.is_terminal:
                    record.mark_terminal(ProcessState.FAILED, error=str(result))

    def _log_summary(self, report: SupervisorReport) -> None:
        for name, record in report.records.items():
            logger.info("  %-*s %s%s", self._label_width, name, record.state.value, _detail(record))
        if report.blocked:
            logger.error("Blocked processes: %s", ", ".join(report.blocked))
        if report.failed:
            logger.error("Failed processes: %s", ", ".join(report.failed))


def _detail(record: ProcessRecord) -> str:
    if record.returncode is not None:
        return f" (code {record.returncode})"
    if record.blocked_by:
        return f" ({record.blocked_by})"
    if record.error:
        return f" ({record.error})"
    return ""


__all__ = [
    "ProcessRecord",
    "ProcessState",
    "ProcessSupervisor",
    "ReadinessGateFactory",
    "SupervisorReport",
]
