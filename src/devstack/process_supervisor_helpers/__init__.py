"""Helper modules for ProcessSupervisor."""

from .dependency_waiter import wait_for_dependencies
from .launcher import build_child_env, spawn_process
from .output_relay import OutputRelay
from .shutdown import terminate_running
from .types import ProcessRecord, ProcessState, SupervisorReport

__all__ = [
    "OutputRelay",
    "ProcessRecord",
    "ProcessState",
    "SupervisorReport",
    "build_child_env",
    "spawn_process",
    "terminate_running",
    "wait_for_dependencies",
]
