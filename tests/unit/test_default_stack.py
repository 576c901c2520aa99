from __future__ import annotations

import shlex
import sys
from pathlib import Path

from devstack.default_stack import BACKEND_READINESS_URL, build_default_stack
from devstack.dependency_graph import validate
from devstack.process_models import CompletionCondition, Dependency, PortBinding


def _by_name(stack):
    return {spec.name: spec for spec in stack.processes}


def test_declares_expected_processes_in_valid_order():
    stack = build_default_stack(Path("/work"))

    assert stack.names == ["otel-cleanup", "opentelemetry-collector", "otel-forward", "devspace", "frontend"]
    order = validate(stack.processes)
    assert sorted(order) == sorted(stack.names)
    assert order.index("otel-cleanup") < order.index("opentelemetry-collector")


def test_collector_waits_for_successful_cleanup():
    processes = _by_name(build_default_stack(Path("/work")))

    assert processes["opentelemetry-collector"].depends_on == frozenset(
        {Dependency("otel-cleanup", CompletionCondition.PROCESS_COMPLETED_SUCCESSFULLY)}
    )
    assert processes["otel-cleanup"].command == f"{shlex.quote(sys.executable)} -m devstack reclaim-ports 4400/tcp 4401/tcp"


def test_port_reclaims_and_readiness():
    processes = _by_name(build_default_stack(Path("/work")))

    assert processes["otel-forward"].reclaim_ports == (PortBinding(14317), PortBinding(14318))
    assert processes["devspace"].reclaim_ports == (PortBinding(7007),)
    assert processes["frontend"].readiness.url == BACKEND_READINESS_URL
    assert processes["frontend"].depends_on == frozenset()


def test_telemetry_points_at_local_forwarder():
    assert build_default_stack().telemetry.endpoint == "http://localhost:4401"
