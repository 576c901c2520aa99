from __future__ import annotations

from devstack.port_reconciler_helpers import find_port_owners
from devstack.process_models import PortBinding, PortProtocol
from tests.helpers.psutil_stub import FakeProcess, build_psutil_stub, make_connection


def test_finds_tcp_listener_and_skips_excluded_pid():
    psutil = build_psutil_stub(
        connections={"tcp": [make_connection(4400, 101), make_connection(4400, 999), make_connection(8080, 102)]},
        processes={101: FakeProcess(101, name="otelcol")},
    )

    owners = find_port_owners([PortBinding(4400)], exclude_pid=999, psutil_module=psutil)

    assert [(owner.pid, owner.name, str(owner.binding)) for owner in owners] == [(101, "otelcol", "4400/tcp")]


def test_matches_non_listening_sockets_on_the_port():
    psutil = build_psutil_stub(connections={"tcp": [make_connection(7007, 55, status="ESTABLISHED")]})

    owners = find_port_owners([PortBinding(7007)], psutil_module=psutil)

    assert [owner.pid for owner in owners] == [55]
    assert owners[0].name is None


def test_udp_bindings_use_udp_table():
    psutil = build_psutil_stub(
        connections={"tcp": [make_connection(4400, 1)], "udp": [make_connection(4400, 2, status="NONE")]}
    )

    owners = find_port_owners([PortBinding(4400, PortProtocol.UDP)], psutil_module=psutil)

    assert [owner.pid for owner in owners] == [2]


def test_falls_back_to_per_process_scan_when_table_denied():
    psutil = build_psutil_stub()

    def denied(kind="inet"):
        raise psutil.AccessDenied()

    proc = FakeProcess(77, name="kubectl")
    proc.net_connections = lambda kind="inet": [make_connection(14317, None)]
    psutil.processes[77] = proc
    psutil.net_connections = denied

    owners = find_port_owners([PortBinding(14317)], psutil_module=psutil)

    assert [owner.pid for owner in owners] == [77]


def test_no_bindings_returns_empty():
    assert find_port_owners([], psutil_module=build_psutil_stub()) == []
