from __future__ import annotations

from devstack.port_reconciler_helpers import PortOwner, terminate_port_owner
from devstack.process_models import PortBinding
from tests.helpers.psutil_stub import FakeProcess, build_psutil_stub


def _terminate(psutil, pid=10):
    return terminate_port_owner(
        PortOwner(pid=pid, binding=PortBinding(4400)),
        psutil_module=psutil,
        graceful_timeout=3.0,
        force_timeout=2.0,
    )


def test_graceful_termination():
    proc = FakeProcess(10)
    psutil = build_psutil_stub(processes={10: proc})

    assert _terminate(psutil) is True
    assert proc.terminate_called
    assert not proc.kill_called
    assert proc.wait_calls == [3.0]


def test_escalates_to_kill_after_timeout():
    psutil = build_psutil_stub()
    proc = FakeProcess(10, wait_side_effects=[psutil.TimeoutExpired(), None])
    psutil.processes[10] = proc

    assert _terminate(psutil) is True
    assert proc.kill_called
    assert proc.wait_calls == [3.0, 2.0]


def test_vanished_process_counts_as_stopped():
    assert _terminate(build_psutil_stub(), pid=404) is True


def test_access_denied_reports_failure():
    psutil = build_psutil_stub()
    proc = FakeProcess(10)

    def deny():
        raise psutil.AccessDenied()

    proc.terminate = deny
    psutil.processes[10] = proc

    assert _terminate(psutil) is False


def test_survives_force_kill_timeout_reports_failure():
    psutil = build_psutil_stub()
    proc = FakeProcess(10, wait_side_effects=[psutil.TimeoutExpired(), psutil.TimeoutExpired()])
    psutil.processes[10] = proc

    assert _terminate(psutil) is False
