from devstack.process_models import PortBinding
from devstack.tunnel import TunnelSpec


def test_default_command():
    assert TunnelSpec().command() == "exec kubectl port-forward -n observability svc/otel-collector 14317:4317 14318:4318"


def test_to_process_reclaims_local_ports():
    process = TunnelSpec(namespace="obs", service="svc/collector", port_mappings=((24318, 4318),)).to_process("tunnel")

    assert process.name == "tunnel"
    assert process.command.endswith("-n obs svc/collector 24318:4318")
    assert process.reclaim_ports == (PortBinding(24318),)
    assert process.depends_on == frozenset()
