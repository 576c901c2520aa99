"""Built-in stack: local telemetry pipeline, K8s backend via DevSpace, local frontend."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .process_models import CompletionCondition, Dependency, HealthCheckSpec, PortBinding, ProcessSpec
from .stack_config import StackDefinition, default_tokens, substitute_tokens
from .telemetry_environment import TelemetryEnvironment
from .telemetry_forwarder_helpers.settings import DEFAULT_FRAMED_PORT, DEFAULT_HTTP_PORT
from .tunnel import TunnelSpec

BACKEND_HOST = "https://backstage.cnoe.localtest.me:8443"
BACKEND_API_URL = f"{BACKEND_HOST}/api"
BACKEND_READINESS_URL = f"{BACKEND_HOST}/.backstage/health/v1/readiness"
BACKEND_PORT = 7007
FRONTEND_URL = "https://localhost:3000"
GRAFANA_EXPLORE_URL = "https://grafana.cnoe.localtest.me:8443/explore"

DEVSPACE_COMMAND = (
    "kubectl delete configmap devspace-dependencies -n backstage 2>/dev/null || true; "
    "devspace reset pods --force 2>/dev/null || true; "
    "sleep 2; "
    "exec devspace dev"
)


def build_default_stack(project_root: Optional[Path] = None) -> StackDefinition:
    tokens = default_tokens(project_root or Path.cwd())
    forwarder_ports = (PortBinding(DEFAULT_FRAMED_PORT), PortBinding(DEFAULT_HTTP_PORT))

    otel_cleanup = ProcessSpec(
        name="otel-cleanup",
        command=substitute_tokens(
            "{{python}} -m devstack reclaim-ports " + " ".join(str(binding) for binding in forwarder_ports), tokens
        ),
        description="Free the local OTLP ingestion ports left over by a previous session",
    )
    collector = ProcessSpec(
        name="opentelemetry-collector",
        command=substitute_tokens("exec {{python}} -m devstack forward", tokens),
        depends_on=frozenset({Dependency(otel_cleanup.name, CompletionCondition.PROCESS_COMPLETED_SUCCESSFULLY)}),
        description="Receive local telemetry and forward it to the cluster collector",
    )
    devspace = ProcessSpec(
        name="devspace",
        command=DEVSPACE_COMMAND,
        reclaim_ports=(PortBinding(BACKEND_PORT),),
        description="Backend in Kubernetes via DevSpace dev mode",
    )
    frontend = ProcessSpec(
        name="frontend",
        command="exec yarn workspace app start",
        readiness=HealthCheckSpec(url=BACKEND_READINESS_URL),
        description="Frontend with HMR, started once the backend reports ready",
    )

    return StackDefinition(
        processes=[otel_cleanup, collector, TunnelSpec().to_process(), devspace, frontend],
        telemetry=TelemetryEnvironment(),
        source="built-in",
    )


__all__ = ["BACKEND_READINESS_URL", "build_default_stack"]
