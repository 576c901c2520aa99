"""Kubernetes port-forward tunnel declarations."""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import Tuple

from .process_models import PortBinding, ProcessSpec

DEFAULT_NAMESPACE = "observability"
DEFAULT_SERVICE = "svc/otel-collector"
# local port -> remote collector port (gRPC, HTTP)
DEFAULT_PORT_MAPPINGS: Tuple[Tuple[int, int], ...] = ((14317, 4317), (14318, 4318))


@dataclass(frozen=True)
class TunnelSpec:
    namespace: str = DEFAULT_NAMESPACE
    service: str = DEFAULT_SERVICE
    port_mappings: Tuple[Tuple[int, int], ...] = DEFAULT_PORT_MAPPINGS

    @property
    def local_ports(self) -> Tuple[PortBinding, ...]:
        return tuple(PortBinding(local) for local, _ in self.port_mappings)

    def command(self) -> str:
        argv = ["kubectl", "port-forward", "-n", self.namespace, self.service]
        argv.extend(f"{local}:{remote}" for local, remote in self.port_mappings)
        return "exec " + shlex.join(argv)

    def to_process(self, name: str = "otel-forward") -> ProcessSpec:
        """A supervised process that reclaims the local ports, then holds the tunnel open."""
        return ProcessSpec(
            name=name,
            command=self.command(),
            reclaim_ports=self.local_ports,
            description=f"Port-forward {self.namespace}/{self.service} to localhost",
        )


__all__ = ["TunnelSpec"]
