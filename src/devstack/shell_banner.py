"""Environment summary shown by ``devstack info``."""

from __future__ import annotations

from typing import Callable, List, Optional

from .default_stack import BACKEND_API_URL, FRONTEND_URL, GRAFANA_EXPLORE_URL
from .project_scripts import SCRIPTS
from .telemetry_forwarder_helpers.settings import DEFAULT_FRAMED_PORT, DEFAULT_HTTP_PORT
from .tool_check import tool_version

VersionLookup = Callable[[str], Optional[str]]

_COLUMN = 29


def _line(command: str, comment: str) -> str:
    return f"  {command.ljust(_COLUMN)}# {comment}"


def render_banner(version_lookup: VersionLookup = tool_version) -> str:
    node = version_lookup("node") or "not installed"
    yarn = version_lookup("yarn") or "not installed"
    lines: List[str] = [
        "=== Backstage Development Environment ===",
        f"Node: {node}",
        f"Yarn: {yarn}",
        "",
        "Development Modes:",
        _line("devstack up", "Start all services (K8s backend + local frontend + OTEL)"),
        _line("yarn dev", "Simple local dev (no K8s, no OTEL)"),
        "",
        "K8s Development (with devstack up):",
        f"  Frontend (HMR):  {FRONTEND_URL}",
        f"  Backend API:     {BACKEND_API_URL}",
        _line("devspace enter", "Shell into K8s dev container"),
        _line("devspace reset pods", "Revert to prod image (keeps node_modules)"),
        _line("devspace purge", "Full cleanup (deletes PVC)"),
        "",
        "OpenTelemetry (auto-started with devstack up):",
        f"  OTEL endpoint:   localhost:{DEFAULT_FRAMED_PORT} (framed) / {DEFAULT_HTTP_PORT} (HTTP)",
        "  K8s backends:    Tempo (traces), Mimir (metrics), Loki (logs)",
        f"  View traces:     {GRAFANA_EXPLORE_URL}",
        "",
        "Build & Push:",
    ]
    for script in SCRIPTS.values():
        lines.append(_line(f"devstack {script.name}", script.description))
    lines.append(_line("devstack build-push VERSION", "Build & push to Gitea"))
    lines.append(_line("  --trigger-kargo", "Trigger Kargo warehouse refresh"))
    return "\n".join(lines)
