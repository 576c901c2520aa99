"""
External CLI availability checks.

devstack drives kubectl, docker, devspace, yarn and friends; it never
reimplements them. These helpers fail fast with installation hints when one
is missing instead of surfacing a bare "command not found" halfway through a
pipeline.
"""

import logging
import shutil
import subprocess
from typing import Callable, Dict, Iterable, Optional, Sequence

from .errors import ToolNotFoundError

logger = logging.getLogger(__name__)

Which = Callable[[str], Optional[str]]

TOOL_HINTS: Dict[str, str] = {
    "git": "Install: https://git-scm.com/downloads\nVerify: git --version",
    "jq": "Install:\n  macOS: brew install jq\n  Ubuntu: sudo apt-get install jq\nVerify: jq --version",
    "kubectl": "Install: https://kubernetes.io/docs/tasks/tools/\nVerify: kubectl version --client",
    "node": "Install Node.js 22: https://nodejs.org/en/download\nVerify: node --version",
    "npx": "npx ships with Node.js: https://nodejs.org/en/download\nVerify: npx --version",
    "yarn": "Install: corepack enable && corepack prepare yarn@stable --activate\nVerify: yarn --version",
    "docker": "Install: https://docs.docker.com/get-docker/\nVerify: docker version",
    "devspace": "Install: https://www.devspace.sh/docs/getting-started/installation\nVerify: devspace version",
    "otel-cli": "Install: https://github.com/equinix-labs/otel-cli#getting-started\nVerify: otel-cli --version",
    "idpbuilder": "Install: https://cnoe.io/docs/idpbuilder/installation\nVerify: idpbuilder version",
    "kargo": "Install: https://docs.kargo.io/user-guide/installing-the-cli/\nVerify: kargo version --client",
}

DOCTOR_TOOLS: Sequence[str] = ("git", "jq", "kubectl", "node", "yarn", "docker", "devspace", "otel-cli")


def find_tool(tool: str, which: Which = shutil.which) -> Optional[str]:
    return which(tool)


def require_tool(tool: str, hint: Optional[str] = None, *, which: Which = shutil.which) -> str:
    """
    Return the resolved path of ``tool``.

    Raises:
        ToolNotFoundError: If ``tool`` is not on PATH
    """
    path = which(tool)
    if not path:
        raise ToolNotFoundError(tool, hint if hint is not None else TOOL_HINTS.get(tool, ""))
    return path


def check_tools(tools: Iterable[str] = DOCTOR_TOOLS, *, which: Which = shutil.which) -> Dict[str, Optional[str]]:
    """Resolve every tool and log one line per tool; missing tools log their hint."""
    status: Dict[str, Optional[str]] = {}
    for tool in tools:
        path = which(tool)
        status[tool] = path
        if path:
            logger.info("✅ %s: %s", tool, path)
        else:
            logger.error("❌ %s not found\n%s", tool, TOOL_HINTS.get(tool, "Install it and make sure it is on PATH"))
    return status


def tool_version(tool: str, args: Sequence[str] = ("--version",), *, timeout: float = 5.0) -> Optional[str]:
    """First line of ``tool --version`` or None when unavailable."""
    try:
        completed = subprocess.run(
            [tool, *args],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired):  # policy_guard: allow-silent-handler
        return None
    output = (completed.stdout or completed.stderr).strip()
    if completed.returncode != 0 or not output:
        return None
    return output.splitlines()[0].strip()


__all__ = ["DOCTOR_TOOLS", "TOOL_HINTS", "check_tools", "find_tool", "require_tool", "tool_version"]
