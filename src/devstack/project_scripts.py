"""Named developer scripts: described, fail-fast command sequences."""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from .errors import UsageError
from .release_pipeline_helpers import CommandRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectScript:
    name: str
    description: str
    steps: Tuple[Tuple[str, ...], ...]

    def render(self) -> str:
        return " && ".join(shlex.join(step) for step in self.steps)


SCRIPTS: Dict[str, ProjectScript] = {
    script.name: script
    for script in (
        ProjectScript("build", "Build all packages with Nx caching", (("npx", "nx", "run-many", "-t", "build"),)),
        ProjectScript("build-backend", "Build backend bundle for Docker", (("yarn", "build:backend"),)),
        ProjectScript(
            "docker-build",
            "Build Docker image",
            (
                ("yarn", "tsc"),
                ("yarn", "build:backend"),
                ("docker", "image", "build", ".", "-f", "packages/backend/Dockerfile", "--tag", "backstage:latest"),
            ),
        ),
        ProjectScript("docker-run", "Run Docker container", (("docker", "run", "-it", "-p", "7007:7007", "backstage:latest"),)),
        ProjectScript("nx-graph", "Visualize project dependency graph", (("npx", "nx", "graph"),)),
    )
}


def get_script(name: str) -> ProjectScript:
    try:
        return SCRIPTS[name]
    except KeyError:
        raise UsageError(f"Unknown script: {name}. Available: {', '.join(SCRIPTS)}") from None


def run_script(name: str, extra_args: Sequence[str] = (), *, runner: Optional[CommandRunner] = None) -> None:
    """
    Run every step of a script in order; extra arguments go to the last step.

    Raises:
        UsageError: Unknown script name
        StepFailedError: A step exited non-zero
        ToolNotFoundError: A step's executable is not installed
    """
    script = get_script(name)
    runner = runner or CommandRunner()
    logger.info(">>> %s: %s", script.name, script.description)
    last = len(script.steps) - 1
    for index, step in enumerate(script.steps):
        argv = list(step) + (list(extra_args) if index == last else [])
        runner.run(f"{script.name} step {index + 1}", argv)


__all__ = ["ProjectScript", "SCRIPTS", "get_script", "run_script"]
