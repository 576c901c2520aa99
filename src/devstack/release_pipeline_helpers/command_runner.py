"""Run external release steps with fail-fast semantics."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from ..errors import StepFailedError, ToolNotFoundError
from ..tool_check import TOOL_HINTS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    argv: Sequence[str]
    returncode: int
    stdout: Optional[str] = None


class CommandRunner:
    """Thin ``subprocess.run`` wrapper; tests substitute a recording fake."""

    def __init__(self, *, cwd: Optional[str] = None, env: Optional[Mapping[str, str]] = None):
        self.cwd = cwd
        self.env = dict(env) if env is not None else None

    def run(
        self,
        step: str,
        argv: Sequence[str],
        *,
        input_text: Optional[str] = None,
        capture: bool = False,
        check: bool = True,
        interactive: bool = True,
    ) -> CommandResult:
        """
        Execute one step.

        Raises:
            ToolNotFoundError: The executable is not installed
            StepFailedError: Non-zero exit status and ``check`` is set
        """
        logger.debug("%s: %s", step, shlex.join(argv))
        stdin = None if interactive or input_text is not None else subprocess.DEVNULL
        try:
            completed = subprocess.run(
                list(argv),
                input=input_text,
                stdin=stdin,
                stdout=subprocess.PIPE if capture else None,
                text=True,
                cwd=self.cwd,
                env=self.env,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ToolNotFoundError(argv[0], TOOL_HINTS.get(argv[0], "")) from exc

        if check and completed.returncode != 0:
            raise StepFailedError(step, completed.returncode, argv)
        return CommandResult(argv=tuple(argv), returncode=completed.returncode, stdout=completed.stdout)
