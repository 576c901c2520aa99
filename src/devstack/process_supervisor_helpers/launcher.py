"""Spawn supervised children in their own session so the whole group can be signalled."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Dict, Mapping, Optional

from ..logging_config import MANAGED_ENV_VAR
from ..process_models import ProcessSpec
from ..telemetry_environment import TelemetryEnvironment

logger = logging.getLogger(__name__)

STREAM_LIMIT_BYTES = 1024 * 1024


def build_child_env(
    spec: ProcessSpec,
    base_env: Mapping[str, str],
    telemetry: Optional[TelemetryEnvironment] = None,
) -> Dict[str, str]:
    """Base environment, then telemetry settings, then the process's own overrides."""
    env = dict(base_env)
    if telemetry is not None:
        env.update(telemetry.to_env())
    env[MANAGED_ENV_VAR] = "1"
    env["DEVSTACK_PROCESS_NAME"] = spec.name
    env.update(spec.env)
    return env


async def spawn_process(spec: ProcessSpec, env: Mapping[str, str]) -> asyncio.subprocess.Process:
    """Start ``spec.command`` through the shell with piped stdout/stderr."""
    cwd = os.path.expanduser(spec.working_dir) if spec.working_dir else None
    logger.debug("Spawning %s: %s (cwd=%s)", spec.name, spec.command, cwd or ".")
    return await asyncio.create_subprocess_shell(
        spec.command,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=dict(env),
        cwd=cwd,
        start_new_session=True,
        limit=STREAM_LIMIT_BYTES,
    )
