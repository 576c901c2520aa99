"""Wait for declared dependency conditions before a process may start."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from ..process_models import CompletionCondition, Dependency
from .types import ProcessRecord, ProcessState

logger = logging.getLogger(__name__)


async def wait_for_dependencies(record: ProcessRecord, records: Mapping[str, ProcessRecord]) -> Optional[str]:
    """
    Block until every dependency of ``record`` reaches its condition.

    Returns:
        None when all conditions hold, otherwise a description of the first
        dependency that can no longer satisfy its condition.
    """
    for dependency in sorted(record.spec.depends_on, key=lambda dep: dep.name):
        upstream = records[dependency.name]
        logger.debug("%s waiting for %s (%s)", record.name, dependency.name, dependency.condition.value)
        reason = await _wait_for(dependency, upstream)
        if reason is not None:
            return reason
    return None


async def _wait_for(dependency: Dependency, upstream: ProcessRecord) -> Optional[str]:
    if dependency.condition is CompletionCondition.PROCESS_STARTED:
        await upstream.started.wait()
        if upstream.started_at is None:
            return f"{upstream.name} never started ({upstream.state.value})"
        return None

    await upstream.finished.wait()
    if upstream.state is not ProcessState.EXITED:
        return f"{upstream.name} did not run ({upstream.state.value})"
    if dependency.condition is CompletionCondition.PROCESS_COMPLETED_SUCCESSFULLY and upstream.returncode != 0:
        return f"{upstream.name} exited with code {upstream.returncode}"
    return None
