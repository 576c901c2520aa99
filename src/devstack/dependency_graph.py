"""Dependency graph validation and start ordering for process declarations."""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, Iterable, List, Sequence, Set

from .config.errors import ConfigurationError, DependencyCycleError
from .process_models import ProcessSpec

logger = logging.getLogger(__name__)


def index_specs(specs: Iterable[ProcessSpec]) -> Dict[str, ProcessSpec]:
    """Map process names to specs, rejecting duplicates."""
    indexed: Dict[str, ProcessSpec] = {}
    for spec in specs:
        if spec.name in indexed:
            raise ConfigurationError.duplicate_name("process", spec.name)
        indexed[spec.name] = spec
    return indexed


def validate(specs: Sequence[ProcessSpec]) -> List[str]:
    """
    Validate a set of process declarations and return a topological start order.

    Raises:
        ConfigurationError: On duplicate names or references to unknown processes
        DependencyCycleError: If the dependency graph contains a cycle
    """
    indexed = index_specs(specs)
    for spec in specs:
        for dep_name in sorted(spec.dependency_names):
            if dep_name not in indexed:
                raise ConfigurationError.unknown_reference(spec.name, dep_name)

    order = topological_order(specs)
    logger.debug("Process start order: %s", ", ".join(order))
    return order


def topological_order(specs: Sequence[ProcessSpec]) -> List[str]:
    """Kahn ordering; declaration order breaks ties so output is stable."""
    position = {spec.name: idx for idx, spec in enumerate(specs)}
    remaining: Dict[str, int] = {spec.name: len(spec.dependency_names) for spec in specs}
    dependents = build_dependents(specs)

    ready = deque(sorted((name for name, count in remaining.items() if count == 0), key=position.__getitem__))
    order: List[str] = []
    while ready:
        name = ready.popleft()
        order.append(name)
        unlocked = []
        for child in dependents[name]:
            remaining[child] -= 1
            if remaining[child] == 0:
                unlocked.append(child)
        ready.extend(sorted(unlocked, key=position.__getitem__))

    if len(order) != len(specs):
        raise DependencyCycleError(_find_cycle(specs, {name for name, count in remaining.items() if count > 0}))
    return order


def build_dependents(specs: Sequence[ProcessSpec]) -> Dict[str, List[str]]:
    """Reverse edges: dependency name -> names of processes that depend on it."""
    dependents: Dict[str, List[str]] = {spec.name: [] for spec in specs}
    for spec in specs:
        for dep_name in spec.dependency_names:
            dependents.setdefault(dep_name, []).append(spec.name)
    return dependents


def transitive_dependents(specs: Sequence[ProcessSpec], root: str) -> Set[str]:
    """Every process that directly or indirectly depends on ``root``."""
    dependents = build_dependents(specs)
    seen: Set[str] = set()
    frontier = list(dependents.get(root, []))
    while frontier:
        name = frontier.pop()
        if name in seen:
            continue
        seen.add(name)
        frontier.extend(dependents.get(name, []))
    return seen


def _find_cycle(specs: Sequence[ProcessSpec], candidates: Set[str]) -> List[str]:
    edges = {spec.name: sorted(spec.dependency_names) for spec in specs}
    visiting: List[str] = []
    visited: Set[str] = set()

    def _walk(name: str) -> List[str]:
        if name in visiting:
            start = visiting.index(name)
            return visiting[start:] + [name]
        if name in visited:
            return []
        visiting.append(name)
        for dep in edges.get(name, []):
            found = _walk(dep)
            if found:
                return found
        visiting.pop()
        visited.add(name)
        return []

    for name in sorted(candidates):
        cycle = _walk(name)
        if cycle:
            return cycle
    return sorted(candidates)


__all__ = ["build_dependents", "index_specs", "topological_order", "transitive_dependents", "validate"]
