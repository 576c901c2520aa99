"""
Stack declaration loading.

A stack file is JSON::

    {
      "telemetry": {"service_name": "backstage-dev"},
      "processes": {
        "otel-cleanup": {"command": "{{python}} -m devstack reclaim-ports 4400 4401"},
        "opentelemetry-collector": {
          "command": "{{python}} -m devstack forward",
          "depends_on": {"otel-cleanup": {"condition": "process_completed_successfully"}}
        }
      }
    }

``{{python}}`` and ``{{root}}`` in commands, env values and working
directories are replaced with the running interpreter and project root.
"""

from __future__ import annotations

import logging
import re
import shlex
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import orjson

from .config import ConfigurationError, env_str
from .dependency_graph import validate
from .process_models import CompletionCondition, Dependency, HealthCheckSpec, PortBinding, ProcessSpec
from .telemetry_environment import TelemetryEnvironment

logger = logging.getLogger(__name__)

STACK_FILE_ENV_VAR = "DEVSTACK_STACK_FILE"
DEFAULT_STACK_FILENAME = "devstack.json"
_TOKEN_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")


@dataclass
class StackDefinition:
    processes: List[ProcessSpec]
    telemetry: TelemetryEnvironment = field(default_factory=TelemetryEnvironment)
    source: str = "built-in"

    @property
    def names(self) -> List[str]:
        return [spec.name for spec in self.processes]


def substitute_tokens(text: str, tokens: Mapping[str, str]) -> str:
    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in tokens:
            raise ConfigurationError.invalid_value("token", match.group(0), f"Known tokens: {', '.join(sorted(tokens))}")
        return tokens[name]

    return _TOKEN_PATTERN.sub(_replace, text)


def default_tokens(project_root: Path) -> Dict[str, str]:
    return {"python": shlex.quote(sys.executable), "root": shlex.quote(str(project_root))}


class StackConfigLoader:
    """Loads and validates stack declarations from a config directory."""

    def __init__(self, config_dir: Path, project_root: Optional[Path] = None):
        self.config_dir = config_dir
        self.project_root = project_root or config_dir.parent
        self.tokens = default_tokens(self.project_root)

    def load_json_file(self, filename: str) -> Dict[str, Any]:
        """
        Load a JSON object from the config directory.

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: If the file is not a JSON object
        """
        config_path = self.config_dir / filename
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        try:
            data = orjson.loads(config_path.read_bytes())
        except orjson.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in config file {filename}: {exc}") from exc
        except OSError as exc:
            raise ConfigurationError.load_failed("stack file", str(config_path)) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {filename} must contain a JSON object")
        return data

    def load(self, filename: str = DEFAULT_STACK_FILENAME) -> StackDefinition:
        data = self.load_json_file(filename)
        stack = self.parse(data, source=str(self.config_dir / filename))
        logger.debug("Loaded %d process(es) from %s", len(stack.processes), stack.source)
        return stack

    def parse(self, data: Mapping[str, Any], *, source: str = "<memory>") -> StackDefinition:
        raw_processes = data.get("processes")
        if not isinstance(raw_processes, dict) or not raw_processes:
            raise ConfigurationError(f"{source}: 'processes' must be a non-empty object")

        processes = [self._parse_process(name, raw) for name, raw in raw_processes.items()]
        validate(processes)
        return StackDefinition(processes=processes, telemetry=self._parse_telemetry(data.get("telemetry")), source=source)

    def _parse_process(self, name: str, raw: Any) -> ProcessSpec:
        if isinstance(raw, str):
            raw = {"command": raw}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Process {name!r} must be an object or a command string")

        working_dir = raw.get("working_dir")
        return ProcessSpec(
            name=name,
            command=substitute_tokens(str(raw.get("command") or ""), self.tokens),
            depends_on=frozenset(_parse_dependencies(name, raw.get("depends_on"))),
            env={str(key): substitute_tokens(str(value), self.tokens) for key, value in _parse_env(name, raw.get("env")).items()},
            working_dir=substitute_tokens(str(working_dir), self.tokens) if working_dir else None,
            reclaim_ports=_parse_reclaim_ports(name, raw.get("reclaim_ports")),
            readiness=_parse_readiness(name, raw.get("readiness")),
            description=str(raw.get("description") or ""),
        )

    @staticmethod
    def _parse_telemetry(raw: Any) -> TelemetryEnvironment:
        if raw is None:
            return TelemetryEnvironment()
        if not isinstance(raw, dict):
            raise ConfigurationError("'telemetry' must be an object")
        defaults = TelemetryEnvironment()
        attributes = raw.get("resource_attributes")
        return TelemetryEnvironment(
            endpoint=str(raw.get("endpoint") or defaults.endpoint),
            protocol=str(raw.get("protocol") or defaults.protocol),
            service_name=str(raw.get("service_name") or defaults.service_name),
            resource_attributes=(
                {str(key): str(value) for key, value in attributes.items()}
                if isinstance(attributes, dict)
                else dict(defaults.resource_attributes)
            ),
        )


def _parse_dependencies(owner: str, raw: Any) -> List[Dependency]:
    if raw is None:
        return []
    if isinstance(raw, list):
        return [Dependency(str(name)) for name in raw]
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Process {owner!r}: depends_on must be a list or an object")
    dependencies = []
    for name, options in raw.items():
        condition = (options or {}).get("condition") if isinstance(options, dict) else options
        if condition:
            dependencies.append(Dependency(str(name), CompletionCondition.parse(condition)))
        else:
            dependencies.append(Dependency(str(name)))
    return dependencies


def _parse_readiness(owner: str, raw: Any) -> Optional[HealthCheckSpec]:
    if raw is None:
        return None
    if isinstance(raw, str):
        return HealthCheckSpec(url=raw)
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Process {owner!r}: readiness must be a URL or an object")
    known = {"url", "expected_field", "expected_value", "poll_interval", "request_timeout", "verify_tls"}
    unknown = set(raw) - known
    if unknown:
        raise ConfigurationError(f"Process {owner!r}: unknown readiness keys {sorted(unknown)}")
    if not isinstance(raw.get("url"), str) or not raw["url"]:
        raise ConfigurationError.missing_value(f"{owner}.readiness.url", "expected the health endpoint URL")
    for key in ("poll_interval", "request_timeout"):
        value = raw.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise ConfigurationError.invalid_value(f"{owner}.readiness.{key}", value, "Must be a number of seconds")
    for key in ("expected_field", "expected_value"):
        if key in raw and not isinstance(raw[key], str):
            raise ConfigurationError.invalid_value(f"{owner}.readiness.{key}", raw[key], "Must be a string")
    if "verify_tls" in raw and not isinstance(raw["verify_tls"], bool):
        raise ConfigurationError.invalid_value(f"{owner}.readiness.verify_tls", raw["verify_tls"], "Must be true or false")
    return HealthCheckSpec(**{key: value for key, value in raw.items() if value is not None})


def _parse_env(owner: str, raw: Any) -> Dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError.invalid_value(f"{owner}.env", raw, "Must be an object of NAME: value pairs")
    return raw


def _parse_reclaim_ports(owner: str, raw: Any) -> Tuple[PortBinding, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ConfigurationError.invalid_value(f"{owner}.reclaim_ports", raw, 'Must be a list such as [4400, "4401/udp"]')
    return tuple(PortBinding.parse(item) for item in raw)


def resolve_stack_path(explicit: Optional[str] = None) -> Optional[Path]:
    """--stack flag, then DEVSTACK_STACK_FILE, then ./config/devstack.json if present."""
    candidate = explicit or env_str(STACK_FILE_ENV_VAR)
    if candidate:
        path = Path(candidate).expanduser()
        if not path.exists():
            raise ConfigurationError.load_failed("stack file", str(path))
        return path
    default_path = Path.cwd() / "config" / DEFAULT_STACK_FILENAME
    return default_path if default_path.exists() else None


def load_stack(explicit: Optional[str] = None) -> StackDefinition:
    """Load the active stack, falling back to the built-in default declaration."""
    path = resolve_stack_path(explicit)
    if path is None:
        from .default_stack import build_default_stack

        logger.info("No stack file found; using the built-in default stack")
        return build_default_stack(Path.cwd())
    loader = StackConfigLoader(path.parent, project_root=Path.cwd())
    return loader.load(path.name)


__all__ = [
    "STACK_FILE_ENV_VAR",
    "StackConfigLoader",
    "StackDefinition",
    "default_tokens",
    "load_stack",
    "resolve_stack_path",
    "substitute_tokens",
]
