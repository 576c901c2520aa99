"""Forwarder settings resolved from the environment."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict

from ..config import ConfigurationError, env_int, env_seconds, env_str
from ..telemetry_environment import DEFAULT_RESOURCE_ATTRIBUTES, parse_resource_attributes

DEFAULT_BIND_HOST = "0.0.0.0"
DEFAULT_FRAMED_PORT = 4400
DEFAULT_HTTP_PORT = 4401
DEFAULT_UPSTREAM_ENDPOINT = "http://localhost:14318"
DEFAULT_UPSTREAM_TIMEOUT_SECONDS = 10.0
DEFAULT_BATCH_SIZE = 1000
DEFAULT_BATCH_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_FRAME_BYTES = 4 * 1024 * 1024
DEBUG_VERBOSITIES = ("basic", "detailed")


@dataclass(frozen=True)
class ForwarderSettings:
    bind_host: str = DEFAULT_BIND_HOST
    framed_port: int = DEFAULT_FRAMED_PORT
    http_port: int = DEFAULT_HTTP_PORT
    upstream_endpoint: str = DEFAULT_UPSTREAM_ENDPOINT
    upstream_timeout: float = DEFAULT_UPSTREAM_TIMEOUT_SECONDS
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_timeout: float = DEFAULT_BATCH_TIMEOUT_SECONDS
    max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES
    debug_verbosity: str = "basic"
    resource_attributes: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_RESOURCE_ATTRIBUTES))

    def __post_init__(self) -> None:
        if self.debug_verbosity not in DEBUG_VERBOSITIES:
            raise ConfigurationError.invalid_value(
                "DEVSTACK_FORWARDER_DEBUG_VERBOSITY", self.debug_verbosity, f"Allowed: {', '.join(DEBUG_VERBOSITIES)}"
            )
        if self.batch_size < 1:
            raise ConfigurationError.invalid_value("DEVSTACK_FORWARDER_BATCH_SIZE", self.batch_size, "Must be positive")
        if self.max_frame_bytes < 1:
            raise ConfigurationError.invalid_value("DEVSTACK_FORWARDER_MAX_FRAME_BYTES", self.max_frame_bytes, "Must be positive")


@lru_cache(maxsize=1)
def get_forwarder_settings() -> ForwarderSettings:
    raw_attributes = env_str("DEVSTACK_FORWARDER_RESOURCE_ATTRIBUTES")
    return ForwarderSettings(
        bind_host=env_str("DEVSTACK_FORWARDER_HOST", or_value=DEFAULT_BIND_HOST) or DEFAULT_BIND_HOST,
        framed_port=int(env_int("DEVSTACK_FORWARDER_FRAMED_PORT", or_value=DEFAULT_FRAMED_PORT)),
        http_port=int(env_int("DEVSTACK_FORWARDER_HTTP_PORT", or_value=DEFAULT_HTTP_PORT)),
        upstream_endpoint=(
            env_str("DEVSTACK_FORWARDER_UPSTREAM", or_value=DEFAULT_UPSTREAM_ENDPOINT) or DEFAULT_UPSTREAM_ENDPOINT
        ).rstrip("/"),
        upstream_timeout=float(env_seconds("DEVSTACK_FORWARDER_UPSTREAM_TIMEOUT", or_value=DEFAULT_UPSTREAM_TIMEOUT_SECONDS)),
        batch_size=int(env_int("DEVSTACK_FORWARDER_BATCH_SIZE", or_value=DEFAULT_BATCH_SIZE)),
        batch_timeout=float(env_seconds("DEVSTACK_FORWARDER_BATCH_TIMEOUT", or_value=DEFAULT_BATCH_TIMEOUT_SECONDS)),
        max_frame_bytes=int(env_int("DEVSTACK_FORWARDER_MAX_FRAME_BYTES", or_value=DEFAULT_MAX_FRAME_BYTES)),
        debug_verbosity=env_str("DEVSTACK_FORWARDER_DEBUG_VERBOSITY", or_value="basic") or "basic",
        resource_attributes=(
            parse_resource_attributes(raw_attributes) if raw_attributes else dict(DEFAULT_RESOURCE_ATTRIBUTES)
        ),
    )
