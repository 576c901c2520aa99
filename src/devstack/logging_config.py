"""
Centralized logging configuration for devstack commands.

This module provides a single setup_logging function that configures
logging consistently across the supervisor, the telemetry forwarder and
the release tooling with:
- Console output on stdout (technical, user-friendly or supervised format)
- Optional file output to {log_dir}/{service_name}.log
- Fresh log file on each start unless LOG_APPEND=1
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional

from devstack.config import env_bool, env_str

_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)

TECHNICAL_FORMAT = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
TECHNICAL_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# The supervisor timestamps and tags relayed child output itself.
SUPERVISED_FORMAT = "%(levelname)s %(name)s: %(message)s"
USER_FRIENDLY_FORMAT = "%(message)s"

MANAGED_ENV_VAR = "DEVSTACK_MANAGED"


def is_managed_by_supervisor() -> bool:
    """Return True when this process was launched by the devstack supervisor."""
    return bool(env_bool(MANAGED_ENV_VAR, or_value=False))


def _resolve_level(default: int) -> int:
    raw = env_str("DEVSTACK_LOG_LEVEL")
    if raw is None:
        return default
    level = logging.getLevelName(raw.upper())
    if isinstance(level, int):
        return level
    _MODULE_LOGGER.warning("Ignoring unknown DEVSTACK_LOG_LEVEL %r", raw)
    return default


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as exc:  # Best-effort cleanup operation  # policy_guard: allow-silent-handler
            _MODULE_LOGGER.debug("Handler close failed for logger '%s': %s", logger.name, exc)
    logger.handlers = []


def _build_console_handler(user_friendly: bool, managed: bool) -> logging.Handler:
    if user_friendly:
        formatter = logging.Formatter(USER_FRIENDLY_FORMAT)
    elif managed:
        formatter = logging.Formatter(SUPERVISED_FORMAT)
    else:
        formatter = logging.Formatter(TECHNICAL_FORMAT, TECHNICAL_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.INFO if user_friendly else logging.DEBUG)
    return console_handler


def _resolve_log_dir(log_dir: Optional[Path]) -> Optional[Path]:
    if log_dir is not None:
        return log_dir
    configured = env_str("DEVSTACK_LOG_DIR")
    if configured:
        return Path(configured).expanduser()
    return None


def _configure_file_handler(service_name: Optional[str], log_dir: Optional[Path]) -> Optional[logging.Handler]:
    if not service_name or log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{service_name}.log"
    file_mode = "a" if env_bool("LOG_APPEND", or_value=False) else "w"

    file_handler = logging.FileHandler(log_path, mode=file_mode, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(TECHNICAL_FORMAT, TECHNICAL_DATE_FORMAT))
    file_handler.setLevel(logging.INFO)
    return file_handler


def _suppress_noisy_third_parties() -> None:
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def setup_logging(
    service_name: Optional[str] = None,
    user_friendly: bool = False,
    *,
    log_dir: Optional[Path] = None,
) -> None:
    """Configure root logging for a devstack command."""

    with _config_lock:
        root_logger = logging.getLogger()
        _close_handlers(root_logger)

        managed = is_managed_by_supervisor()
        root_logger.addHandler(_build_console_handler(user_friendly, managed))

        file_handler = _configure_file_handler(service_name, _resolve_log_dir(log_dir))
        if file_handler:
            root_logger.addHandler(file_handler)

        root_logger.setLevel(_resolve_level(logging.INFO))
        _suppress_noisy_third_parties()


__all__ = ["MANAGED_ENV_VAR", "is_managed_by_supervisor", "setup_logging"]
