"""
Environment-backed settings lookups.

Values come from the process environment first, then from ``.env`` or
``.devstack.env`` in the working directory. Every helper accepts an
``or_value`` returned when the variable is unset or blank, and raises
ConfigurationError when a value is present but malformed.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, NoReturn, Optional, Sequence, TypeVar

from .errors import ConfigurationError

T = TypeVar("T")

_TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "f", "no", "n", "off"})

DOTENV_FILES = (Path(".env"), Path(".devstack.env"))

_dotenv_cache: dict[str, str] | None = None


def _dotenv_values() -> dict[str, str]:
    from .runtime_helpers import DotenvLoader

    global _dotenv_cache
    if _dotenv_cache is None:
        merged: dict[str, str] = {}
        # earlier files win
        for path in DOTENV_FILES:
            for key, value in DotenvLoader.load_from_file(path).items():
                merged.setdefault(key, value)
        _dotenv_cache = merged
    return _dotenv_cache


def reset_default_values() -> None:
    """Forget cached .env values so the next lookup re-reads them."""
    global _dotenv_cache
    _dotenv_cache = None


def _raise_missing(name: str) -> NoReturn:
    raise ConfigurationError(f"Required environment variable {name!r} is not set")


def _present(value: Optional[str], allow_blank: bool) -> bool:
    return value is not None and (allow_blank or value != "")


def _parse(name: str, raw_value: str, cast: Callable[[str], T], expected: str) -> T:
    try:
        return cast(raw_value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Environment variable {name!r} must be {expected} (got {raw_value!r})") from exc


def env_str(
    name: str,
    or_value: str | None = None,
    *,
    required: bool = False,
    strip: bool = True,
    allow_blank: bool = False,
) -> str | None:
    """Fetch an environment variable as a string, falling back to .env files."""
    for candidate in (os.getenv(name), _dotenv_values().get(name)):
        if candidate is None:
            continue
        value = candidate.strip() if strip else candidate
        if _present(value, allow_blank):
            return value
    if required:
        _raise_missing(name)
    return or_value


def _typed(name: str, or_value: Optional[T], required: bool, cast: Callable[[str], T], expected: str) -> Optional[T]:
    raw = env_str(name)
    if raw is None:
        if required and or_value is None:
            _raise_missing(name)
        return or_value
    return _parse(name, raw, cast, expected)


def env_int(name: str, or_value: int | None = None, *, required: bool = False) -> int | None:
    return _typed(name, or_value, required, int, "an integer")


def env_float(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    return _typed(name, or_value, required, float, "a float")


def _to_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(raw)


def env_bool(name: str, or_value: bool | None = None, *, required: bool = False) -> bool | None:
    """Accepts 1/0, true/false, yes/no, on/off and their one-letter forms."""
    return _typed(name, or_value, required, _to_bool, "a boolean")


def env_list(
    name: str,
    *,
    or_value: Sequence[str] | None = None,
    separator: str = ",",
    strip_items: bool = True,
    unique: bool = True,
    required: bool = False,
) -> tuple[str, ...] | None:
    """Fetch a delimited list, e.g. ``DEVSTACK_DOCTOR_TOOLS=git,kubectl``."""
    from .runtime_helpers import ListNormalizer

    raw = env_str(name)
    if raw is None:
        if required and not or_value:
            _raise_missing(name)
        return None if or_value is None else tuple(or_value)

    items = tuple(ListNormalizer.split_and_normalize(raw, separator, strip_items))
    if not items and required:
        raise ConfigurationError(f"Environment variable {name!r} must contain at least one value")
    return ListNormalizer.deduplicate_preserving_order(items) if unique else items


def env_seconds(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    """Non-negative duration in seconds."""
    value = env_float(name, or_value=or_value, required=required)
    if value is not None and value < 0:
        raise ConfigurationError(f"Environment variable {name!r} must be non-negative (got {value})")
    return value


__all__ = [
    "ConfigurationError",
    "DOTENV_FILES",
    "env_bool",
    "env_float",
    "env_int",
    "env_list",
    "env_seconds",
    "env_str",
    "reset_default_values",
]
