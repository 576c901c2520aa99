"""Registry authentication through idpbuilder-issued credentials."""

from __future__ import annotations

import logging
import shutil
from typing import Callable, Optional

import orjson

from ..errors import DevstackError
from .command_runner import CommandRunner
from .options import ReleaseOptions

logger = logging.getLogger(__name__)

REGISTRY_LOGIN_USER = "giteaAdmin"
CREDENTIALS_COMMAND = ["idpbuilder", "get", "secrets", "-p", "gitea", "-o", "json"]


def extract_password(raw: Optional[str]) -> str:
    """Password of the first entry in ``idpbuilder get secrets -o json`` output."""
    try:
        payload = orjson.loads(raw or "")
    except orjson.JSONDecodeError as exc:
        raise DevstackError(f"idpbuilder returned malformed JSON: {exc}") from exc
    entry = payload[0] if isinstance(payload, list) and payload else payload
    password = entry.get("password") if isinstance(entry, dict) else None
    if not password:
        raise DevstackError("idpbuilder output does not contain a registry password")
    return str(password)


def login_to_registry(
    options: ReleaseOptions,
    runner: CommandRunner,
    *,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> bool:
    """
    Authenticate docker against the registry.

    Returns:
        True when credentials came from idpbuilder, False when an existing
        docker session was assumed.
    """
    host = options.registry_host
    if which("idpbuilder"):
        result = runner.run("Fetching registry credentials", CREDENTIALS_COMMAND, capture=True)
        password = extract_password(result.stdout)
        runner.run(
            "Logging into registry",
            ["docker", "login", "-u", REGISTRY_LOGIN_USER, "--password-stdin", host],
            input_text=password + "\n",
        )
        return True

    logger.warning(
        "idpbuilder not found: assuming an existing docker session for %s. "
        "The push will fail if docker is not already authenticated.",
        host,
    )
    result = runner.run("Logging into registry", ["docker", "login", host], check=False, interactive=False)
    if result.returncode != 0:
        logger.warning("docker login %s exited with %d; continuing with existing credentials", host, result.returncode)
    return False
