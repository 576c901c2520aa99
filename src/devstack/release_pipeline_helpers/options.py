"""Argument parsing and defaults for ``devstack build-push``."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Sequence

from ..config import env_str
from ..errors import UsageError

DEFAULT_REGISTRY_HOST = "gitea.cnoe.localtest.me:8443"
DEFAULT_REGISTRY_OWNER = "giteaadmin"
DEFAULT_IMAGE_NAME = "backstage"
DEFAULT_KARGO_WAREHOUSE = "backstage"
DEFAULT_KARGO_NAMESPACE = "kargo-pipelines"

PROG = "devstack build-push"

EPILOG = f"""Examples:
  {PROG} 1.0.0
  {PROG} --trigger-kargo 1.0.0
  {PROG} --skip-build --trigger-kargo latest
"""


@dataclass(frozen=True)
class ReleaseDefaults:
    registry_host: str = DEFAULT_REGISTRY_HOST
    owner: str = DEFAULT_REGISTRY_OWNER
    image: str = DEFAULT_IMAGE_NAME
    warehouse: str = DEFAULT_KARGO_WAREHOUSE
    namespace: str = DEFAULT_KARGO_NAMESPACE


@lru_cache(maxsize=1)
def get_release_defaults() -> ReleaseDefaults:
    return ReleaseDefaults(
        registry_host=env_str("DEVSTACK_REGISTRY_HOST", or_value=DEFAULT_REGISTRY_HOST) or DEFAULT_REGISTRY_HOST,
        owner=env_str("DEVSTACK_REGISTRY_OWNER", or_value=DEFAULT_REGISTRY_OWNER) or DEFAULT_REGISTRY_OWNER,
        image=env_str("DEVSTACK_IMAGE_NAME", or_value=DEFAULT_IMAGE_NAME) or DEFAULT_IMAGE_NAME,
        warehouse=env_str("DEVSTACK_KARGO_WAREHOUSE", or_value=DEFAULT_KARGO_WAREHOUSE) or DEFAULT_KARGO_WAREHOUSE,
        namespace=env_str("DEVSTACK_KARGO_NAMESPACE", or_value=DEFAULT_KARGO_NAMESPACE) or DEFAULT_KARGO_NAMESPACE,
    )


@dataclass(frozen=True)
class ReleaseOptions:
    version: str
    trigger_kargo: bool = False
    skip_build: bool = False
    registry_host: str = DEFAULT_REGISTRY_HOST
    owner: str = DEFAULT_REGISTRY_OWNER
    image: str = DEFAULT_IMAGE_NAME
    warehouse: str = DEFAULT_KARGO_WAREHOUSE
    namespace: str = DEFAULT_KARGO_NAMESPACE

    @property
    def local_tag(self) -> str:
        return f"{self.image}:{self.version}"

    @property
    def full_image(self) -> str:
        return f"{self.registry_host}/{self.owner}/{self.image}:{self.version}"


class _UsageRaisingParser(argparse.ArgumentParser):
    """argparse exits with status 2 on errors; release usage errors exit 1."""

    def error(self, message: str):  # type: ignore[override]
        raise UsageError(message, usage_hint=f"Run '{PROG} --help' for usage")


def build_parser(defaults: Optional[ReleaseDefaults] = None) -> argparse.ArgumentParser:
    defaults = defaults or get_release_defaults()
    parser = _UsageRaisingParser(
        prog=PROG,
        description="Build and push the backend container image to the OCI registry.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("version", nargs="?", metavar="VERSION", help="Version tag for the image (e.g., 1.0.0, latest)")
    parser.add_argument("--trigger-kargo", action="store_true", help="Trigger Kargo warehouse refresh after push")
    parser.add_argument("--skip-build", action="store_true", help="Skip the yarn build, only build the image")
    parser.add_argument("--registry", metavar="HOST", default=defaults.registry_host, help="Registry host (default: %(default)s)")
    parser.add_argument("--owner", metavar="OWNER", default=defaults.owner, help="Registry owner (default: %(default)s)")
    parser.add_argument("--image", metavar="NAME", default=defaults.image, help="Image name (default: %(default)s)")
    parser.add_argument("--warehouse", metavar="NAME", default=defaults.warehouse, help="Kargo warehouse name (default: %(default)s)")
    parser.add_argument("--namespace", metavar="NS", default=defaults.namespace, help="Kargo namespace (default: %(default)s)")
    return parser


def parse_release_args(argv: Sequence[str], defaults: Optional[ReleaseDefaults] = None) -> ReleaseOptions:
    """
    Parse ``build-push`` arguments.

    Raises:
        UsageError: Unknown option, unexpected argument or missing VERSION
        SystemExit: With status 0 for ``-h/--help``
    """
    parser = build_parser(defaults)
    namespace, extras = parser.parse_known_args(list(argv))
    for extra in extras:
        if extra.startswith("-"):
            raise UsageError(f"Unknown option: {extra}", usage_hint=f"Run '{PROG} --help' for usage")
    if extras:
        raise UsageError(f"Unexpected argument: {extras[0]}", usage_hint=f"Run '{PROG} --help' for usage")
    if not namespace.version:
        raise UsageError("VERSION is required", usage_hint=f"Run '{PROG} --help' for usage")

    return ReleaseOptions(
        version=namespace.version,
        trigger_kargo=namespace.trigger_kargo,
        skip_build=namespace.skip_build,
        registry_host=namespace.registry,
        owner=namespace.owner,
        image=namespace.image,
        warehouse=namespace.warehouse,
        namespace=namespace.namespace,
    )
