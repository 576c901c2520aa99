"""Helper modules for the release pipeline."""

from .command_runner import CommandResult, CommandRunner
from .options import ReleaseDefaults, ReleaseOptions, build_parser, get_release_defaults, parse_release_args
from .registry_login import CREDENTIALS_COMMAND, REGISTRY_LOGIN_USER, extract_password, login_to_registry
from .steps import compile_steps, image_build_command, kargo_refresh_command, push_command

__all__ = [
    "CREDENTIALS_COMMAND",
    "CommandResult",
    "CommandRunner",
    "REGISTRY_LOGIN_USER",
    "ReleaseDefaults",
    "ReleaseOptions",
    "build_parser",
    "compile_steps",
    "extract_password",
    "get_release_defaults",
    "image_build_command",
    "kargo_refresh_command",
    "login_to_registry",
    "parse_release_args",
    "push_command",
]
