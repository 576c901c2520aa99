"""
Release Pipeline

compile -> image build -> registry login -> push -> optional Kargo warehouse
refresh. Strictly sequential and fail-fast: the first failing step's exit
status becomes the command's exit status.
"""

from __future__ import annotations

import logging
import shutil
import sys
from typing import Callable, List, Optional, Sequence

from .errors import DevstackError, StepFailedError, ToolNotFoundError, UsageError
from .release_pipeline_helpers import (
    CommandRunner,
    ReleaseOptions,
    compile_steps,
    image_build_command,
    kargo_refresh_command,
    login_to_registry,
    parse_release_args,
    push_command,
)

logger = logging.getLogger(__name__)

_RULE = "=" * 44


class ReleasePipeline:
    def __init__(
        self,
        options: ReleaseOptions,
        *,
        runner: Optional[CommandRunner] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        self.options = options
        self.runner = runner or CommandRunner()
        self.which = which
        self.completed: List[str] = []

    def run(self) -> None:
        """
        Execute every step in order.

        Raises:
            StepFailedError: A step exited non-zero
            ToolNotFoundError: A required CLI is missing
        """
        opts = self.options
        logger.info(_RULE)
        logger.info("Build and Push")
        logger.info(_RULE)
        logger.info("Version:    %s", opts.version)
        logger.info("Image:      %s", opts.full_image)
        logger.info("Kargo:      %s", str(opts.trigger_kargo).lower())
        logger.info(_RULE)

        if opts.skip_build:
            logger.info(">>> Skipping build (--skip-build)")
        else:
            for label, argv in compile_steps():
                self._step(label, argv)

        self._step("Building Docker image", image_build_command(opts))

        logger.info(">>> Logging into registry %s...", opts.registry_host)
        login_to_registry(opts, self.runner, which=self.which)
        self.completed.append("login")

        self._step(f"Pushing image to {opts.full_image}", push_command(opts))
        logger.info(">>> Image pushed successfully!")
        logger.info("    %s", opts.full_image)

        if opts.trigger_kargo:
            self._trigger_kargo()

        logger.info(_RULE)
        logger.info("Done!")
        logger.info(_RULE)

    def _trigger_kargo(self) -> None:
        opts = self.options
        logger.info(">>> Triggering Kargo warehouse refresh...")
        command = kargo_refresh_command(opts)
        if not self.which("kargo"):
            raise ToolNotFoundError(
                "kargo",
                "Install kargo CLI or trigger manually:\n  " + " ".join(command),
            )
        self._step("Refreshing Kargo warehouse", command)
        logger.info(">>> Kargo warehouse refresh triggered")
        logger.info("    Warehouse: %s", opts.warehouse)
        logger.info("    Namespace: %s", opts.namespace)

    def _step(self, label: str, argv: Sequence[str]) -> None:
        logger.info(">>> %s...", label)
        self.runner.run(label, argv)
        self.completed.append(label)


def main(argv: Optional[Sequence[str]] = None, *, runner: Optional[CommandRunner] = None) -> int:
    """Entry point for ``devstack build-push``; returns the process exit status."""
    try:
        options = parse_release_args(sys.argv[1:] if argv is None else argv)
    except UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if exc.usage_hint:
            print(exc.usage_hint, file=sys.stderr)
        return exc.exit_code

    try:
        ReleasePipeline(options, runner=runner).run()
    except ToolNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return exc.exit_code
    except StepFailedError as exc:
        logger.error("%s", exc)
        return exc.exit_code
    except DevstackError as exc:
        logger.error("Release failed: %s", exc)
        return exc.exit_code
    return 0


__all__ = ["ReleaseOptions", "ReleasePipeline", "main"]
