"""Common error types used across devstack."""

from __future__ import annotations

from typing import Optional, Sequence


class DevstackError(RuntimeError):
    """Base class for every error raised deliberately by devstack."""

    exit_code = 1


class UsageError(DevstackError):
    """Raised when command-line arguments are missing or unknown."""

    def __init__(self, message: str, *, usage_hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.usage_hint = usage_hint


class ToolNotFoundError(DevstackError):
    """Raised when a required external CLI is not installed."""

    def __init__(self, tool: str, hint: str = "") -> None:
        message = f"{tool} CLI not found"
        if hint:
            message += f"\n{hint}"
        super().__init__(message)
        self.tool = tool
        self.hint = hint


class StepFailedError(DevstackError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, step: str, returncode: int, command: Sequence[str] = ()) -> None:
        rendered = " ".join(command)
        message = f"Step '{step}' failed with exit code {returncode}"
        if rendered:
            message += f": {rendered}"
        super().__init__(message)
        self.step = step
        self.returncode = returncode
        self.command = tuple(command)

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.returncode or 1


class UpstreamUnavailableError(DevstackError):
    """Raised when the telemetry upstream cannot accept a batch."""

    def __init__(self, endpoint: str, *, reason: str, status: Optional[int] = None) -> None:
        message = f"Upstream {endpoint} unavailable: {reason}"
        super().__init__(message)
        self.endpoint = endpoint
        self.reason = reason
        self.status = status


__all__ = [
    "DevstackError",
    "StepFailedError",
    "ToolNotFoundError",
    "UpstreamUnavailableError",
    "UsageError",
]
