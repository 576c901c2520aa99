"""Exception types for configuration handling."""

from __future__ import annotations

from ..errors import DevstackError


class ConfigurationError(DevstackError):
    """Raised when configuration values are missing or malformed."""

    @classmethod
    def invalid_format(
        cls, param_name: str, received_value: str, expected_format: str = ""
    ) -> "ConfigurationError":
        """Create error for invalid format."""
        msg = f"{param_name} has invalid format (received {received_value!r})"
        if expected_format:
            msg += f". Expected {expected_format}"
        return cls(msg)

    @classmethod
    def missing_value(cls, param_name: str, context: str = "") -> "ConfigurationError":
        """Create error for missing value."""
        msg = f"{param_name} is missing or empty"
        if context:
            msg += f": {context}"
        return cls(msg)

    @classmethod
    def invalid_value(cls, param_name: str, value, reason: str = "") -> "ConfigurationError":
        """Create error for invalid value."""
        msg = f"Invalid value for {param_name}: {value!r}"
        if reason:
            msg += f". {reason}"
        return cls(msg)

    @classmethod
    def load_failed(cls, resource: str, identifier: str = "") -> "ConfigurationError":
        """Create error for failed resource load."""
        msg = f"Failed to load {resource}"
        if identifier:
            msg += f" for {identifier}"
        return cls(msg)

    @classmethod
    def duplicate_name(cls, kind: str, name: str) -> "ConfigurationError":
        """Create error for a name declared more than once."""
        return cls(f"Duplicate {kind} name detected: {name}")

    @classmethod
    def unknown_reference(cls, owner: str, reference: str) -> "ConfigurationError":
        """Create error for a dependency on an undeclared process."""
        return cls(f"Process {owner!r} depends on unknown process {reference!r}")


class DependencyCycleError(ConfigurationError):
    """Raised when process dependencies form a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        super().__init__("Dependency cycle detected: " + " -> ".join(cycle))
        self.cycle = list(cycle)


__all__ = ["ConfigurationError", "DependencyCycleError"]
