"""Local development stack orchestration: supervisor, telemetry relay and release tooling."""

__version__ = "0.1.0"
