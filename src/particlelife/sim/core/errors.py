from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a simulation or partition is constructed with invalid settings."""
