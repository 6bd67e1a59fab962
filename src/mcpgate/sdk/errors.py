"""SDK error types."""

from __future__ import annotations


class ConfigError(Exception):
    """Raised when a settings file cannot be read, parsed or validated."""
