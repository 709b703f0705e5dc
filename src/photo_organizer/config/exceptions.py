"""Custom exceptions for configuration management."""


class ConfigError(Exception):
    """Raised when application settings cannot be loaded or validated."""
