"""Configuration and input validation exceptions."""

from typing import Any

from .base import ErrorScopeError


class ConfigurationError(ErrorScopeError):
    """Base class for configuration-related errors."""

    pass


class ValidationError(ConfigurationError):
    """Raised when input to a public operation is malformed."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            f"Invalid input for {field}: {reason}",
            details={"field": field, "reason": reason},
        )
        self.field = field
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason
