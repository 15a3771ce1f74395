"""Application-level exception types for askdb."""

from __future__ import annotations


class AskDBError(Exception):
    """Base exception for askdb."""


class ConfigurationError(AskDBError):
    """Base exception for configuration and startup validation errors."""


class ModelNotConfiguredError(ConfigurationError):
    """Raised when model configuration is missing."""


class TokenNotConfiguredError(ConfigurationError):
    """Raised when the messaging transport has no token to log in with."""


class ExecutionError(AskDBError):
    """Raised when the database rejects or cannot run a query."""


class ServiceError(AskDBError):
    """Raised when the language model call fails or returns unusable output."""


class TransportError(AskDBError):
    """Raised when the messaging session is stale, closed or rejects a send."""
