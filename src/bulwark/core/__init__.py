"""Bulwark core: error taxonomy, structured logging and settings."""

from bulwark.core.errors import (
    BulwarkError,
    ConfigurationError,
    ErrorCategory,
    OperationError,
    categorize_error,
    normalize_error,
)
from bulwark.core.logging import (
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)
from bulwark.core.settings import BulwarkSettings

__all__ = [
    # Errors
    "BulwarkError",
    "ConfigurationError",
    "ErrorCategory",
    "OperationError",
    "categorize_error",
    "normalize_error",
    # Logging
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    # Settings
    "BulwarkSettings",
]
