"""
Structured error types for bulwark.

Every failure a boundary surfaces falls into one of three kinds: the caller
built the boundary wrong, the wrapped operation failed, or the caller's own
fallback/on_error handler failed. Only the first two are modelled here; a
handler failure is the caller's exception and propagates untouched.

Manifesto:
    - **Typed hierarchy:** One base class, one subclass per failure domain
    - **Preserve the original:** Operation errors keep their own type
    - **Normalize at the edge:** Non-Exception failures become OperationError
    - **Serializable:** to_dict() for structured logging

Architecture:
    ::

        ┌──────────────────────────────────────────────────────┐
        │                    BulwarkError                       │
        │             (message, category, cause)                │
        ├──────────────────────────────────────────────────────┤
        │                                                       │
        │  ConfigurationError          OperationError           │
        │  (CONFIG, construction)      (OPERATION, normalized)  │
        │                                                       │
        └──────────────────────────────────────────────────────┘

Examples:
    Rejecting a bad boundary definition:

    >>> raise ConfigurationError("Boundary name must be a non-empty string")
    Traceback (most recent call last):
    ...
    ConfigurationError: Boundary name must be a non-empty string

    Normalizing a failure signal:

    >>> normalize_error(ValueError("boom"))
    ValueError('boom')
    >>> normalize_error("disk full")
    OperationError('disk full', category=OPERATION)

Guardrails:
    ❌ DON'T: Wrap ordinary exceptions raised by operations
    ✅ DO: Hand the caller back the exception its own code raised

    ❌ DON'T: Catch failures raised by fallback or on_error handlers
    ✅ DO: Let defective handlers fail loudly

Tags:
    error-handling, exception-hierarchy, normalization, bulwark
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification in logs."""

    CONFIG = "CONFIG"             # Invalid boundary definition
    OPERATION = "OPERATION"       # Failure raised by a wrapped operation
    NETWORK = "NETWORK"           # Connection, timeout, DNS
    VALIDATION = "VALIDATION"     # Bad values passed to an operation
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


class BulwarkError(Exception):
    """
    Base exception for all bulwark errors.

    Subclasses set ``default_category`` so callers and log processors can
    route on ``category`` without isinstance chains.

    Examples:
        >>> error = BulwarkError("unexpected", category=ErrorCategory.INTERNAL)
        >>> error.to_dict()["category"]
        'INTERNAL'

        Chaining the original failure:

        >>> error = OperationError("stopped", cause=StopIteration())
        >>> error.__cause__
        StopIteration()
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class ConfigurationError(BulwarkError):
    """Invalid boundary configuration, raised at construction time."""

    default_category = ErrorCategory.CONFIG


class OperationError(BulwarkError):
    """Normalized form of a failure that was not an ``Exception`` instance."""

    default_category = ErrorCategory.OPERATION


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def normalize_error(value: Any) -> Exception:
    """Convert any failure signal into one canonical ``Exception``.

    ``Exception`` instances are returned unchanged. Anything else (a
    ``BaseException`` that is not an ``Exception``, a string, ``None``) is
    wrapped in an ``OperationError`` whose message is the value's string
    representation.
    """
    if isinstance(value, Exception):
        return value
    cause = value if isinstance(value, BaseException) else None
    return OperationError(str(value), cause=cause)


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, BulwarkError):
        return error.category
    if isinstance(error, (ConnectionError, TimeoutError)):
        return ErrorCategory.NETWORK
    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "BulwarkError",
    "ConfigurationError",
    "OperationError",
    "normalize_error",
    "categorize_error",
]
