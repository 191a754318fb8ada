"""Boundary configuration and validation.

``BoundaryConfig`` is a frozen dataclass: optional fields carry their
defaults here, and nothing about a boundary's policy changes after
construction. Validation is a separate step (``validate_config``) run by
both ``Boundary.__init__`` and ``create_boundary`` so that a half-specified
config can be built, inspected and rejected with a ``ConfigurationError``
rather than a ``TypeError``.

Example:
    >>> config = BoundaryConfig(
    ...     name="user-service",
    ...     fallback=lambda error, context: {"users": [], "degraded": True},
    ...     max_retries=2,
    ...     retry_delay_ms=50,
    ... )
    >>> validate_config(config)
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, Any, Callable, Mapping

from bulwark.core.errors import ConfigurationError

if TYPE_CHECKING:
    from bulwark.core.settings import BulwarkSettings
    from bulwark.execution.context import ErrorContext

FallbackHandler = Callable[[Exception, "ErrorContext"], Any]
ErrorHandler = Callable[[Exception, "ErrorContext"], Any]


@dataclass(frozen=True)
class BoundaryConfig:
    """Immutable boundary policy.

    Attributes:
        name: Identifier used in logs and error contexts
        fallback: Produces the degraded result once retries exhaust
        max_retries: Retries after the first attempt (0 = one attempt only)
        retry_delay_ms: Pause before each retry, in milliseconds
        on_error: Notified before the fallback runs; failures propagate
        rethrow: Raise the original error after the fallback has run
    """

    name: str = ""
    fallback: FallbackHandler | None = None
    max_retries: int = 0
    retry_delay_ms: float = 0
    on_error: ErrorHandler | None = None
    rethrow: bool = False

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def option_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    @classmethod
    def _check_option_names(cls, options: Mapping[str, Any]) -> None:
        unknown = set(options) - cls.option_names()
        if unknown:
            raise ConfigurationError(
                f"Unknown boundary option(s): {', '.join(sorted(unknown))}"
            )

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> BoundaryConfig:
        """Build a config from option names, rejecting unknown keys."""
        cls._check_option_names(options)
        return cls(**options)

    def with_options(self, **options: Any) -> BoundaryConfig:
        """Copy of this config with ``options`` replaced, rejecting unknown keys."""
        self._check_option_names(options)
        return replace(self, **options)

    @classmethod
    def from_settings(
        cls, settings: BulwarkSettings | None = None, **options: Any
    ) -> BoundaryConfig:
        """Build a config whose retry defaults come from ``BulwarkSettings``.

        Explicit ``options`` always win over the environment.
        """
        if settings is None:
            from bulwark.core.settings import BulwarkSettings

            settings = BulwarkSettings()
        merged: dict[str, Any] = {
            "max_retries": settings.max_retries,
            "retry_delay_ms": settings.retry_delay_ms,
            "rethrow": settings.rethrow,
        }
        merged.update(options)
        return cls.from_mapping(merged)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: BoundaryConfig) -> None:
    """Raise ``ConfigurationError`` unless ``config`` describes a usable boundary."""
    if not isinstance(config.name, str) or not config.name.strip():
        raise ConfigurationError("Boundary name must be a non-empty string")

    if config.fallback is None or not callable(config.fallback):
        raise ConfigurationError(
            f"Boundary '{config.name}' requires a callable fallback"
        )

    if not isinstance(config.max_retries, int) or isinstance(config.max_retries, bool):
        raise ConfigurationError(
            f"Boundary '{config.name}': max_retries must be an integer"
        )
    if config.max_retries < 0:
        raise ConfigurationError(
            f"Boundary '{config.name}': max_retries must be >= 0, got {config.max_retries}"
        )

    if not _is_number(config.retry_delay_ms) or config.retry_delay_ms < 0:
        raise ConfigurationError(
            f"Boundary '{config.name}': retry_delay_ms must be a non-negative number"
        )

    if config.on_error is not None and not callable(config.on_error):
        raise ConfigurationError(
            f"Boundary '{config.name}': on_error must be callable"
        )

    if not isinstance(config.rethrow, bool):
        raise ConfigurationError(
            f"Boundary '{config.name}': rethrow must be a bool"
        )


__all__ = [
    "BoundaryConfig",
    "ErrorHandler",
    "FallbackHandler",
    "validate_config",
]
