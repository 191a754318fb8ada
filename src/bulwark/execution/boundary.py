"""Error boundaries: retry, fall back, and keep score.

A boundary runs a caller-supplied operation, retries it on failure, and
when the retry budget is spent hands the final error to a caller-supplied
fallback whose result stands in for the operation's. Every boundary keeps
its own metrics and a sticky error flag so callers can see which parts of
the system are degraded.

Lifecycle of one call::

    attempt 0 ──ok──────────────────────────────► result
        │fail
        ▼  (sleep retry_delay_ms)
    attempt 1 ──ok──► recovery_count += 1 ──────► result
        │fail
        ▼
      ...  (max_retries + 1 attempts in total)
        │fail
        ▼
    exhausted:
      build ErrorContext
      error_count += 1, fallback_count += 1, error state = True
      on_error(error, context)       (optional, failures propagate)
      fallback(error, context) ────────────────► fallback result
      rethrow? ────────────────────────────────► raise original error

Every failed attempt, not just exhausted calls, is timestamped into a
60-second window that backs ``error_rate``.

Example:
    >>> from bulwark.execution.boundary import create_boundary
    >>>
    >>> boundary = create_boundary(
    ...     name="user-service",
    ...     fallback=lambda error, context: {"users": [], "degraded": True},
    ...     max_retries=2,
    ...     retry_delay_ms=100,
    ... )
    >>> boundary.execute(fetch_users, {"operation": "fetch-users"})
    {'users': [], 'degraded': True}
    >>> boundary.get_metrics().error_count
    1
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import threading
import time
from dataclasses import asdict, dataclass, replace
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from bulwark.core.errors import categorize_error, normalize_error
from bulwark.core.logging import get_logger
from bulwark.execution.config import BoundaryConfig, validate_config
from bulwark.execution.context import ErrorContext

T = TypeVar("T")

logger = get_logger(__name__)

# Trailing window for error_rate, in milliseconds.
ERROR_WINDOW_MS = 60_000

# Never absorbed by a boundary: interpreter shutdown and task cancellation.
_PASSTHROUGH = (KeyboardInterrupt, SystemExit, GeneratorExit, asyncio.CancelledError)


def now_ms() -> int:
    """Return wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class BoundaryMetrics:
    """Counters for one boundary.

    ``fallback_count`` always equals ``error_count``: the fallback runs on
    every exhausted call, including ones that go on to rethrow.
    """

    error_count: int = 0
    fallback_count: int = 0
    recovery_count: int = 0
    last_error_at: int | None = None
    error_rate: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class Boundary:
    """Error-isolation wrapper around an operation.

    Construct through ``create_boundary`` or directly from a
    ``BoundaryConfig``; both validate the config and raise
    ``ConfigurationError`` on a bad one.

    Attributes:
        name: Identifier for this boundary
        config: The immutable policy it was built with
    """

    def __init__(
        self,
        config: BoundaryConfig,
        *,
        clock: Callable[[], int] | None = None,
    ):
        validate_config(config)
        self._config = config
        self._clock = clock or now_ms
        self._metrics = BoundaryMetrics()
        self._error_timestamps: list[int] = []
        self._in_error_state = False
        self._lock = threading.Lock()

        logger.debug(
            "boundary_created",
            boundary=config.name,
            max_retries=config.max_retries,
            retry_delay_ms=config.retry_delay_ms,
            rethrow=config.rethrow,
        )

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> BoundaryConfig:
        return self._config

    def __repr__(self) -> str:
        return f"Boundary(name={self.name!r}, in_error_state={self._in_error_state})"

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(
        self,
        operation: Callable[[], T],
        context: Mapping[str, Any] | None = None,
    ) -> T | Any:
        """Run ``operation`` inside the boundary, blocking between retries.

        Args:
            operation: Zero-argument callable doing the work
            context: Caller fields merged into the ``ErrorContext`` on failure

        Returns:
            The operation's result, or the fallback's once retries exhaust

        Raises:
            The final operation error, after the fallback ran, if ``rethrow``
            is set; any exception raised by ``on_error`` or ``fallback``.
        """
        config = self._config
        attempt = 0

        while True:
            try:
                result = operation()
            except _PASSTHROUGH:
                raise
            except BaseException as exc:
                error = normalize_error(exc)
                self._record_attempt_failure(error, attempt)
                attempt += 1
                if attempt >= config.max_attempts:
                    break
                if config.retry_delay_ms > 0:
                    time.sleep(config.retry_delay_ms / 1000)
                continue

            if attempt > 0:
                self._record_recovery(attempt + 1)
            return result

        error_context = self._record_exhausted(error, context)

        if config.on_error is not None:
            config.on_error(error, error_context)
        fallback_result = config.fallback(error, error_context)

        if config.rethrow:
            raise error
        return fallback_result

    async def execute_async(
        self,
        operation: Callable[[], Awaitable[T]],
        context: Mapping[str, Any] | None = None,
    ) -> T | Any:
        """Async variant of ``execute``.

        ``operation`` must return an awaitable. ``on_error`` and ``fallback``
        may be plain functions or coroutine functions. The retry delay uses
        ``asyncio.sleep`` so other calls on the same boundary keep running.
        """
        config = self._config
        attempt = 0

        while True:
            try:
                result = await operation()
            except _PASSTHROUGH:
                raise
            except BaseException as exc:
                error = normalize_error(exc)
                self._record_attempt_failure(error, attempt)
                attempt += 1
                if attempt >= config.max_attempts:
                    break
                if config.retry_delay_ms > 0:
                    await asyncio.sleep(config.retry_delay_ms / 1000)
                continue

            if attempt > 0:
                self._record_recovery(attempt + 1)
            return result

        error_context = self._record_exhausted(error, context)

        if config.on_error is not None:
            notified = config.on_error(error, error_context)
            if inspect.isawaitable(notified):
                await notified
        fallback_result = config.fallback(error, error_context)
        if inspect.isawaitable(fallback_result):
            fallback_result = await fallback_result

        if config.rethrow:
            raise error
        return fallback_result

    # ------------------------------------------------------------------
    # Bookkeeping (the only code that touches shared state)
    # ------------------------------------------------------------------

    def _prune(self, now: int) -> None:
        """Drop timestamps outside the window. Caller holds the lock."""
        cutoff = now - ERROR_WINDOW_MS
        self._error_timestamps = [ts for ts in self._error_timestamps if ts > cutoff]

    def _record_attempt_failure(self, error: Exception, attempt: int) -> None:
        now = self._clock()
        with self._lock:
            self._error_timestamps.append(now)
            self._prune(now)

        logger.debug(
            "boundary_attempt_failed",
            boundary=self.name,
            attempt=attempt + 1,
            max_attempts=self._config.max_attempts,
            category=categorize_error(error).value,
            error_type=type(error).__name__,
            error=str(error),
        )

    def _record_recovery(self, attempts: int) -> None:
        with self._lock:
            self._metrics.recovery_count += 1

        logger.info("boundary_recovered", boundary=self.name, attempts=attempts)

    def _record_exhausted(
        self, error: Exception, partial: Mapping[str, Any] | None
    ) -> ErrorContext:
        # The window is pruned against the boundary's clock; a caller-supplied
        # "timestamp" only shows up in the context and last_error_at.
        now = self._clock()
        error_context = ErrorContext.build(
            self.name,
            error,
            timestamp=now,
            attempts=self._config.max_attempts,
            partial=partial,
        )

        with self._lock:
            self._metrics.error_count += 1
            self._metrics.fallback_count += 1
            self._metrics.last_error_at = error_context.timestamp
            self._prune(now)
            self._metrics.error_rate = len(self._error_timestamps)
            self._in_error_state = True

        logger.warning(
            "boundary_exhausted",
            boundary=self.name,
            attempts=self._config.max_attempts,
            category=categorize_error(error).value,
            error_type=type(error).__name__,
            error=str(error),
            rethrow=self._config.rethrow,
        )
        return error_context

    # ------------------------------------------------------------------
    # Metrics and state
    # ------------------------------------------------------------------

    def get_metrics(self) -> BoundaryMetrics:
        """Snapshot of the metrics with ``error_rate`` recomputed now."""
        with self._lock:
            self._prune(self._clock())
            self._metrics.error_rate = len(self._error_timestamps)
            return replace(self._metrics)

    def reset_metrics(self) -> None:
        """Zero all counters and forget the error history.

        The error state is left alone; see ``clear_error_state``.
        """
        with self._lock:
            self._metrics = BoundaryMetrics()
            self._error_timestamps = []

        logger.info("boundary_metrics_reset", boundary=self.name)

    def is_in_error_state(self) -> bool:
        return self._in_error_state

    def clear_error_state(self) -> None:
        """Reset the sticky error flag. Metrics are untouched."""
        with self._lock:
            self._in_error_state = False

        logger.info("boundary_error_state_cleared", boundary=self.name)


def create_boundary(
    config: BoundaryConfig | Mapping[str, Any] | None = None,
    /,
    *,
    clock: Callable[[], int] | None = None,
    **options: Any,
) -> Boundary:
    """Validate a configuration and build a boundary from it.

    Args:
        config: A ``BoundaryConfig``, a mapping of option names, or None
        clock: Epoch-millisecond clock (tests inject a fake one)
        **options: Option overrides (``name``, ``fallback``, ``max_retries``,
            ``retry_delay_ms``, ``on_error``, ``rethrow``)

    Raises:
        ConfigurationError: Unknown option, missing/blank name, missing or
            non-callable fallback, or an out-of-range retry setting
    """
    if isinstance(config, BoundaryConfig):
        if options:
            config = config.with_options(**options)
    else:
        config = BoundaryConfig.from_mapping({**(config or {}), **options})

    return Boundary(config, clock=clock)


def with_boundary(
    boundary: Boundary, **context: Any
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator factory running every call of a function through ``boundary``.

    Example:
        >>> @with_boundary(users_boundary, operation="fetch-users")
        ... def fetch_users(team_id):
        ...     return api.get(f"/teams/{team_id}/users")
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                return await boundary.execute_async(
                    lambda: func(*args, **kwargs), context
                )
            return async_wrapper
        else:
            @functools.wraps(func)
            def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
                return boundary.execute(lambda: func(*args, **kwargs), context)
            return sync_wrapper

    return decorator


__all__ = [
    "ERROR_WINDOW_MS",
    "Boundary",
    "BoundaryMetrics",
    "create_boundary",
    "now_ms",
    "with_boundary",
]
