"""Error context handed to ``on_error`` and ``fallback`` handlers.

One ``ErrorContext`` is built per exhausted call. It carries what the
boundary knows (its name, when the call gave up, the final traceback, how
many attempts were made) merged with whatever the caller passed to
``execute``. Caller keys win on collision: a caller key that names a field
overrides it, every other key lands in ``extra``.

Example:
    >>> def fallback(error, context):
    ...     return {"error": f"{context.operation} failed", "retry_after": 30}
    >>>
    >>> boundary.execute(fetch_users, {"operation": "fetch-users"})
    {'error': 'fetch-users failed', 'retry_after': 30}
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field, fields
from typing import Any, Mapping


def format_stack(error: BaseException) -> str:
    """Render an exception and its traceback the way the interpreter would."""
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


@dataclass
class ErrorContext:
    """Context for one exhausted boundary call.

    Attributes:
        boundary_name: Name of the boundary that gave up
        timestamp: Epoch milliseconds when the call was declared exhausted
        stack: Formatted traceback of the final error
        attempts: Attempts made during the call
        extra: Caller-supplied fields that are not context attributes
    """

    boundary_name: str
    timestamp: int
    stack: str | None = None
    attempts: int = 1
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        boundary_name: str,
        error: BaseException,
        *,
        timestamp: int,
        attempts: int,
        partial: Mapping[str, Any] | None = None,
    ) -> ErrorContext:
        context = cls(
            boundary_name=boundary_name,
            timestamp=timestamp,
            stack=format_stack(error),
            attempts=attempts,
        )
        if partial:
            for key, value in partial.items():
                if key in _ATTRIBUTES:
                    setattr(context, key, value)
                else:
                    context.extra[key] = value
        return context

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def __getitem__(self, key: str) -> Any:
        if key in _ATTRIBUTES:
            return getattr(self, key)
        return self.extra[key]

    def __contains__(self, key: object) -> bool:
        return key in _ATTRIBUTES or key in self.extra

    def __getattr__(self, name: str) -> Any:
        # Only reached for names that are not dataclass fields.
        extra = self.__dict__.get("extra")
        if extra is not None and name in extra:
            return extra[name]
        raise AttributeError(
            f"{type(self).__name__!r} object has no attribute {name!r}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Flatten into one mapping; caller fields sit beside the boundary's."""
        result: dict[str, Any] = {name: getattr(self, name) for name in _ATTRIBUTES}
        result.update(self.extra)
        return result


_ATTRIBUTES = tuple(f.name for f in fields(ErrorContext) if f.name != "extra")


__all__ = ["ErrorContext", "format_stack"]
