"""Bulwark execution: error boundaries around caller-supplied operations.

MODULE MAP
──────────
  1. config.py   ─ BoundaryConfig + validate_config
  2. context.py  ─ ErrorContext handed to on_error / fallback
  3. boundary.py ─ Boundary, BoundaryMetrics, create_boundary, with_boundary

Example::

    from bulwark.execution import create_boundary

    boundary = create_boundary(
        name="order-service",
        fallback=lambda error, context: {"orders": [], "degraded": True},
        max_retries=3,
        retry_delay_ms=100,
    )
    orders = boundary.execute(load_orders, {"operation": "load-orders"})
"""

from .boundary import (
    ERROR_WINDOW_MS,
    Boundary,
    BoundaryMetrics,
    create_boundary,
    now_ms,
    with_boundary,
)
from .config import BoundaryConfig, validate_config
from .context import ErrorContext, format_stack

__all__ = [
    "ERROR_WINDOW_MS",
    "Boundary",
    "BoundaryConfig",
    "BoundaryMetrics",
    "ErrorContext",
    "create_boundary",
    "format_stack",
    "now_ms",
    "validate_config",
    "with_boundary",
]
