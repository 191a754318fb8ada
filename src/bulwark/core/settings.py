"""Environment-driven defaults for bulwark.

Boundaries are usually declared in code, but the retry budget and log
output are operational knobs. ``BulwarkSettings`` reads them from
``BULWARK_*`` environment variables (or a ``.env`` file) so operators can
tune a deployment without touching the call sites.

Fields
──────
max_retries    : Default retry budget for ``BoundaryConfig.from_settings``
retry_delay_ms : Default pause between attempts, in milliseconds
rethrow        : Default rethrow policy
log_level      : Structlog log level
log_json       : Force JSON (true) or console (false); unset auto-detects

Examples:
    >>> from bulwark.core.settings import BulwarkSettings
    >>> settings = BulwarkSettings()          # BULWARK_MAX_RETRIES=2 in env
    >>> settings.max_retries
    2
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BulwarkSettings(BaseSettings):
    """Process-wide defaults, read from ``BULWARK_``-prefixed variables."""

    model_config = SettingsConfigDict(
        env_prefix="BULWARK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Retry policy ─────────────────────────────────────────────
    max_retries: int = Field(default=0, ge=0)
    retry_delay_ms: float = Field(default=0.0, ge=0)
    rethrow: bool = False

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
