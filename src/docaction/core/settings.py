"""Runtime settings for docaction.

All fields can be set through ``DOCACTION_*`` environment variables or a
``.env`` file in the working directory::

    DOCACTION_SERVER_SELECTION_TIMEOUT_MS=5000
    DOCACTION_MAX_DOCUMENTS=10000

Tags:
    settings, configuration, pydantic, environment, docaction

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docaction.core.errors import ConfigError


class DocActionSettings(BaseSettings):
    """Settings shared by the executor, the connection manager and the CLI.

    Fields
    ──────
    log_level                    : structlog log level
    log_json                     : JSON log output (``None`` = auto-detect tty)
    server_selection_timeout_ms  : how long the driver waits for a server
    app_name                     : ``appname`` reported to the server
    ping_on_connect              : verify reachability while connecting
    max_documents                : cap on documents drained from one cursor
    default_uri                  : connection string used by the CLI when none is given
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCACTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_json: bool | None = Field(default=None)

    # ── Connection ───────────────────────────────────────────────
    server_selection_timeout_ms: int = Field(default=30_000, gt=0)
    app_name: str = Field(default="docaction")
    ping_on_connect: bool = Field(default=True)
    default_uri: str | None = Field(default=None)

    # ── Results ──────────────────────────────────────────────────
    max_documents: int | None = Field(
        default=None,
        gt=0,
        description="Upper bound on documents drained from a cursor (None = unbounded)",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return value


# ── Settings factory with caching ────────────────────────────────────────

_settings: DocActionSettings | None = None


def get_settings(*, _force_reload: bool = False) -> DocActionSettings:
    """Load, validate, and cache the process-wide settings.

    Raises:
        ConfigError: an environment variable or ``.env`` entry is invalid.
    """
    global _settings
    if _settings is None or _force_reload:
        try:
            _settings = DocActionSettings()
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'settings'}: {err['msg']}" for err in e.errors()
            )
            raise ConfigError(f"Invalid settings: {problems}", cause=e) from e
    return _settings


def reset_settings() -> None:
    """Clear the settings cache (primarily for testing)."""
    global _settings
    _settings = None


__all__ = [
    "DocActionSettings",
    "get_settings",
    "reset_settings",
]
