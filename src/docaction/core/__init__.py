"""
Core primitives: errors, logging, settings, and collaborator protocols.

Modules
-------
errors          Stage error hierarchy + unified ActionError
logging         structlog configuration and helpers
settings        DocActionSettings (pydantic-settings) + get_settings()
protocols       ArgumentResolver, OutputSink, DatabaseClient, StorageSlot
awaitables      maybe_await() for sync/async driver calls
"""

from docaction.core.errors import (
    ActionError,
    CleanupError,
    ConfigError,
    DatabaseConnectionError,
    DispatchError,
    DocActionError,
    ErrorCategory,
    ErrorContext,
    ErrorRecord,
    ErrorStage,
    ExecutionError,
    ParseError,
    StoredConnectionClosedWarning,
    ValidationError,
)
from docaction.core.logging import configure_logging, get_logger
from docaction.core.settings import DocActionSettings, get_settings

__all__ = [
    "ActionError",
    "CleanupError",
    "ConfigError",
    "DatabaseConnectionError",
    "DispatchError",
    "DocActionError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorRecord",
    "ErrorStage",
    "ExecutionError",
    "ParseError",
    "StoredConnectionClosedWarning",
    "ValidationError",
    "configure_logging",
    "get_logger",
    "DocActionSettings",
    "get_settings",
]
