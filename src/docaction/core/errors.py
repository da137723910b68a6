"""
Structured error types for docaction.

Every stage of a database action (validating inputs, connecting, parsing
arguments, dispatching, executing, releasing the connection) raises its own
typed error. At the action boundary all of them are folded into a single
:class:`ActionError` whose message carries a fixed prefix plus the original
text, so hosts only ever have to handle one error kind.

Manifesto:
    - **Typed stage errors:** Each stage has its own class and category
    - **One outward kind:** Callers see ``ActionError`` and a message
    - **Error chaining:** The original exception is kept as ``cause``
    - **Rich context:** Errors carry metadata for logging

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                      DocActionError                          │
        │        (category, retryable, context, cause)                 │
        ├──────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ValidationError     ParseError          DispatchError       │
        │  (VALIDATION)        (PARSE)             (DISPATCH)          │
        │                                                              │
        │  DatabaseConnectionError   ExecutionError    CleanupError    │
        │  (DATABASE, retryable)     (EXECUTION)       (DATABASE)      │
        │                                                              │
        │  ActionError  (unified kind, carries ErrorRecord)            │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ParseError("Invalid JSON in Arguments field: ...")
    >>> error.category
    <ErrorCategory.PARSE: 'PARSE'>
    >>> wrapped = ActionError.wrap(error)
    >>> str(wrapped).startswith("MongoDB Action Error: ")
    True
    >>> wrapped.record.stage
    <ErrorStage.PARSE: 'parse'>

Guardrails:
    ❌ DON'T: Let a driver exception escape a database action unwrapped
    ✅ DO: Raise the stage error and let the action boundary wrap it

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, docaction

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ACTION_ERROR_PREFIX = "MongoDB Action Error"


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        VALIDATION: Missing or malformed required input
        PARSE: Argument text is not a JSON array
        DATABASE: Connecting to or closing the database
        DISPATCH: Operation name not valid for the collection
        EXECUTION: The operation itself failed
        CONFIG: Invalid settings
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    VALIDATION = "VALIDATION"
    PARSE = "PARSE"
    DATABASE = "DATABASE"
    DISPATCH = "DISPATCH"
    EXECUTION = "EXECUTION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


class ErrorStage(str, Enum):
    """Stage of a database action in which a failure originated."""

    VALIDATION = "validation"
    CONNECTION = "connection"
    PARSE = "parse"
    DISPATCH = "dispatch"
    EXECUTION = "execution"
    CLEANUP = "cleanup"


@dataclass(frozen=True)
class ErrorRecord:
    """Where a failure happened and what it said."""

    stage: ErrorStage
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"stage": self.stage.value, "message": self.message}


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Attributes:
        operation: Operation name requested by the caller
        database: Target database name
        collection: Target collection name
        request_id: Identifier of the action invocation
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    database: str | None = None
    collection: str | None = None
    request_id: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "database", "collection", "request_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result

    def merged(self, other: ErrorContext) -> ErrorContext:
        """Return a copy filled in from ``other`` where this context is empty."""
        return ErrorContext(
            operation=self.operation if self.operation is not None else other.operation,
            database=self.database if self.database is not None else other.database,
            collection=self.collection if self.collection is not None else other.collection,
            request_id=self.request_id if self.request_id is not None else other.request_id,
            metadata={**other.metadata, **self.metadata},
        )


class DocActionError(Exception):
    """
    Base exception for all docaction errors.

    Subclasses set ``default_category``, ``default_retryable`` and ``stage``
    so that the action boundary can classify them without isinstance chains.

    Examples:
        >>> error = DocActionError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(operation="find").context.operation
        'find'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False
    stage: ErrorStage = ErrorStage.EXECUTION

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DocActionError:
        """
        Add context to this error (fluent API).

        Usage:
            raise DispatchError("...").with_context(operation="fnd")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# STAGE ERRORS
# =============================================================================


class ValidationError(DocActionError):
    """A required input is missing or has the wrong shape."""

    default_category = ErrorCategory.VALIDATION
    stage = ErrorStage.VALIDATION

    def __init__(self, message: str, *, field: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class ParseError(DocActionError):
    """The argument text is not a valid JSON array."""

    default_category = ErrorCategory.PARSE
    stage = ErrorStage.PARSE

    def __init__(self, message: str, *, raw_input: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.raw_input = raw_input


class DatabaseConnectionError(DocActionError):
    """The database could not be reached or the client could not be created."""

    default_category = ErrorCategory.DATABASE
    default_retryable = True
    stage = ErrorStage.CONNECTION


class DispatchError(DocActionError):
    """The operation name does not resolve to a callable on the collection."""

    default_category = ErrorCategory.DISPATCH
    stage = ErrorStage.DISPATCH

    def __init__(self, message: str, *, operation: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.operation = operation


class ExecutionError(DocActionError):
    """The operation rejected its arguments or the server reported an error."""

    default_category = ErrorCategory.EXECUTION
    stage = ErrorStage.EXECUTION


class CleanupError(DocActionError):
    """Closing the connection failed."""

    default_category = ErrorCategory.DATABASE
    stage = ErrorStage.CLEANUP


class ConfigError(DocActionError):
    """Settings are missing or invalid."""

    default_category = ErrorCategory.CONFIG
    stage = ErrorStage.VALIDATION


# =============================================================================
# UNIFIED ERROR
# =============================================================================


class ActionError(DocActionError):
    """
    The single error kind surfaced by a database action.

    The message is ``"MongoDB Action Error: <original message>"``. The stage
    the failure came from is kept on :attr:`record` for logging; callers are
    not expected to branch on it.
    """

    def __init__(self, message: str, *, record: ErrorRecord, **kwargs: Any):
        super().__init__(f"{ACTION_ERROR_PREFIX}: {message}", **kwargs)
        self.record = record

    @property
    def original_message(self) -> str:
        return self.record.message

    @classmethod
    def wrap(
        cls,
        error: BaseException,
        *,
        stage: ErrorStage | None = None,
        context: ErrorContext | None = None,
    ) -> ActionError:
        """Fold any exception into the unified kind.

        ``stage`` is used only when ``error`` is not one of our stage errors.
        """
        if isinstance(error, ActionError):
            return error
        if isinstance(error, DocActionError):
            message = error.message
            category = error.category
            retryable = error.retryable
            stage = error.stage
            context = error.context if context is None else context.merged(error.context)
        else:
            message = str(error) or error.__class__.__name__
            category = ErrorCategory.UNKNOWN
            retryable = False
            stage = stage or ErrorStage.EXECUTION
        return cls(
            message,
            record=ErrorRecord(stage=stage, message=message),
            category=category,
            retryable=retryable,
            context=context,
            cause=error,
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["stage"] = self.record.stage.value
        return result


# =============================================================================
# WARNINGS
# =============================================================================


class StoredConnectionClosedWarning(UserWarning):
    """A connection was stored for reuse but is being closed by the same action."""


# =============================================================================
# HELPERS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check whether an error is marked retryable."""
    if isinstance(error, DocActionError):
        return error.retryable
    return False


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, DocActionError):
        return error.category
    return ErrorCategory.UNKNOWN


__all__ = [
    "ACTION_ERROR_PREFIX",
    "ErrorCategory",
    "ErrorStage",
    "ErrorRecord",
    "ErrorContext",
    "DocActionError",
    "ValidationError",
    "ParseError",
    "DatabaseConnectionError",
    "DispatchError",
    "ExecutionError",
    "CleanupError",
    "ConfigError",
    "ActionError",
    "StoredConnectionClosedWarning",
    "is_retryable",
    "categorize_error",
]
