"""
Command dispatcher — run one allow-listed operation on a collection.

Arguments arrive as a JSON array and are applied positionally, in order, to
the driver method the operation maps to. When the caller passes one argument
more than the operation's positional parameters, the trailing argument is the
options object (``{"upsert": true}``, ``{"returnDocument": "after"}``) and is
translated to the driver's keyword arguments::

    arguments = parse_arguments('[{"status": "open"}, {"limit": 5}]')
    cursor = await dispatch(collection, "find", arguments)
    # collection.find({"status": "open"}, limit=5)

The dispatcher does not check argument types; the driver does, and its
complaints surface as :class:`ExecutionError`.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

from bson.errors import BSONError
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from docaction.core.awaitables import maybe_await
from docaction.core.errors import DispatchError, ExecutionError, ParseError
from docaction.core.logging import get_logger

from .registry import OperationRegistry, OperationSpec, operation_registry

logger = get_logger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Keys whose snake_case form is not a plain camelCase split.
_OPTION_ALIASES = {
    "maxTimeMS": "max_time_ms",
    "maxAwaitTimeMS": "max_await_time_ms",
    "returnNewDocument": "return_document",
    "new": "return_document",
}

_RETURN_DOCUMENT = {
    "after": ReturnDocument.AFTER,
    "before": ReturnDocument.BEFORE,
}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


# ── Argument parsing ─────────────────────────────────────────────────────


def parse_arguments(text: Any) -> list[Any]:
    """Decode the JSON argument list.

    Raises:
        ParseError: ``text`` is not valid JSON, or decodes to something other
            than an array. The offending input is embedded in the message.
    """
    if text is None or text == "":
        text = "[]"
    try:
        if not isinstance(text, str | bytes | bytearray):
            raise ValueError(f"expected JSON text, got {type(text).__name__}")
        arguments = json.loads(text, parse_constant=_reject_constant)
        if not isinstance(arguments, list):
            raise ValueError("Arguments must be a valid JSON array string.")
    except ValueError as e:
        shown = text.decode("utf-8", "replace") if isinstance(text, bytes | bytearray) else text
        raise ParseError(
            f"Invalid JSON in Arguments field: {e}. Input was: {shown}",
            raw_input=str(shown),
            cause=e,
        ) from e
    return arguments


# ── Options translation ──────────────────────────────────────────────────


def _option_name(key: str) -> str:
    if key in _OPTION_ALIASES:
        return _OPTION_ALIASES[key]
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _option_value(name: str, value: Any) -> Any:
    if name == "return_document":
        if isinstance(value, str):
            try:
                return _RETURN_DOCUMENT[value.lower()]
            except KeyError:
                raise ExecutionError(
                    f"returnDocument must be 'before' or 'after', got {value!r}"
                ) from None
        return bool(value)
    if name == "sort" and isinstance(value, Mapping):
        return list(value.items())
    if name == "sort" and isinstance(value, Sequence) and not isinstance(value, str):
        return [tuple(item) if isinstance(item, list) else item for item in value]
    return value


def translate_options(options: Any, *, command_options: bool = False) -> dict[str, Any]:
    """Turn a driver-style options object into keyword arguments.

    With ``command_options`` the keys are kept as given: aggregate, distinct
    and count_documents send their keyword arguments to the server as command
    fields (``maxTimeMS``, ``allowDiskUse``), while their named parameters
    (``session``, ``let``, ``comment``, ``hint``) need no renaming.
    """
    if options is None:
        return {}
    if not isinstance(options, Mapping):
        raise ExecutionError(f"options must be a JSON object, got {type(options).__name__}")
    if command_options:
        return {str(key): value for key, value in options.items()}
    kwargs: dict[str, Any] = {}
    for key, value in options.items():
        name = _option_name(str(key))
        kwargs[name] = _option_value(name, value)
    return kwargs


def bind_arguments(spec: OperationSpec, arguments: Sequence[Any]) -> tuple[list[Any], dict[str, Any]]:
    """Split decoded arguments into driver positional and keyword arguments."""
    if len(arguments) > spec.max_args:
        raise ExecutionError(
            f"{spec.name}() takes at most {spec.max_args} arguments "
            f"({', '.join([*spec.params, 'options'])}), got {len(arguments)}"
        )
    if not arguments and spec.default_args:
        arguments = list(spec.default_args)

    positional = list(arguments[: len(spec.params)])
    kwargs: dict[str, Any] = {}
    if len(arguments) == spec.max_args:
        kwargs = translate_options(arguments[-1], command_options=spec.command_options)
    return positional, kwargs


# ── Dispatch ─────────────────────────────────────────────────────────────


def resolve_method(collection: Any, spec: OperationSpec) -> Any:
    """Bind the driver method for ``spec`` on ``collection``.

    The lookup goes through the collection's type: driver collections answer
    any unknown attribute with a sub-collection, which is not an operation.
    """
    if not callable(getattr(type(collection), spec.method, None)):
        raise DispatchError(
            f"Method '{spec.name}' is not a valid function on the MongoDB collection object.",
            operation=spec.name,
        )
    return getattr(collection, spec.method)


async def dispatch(
    collection: Any,
    operation_name: str,
    arguments: Sequence[Any],
    *,
    registry: OperationRegistry | None = None,
) -> Any:
    """Invoke ``operation_name`` on ``collection`` with ``arguments``.

    Returns the raw driver result, which may still be a cursor.

    Raises:
        DispatchError: the name is not allow-listed or not callable here.
        ExecutionError: the driver rejected the call or the server failed it.
    """
    spec = (registry or operation_registry).get(operation_name)
    method = resolve_method(collection, spec)
    positional, kwargs = bind_arguments(spec, arguments)

    logger.debug(
        "operation.dispatched",
        operation=spec.name,
        method=spec.method,
        args=len(positional),
        options=sorted(kwargs),
    )
    try:
        return await maybe_await(method(*positional, **kwargs))
    except (PyMongoError, BSONError, TypeError, ValueError) as e:
        raise ExecutionError(str(e) or e.__class__.__name__, cause=e) from e


__all__ = [
    "parse_arguments",
    "translate_options",
    "bind_arguments",
    "resolve_method",
    "dispatch",
]
