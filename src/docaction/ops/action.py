"""
Database action executor.

:func:`run_database_action` is the one entry point hosts call. It walks a
fixed sequence of states and guarantees the connection is released on every
way out::

    IDLE → RESOLVING_ARGS → CONNECTING → PARSING_ARGUMENTS → DISPATCHING
         → NORMALIZING → STORING → SUCCESS ┐
                    (any error) → FAILED ──┴→ CLEANUP → DONE

Every failure, whatever stage raised it, leaves as a single
:class:`~docaction.core.errors.ActionError` whose message is
``"MongoDB Action Error: <original message>"``.

Example::

    sink = MemorySink()
    docs = await run_database_action(
        ActionInputs(
            connection="mongodb://localhost:27017",
            database_name="shop",
            collection_name="orders",
            method_name="find",
            args_json='[{"status": "open"}]',
            store=StorageSlot("temporary", "orders"),
        ),
        sink,
    )
"""

from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import Any

from docaction.adapters.connection import (
    ConnectionHandle,
    collection_for,
    connect_handle,
    open_handle,
    release,
)
from docaction.core.errors import ActionError, ErrorContext, ErrorStage, ValidationError
from docaction.core.logging import LogContext, get_logger
from docaction.core.protocols import ArgumentResolver, OutputSink, PassthroughResolver
from docaction.core.settings import DocActionSettings, get_settings
from docaction.operations.dispatcher import dispatch, parse_arguments
from docaction.operations.normalizer import normalize

from .requests import ActionInputs

logger = get_logger(__name__)


class ActionState(str, Enum):
    """States a database action moves through."""

    IDLE = "idle"
    RESOLVING_ARGS = "resolving_args"
    CONNECTING = "connecting"
    PARSING_ARGUMENTS = "parsing_arguments"
    DISPATCHING = "dispatching"
    NORMALIZING = "normalizing"
    STORING = "storing"
    SUCCESS = "success"
    FAILED = "failed"
    CLEANUP = "cleanup"
    DONE = "done"


# Stage blamed for a non-docaction exception raised while in a given state.
_STATE_STAGES = {
    ActionState.RESOLVING_ARGS: ErrorStage.VALIDATION,
    ActionState.CONNECTING: ErrorStage.CONNECTION,
    ActionState.PARSING_ARGUMENTS: ErrorStage.PARSE,
    ActionState.DISPATCHING: ErrorStage.EXECUTION,
    ActionState.NORMALIZING: ErrorStage.EXECUTION,
    ActionState.STORING: ErrorStage.EXECUTION,
    ActionState.CLEANUP: ErrorStage.CLEANUP,
}


class ActionRun:
    """Tracks the state of one action invocation."""

    def __init__(self, request_id: str | None = None) -> None:
        self.request_id = request_id or str(uuid.uuid4())
        self.state = ActionState.IDLE
        self.failed_in: ActionState | None = None
        self.history: list[ActionState] = [ActionState.IDLE]

    def advance(self, state: ActionState) -> None:
        if state is ActionState.FAILED:
            self.failed_in = self.state
        logger.debug("action.state", previous=self.state.value, state=state.value)
        self.state = state
        self.history.append(state)

    @property
    def failure_stage(self) -> ErrorStage:
        return _STATE_STAGES.get(self.failed_in or self.state, ErrorStage.EXECUTION)


def _required_name(value: Any, label: str, field: str) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{label} is required.", field=field)
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string, got {type(value).__name__}.", field=field)
    return value


def resolve_inputs(inputs: ActionInputs, resolver: ArgumentResolver) -> ActionInputs:
    """Resolve every templated field and check the required ones.

    Raises:
        ValidationError: a required field is missing or not a string.
    """
    connection = resolver.resolve(inputs.connection)
    database_name = resolver.resolve(inputs.database_name)
    collection_name = resolver.resolve(inputs.collection_name)
    method_name = resolver.resolve(inputs.method_name)
    args_json = resolver.resolve(inputs.args_json or "[]")

    if connection is None or (isinstance(connection, str) and not connection.strip()):
        raise ValidationError("MongoDB Connection String is required.", field="connection")
    database_name = _required_name(database_name, "Database Name", "database_name")
    collection_name = _required_name(collection_name, "Collection Name", "collection_name")

    return inputs.with_changes(
        connection=connection,
        database_name=database_name,
        collection_name=collection_name,
        method_name="" if method_name is None else str(method_name),
        args_json=args_json,
    )


async def run_database_action(
    inputs: ActionInputs,
    sink: OutputSink,
    *,
    resolver: ArgumentResolver | None = None,
    settings: DocActionSettings | None = None,
    run: ActionRun | None = None,
) -> Any:
    """Run one operation against a MongoDB collection.

    Stores the materialized result in ``inputs.store`` and, when requested,
    the live client in ``inputs.connection_store``. Returns the stored result.

    Raises:
        ActionError: for any failure, including failing to close the client.
    """
    resolver = resolver or PassthroughResolver()
    run = run or ActionRun()
    context = ErrorContext(request_id=run.request_id)
    handle: ConnectionHandle | None = None
    connected = False
    started = time.perf_counter()

    async with LogContext(request_id=run.request_id):
        logger.info("action.started", close=inputs.close_connection, stored=inputs.persist_connection)
        try:
            run.advance(ActionState.RESOLVING_ARGS)
            settings = settings or get_settings()
            resolved = resolve_inputs(inputs, resolver)
            context.operation = resolved.method_name
            context.database = resolved.database_name
            context.collection = resolved.collection_name

            run.advance(ActionState.CONNECTING)
            handle = open_handle(resolved.connection, settings=settings)
            await connect_handle(handle, settings=settings)
            connected = True
            collection = collection_for(handle, resolved.database_name, resolved.collection_name)

            run.advance(ActionState.PARSING_ARGUMENTS)
            arguments = parse_arguments(resolved.args_json)

            run.advance(ActionState.DISPATCHING)
            raw = await dispatch(collection, resolved.method_name, arguments)

            run.advance(ActionState.NORMALIZING)
            result = await normalize(
                raw,
                resolved.stringify_result,
                max_documents=settings.max_documents,
            )

            run.advance(ActionState.STORING)
            sink.store(resolved.store, result)
            if resolved.persist_connection:
                sink.store(resolved.connection_store, handle.client)

            run.advance(ActionState.SUCCESS)
            logger.info(
                "action.completed",
                operation=resolved.method_name,
                result_type=type(result).__name__,
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return result
        except Exception as e:
            run.advance(ActionState.FAILED)
            error = ActionError.wrap(e, stage=run.failure_stage, context=context)
            logger.error("action.failed", **error.to_dict())
            raise error from e
        finally:
            run.advance(ActionState.CLEANUP)
            try:
                if handle is not None:
                    await release(
                        handle,
                        # an owned client that never connected is closed regardless
                        close_requested=inputs.close_connection or (handle.owned and not connected),
                        persist_requested=inputs.persist_connection and connected,
                    )
            except Exception as e:
                error = ActionError.wrap(e, stage=ErrorStage.CLEANUP, context=context)
                logger.error("action.cleanup_failed", **error.to_dict())
                raise error from e
            finally:
                run.advance(ActionState.DONE)


__all__ = [
    "ActionState",
    "ActionRun",
    "resolve_inputs",
    "run_database_action",
]
