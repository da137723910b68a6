"""Connection manager — turn a connection target into an open MongoDB client.

A connection target is either a connection string or a client the caller
already holds. The two cases carry different ownership, so they are kept as
two handle types instead of a flag:

==========================  ======================  =============
Target                      Handle                  Who opened it
==========================  ======================  =============
``"mongodb://host/..."``    ``OwnedConnection``     this action
client with get_database()  ``BorrowedConnection``  the caller
anything else               ``ValidationError``     —
==========================  ======================  =============

Usage
-----
::

    handle = open_handle("mongodb://localhost:27017")
    await connect_handle(handle)
    collection = collection_for(handle, "shop", "orders")
    ...
    await release(handle, close_requested=True, persist_requested=False)

Release closes the client whenever closing was requested, whichever side
opened it. Asking to keep the client in a store *and* to close it logs a
warning and closes it anyway.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.errors import ConfigurationError, PyMongoError

from docaction.core.awaitables import maybe_await
from docaction.core.errors import (
    CleanupError,
    DatabaseConnectionError,
    StoredConnectionClosedWarning,
    ValidationError,
)
from docaction.core.logging import get_logger, redact_uri
from docaction.core.protocols import DatabaseClient
from docaction.core.settings import DocActionSettings, get_settings

logger = get_logger(__name__)

STORED_AND_CLOSED_MESSAGE = (
    "Storing the MongoDB connection while 'Close Connection' is enabled. "
    "The stored connection will be closed."
)


# ── Handles ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class OwnedConnection:
    """A client opened by this action from a connection string."""

    client: Any
    uri: str

    owned = True

    def __repr__(self) -> str:
        return f"OwnedConnection(uri={redact_uri(self.uri)!r})"


@dataclass(frozen=True)
class BorrowedConnection:
    """A client supplied by the caller; other holders may still use it."""

    client: DatabaseClient

    owned = False

    def __repr__(self) -> str:
        return f"BorrowedConnection(client={type(self.client).__name__})"


ConnectionHandle = OwnedConnection | BorrowedConnection


# ── Acquire ──────────────────────────────────────────────────────────────


def _open_client(uri: str, settings: DocActionSettings) -> Any:
    """Create the driver client. Parsing the URI happens here, I/O does not."""
    try:
        return AsyncMongoClient(
            uri,
            serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
            appname=settings.app_name,
        )
    except (ConfigurationError, ValueError, TypeError) as e:
        raise DatabaseConnectionError(str(e), cause=e) from e


def open_handle(
    target: str | DatabaseClient,
    *,
    settings: DocActionSettings | None = None,
) -> ConnectionHandle:
    """Wrap ``target`` in a handle without touching the network.

    Callers that must release the client on every exit path hold the handle
    before awaiting :func:`connect_handle`.

    Raises:
        ValidationError: ``target`` is neither a string nor an open client.
        DatabaseConnectionError: the connection string was rejected.
    """
    settings = settings or get_settings()

    if isinstance(target, str):
        if not target.strip():
            raise ValidationError("MongoDB Connection String is required.", field="connection")
        return OwnedConnection(client=_open_client(target, settings), uri=target)
    if isinstance(target, DatabaseClient):
        return BorrowedConnection(client=target)
    raise ValidationError(
        "MongoDB Connection must be a valid string URI or an existing MongoClient instance.",
        field="connection",
    )


async def connect_handle(
    handle: ConnectionHandle,
    *,
    settings: DocActionSettings | None = None,
) -> ConnectionHandle:
    """Connect the handle's client; owned clients are also pinged.

    Raises:
        DatabaseConnectionError: the server could not be reached. The client
            is left as it was; releasing it is up to the caller.
    """
    settings = settings or get_settings()
    client = handle.client
    try:
        if callable(getattr(type(client), "aconnect", None)):
            await maybe_await(client.aconnect())
        if handle.owned and settings.ping_on_connect:
            await maybe_await(client.admin.command("ping"))
    except PyMongoError as e:
        raise DatabaseConnectionError(str(e), cause=e) from e

    logger.debug("connection.opened", handle=repr(handle), owned=handle.owned)
    return handle


async def acquire(
    target: str | DatabaseClient,
    *,
    settings: DocActionSettings | None = None,
) -> ConnectionHandle:
    """Return an open handle for ``target``.

    An owned client that cannot reach its server is closed before the error
    is raised.

    Raises:
        ValidationError: ``target`` is neither a string nor an open client.
        DatabaseConnectionError: the client could not be created or the
            server could not be reached.
    """
    handle = open_handle(target, settings=settings)
    try:
        return await connect_handle(handle, settings=settings)
    except DatabaseConnectionError:
        if handle.owned:
            await _discard(handle.client)
        raise


async def _discard(client: Any) -> None:
    """Close a client that failed to connect, keeping the original error."""
    try:
        await maybe_await(client.close())
    except PyMongoError as e:
        logger.debug("connection.discard_failed", error=str(e))


def collection_for(handle: ConnectionHandle, database_name: str, collection_name: str) -> Any:
    """Select ``database_name.collection_name`` on the handle's client."""
    try:
        database = handle.client.get_database(database_name)
        return database.get_collection(collection_name)
    except (PyMongoError, ValueError) as e:
        # invalid database or collection names are rejected client-side
        raise ValidationError(str(e), cause=e) from e


# ── Release ──────────────────────────────────────────────────────────────


async def release(
    handle: ConnectionHandle,
    *,
    close_requested: bool,
    persist_requested: bool = False,
) -> bool:
    """Close the handle iff ``close_requested``. Returns whether it was closed.

    Raises:
        CleanupError: closing the client failed.
    """
    if not close_requested:
        logger.debug("connection.kept_open", owned=handle.owned, stored=persist_requested)
        return False

    if persist_requested:
        logger.warning("connection.close_while_stored", owned=handle.owned)
        warnings.warn(STORED_AND_CLOSED_MESSAGE, StoredConnectionClosedWarning, stacklevel=2)

    try:
        await maybe_await(handle.client.close())
    except Exception as e:
        raise CleanupError(str(e) or e.__class__.__name__, cause=e) from e

    logger.debug("connection.closed", owned=handle.owned)
    return True


__all__ = [
    "ConnectionHandle",
    "OwnedConnection",
    "BorrowedConnection",
    "STORED_AND_CLOSED_MESSAGE",
    "open_handle",
    "connect_handle",
    "acquire",
    "collection_for",
    "release",
]
