"""MongoDB connection handling.

Architecture::

    open_handle(target)      str → OwnedConnection, client → BorrowedConnection
    connect_handle(handle)   aconnect, then ping owned clients
    acquire(target)          both of the above
    collection_for(handle)   client.get_database(db).get_collection(coll)
    release(handle, ...)     close iff requested, warn if also stored
"""

from .connection import (
    BorrowedConnection,
    ConnectionHandle,
    OwnedConnection,
    acquire,
    collection_for,
    connect_handle,
    open_handle,
    release,
)

__all__ = [
    "BorrowedConnection",
    "ConnectionHandle",
    "OwnedConnection",
    "acquire",
    "collection_for",
    "connect_handle",
    "open_handle",
    "release",
]
