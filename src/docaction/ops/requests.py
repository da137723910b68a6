"""
Typed request objects for database actions.

Requests carry the raw action fields exactly as the host collected them.
Templated values are resolved later, inside the action, so that resolution
failures are reported like any other stage failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from docaction.core.protocols import StorageSlot


@dataclass(frozen=True, slots=True)
class ActionInputs:
    """Request for :func:`docaction.ops.action.run_database_action`.

    Attributes:
        connection: Connection string, or a client the caller already holds.
        database_name: Database to select.
        collection_name: Collection to run the operation on.
        method_name: Operation name from the allow-list (``"find"``, ...).
        args_json: JSON array of positional arguments.
        stringify_result: Store the result as JSON text instead of a value.
        close_connection: Close the client once the action finishes.
        store: Slot receiving the result.
        connection_store: Slot receiving the live client (``none`` = don't).
    """

    connection: Any
    database_name: Any
    collection_name: Any
    method_name: Any
    args_json: Any = "[]"
    stringify_result: bool = False
    close_connection: bool = True
    store: StorageSlot = field(default_factory=StorageSlot.none)
    connection_store: StorageSlot = field(default_factory=StorageSlot.none)

    @property
    def persist_connection(self) -> bool:
        return not self.connection_store.is_none

    def with_changes(self, **changes: Any) -> ActionInputs:
        return replace(self, **changes)


__all__ = ["ActionInputs"]
