"""
docaction - run allow-listed operations against MongoDB collections.

Usage::

    from docaction import ActionInputs, MemorySink, run_database_action

    sink = MemorySink()
    docs = await run_database_action(
        ActionInputs("mongodb://localhost", "shop", "orders", "find"),
        sink,
    )
"""

__version__ = "0.1.0"

from docaction.core.errors import ActionError, StoredConnectionClosedWarning
from docaction.core.protocols import MemorySink, PassthroughResolver, StorageSlot
from docaction.operations.registry import Operation, list_operations
from docaction.ops.action import run_database_action
from docaction.ops.requests import ActionInputs

__all__ = [
    "ActionError",
    "ActionInputs",
    "MemorySink",
    "Operation",
    "PassthroughResolver",
    "StorageSlot",
    "StoredConnectionClosedWarning",
    "list_operations",
    "run_database_action",
]
