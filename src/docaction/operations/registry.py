"""Operation registry — the allow-listed collection operations.

Manifesto:
    Callers name operations with the camelCase vocabulary of the MongoDB
    shell and drivers (``findOne``, ``updateMany``, ...). Looking those names
    up with ``getattr`` on a live collection would let any attribute through,
    including sub-collections and private helpers. The registry maps each
    allowed name to the driver method it stands for and to the positional
    shape that method accepts, and rejects everything else up front.

Features:
    - ``Operation`` string enum: the closed vocabulary
    - ``OperationSpec``: driver method, positional parameters, cursor flag
    - ``OperationRegistry`` with a pre-registered default table
    - ``get_operation()`` / ``list_operations()`` helpers

Tags:
    docaction, registry, allow-list, operations

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from docaction.core.errors import DispatchError


class Operation(str, Enum):
    """Allow-listed collection operations."""

    FIND = "find"
    FIND_ONE = "findOne"
    INSERT_ONE = "insertOne"
    INSERT_MANY = "insertMany"
    UPDATE_ONE = "updateOne"
    UPDATE_MANY = "updateMany"
    REPLACE_ONE = "replaceOne"
    DELETE_ONE = "deleteOne"
    DELETE_MANY = "deleteMany"
    FIND_ONE_AND_UPDATE = "findOneAndUpdate"
    FIND_ONE_AND_REPLACE = "findOneAndReplace"
    FIND_ONE_AND_DELETE = "findOneAndDelete"
    AGGREGATE = "aggregate"
    DISTINCT = "distinct"
    COUNT_DOCUMENTS = "countDocuments"


@dataclass(frozen=True)
class OperationSpec:
    """
    Call shape of one operation.

    Attributes:
        operation: The vocabulary entry.
        method: Driver method name on the collection.
        params: Positional parameter names, in order. When the caller passes
            one argument more than ``params``, that trailing argument is the
            options object and becomes keyword arguments.
        label: Human-readable name.
        returns_cursor: The driver returns a cursor that must be drained.
        default_args: Arguments used when the caller passes none.
        command_options: The driver merges keyword arguments into the server
            command, so option names keep their camelCase form.
    """

    operation: Operation
    method: str
    params: tuple[str, ...]
    label: str
    returns_cursor: bool = False
    default_args: tuple[Any, ...] = ()
    command_options: bool = False

    @property
    def name(self) -> str:
        return self.operation.value

    @property
    def max_args(self) -> int:
        return len(self.params) + 1

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "method": self.method,
            "params": [*self.params, "options"],
            "cursor": self.returns_cursor,
        }


_DEFAULT_SPECS: tuple[OperationSpec, ...] = (
    OperationSpec(Operation.FIND, "find", ("filter",), "Find", returns_cursor=True),
    OperationSpec(Operation.FIND_ONE, "find_one", ("filter",), "Find One"),
    OperationSpec(Operation.INSERT_MANY, "insert_many", ("documents",), "Insert"),
    OperationSpec(Operation.INSERT_ONE, "insert_one", ("document",), "Insert One"),
    OperationSpec(Operation.UPDATE_MANY, "update_many", ("filter", "update"), "Update"),
    OperationSpec(Operation.UPDATE_ONE, "update_one", ("filter", "update"), "Update One"),
    OperationSpec(Operation.REPLACE_ONE, "replace_one", ("filter", "replacement"), "Replace One"),
    OperationSpec(Operation.DELETE_MANY, "delete_many", ("filter",), "Delete"),
    OperationSpec(Operation.DELETE_ONE, "delete_one", ("filter",), "Delete One"),
    OperationSpec(
        Operation.FIND_ONE_AND_UPDATE,
        "find_one_and_update",
        ("filter", "update"),
        "Find One & Update",
    ),
    OperationSpec(
        Operation.FIND_ONE_AND_REPLACE,
        "find_one_and_replace",
        ("filter", "replacement"),
        "Find One & Replace",
    ),
    OperationSpec(Operation.FIND_ONE_AND_DELETE, "find_one_and_delete", ("filter",), "Find One & Delete"),
    OperationSpec(
        Operation.AGGREGATE,
        "aggregate",
        ("pipeline",),
        "Aggregate",
        returns_cursor=True,
        command_options=True,
    ),
    OperationSpec(Operation.DISTINCT, "distinct", ("key", "filter"), "Distinct", command_options=True),
    OperationSpec(
        Operation.COUNT_DOCUMENTS,
        "count_documents",
        ("filter",),
        "Count Documents",
        default_args=({},),
        command_options=True,
    ),
)


class OperationRegistry:
    """
    Registry of operation specs keyed by vocabulary name.

    Pre-registered: every member of :class:`Operation`.
    """

    def __init__(self) -> None:
        self._specs: dict[str, OperationSpec] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        for spec in _DEFAULT_SPECS:
            self._specs[spec.name] = spec

    def register(self, spec: OperationSpec) -> None:
        """Replace the spec for one vocabulary entry."""
        self._specs[spec.name] = spec

    def get(self, name: str | Operation) -> OperationSpec:
        """Look up a spec by name.

        Raises:
            DispatchError: ``name`` is not in the vocabulary.
        """
        key = name.value if isinstance(name, Operation) else name
        spec = self._specs.get(key) if isinstance(key, str) else None
        if spec is None:
            raise DispatchError(
                f"Method '{key}' is not a valid function on the MongoDB collection object.",
                operation=str(key),
            )
        return spec

    def __contains__(self, name: object) -> bool:
        key = name.value if isinstance(name, Operation) else name
        return key in self._specs

    def list_operations(self) -> list[str]:
        """List registered operation names, in vocabulary order."""
        return [op.value for op in Operation if op.value in self._specs]

    def specs(self) -> list[OperationSpec]:
        return [self._specs[name] for name in self.list_operations()]


# Global registry
operation_registry = OperationRegistry()


def get_operation(name: str | Operation) -> OperationSpec:
    """Get an operation spec from the global registry."""
    return operation_registry.get(name)


def list_operations() -> list[str]:
    """List all allow-listed operation names."""
    return operation_registry.list_operations()


__all__ = [
    "Operation",
    "OperationSpec",
    "OperationRegistry",
    "operation_registry",
    "get_operation",
    "list_operations",
]
