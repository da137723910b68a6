"""
Protocols for the collaborators a database action talks to.

The executor never imports a host runtime. It depends on shapes:

- :class:`ArgumentResolver`  turns a raw (possibly templated) field into a
  concrete value
- :class:`OutputSink`        named-slot store that receives results and the
  live client
- :class:`DatabaseClient`    anything that can select a database by name,
  i.e. an already-open driver client

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        ├── ArgumentResolver   — resolve(value) -> value
        ├── OutputSink         — store(slot, value)
        ├── DatabaseClient     — get_database(name)
        ├── StorageSlot        — (type, value) slot identifier
        ├── PassthroughResolver
        └── MemorySink

Guardrails:
    ❌ DON'T: Import host-specific modules in the executor
    ✅ DO: Accept any object matching these protocols

Tags:
    protocol, resolver, sink, docaction, contracts

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

NONE_SLOT_TYPE = "none"


@dataclass(frozen=True, slots=True)
class StorageSlot:
    """Identifier of a named slot in an :class:`OutputSink`.

    Attributes:
        type: Slot kind (``"temporary"``, ``"server"``, ...). ``"none"`` means
            the caller asked for the value not to be stored.
        value: Slot name within its kind.
    """

    type: str = NONE_SLOT_TYPE
    value: str = ""

    @classmethod
    def none(cls) -> StorageSlot:
        return cls(NONE_SLOT_TYPE, "")

    @classmethod
    def parse(cls, text: str | None) -> StorageSlot:
        """Build a slot from ``"type:name"`` or a bare ``"name"`` (type ``temporary``)."""
        if not text or text.strip().lower() == NONE_SLOT_TYPE:
            return cls.none()
        kind, sep, name = text.partition(":")
        if not sep:
            return cls("temporary", kind.strip())
        return cls(kind.strip(), name.strip())

    @property
    def is_none(self) -> bool:
        return self.type == NONE_SLOT_TYPE

    def __str__(self) -> str:
        return NONE_SLOT_TYPE if self.is_none else f"{self.type}:{self.value}"


@runtime_checkable
class ArgumentResolver(Protocol):
    """Resolves a raw input field into the concrete value to use."""

    def resolve(self, value: Any) -> Any: ...


@runtime_checkable
class OutputSink(Protocol):
    """Named-slot store written to at the end of an action."""

    def store(self, slot: StorageSlot, value: Any) -> None: ...


@runtime_checkable
class DatabaseClient(Protocol):
    """An open driver client: it can select a database by name."""

    def get_database(self, name: str) -> Any: ...


class PassthroughResolver:
    """Resolver that returns every value unchanged."""

    def resolve(self, value: Any) -> Any:
        return value


class MemorySink:
    """In-process :class:`OutputSink` backed by a dict.

    Slots of type ``"none"`` are ignored, matching how hosts treat them.
    """

    def __init__(self) -> None:
        self._slots: dict[tuple[str, str], Any] = {}

    def store(self, slot: StorageSlot, value: Any) -> None:
        if slot.is_none:
            return
        self._slots[(slot.type, slot.value)] = value

    def get(self, slot: StorageSlot, default: Any = None) -> Any:
        return self._slots.get((slot.type, slot.value), default)

    def __contains__(self, slot: object) -> bool:
        return isinstance(slot, StorageSlot) and (slot.type, slot.value) in self._slots

    def __len__(self) -> int:
        return len(self._slots)


__all__ = [
    "NONE_SLOT_TYPE",
    "StorageSlot",
    "ArgumentResolver",
    "OutputSink",
    "DatabaseClient",
    "PassthroughResolver",
    "MemorySink",
]
