"""Helpers for calling driver APIs that may be sync or async."""

from __future__ import annotations

import inspect
from typing import Any


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged.

    ``AsyncMongoClient`` returns coroutines from most collection methods but
    plain cursors from ``find()``; a borrowed ``MongoClient`` returns values.
    """
    if inspect.isawaitable(value):
        return await value
    return value


__all__ = ["maybe_await"]
