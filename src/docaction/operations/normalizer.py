"""
Result normalizer — turn a raw driver result into a storable value.

Three things happen, in order:

1. Cursors (anything with a ``to_list`` method) are drained into a list,
   keeping server order. The drain is eager. ``max_documents`` bounds it and
   fails the action instead of truncating silently.
2. Driver write results (``InsertOneResult``, ``UpdateResult``, ...) become
   plain dicts with the field names the MongoDB drivers use elsewhere
   (``insertedId``, ``matchedCount``, ...).
3. With ``stringify=True`` the value is rendered as compact JSON text.
   ``ObjectId`` renders as its hex string, datetimes as ISO-8601 UTC with
   milliseconds, ``Decimal128`` as its string form.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from bson import Decimal128, ObjectId, json_util
from pymongo.errors import InvalidOperation, PyMongoError
from pymongo.results import DeleteResult, InsertManyResult, InsertOneResult, UpdateResult

from docaction.core.awaitables import maybe_await
from docaction.core.errors import ExecutionError
from docaction.core.logging import get_logger

logger = get_logger(__name__)


def is_cursor(result: Any) -> bool:
    """Whether ``result`` must be drained to get its documents."""
    return callable(getattr(result, "to_list", None))


async def drain(cursor: Any, *, max_documents: int | None = None) -> list[Any]:
    """Materialize every document of ``cursor``, in order.

    Raises:
        ExecutionError: the cursor failed, or held more than ``max_documents``.
    """
    try:
        if max_documents is None:
            documents = await maybe_await(cursor.to_list(None))
        else:
            documents = await maybe_await(cursor.to_list(max_documents + 1))
    except PyMongoError as e:
        raise ExecutionError(str(e), cause=e) from e
    finally:
        close = getattr(cursor, "close", None)
        if callable(close):
            await maybe_await(close())

    documents = list(documents)
    if max_documents is not None and len(documents) > max_documents:
        raise ExecutionError(
            f"Cursor returned more than {max_documents} documents; "
            "narrow the query or raise DOCACTION_MAX_DOCUMENTS."
        )
    logger.debug("cursor.drained", documents=len(documents))
    return documents


def write_result_to_dict(result: Any) -> dict[str, Any] | Any:
    """Convert a driver write result to a plain dict; pass other values through."""
    if not isinstance(result, InsertOneResult | InsertManyResult | UpdateResult | DeleteResult):
        return result

    out: dict[str, Any] = {"acknowledged": result.acknowledged}
    if not result.acknowledged:
        # counts are unavailable for unacknowledged writes
        return out

    try:
        if isinstance(result, InsertOneResult):
            out["insertedId"] = result.inserted_id
        elif isinstance(result, InsertManyResult):
            ids = list(result.inserted_ids)
            out["insertedCount"] = len(ids)
            out["insertedIds"] = {str(i): _id for i, _id in enumerate(ids)}
        elif isinstance(result, UpdateResult):
            out["matchedCount"] = result.matched_count
            out["modifiedCount"] = result.modified_count
            out["upsertedCount"] = 0 if result.upserted_id is None else 1
            out["upsertedId"] = result.upserted_id
        else:
            out["deletedCount"] = result.deleted_count
    except InvalidOperation as e:
        raise ExecutionError(str(e), cause=e) from e
    return out


def _json_default(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
    if isinstance(value, Decimal128):
        return str(value)
    return json_util.default(value)


def to_json_text(value: Any) -> str:
    """Render ``value`` as compact JSON text.

    Raises:
        ExecutionError: ``value`` holds something with no JSON form.
    """
    try:
        return json.dumps(value, default=_json_default, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ExecutionError(f"Result is not JSON serializable: {e}", cause=e) from e


async def normalize(
    result: Any,
    stringify: bool = False,
    *,
    max_documents: int | None = None,
) -> Any:
    """Materialize ``result`` and optionally serialize it to JSON text."""
    if is_cursor(result):
        value = await drain(result, max_documents=max_documents)
    else:
        value = write_result_to_dict(result)

    if stringify:
        return to_json_text(value)
    return value


__all__ = [
    "is_cursor",
    "drain",
    "write_result_to_dict",
    "to_json_text",
    "normalize",
]
