"""
Repository layer for User documents.

Provides the document store operations the user service builds on. Every
function takes the users collection as its first argument and leaves
existence semantics to the caller: a missing document is reported as
``None``, never raised.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ReturnDocument

from app.core.errors import MalformedQueryError
from app.core.observability import store_metrics

logger = logging.getLogger(__name__)


def to_object_id(user_id: str | ObjectId) -> ObjectId | None:
    """Parse a user id; returns None for strings that are not ObjectIds."""
    if isinstance(user_id, ObjectId):
        return user_id
    # ObjectId(None) would mint a fresh id
    if not isinstance(user_id, str):
        return None
    try:
        return ObjectId(user_id)
    except InvalidId:
        return None


def _parse_datetime(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_object_id(value: str) -> ObjectId:
    oid = to_object_id(value)
    if oid is None:
        raise ValueError(f"'{value}' is not a valid ObjectId")
    return oid


# Stored types of User fields that are not plain strings
USER_FIELD_CASTS: dict[str, Callable[[str], Any]] = {
    "_id": _parse_object_id,
    "age": int,
    "createdAt": _parse_datetime,
    "updatedAt": _parse_datetime,
}


def _cast_value(field_name: str, caster: Callable[[str], Any], value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return caster(value.strip())
    except (TypeError, ValueError):
        raise MalformedQueryError(
            f'Invalid filter value for field "{field_name}": {value!r}',
            status=400,
            details={"field": field_name, "value": value},
        )


def cast_filter(filter_: dict[str, Any]) -> dict[str, Any]:
    """
    Cast string filter values to the stored types of known User fields.

    Scalars and values under ``$`` operator keys are cast. Nested mappings
    without operator keys are left as they are, so they keep matching as
    embedded documents.

    Args:
        filter_: Normalized filter with string values

    Returns:
        New filter with typed values

    Raises:
        MalformedQueryError: If a value cannot be converted
    """
    cast: dict[str, Any] = {}
    for field_name, value in filter_.items():
        caster = USER_FIELD_CASTS.get(field_name)
        if caster is None:
            cast[field_name] = value
        elif isinstance(value, dict):
            cast[field_name] = {
                key: (
                    _cast_value(field_name, caster, sub_value) if key.startswith("$") else sub_value
                )
                for key, sub_value in value.items()
            }
        else:
            cast[field_name] = _cast_value(field_name, caster, value)
    return cast


async def find_all(collection: AsyncIOMotorCollection) -> list[dict[str, Any]]:
    """
    Retrieve every user document, in natural order.

    Args:
        collection: Users collection

    Returns:
        List of user documents
    """
    with store_metrics.track("find_all_users"):
        documents = await collection.find({}).to_list(length=None)

    logger.info(f"Retrieved {len(documents)} users")
    return documents


async def find_by_id(
    collection: AsyncIOMotorCollection, user_id: str | ObjectId
) -> dict[str, Any] | None:
    """
    Retrieve a single user document by id.

    Args:
        collection: Users collection
        user_id: Hex ObjectId string or ObjectId

    Returns:
        The document, or None if absent or the id is not an ObjectId
    """
    oid = to_object_id(user_id)
    if oid is None:
        logger.debug(f"Rejected non-ObjectId user id: {user_id!r}")
        return None

    with store_metrics.track("find_user"):
        return await collection.find_one({"_id": oid})


async def insert(collection: AsyncIOMotorCollection, document: dict[str, Any]) -> dict[str, Any]:
    """
    Insert a user document, stamping creation and update times.

    Args:
        collection: Users collection
        document: Field values of the new user

    Returns:
        The stored document including its ``_id``
    """
    now = datetime.now(UTC)
    stored = {**document, "createdAt": now, "updatedAt": now}

    with store_metrics.track("insert_user"):
        result = await collection.insert_one(stored)

    stored["_id"] = result.inserted_id
    logger.info("Created user", extra={"user_id": str(result.inserted_id)})
    return stored


async def find_one_and_update(
    collection: AsyncIOMotorCollection,
    user_id: str | ObjectId,
    changes: dict[str, Any],
) -> dict[str, Any] | None:
    """
    Atomically apply ``changes`` to one user and return the updated document.

    Args:
        collection: Users collection
        user_id: Id of the user to update
        changes: Field values to set

    Returns:
        The post-update document, or None if no user has that id
    """
    oid = to_object_id(user_id)
    if oid is None:
        return None

    update = {"$set": {**changes, "updatedAt": datetime.now(UTC)}}
    with store_metrics.track("update_user"):
        document = await collection.find_one_and_update(
            {"_id": oid}, update, return_document=ReturnDocument.AFTER
        )

    if document is not None:
        logger.info(
            "Updated user",
            extra={"user_id": str(oid), "updated_fields": sorted(changes)},
        )
    return document


async def find_one_and_delete(
    collection: AsyncIOMotorCollection, user_id: str | ObjectId
) -> dict[str, Any] | None:
    """
    Atomically delete one user.

    Returns:
        The deleted document, or None if no user has that id
    """
    oid = to_object_id(user_id)
    if oid is None:
        return None

    with store_metrics.track("delete_user"):
        document = await collection.find_one_and_delete({"_id": oid})

    if document is not None:
        logger.info("Deleted user", extra={"user_id": str(oid)})
    return document


async def ping(client: AsyncIOMotorClient) -> None:
    """Round-trip to the server; raises if it is unreachable."""
    with store_metrics.track("ping"):
        await client.admin.command("ping")
