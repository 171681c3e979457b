"""
Document store connection management.

Provides a lazily created Motor client, accessors for the database and the
users collection, and a FastAPI dependency for the collection.
"""

import logging

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from app.core.config import settings

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None


def get_client() -> AsyncIOMotorClient:
    """
    Create and cache the Motor client.

    The client owns its own connection pool; creating it does not open a
    connection, so this is safe to call at import or startup time.

    Returns:
        Shared AsyncIOMotorClient
    """
    global _client

    if _client is not None:
        return _client

    _client = AsyncIOMotorClient(
        settings.mongodb_url,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        tz_aware=True,
    )
    logger.info(
        "Mongo client created",
        extra={"database": settings.mongodb_database},
    )
    return _client


def get_database() -> AsyncIOMotorDatabase:
    return get_client()[settings.mongodb_database]


def get_users_collection() -> AsyncIOMotorCollection:
    """FastAPI dependency returning the users collection."""
    return get_database()[settings.mongodb_users_collection]


def close_client() -> None:
    """Close the cached client, if any. Used on shutdown and in tests."""
    global _client

    if _client is not None:
        _client.close()
        logger.info("Mongo client closed")
    _client = None
