"""
User service: search, lookup and mutation of User documents.

``UserService`` is the entry point used by the API layer. It owns the
"exists or fail" contract: every lookup, update or delete of an id that is
not in the collection raises ``NotFoundError("User not found")`` with status
422.

Updates and deletes use the store's atomic find-and-modify operations, so
the existence check and the mutation are one step and cannot race with a
concurrent delete.
"""

import logging
from collections.abc import Mapping
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection

from app.api.schemas.user import UserCreate, UserUpdate
from app.core.errors import ApiError, MalformedQueryError, NotFoundError, StoreFailureError
from app.repos import user_repo
from app.repos.pagination import STORE_ERRORS, Page, paginate
from app.repos.query import normalize_query

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"


class UserService:
    """Service-layer operations on the users collection."""

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self.collection = collection

    async def find_all(self) -> list[dict[str, Any]]:
        """Return every user. Unpaginated; meant for small or admin reads."""
        try:
            return await user_repo.find_all(self.collection)
        except STORE_ERRORS as e:
            raise StoreFailureError(str(e), details={"error_type": type(e).__name__}) from e

    async def find_all_with_pagination(self, raw_query: Mapping[str, Any]) -> Page:
        """
        Search users with a URL-style query.

        Args:
            raw_query: String-valued query holding ``page``, ``limit``,
                ``sortedBy`` and any filter keys

        Returns:
            Page of matching users with total and matched counts

        Raises:
            MalformedQueryError: If the query cannot be normalized
            StoreFailureError: If the store reads fail
        """
        try:
            query = normalize_query(raw_query)
            return await paginate(self.collection, query, cast=user_repo.cast_filter)
        except ApiError as e:
            logger.warning(
                f"User search failed: {e.message}",
                extra={"kind": e.kind.value, "status": e.status},
            )
            raise
        except (TypeError, ValueError) as e:
            raise MalformedQueryError(str(e)) from e

    async def create(self, data: UserCreate) -> dict[str, Any]:
        """Insert a new user and return the stored document."""
        try:
            return await user_repo.insert(self.collection, data.model_dump())
        except STORE_ERRORS as e:
            raise StoreFailureError(str(e), details={"error_type": type(e).__name__}) from e

    async def find_by_id(self, user_id: str) -> dict[str, Any]:
        """
        Retrieve a user by id.

        Raises:
            NotFoundError: If no user has that id
        """
        return await self._get_one_by_id_or_raise(user_id)

    async def update_by_id(self, user_id: str, patch: UserUpdate) -> dict[str, Any]:
        """
        Apply a partial update and return the updated user.

        Only the fields set on ``patch`` are written. An empty patch
        leaves the document untouched.

        Raises:
            NotFoundError: If no user has that id; nothing is written
        """
        changes = patch.changes()
        if not changes:
            logger.debug(f"No updates provided for user: {user_id}")
            return await self._get_one_by_id_or_raise(user_id)

        try:
            document = await user_repo.find_one_and_update(self.collection, user_id, changes)
        except STORE_ERRORS as e:
            raise StoreFailureError(str(e), details={"error_type": type(e).__name__}) from e

        if document is None:
            raise self._not_found(user_id)
        return document

    async def delete_by_id(self, user_id: str) -> None:
        """
        Delete a user.

        Raises:
            NotFoundError: If no user has that id
        """
        try:
            document = await user_repo.find_one_and_delete(self.collection, user_id)
        except STORE_ERRORS as e:
            raise StoreFailureError(str(e), details={"error_type": type(e).__name__}) from e

        if document is None:
            raise self._not_found(user_id)

    async def _get_one_by_id_or_raise(self, user_id: str) -> dict[str, Any]:
        try:
            document = await user_repo.find_by_id(self.collection, user_id)
        except STORE_ERRORS as e:
            raise StoreFailureError(str(e), details={"error_type": type(e).__name__}) from e

        if document is None:
            raise self._not_found(user_id)
        return document

    @staticmethod
    def _not_found(user_id: str) -> NotFoundError:
        logger.warning(f"User not found: {user_id}")
        return NotFoundError(USER_NOT_FOUND, details={"user_id": user_id})
