"""
FastAPI dependency injection utilities.

Provides the users collection and the user service to endpoints. Tests
override ``get_users_collection`` to run against an in-memory collection.
"""

from typing import Annotated

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorCollection

from app.core.db import get_users_collection
from app.services.user_service import UserService

# Type alias for the users collection dependency
UsersCollection = Annotated[AsyncIOMotorCollection, Depends(get_users_collection)]


def get_user_service(collection: UsersCollection) -> UserService:
    """
    Build a UserService bound to the request's users collection.

    Usage:
        @router.get("/users/{user_id}")
        async def get_user(user_id: str, service: UserServiceDep):
            return await service.find_by_id(user_id)
    """
    return UserService(collection)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
