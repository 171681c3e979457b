"""
FastAPI routes for User CRUD and search.

The handlers are thin: they translate HTTP input into service calls and
service results into response schemas. Errors raised by the service are
``ApiError`` subclasses and are rendered by the application's handler.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Path, Request, Response, status

from app.api.schemas.pagination import PaginatedResponse
from app.api.schemas.user import UserCreate, UserResponse, UserUpdate
from app.core.dependencies import UserServiceDep
from app.repos.query import parse_query_params

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

UserId = Annotated[str, Path(description="Hex ObjectId of the user")]


@router.get(
    "",
    response_model=list[UserResponse],
    summary="List all users",
    description="Return every user without pagination. Intended for small collections.",
)
async def list_users(service: UserServiceDep) -> list[dict[str, Any]]:
    users = await service.find_all()
    logger.info(f"Listed {len(users)} users", extra={"count": len(users)})
    return users


@router.get(
    "/search",
    response_model=PaginatedResponse[UserResponse],
    summary="Search users with pagination",
    description="""
    Filter, sort and paginate users from the URL query string.

    **Query Parameters:**
    - `page`: 1-based page number (default 1)
    - `limit`: page size (default 10)
    - `sortedBy`: sort field, prefix with `-` for descending (default `createdAt`)
    - any other key is an equality filter; `field[gte]`, `field[lte]`,
      `field[gt]` and `field[lt]` express a comparison

    **Errors:**
    - 400 Bad Request: page, limit or a filter value is invalid
    """,
)
async def search_users(request: Request, service: UserServiceDep) -> dict[str, Any]:
    raw_query = parse_query_params(request.query_params.multi_items())
    result = await service.find_all_with_pagination(raw_query)
    return {
        "page": result.page,
        "perPage": result.per_page,
        "itemsCount": result.items_count,
        "itemsFound": result.items_found,
        "data": result.data,
    }


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(payload: UserCreate, service: UserServiceDep) -> dict[str, Any]:
    return await service.create(payload)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user",
    description="""
    **Errors:**
    - 422 Unprocessable Entity: no user has this id
    """,
)
async def get_user(user_id: UserId, service: UserServiceDep) -> dict[str, Any]:
    return await service.find_by_id(user_id)


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
    description="""
    Partial update; only fields present in the body are changed.

    **Errors:**
    - 422 Unprocessable Entity: no user has this id
    """,
)
async def update_user(
    user_id: UserId, payload: UserUpdate, service: UserServiceDep
) -> dict[str, Any]:
    return await service.update_by_id(user_id, payload)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
)
async def delete_user(user_id: UserId, service: UserServiceDep) -> Response:
    await service.delete_by_id(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
