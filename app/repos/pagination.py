"""Offset pagination over a document store collection."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from bson.errors import BSONError
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from app.core.errors import StoreFailureError
from app.core.observability import store_metrics
from app.repos.query import NormalizedQuery, parse_sort

logger = logging.getLogger(__name__)

# Driver-level faults that surface as a store failure
STORE_ERRORS: tuple[type[Exception], ...] = (PyMongoError, BSONError)


@dataclass
class Page:
    """One page of documents plus the counts that describe it.

    ``items_count`` is the size of the whole collection, ``items_found`` the
    number of documents matching the filter.
    """

    page: int
    per_page: int
    items_count: int
    items_found: int
    data: list[dict[str, Any]] = field(default_factory=list)


async def _fetch_page(
    collection: AsyncIOMotorCollection,
    filter_: dict[str, Any],
    sort: list[tuple[str, int]],
    skip: int,
    limit: int,
) -> list[dict[str, Any]]:
    with store_metrics.track("find_page"):
        cursor = collection.find(filter_).sort(sort).skip(skip).limit(limit)
        return await cursor.to_list(length=limit)


async def _count(
    collection: AsyncIOMotorCollection, filter_: dict[str, Any], operation: str
) -> int:
    with store_metrics.track(operation):
        return await collection.count_documents(filter_)


async def paginate(
    collection: AsyncIOMotorCollection,
    query: NormalizedQuery,
    cast: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
) -> Page:
    """
    Fetch one page of documents matching a normalized query.

    The page fetch, the total count and the filtered count are issued
    concurrently. All three must succeed; a failure in one does not cancel
    the others, and no partial page is returned. When several reads fail,
    the first in page, total, matched order is the one reported.

    Args:
        collection: Motor collection to read from
        query: Normalized filter, page window and sort
        cast: Optional hook converting filter values to stored types

    Returns:
        Page with the slice of matching documents and both counts

    Raises:
        MalformedQueryError: If ``cast`` rejects a filter value
        StoreFailureError: If any of the reads fail
    """
    filter_ = cast(query.filter) if cast is not None else query.filter
    sort = parse_sort(query.sorted_by)

    results = await asyncio.gather(
        _fetch_page(collection, filter_, sort, query.skip, query.limit),
        _count(collection, {}, "count_all"),
        _count(collection, filter_, "count_matching"),
        return_exceptions=True,
    )
    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        error = failures[0]
        logger.warning(
            f"Paginated read failed: {error}",
            extra={
                "filter_keys": sorted(filter_),
                "page": query.page,
                "limit": query.limit,
                "failed_reads": [type(f).__name__ for f in failures],
            },
        )
        if not isinstance(error, STORE_ERRORS):
            raise error
        raise StoreFailureError(str(error), details={"error_type": type(error).__name__}) from error

    data, items_count, items_found = results

    logger.debug(
        f"Paginated read returned {len(data)} of {items_found} matching documents",
        extra={"page": query.page, "limit": query.limit, "items_count": items_count},
    )

    return Page(
        page=query.page,
        per_page=query.limit,
        items_count=items_count,
        items_found=items_found,
        data=data,
    )
