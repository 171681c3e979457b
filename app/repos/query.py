"""
Translation of URL search queries into document store filters.

A search query arrives as untyped strings, e.g. from
``/users/search?page=2&limit=5&age[gte]=18``. ``normalize_query`` turns it
into a Mongo filter plus the page window and sort string.

The comparison operator rewrite is textual and only touches the first
operator token in the serialized query; a second comparison keeps its bare
name (``lt`` rather than ``$lt``). Next to the first one under the same
field, the store rejects it as an unknown operator and the search fails as a
store failure. Under another field it is an embedded-document match. This is
long-standing behavior; it is covered by regression tests.
"""

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pymongo import ASCENDING, DESCENDING

from app.core.errors import MalformedQueryError

DEFAULT_PAGE = "1"
DEFAULT_LIMIT = "10"
DEFAULT_SORTED_BY = "createdAt"

PAGINATION_KEYS = ("page", "limit", "sortedBy")

# Whole-word match over ASCII word characters: a non-ASCII letter next to a
# token is a boundary. Serialization keeps such letters unescaped.
_OPERATOR_TOKEN = re.compile(r"\b(gte|lte|gt|lt)\b", re.ASCII)
_BRACKET_KEY = re.compile(r"^([^\[\]]+)\[([^\[\]]+)\]$")
_SORT_SEPARATOR = re.compile(r"[\s,]+")


@dataclass(frozen=True)
class NormalizedQuery:
    """Filter, page window and sort derived from one search query."""

    filter: dict[str, Any] = field(default_factory=dict)
    page: int = 1
    limit: int = 10
    sorted_by: str = DEFAULT_SORTED_BY

    @property
    def skip(self) -> int:
        return self.limit * (self.page - 1)


def parse_query_params(items: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """Build a raw search query from URL query string pairs.

    Bracket keys are expanded one level deep, so ``age[gte]=18`` becomes
    ``{"age": {"gte": "18"}}``. A repeated key keeps its last value.

    Args:
        items: ``(key, value)`` pairs in query string order

    Returns:
        Raw query mapping suitable for ``normalize_query``
    """
    raw: dict[str, Any] = {}
    for key, value in items:
        match = _BRACKET_KEY.match(key)
        if match is None:
            raw[key] = value
            continue
        name, sub_key = match.groups()
        nested = raw.get(name)
        if not isinstance(nested, dict):
            nested = {}
            raw[name] = nested
        nested[sub_key] = value
    return raw


def rewrite_first_operator(serialized: str) -> str:
    """Prefix the first ``gte``/``lte``/``gt``/``lt`` token with ``$``."""
    return _OPERATOR_TOKEN.sub(lambda m: f"${m.group(1)}", serialized, count=1)


def _positive_int(name: str, raw: Any) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        raise MalformedQueryError(
            f"{name} must be a positive integer, got '{raw}'",
            status=400,
            details={name: raw},
        )
    if value < 1:
        raise MalformedQueryError(
            f"{name} must be a positive integer, got '{raw}'",
            status=400,
            details={name: raw},
        )
    return value


def normalize_query(raw_query: Mapping[str, Any]) -> NormalizedQuery:
    """
    Normalize a raw search query.

    Args:
        raw_query: String-valued query, optionally with one level of nesting

    Returns:
        NormalizedQuery with the filter, page, limit and sort string

    Raises:
        MalformedQueryError: If the query cannot round-trip through JSON or
            page/limit are not positive integers
    """
    try:
        serialized = json.dumps(dict(raw_query), ensure_ascii=False)
        query_obj = json.loads(rewrite_first_operator(serialized))
    except (TypeError, ValueError) as e:
        raise MalformedQueryError(f"Malformed search query: {e}") from e

    page = query_obj.pop("page", DEFAULT_PAGE)
    limit = query_obj.pop("limit", DEFAULT_LIMIT)
    sorted_by = query_obj.pop("sortedBy", DEFAULT_SORTED_BY)

    if not isinstance(sorted_by, str):
        raise MalformedQueryError("sortedBy must be a field name", status=400)

    return NormalizedQuery(
        filter=query_obj,
        page=_positive_int("page", page),
        limit=_positive_int("limit", limit),
        sorted_by=sorted_by,
    )


def parse_sort(sorted_by: str) -> list[tuple[str, int]]:
    """
    Build a Mongo sort list from a sort string.

    Fields are separated by whitespace or commas; a leading ``-`` sorts that
    field descending. ``_id`` ascending is appended as a tiebreak so that
    pages stay stable when sort keys collide.

    Example:
        >>> parse_sort("-age name")
        [('age', -1), ('name', 1), ('_id', 1)]
    """
    sort: list[tuple[str, int]] = []
    for token in _SORT_SEPARATOR.split(sorted_by.strip()):
        if token in ("", "-", "+"):
            continue
        if token.startswith("-"):
            sort.append((token[1:], DESCENDING))
        else:
            sort.append((token.lstrip("+"), ASCENDING))

    if not sort:
        sort.append((DEFAULT_SORTED_BY, ASCENDING))
    if all(name != "_id" for name, _ in sort):
        sort.append(("_id", ASCENDING))
    return sort
