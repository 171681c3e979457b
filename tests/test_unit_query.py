"""
Unit tests for search query normalization.

Tests cover:
- Default page window and sort
- Skip computation
- The first-operator-only rewrite
- page/limit validation
- Bracket query string parsing
- Sort string parsing
"""

import pytest
from pymongo import ASCENDING, DESCENDING

from app.core.errors import ErrorKind, MalformedQueryError
from app.repos.query import (
    NormalizedQuery,
    normalize_query,
    parse_query_params,
    parse_sort,
    rewrite_first_operator,
)


class TestNormalizeQuery:
    """Tests for normalize_query."""

    @pytest.mark.anyio
    async def test_defaults_when_only_filter_given(self):
        """page, limit and sortedBy fall back to 1, 10 and createdAt."""
        query = normalize_query({"name": "Ada"})

        assert query == NormalizedQuery(
            filter={"name": "Ada"}, page=1, limit=10, sorted_by="createdAt"
        )
        assert query.skip == 0

    @pytest.mark.anyio
    async def test_pagination_keys_leave_empty_filter(self):
        """A query with only pagination keys matches everything."""
        query = normalize_query({"page": "2", "limit": "5"})

        assert query.filter == {}
        assert query.page == 2
        assert query.limit == 5
        assert query.skip == 5

    @pytest.mark.anyio
    async def test_sorted_by_is_removed_from_filter(self):
        query = normalize_query({"sortedBy": "-age", "name": "Ada"})

        assert query.sorted_by == "-age"
        assert query.filter == {"name": "Ada"}

    @pytest.mark.anyio
    async def test_single_operator_is_rewritten(self):
        query = normalize_query({"age": {"gte": "18"}})

        assert query.filter == {"age": {"$gte": "18"}}

    @pytest.mark.anyio
    async def test_only_first_operator_is_rewritten(self):
        """The second comparison stays a plain embedded-document key."""
        query = normalize_query({"age": {"gte": "18", "lt": "65"}})

        assert query.filter == {"age": {"$gte": "18", "lt": "65"}}

    @pytest.mark.anyio
    async def test_first_operator_across_fields(self):
        query = normalize_query({"age": {"lt": "65"}, "score": {"gt": "3"}})

        assert query.filter == {"age": {"$lt": "65"}, "score": {"gt": "3"}}

    @pytest.mark.anyio
    async def test_operator_token_inside_value_is_rewritten(self):
        """The rewrite is textual, so a whole-word token in a value counts too."""
        query = normalize_query({"name": "gt"})

        assert query.filter == {"name": "$gt"}

    @pytest.mark.anyio
    async def test_operator_substring_is_not_rewritten(self):
        query = normalize_query({"name": "Margaret", "status": "ltd"})

        assert query.filter == {"name": "Margaret", "status": "ltd"}

    @pytest.mark.anyio
    async def test_non_ascii_letter_before_token_is_a_boundary(self):
        """Accented letters stay unescaped, so "élt" ends in a whole-word lt."""
        query = normalize_query({"name": "élt", "age": {"gte": "18"}})

        assert query.filter == {"name": "é$lt", "age": {"gte": "18"}}

    @pytest.mark.anyio
    async def test_non_ascii_values_round_trip_unchanged(self):
        query = normalize_query({"city": "東京", "age": {"lt": "30"}})

        assert query.filter == {"city": "東京", "age": {"$lt": "30"}}

    @pytest.mark.anyio
    async def test_pagination_values_are_trimmed(self):
        query = normalize_query({"page": " 3 ", "limit": "20"})

        assert query.page == 3
        assert query.skip == 40

    @pytest.mark.anyio
    @pytest.mark.parametrize("page", ["0", "-1", "abc", "1.5", ""])
    async def test_invalid_page_raises(self, page):
        with pytest.raises(MalformedQueryError) as exc_info:
            normalize_query({"page": page})

        assert exc_info.value.status == 400
        assert exc_info.value.kind is ErrorKind.MALFORMED_QUERY
        assert exc_info.value.details == {"page": page}

    @pytest.mark.anyio
    async def test_invalid_limit_raises(self):
        with pytest.raises(MalformedQueryError) as exc_info:
            normalize_query({"limit": "0"})

        assert exc_info.value.status == 400
        assert "limit" in exc_info.value.message

    @pytest.mark.anyio
    async def test_non_string_sorted_by_raises(self):
        with pytest.raises(MalformedQueryError) as exc_info:
            normalize_query({"sortedBy": {"gt": "1"}})

        assert exc_info.value.status == 400

    @pytest.mark.anyio
    async def test_unserializable_query_raises_without_status(self):
        """A serialization fault carries no status of its own."""
        with pytest.raises(MalformedQueryError) as exc_info:
            normalize_query({"name": object()})

        assert exc_info.value.status is None

    @pytest.mark.anyio
    async def test_input_is_not_mutated(self):
        raw = {"page": "2", "age": {"gte": "18"}}

        normalize_query(raw)

        assert raw == {"page": "2", "age": {"gte": "18"}}


class TestRewriteFirstOperator:
    """Tests for the textual operator rewrite."""

    @pytest.mark.anyio
    @pytest.mark.parametrize("token", ["gte", "lte", "gt", "lt"])
    async def test_each_token_is_rewritten(self, token):
        assert rewrite_first_operator(f'{{"{token}": "1"}}') == f'{{"${token}": "1"}}'

    @pytest.mark.anyio
    async def test_string_without_tokens_is_unchanged(self):
        serialized = '{"name": "Ada"}'
        assert rewrite_first_operator(serialized) == serialized


class TestParseQueryParams:
    """Tests for URL query string expansion."""

    @pytest.mark.anyio
    async def test_flat_pairs(self):
        raw = parse_query_params([("page", "2"), ("name", "Ada")])

        assert raw == {"page": "2", "name": "Ada"}

    @pytest.mark.anyio
    async def test_bracket_keys_become_nested(self):
        raw = parse_query_params([("age[gte]", "18"), ("age[lt]", "65")])

        assert raw == {"age": {"gte": "18", "lt": "65"}}

    @pytest.mark.anyio
    async def test_repeated_key_keeps_last_value(self):
        raw = parse_query_params([("name", "Ada"), ("name", "Grace")])

        assert raw == {"name": "Grace"}

    @pytest.mark.anyio
    async def test_bracket_key_replaces_plain_value(self):
        raw = parse_query_params([("age", "30"), ("age[gt]", "18")])

        assert raw == {"age": {"gt": "18"}}

    @pytest.mark.anyio
    async def test_deeper_nesting_is_kept_literal(self):
        raw = parse_query_params([("a[b][c]", "1")])

        assert raw == {"a[b][c]": "1"}


class TestParseSort:
    """Tests for sort string parsing."""

    @pytest.mark.anyio
    async def test_default_field_ascending_with_tiebreak(self):
        assert parse_sort("createdAt") == [("createdAt", ASCENDING), ("_id", ASCENDING)]

    @pytest.mark.anyio
    async def test_descending_prefix(self):
        assert parse_sort("-age") == [("age", DESCENDING), ("_id", ASCENDING)]

    @pytest.mark.anyio
    async def test_multiple_fields(self):
        assert parse_sort("-age, name") == [
            ("age", DESCENDING),
            ("name", ASCENDING),
            ("_id", ASCENDING),
        ]

    @pytest.mark.anyio
    async def test_explicit_id_is_not_duplicated(self):
        assert parse_sort("-_id") == [("_id", DESCENDING)]

    @pytest.mark.anyio
    async def test_blank_falls_back_to_created_at(self):
        assert parse_sort("  ") == [("createdAt", ASCENDING), ("_id", ASCENDING)]
