"""
Unit tests for UserService.

Tests cover:
- "User not found" (422) for every id-based operation
- Partial updates and the empty patch
- Delete followed by lookup
- Paginated search end to end
- Store faults surfacing as StoreFailureError
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect

from app.api.schemas.user import UserCreate, UserUpdate
from app.core.errors import ErrorKind, MalformedQueryError, NotFoundError, StoreFailureError
from app.services.user_service import USER_NOT_FOUND, UserService


class TestFindById:
    @pytest.mark.anyio
    async def test_returns_document(self, seeded_users):
        service = UserService(seeded_users)
        target = seeded_users.documents[2]

        user = await service.find_by_id(str(target["_id"]))

        assert user == target

    @pytest.mark.anyio
    async def test_missing_id_raises_not_found(self, user_service):
        with pytest.raises(NotFoundError) as exc_info:
            await user_service.find_by_id(str(ObjectId()))

        assert exc_info.value.message == USER_NOT_FOUND == "User not found"
        assert exc_info.value.status == 422
        assert exc_info.value.kind is ErrorKind.NOT_FOUND

    @pytest.mark.anyio
    async def test_malformed_id_raises_not_found(self, user_service):
        with pytest.raises(NotFoundError) as exc_info:
            await user_service.find_by_id("not-an-id")

        assert exc_info.value.details == {"user_id": "not-an-id"}


class TestUpdateById:
    @pytest.mark.anyio
    async def test_applies_only_set_fields(self, seeded_users):
        service = UserService(seeded_users)
        target_id = str(seeded_users.documents[0]["_id"])

        updated = await service.update_by_id(target_id, UserUpdate(age=37))

        assert updated["age"] == 37
        assert updated["email"] == "ada@example.com"

    @pytest.mark.anyio
    async def test_phone_can_be_cleared(self, seeded_users):
        service = UserService(seeded_users)
        target_id = str(seeded_users.documents[0]["_id"])

        updated = await service.update_by_id(target_id, UserUpdate(phone=None))

        assert "phone" in updated
        assert updated["phone"] is None

    @pytest.mark.anyio
    async def test_missing_id_raises_and_writes_nothing(self, seeded_users):
        service = UserService(seeded_users)
        before = [dict(d) for d in seeded_users.documents]

        with pytest.raises(NotFoundError) as exc_info:
            await service.update_by_id(str(ObjectId()), UserUpdate(name="Ghost"))

        assert exc_info.value.status == 422
        assert seeded_users.documents == before

    @pytest.mark.anyio
    async def test_empty_patch_returns_current_document(self, seeded_users):
        service = UserService(seeded_users)
        target = seeded_users.documents[1]

        user = await service.update_by_id(str(target["_id"]), UserUpdate())

        assert user == target

    @pytest.mark.anyio
    async def test_empty_patch_on_missing_id_raises(self, user_service):
        with pytest.raises(NotFoundError):
            await user_service.update_by_id(str(ObjectId()), UserUpdate())

    @pytest.mark.anyio
    async def test_update_is_a_single_store_call(self):
        """Existence check and write are one find-and-modify round trip."""
        collection = MagicMock()
        collection.find_one = AsyncMock()
        collection.find_one_and_update = AsyncMock(return_value={"_id": ObjectId(), "age": 5})

        await UserService(collection).update_by_id(str(ObjectId()), UserUpdate(age=5))

        collection.find_one_and_update.assert_awaited_once()
        collection.find_one.assert_not_called()


class TestDeleteById:
    @pytest.mark.anyio
    async def test_delete_then_find_raises_not_found(self, seeded_users):
        service = UserService(seeded_users)
        target_id = str(seeded_users.documents[3]["_id"])

        await service.delete_by_id(target_id)

        with pytest.raises(NotFoundError):
            await service.find_by_id(target_id)

    @pytest.mark.anyio
    async def test_missing_id_raises_not_found(self, seeded_users):
        service = UserService(seeded_users)

        with pytest.raises(NotFoundError) as exc_info:
            await service.delete_by_id(str(ObjectId()))

        assert exc_info.value.status == 422
        assert len(seeded_users.documents) == 5


class TestCreateAndFindAll:
    @pytest.mark.anyio
    async def test_create_then_find(self, user_service):
        created = await user_service.create(UserCreate(name=" Ada ", email="ADA@Example.com"))

        found = await user_service.find_by_id(str(created["_id"]))
        assert found["name"] == "Ada"
        assert found["email"] == "ada@example.com"
        assert found["createdAt"] is not None

    @pytest.mark.anyio
    async def test_find_all_returns_every_user(self, seeded_users):
        users = await UserService(seeded_users).find_all()

        assert len(users) == 5

    @pytest.mark.anyio
    async def test_find_all_store_fault_is_wrapped(self):
        with patch(
            "app.services.user_service.user_repo.find_all",
            new=AsyncMock(side_effect=AutoReconnect("connection reset")),
        ):
            with pytest.raises(StoreFailureError) as exc_info:
                await UserService(MagicMock()).find_all()

        assert exc_info.value.message == "connection reset"
        assert exc_info.value.status is None


class TestFindAllWithPagination:
    @pytest.mark.anyio
    async def test_search_with_range_filter(self, seeded_users):
        service = UserService(seeded_users)

        page = await service.find_all_with_pagination(
            {"age": {"lt": "40"}, "sortedBy": "-age", "limit": "2"}
        )

        assert [d["name"] for d in page.data] == ["Ada", "Margaret"]
        assert page.items_found == 3
        assert page.items_count == 5
        assert page.per_page == 2

    @pytest.mark.anyio
    async def test_invalid_limit(self, user_service):
        with pytest.raises(MalformedQueryError) as exc_info:
            await user_service.find_all_with_pagination({"limit": "-3"})

        assert exc_info.value.status == 400

    @pytest.mark.anyio
    async def test_store_fault_is_wrapped(self):
        collection = MagicMock()
        collection.find.side_effect = AutoReconnect("gone")
        collection.count_documents = AsyncMock(return_value=0)

        with pytest.raises(StoreFailureError) as exc_info:
            await UserService(collection).find_all_with_pagination({})

        assert exc_info.value.message == "gone"

    @pytest.mark.anyio
    async def test_two_comparisons_on_one_field_fail_as_store_failure(self, seeded_users):
        """Only the first comparison becomes an operator; the store rejects the bare second one."""
        service = UserService(seeded_users)

        with pytest.raises(StoreFailureError) as exc_info:
            await service.find_all_with_pagination({"age": {"gte": "18", "lt": "65"}})

        assert exc_info.value.status is None
        assert "unknown operator: lt" in exc_info.value.message
