"""
Unit tests for the ownership-guarded services (favorites, comments,
pharmacies) with a mocked document store.
"""
from unittest.mock import AsyncMock

import pytest

from pharmadir.core.errors import ForbiddenError, InvalidInputError, NotFoundError
from pharmadir.schemas.identity import Role, UserIdentity
from pharmadir.services.comments_service import CommentsService
from pharmadir.services.favorites_service import FavoritesService
from pharmadir.services.pharmacy_service import PharmacyService
from pharmadir.services.store_base import DocumentSnapshot, StoreConflictError

pytestmark = pytest.mark.asyncio

USER = UserIdentity(uid="user123", email="test@example.com", displayName="Tester")
OTHER = UserIdentity(uid="other456", email="other@example.com")


def _profile(favorites, version=1):
    return DocumentSnapshot(id=USER.uid, data={"email": USER.email, "favorites": list(favorites)}, version=version)


class TestFavorites:
    async def test_add_appends_new_ids(self):
        store = AsyncMock()
        store.get.return_value = _profile(["a"])
        store.compare_and_set.return_value = True
        result = await FavoritesService(store).add_favorites(["b", "c"], USER)
        assert result == ["a", "b", "c"]
        store.compare_and_set.assert_awaited_once_with("users", USER.uid, {"favorites": ["a", "b", "c"]}, expected_version=1)

    async def test_add_collapses_duplicate_ids_in_request(self):
        store = AsyncMock()
        store.get.return_value = _profile([])
        store.compare_and_set.return_value = True
        assert await FavoritesService(store).add_favorites(["b", "b"], USER) == ["b"]

    async def test_add_existing_id_is_rejected_without_write(self):
        store = AsyncMock()
        store.get.return_value = _profile(["pharmacy123"])
        with pytest.raises(InvalidInputError, match="pharmacy123"):
            await FavoritesService(store).add_favorites(["pharmacy123", "new"], USER)
        store.compare_and_set.assert_not_called()

    async def test_remove_missing_id_is_rejected_without_write(self):
        store = AsyncMock()
        store.get.return_value = _profile([])
        with pytest.raises(InvalidInputError):
            await FavoritesService(store).remove_favorites(["pharmacy123"], USER)
        store.compare_and_set.assert_not_called()

    async def test_remove_drops_ids(self):
        store = AsyncMock()
        store.get.return_value = _profile(["a", "b", "c"])
        store.compare_and_set.return_value = True
        assert await FavoritesService(store).remove_favorites(["b"], USER) == ["a", "c"]

    async def test_missing_profile_is_not_found(self):
        store = AsyncMock()
        store.get.return_value = None
        service = FavoritesService(store)
        with pytest.raises(NotFoundError):
            await service.get_favorites(USER)
        with pytest.raises(NotFoundError):
            await service.add_favorites(["a"], USER)

    async def test_get_returns_array_verbatim(self):
        store = AsyncMock()
        store.get.return_value = _profile(["x", "y"])
        assert await FavoritesService(store).get_favorites(USER) == ["x", "y"]

    async def test_lost_race_is_retried_on_fresh_data(self):
        """A concurrent writer added "a"; the retry sees it and keeps it."""
        store = AsyncMock()
        store.get.side_effect = [_profile([], version=1), _profile(["a"], version=2)]
        store.compare_and_set.side_effect = [False, True]
        result = await FavoritesService(store).add_favorites(["b"], USER)
        assert result == ["a", "b"]
        assert store.compare_and_set.await_args_list[1].kwargs["expected_version"] == 2

    async def test_retry_reevaluates_predicate(self):
        """If the concurrent writer added the same id, the retry rejects it."""
        store = AsyncMock()
        store.get.side_effect = [_profile([], version=1), _profile(["a"], version=2)]
        store.compare_and_set.side_effect = [False]
        with pytest.raises(InvalidInputError):
            await FavoritesService(store).add_favorites(["a"], USER)

    async def test_gives_up_after_max_attempts(self):
        store = AsyncMock()
        store.get.return_value = _profile([])
        store.compare_and_set.return_value = False
        with pytest.raises(StoreConflictError):
            await FavoritesService(store, max_attempts=3).add_favorites(["a"], USER)
        assert store.compare_and_set.await_count == 3


class TestComments:
    async def test_create_on_missing_pharmacy_is_not_found(self):
        store = AsyncMock()
        store.get.return_value = None
        with pytest.raises(NotFoundError):
            await CommentsService(store).create_comment("nonexistent", "Test", 5, USER)
        store.add.assert_not_called()

    async def test_create_stores_owner(self):
        store = AsyncMock()
        store.get.return_value = DocumentSnapshot(id="pharmacy123", data={"name": "P"})
        store.add.return_value = DocumentSnapshot(
            id="comment123",
            data={"ownerUid": USER.uid, "authorName": "Tester", "text": "Great service!", "starRating": 5,
                  "createdAt": "2024-01-01T00:00:00+00:00"},
        )
        result = await CommentsService(store).create_comment("pharmacy123", "Great service!", 5, USER)
        assert result["id"] == "comment123"
        collection, data = store.add.await_args.args
        assert collection == "pharmacies/pharmacy123/comments"
        assert data["ownerUid"] == USER.uid
        assert data["starRating"] == 5

    async def test_list_on_missing_pharmacy_is_not_found(self):
        store = AsyncMock()
        store.get.return_value = None
        with pytest.raises(NotFoundError):
            await CommentsService(store).list_comments("nonexistent")

    async def test_list_returns_documents_with_ids(self):
        store = AsyncMock()
        store.get.return_value = DocumentSnapshot(id="pharmacy123", data={})
        store.list.return_value = [DocumentSnapshot(id="comment123", data={"text": "Great service!", "starRating": 5})]
        assert await CommentsService(store).list_comments("pharmacy123") == [
            {"id": "comment123", "text": "Great service!", "starRating": 5}
        ]

    async def test_delete_missing_comment_is_not_found(self):
        store = AsyncMock()
        store.get.side_effect = [DocumentSnapshot(id="pharmacy123", data={}), None]
        with pytest.raises(NotFoundError, match="Comment not found"):
            await CommentsService(store).delete_comment("pharmacy123", "nonexistent", USER)
        store.delete.assert_not_called()

    async def test_delete_by_non_owner_is_forbidden(self):
        store = AsyncMock()
        store.get.side_effect = [
            DocumentSnapshot(id="pharmacy123", data={}),
            DocumentSnapshot(id="comment123", data={"ownerUid": USER.uid}),
        ]
        with pytest.raises(ForbiddenError):
            await CommentsService(store).delete_comment("pharmacy123", "comment123", OTHER)
        store.delete.assert_not_called()

    async def test_delete_by_owner(self):
        store = AsyncMock()
        store.get.side_effect = [
            DocumentSnapshot(id="pharmacy123", data={}),
            DocumentSnapshot(id="comment123", data={"ownerUid": USER.uid}),
        ]
        await CommentsService(store).delete_comment("pharmacy123", "comment123", USER)
        store.delete.assert_awaited_once_with("pharmacies/pharmacy123/comments", "comment123")


class TestPharmacies:
    async def test_upsert_requires_admin(self):
        store = AsyncMock()
        with pytest.raises(ForbiddenError):
            await PharmacyService(store).upsert_pharmacy("p1", {"name": "P"}, USER)
        store.set.assert_not_called()

    async def test_upsert_as_admin(self):
        store = AsyncMock()
        store.get.return_value = DocumentSnapshot(id="p1", data={"name": "P"})
        admin = USER.model_copy(update={"role": Role.ADMIN})
        result = await PharmacyService(store).upsert_pharmacy("p1", {"name": "P"}, admin)
        assert result == {"id": "p1", "name": "P"}
