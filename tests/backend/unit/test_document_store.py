"""
Unit tests for services.store_tortoise module.
Runs against the in-memory SQLite database from the `db` fixture.
"""
import asyncio
import datetime as dt

import pytest
from tortoise import timezone

from pharmadir.models.document import StoredDocument
from pharmadir.services.store_base import (
    SERVER_TIMESTAMP,
    DocumentNotFoundError,
    document_path,
    subcollection,
)
from pharmadir.services.store_tortoise import TortoiseDocumentStore

pytestmark = pytest.mark.asyncio


@pytest.fixture
def store(db):
    return TortoiseDocumentStore()


class TestPaths:
    async def test_subcollection_path(self):
        assert subcollection("pharmacies", "p1", "comments") == "pharmacies/p1/comments"

    @pytest.mark.parametrize("bad", ["", "a/b"])
    async def test_invalid_document_id(self, bad):
        with pytest.raises(ValueError):
            document_path("users", bad)


class TestReadWrite:
    async def test_get_missing_returns_none(self, store):
        assert await store.get("users", "nobody") is None

    async def test_set_then_get(self, store):
        await store.set("users", "u1", {"email": "a@x.com", "favorites": []})
        snap = await store.get("users", "u1")
        assert snap.id == "u1"
        assert snap.data == {"email": "a@x.com", "favorites": []}
        assert snap.version == 1

    async def test_set_replaces_unless_merge(self, store):
        await store.set("users", "u1", {"email": "a@x.com", "role": "USER"})
        await store.set("users", "u1", {"role": "ADMIN"}, merge=True)
        assert (await store.get("users", "u1")).data == {"email": "a@x.com", "role": "ADMIN"}
        await store.set("users", "u1", {"role": "USER"})
        assert (await store.get("users", "u1")).data == {"role": "USER"}

    async def test_every_write_bumps_version(self, store):
        await store.set("users", "u1", {"n": 1})
        await store.set("users", "u1", {"n": 2}, merge=True)
        await store.update("users", "u1", {"n": 3})
        assert (await store.get("users", "u1")).version == 3

    async def test_writes_refresh_updated_at(self, store):
        await store.set("users", "u1", {"n": 1})
        day_ago = timezone.now() - dt.timedelta(days=1)
        await StoredDocument.filter(path="users/u1").update(updated_at=day_ago)

        await store.set("users", "u1", {"n": 2}, merge=True)
        after_set = (await StoredDocument.get(path="users/u1")).updated_at
        assert after_set > day_ago

        await StoredDocument.filter(path="users/u1").update(updated_at=day_ago)
        snap = await store.get("users", "u1")
        assert await store.compare_and_set("users", "u1", {"n": 3}, expected_version=snap.version)
        assert (await StoredDocument.get(path="users/u1")).updated_at > day_ago

    async def test_server_timestamp_is_resolved(self, store):
        await store.set("users", "u1", {"createdAt": SERVER_TIMESTAMP})
        value = (await store.get("users", "u1")).data["createdAt"]
        assert isinstance(value, str)
        assert value.startswith("20")

    async def test_update_missing_raises(self, store):
        with pytest.raises(DocumentNotFoundError):
            await store.update("users", "nobody", {"x": 1})

    async def test_delete(self, store):
        await store.set("users", "u1", {"x": 1})
        await store.delete("users", "u1")
        assert await store.get("users", "u1") is None

    async def test_delete_missing_is_noop(self, store):
        await store.delete("users", "nobody")


class TestCompareAndSet:
    async def test_matching_version_writes(self, store):
        await store.set("users", "u1", {"favorites": []})
        assert await store.compare_and_set("users", "u1", {"favorites": ["a"]}, expected_version=1) is True
        snap = await store.get("users", "u1")
        assert snap.data["favorites"] == ["a"]
        assert snap.version == 2

    async def test_stale_version_is_refused(self, store):
        await store.set("users", "u1", {"favorites": []})
        await store.set("users", "u1", {"favorites": ["b"]}, merge=True)
        assert await store.compare_and_set("users", "u1", {"favorites": ["a"]}, expected_version=1) is False
        assert (await store.get("users", "u1")).data["favorites"] == ["b"]

    async def test_missing_document_raises(self, store):
        with pytest.raises(DocumentNotFoundError):
            await store.compare_and_set("users", "nobody", {"x": 1}, expected_version=1)

    async def test_only_one_of_two_racing_writers_wins(self, store):
        await store.set("users", "u1", {"favorites": []})
        results = await asyncio.gather(
            store.compare_and_set("users", "u1", {"favorites": ["a"]}, expected_version=1),
            store.compare_and_set("users", "u1", {"favorites": ["b"]}, expected_version=1),
        )
        assert sorted(results) == [False, True]


class TestCollections:
    async def test_add_assigns_ids_and_list_keeps_order(self, store):
        first = await store.add("pharmacies/p1/comments", {"text": "one"})
        second = await store.add("pharmacies/p1/comments", {"text": "two"})
        assert first.id != second.id
        listed = await store.list("pharmacies/p1/comments")
        assert [s.data["text"] for s in listed] == ["one", "two"]

    async def test_subcollections_are_separate(self, store):
        await store.add("pharmacies/p1/comments", {"text": "one"})
        await store.add("pharmacies/p2/comments", {"text": "two"})
        assert [s.data["text"] for s in await store.list("pharmacies/p2/comments")] == ["two"]
        assert await store.list("pharmacies") == []

    async def test_deleting_parent_keeps_subcollection(self, store):
        await store.set("pharmacies", "p1", {"name": "P"})
        await store.add("pharmacies/p1/comments", {"text": "one"})
        await store.delete("pharmacies", "p1")
        assert len(await store.list("pharmacies/p1/comments")) == 1
