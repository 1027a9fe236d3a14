"""
Tests for the SQLite document store query and update translation.
"""

from datetime import datetime, timedelta

import pytest


@pytest.fixture
async def notes(db):
    collection = db.notes
    base = datetime(2024, 1, 1)
    await collection.insert_one({
        "_id": "a", "title": "Alpha", "tagIds": ["t1", "t2"], "isPinned": True,
        "updatedAt": base,
    })
    await collection.insert_one({
        "_id": "b", "title": "Beta 50%", "tagIds": ["t2"], "isPinned": False,
        "updatedAt": base + timedelta(days=1),
    })
    await collection.insert_one({
        "_id": "c", "title": "Gamma", "tagIds": [], "isPinned": False,
        "notebookId": None, "updatedAt": base + timedelta(days=2),
    })
    return collection


class TestQueries:
    """Test query operator translation."""

    async def test_exact_and_bool_match(self, notes):
        docs = await notes.find({"isPinned": True}).to_list()

        assert [d["_id"] for d in docs] == ["a"]

    async def test_all_matches_array_members(self, notes):
        docs = await notes.find({"tagIds": {"$all": ["t2"]}}).sort("title").to_list()

        assert [d["title"] for d in docs] == ["Alpha", "Beta 50%"]
        assert await notes.count_documents({"tagIds": {"$all": ["t1", "t2"]}}) == 1

    async def test_search_is_case_insensitive(self, notes):
        docs = await notes.find({"title": {"$search": "ALP"}}).to_list()

        assert [d["_id"] for d in docs] == ["a"]

    async def test_search_treats_wildcards_literally(self, notes):
        assert await notes.count_documents({"title": {"$search": "%"}}) == 1
        assert await notes.count_documents({"title": {"$search": "_"}}) == 0

    async def test_or(self, notes):
        count = await notes.count_documents(
            {"$or": [{"_id": "a"}, {"title": "Gamma"}]}
        )

        assert count == 2

    async def test_id_in(self, notes):
        assert await notes.count_documents({"_id": {"$in": ["a", "c", "zzz"]}}) == 2

    async def test_none_matches_missing_and_null(self, notes):
        docs = await notes.find({"notebookId": None}).to_list()

        assert len(docs) == 3

    async def test_sort_skip_limit(self, notes):
        docs = await notes.find({}).sort("updatedAt", -1).skip(1).limit(1).to_list()

        assert [d["_id"] for d in docs] == ["b"]

    async def test_dates_round_trip(self, notes):
        doc = await notes.find_one({"_id": "a"})

        assert doc["updatedAt"] == datetime(2024, 1, 1)


class TestUpdates:
    """Test update operators."""

    async def test_pull(self, notes):
        await notes.update_many({"tagIds": {"$all": ["t2"]}}, {"$pull": {"tagIds": "t2"}})

        doc = await notes.find_one({"_id": "a"})
        assert doc["tagIds"] == ["t1"]
        assert await notes.count_documents({"tagIds": {"$all": ["t2"]}}) == 0

    async def test_find_one_and_update_returns_new_document(self, notes):
        stamp = datetime(2025, 6, 1, 12, 30)

        doc = await notes.find_one_and_update(
            {"_id": "c"}, {"$set": {"title": "Delta", "updatedAt": stamp}}, return_document=True
        )

        assert doc["title"] == "Delta"
        assert doc["updatedAt"] == stamp

    async def test_find_one_and_update_missing(self, notes):
        assert await notes.find_one_and_update({"_id": "zzz"}, {"$set": {"x": 1}}) is None

    async def test_upsert_creates_document(self, db):
        pads = db.scratchPads

        result = await pads.update_one(
            {"userId": "u1"}, {"$set": {"content": "hi"}}, upsert=True
        )

        assert result.upserted_id
        doc = await pads.find_one({"userId": "u1"})
        assert doc["content"] == "hi"

    async def test_delete_many(self, notes):
        result = await notes.delete_many({"isPinned": False})

        assert result.deleted_count == 2
        assert await notes.count_documents() == 1

    async def test_unknown_operator_rejected(self, notes):
        with pytest.raises(ValueError):
            await notes.count_documents({"title": {"$regex": "A.*"}})
