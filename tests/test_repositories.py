"""Tests for the Mongo repositories, their record mapping and the database handle."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from songs_api.app.core.db import MongoDatabase
from songs_api.app.core.errors import DuplicateRecordError
from songs_api.app.repositories import SongRepository, UserRepository, from_document, to_document, to_object_id


class TestObjectIds:
    def test_valid_string_is_converted(self):
        oid = ObjectId()
        assert to_object_id(str(oid)) == oid

    def test_object_id_is_returned_as_is(self):
        oid = ObjectId()
        assert to_object_id(oid) is oid

    def test_invalid_values_give_none(self):
        assert to_object_id("not-an-id") is None
        assert to_object_id("") is None
        assert to_object_id(None) is None
        assert to_object_id(123) is None


class TestDocumentMapping:
    def test_from_document_renames_id(self):
        oid = ObjectId()
        record = from_document({"_id": oid, "title": "Song", "createdBy": "u1"})
        assert record == {"id": str(oid), "title": "Song", "createdBy": "u1"}

    def test_from_document_none(self):
        assert from_document(None) is None

    def test_from_document_does_not_mutate(self):
        document = {"_id": ObjectId(), "title": "Song"}
        from_document(document)
        assert "_id" in document

    def test_to_document_drops_identifiers(self):
        assert to_document({"id": "x", "_id": "y", "title": "Song"}) == {"title": "Song"}


class TestUniqueFields:
    def test_songs_are_unique_by_title(self):
        assert SongRepository.unique_fields == ("title",)

    def test_users_are_unique_by_email(self):
        assert UserRepository.unique_fields == ("email",)


def mock_collection() -> MagicMock:
    """A motor collection whose awaitable methods are ``AsyncMock``s."""
    collection = MagicMock()
    collection.find_one = AsyncMock()
    collection.insert_one = AsyncMock()
    collection.find_one_and_update = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.create_index = AsyncMock()
    return collection


def duplicate_key(field: str) -> DuplicateKeyError:
    return DuplicateKeyError("E11000 duplicate key error", 11000, {"keyPattern": {field: 1}})


@pytest.fixture
def collection():
    return mock_collection()


@pytest.fixture
def songs(collection):
    return SongRepository(collection)


class TestMongoRepository:
    @pytest.mark.asyncio
    async def test_get_all_maps_documents(self, songs, collection):
        oid = ObjectId()
        collection.find.return_value.__aiter__.return_value = [{"_id": oid, "title": "Song"}]
        assert await songs.get_all() == [{"id": str(oid), "title": "Song"}]
        collection.find.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_get_by_id_queries_object_id(self, songs, collection):
        oid = ObjectId()
        collection.find_one.return_value = {"_id": oid, "title": "Song"}
        assert await songs.get_by_id(str(oid)) == {"id": str(oid), "title": "Song"}
        collection.find_one.assert_awaited_once_with({"_id": oid})

    @pytest.mark.asyncio
    async def test_get_by_malformed_id_skips_the_query(self, songs, collection):
        assert await songs.get_by_id("not-an-id") is None
        collection.find_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_by_title(self, songs, collection):
        collection.find_one.return_value = None
        assert await songs.get_by_title("Song") is None
        collection.find_one.assert_awaited_once_with({"title": "Song"})

    @pytest.mark.asyncio
    async def test_get_by_email(self, collection):
        oid = ObjectId()
        collection.find_one.return_value = {"_id": oid, "email": "ana@example.com"}
        user = await UserRepository(collection).get_by_email("ana@example.com")
        assert user == {"id": str(oid), "email": "ana@example.com"}

    @pytest.mark.asyncio
    async def test_create_returns_record_with_new_id(self, songs, collection):
        oid = ObjectId()
        collection.insert_one.return_value = MagicMock(inserted_id=oid)
        record = await songs.create({"id": "ignored", "title": "Song"})
        assert record == {"id": str(oid), "title": "Song"}
        collection.insert_one.assert_awaited_once_with({"title": "Song"})

    @pytest.mark.asyncio
    async def test_create_duplicate_key_names_the_field(self, songs, collection):
        collection.insert_one.side_effect = duplicate_key("title")
        with pytest.raises(DuplicateRecordError) as exc_info:
            await songs.create({"title": "Song"})
        assert exc_info.value.field == "title"

    @pytest.mark.asyncio
    async def test_duplicate_key_without_details_falls_back_to_unique_field(self, collection):
        collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key error", 11000)
        with pytest.raises(DuplicateRecordError) as exc_info:
            await UserRepository(collection).create({"email": "ana@example.com"})
        assert exc_info.value.field == "email"

    @pytest.mark.asyncio
    async def test_update_sets_fields_and_returns_new_document(self, songs, collection):
        oid = ObjectId()
        collection.find_one_and_update.return_value = {"_id": oid, "title": "New"}
        record = await songs.update(str(oid), {"id": str(oid), "title": "New"})
        assert record == {"id": str(oid), "title": "New"}
        collection.find_one_and_update.assert_awaited_once_with(
            {"_id": oid}, {"$set": {"title": "New"}}, return_document=ReturnDocument.AFTER
        )

    @pytest.mark.asyncio
    async def test_update_unknown_record(self, songs, collection):
        collection.find_one_and_update.return_value = None
        assert await songs.update(str(ObjectId()), {"title": "New"}) is None
        assert await songs.update("not-an-id", {"title": "New"}) is None

    @pytest.mark.asyncio
    async def test_update_duplicate_key(self, songs, collection):
        collection.find_one_and_update.side_effect = duplicate_key("title")
        with pytest.raises(DuplicateRecordError):
            await songs.update(str(ObjectId()), {"title": "Taken"})

    @pytest.mark.asyncio
    async def test_delete_reports_whether_a_document_was_removed(self, songs, collection):
        collection.delete_one.return_value = MagicMock(deleted_count=1)
        assert await songs.delete(str(ObjectId())) is True
        collection.delete_one.return_value = MagicMock(deleted_count=0)
        assert await songs.delete(str(ObjectId())) is False
        assert await songs.delete("not-an-id") is False

    @pytest.mark.asyncio
    async def test_ensure_indexes_creates_unique_index(self, songs, collection):
        await songs.ensure_indexes()
        collection.create_index.assert_awaited_once_with("title", unique=True)


class TestMongoDatabase:
    @pytest.fixture
    def client(self, collection):
        client = MagicMock()
        client.admin.command = AsyncMock()
        client.__getitem__.return_value.__getitem__.return_value = collection
        return client

    def test_exposes_repositories_over_named_collections(self, client):
        database = MongoDatabase("mongodb://localhost:27017", "songs-db", client=client)
        assert isinstance(database.songs, SongRepository)
        assert isinstance(database.users, UserRepository)
        client.__getitem__.assert_called_once_with("songs-db")

    @pytest.mark.asyncio
    async def test_connect_pings_and_creates_indexes(self, client, collection):
        database = MongoDatabase("mongodb://localhost:27017", "songs-db", client=client)
        await database.connect()
        client.admin.command.assert_awaited_once_with("ping")
        assert {call.args[0] for call in collection.create_index.await_args_list} == {"title", "email"}

    @pytest.mark.asyncio
    async def test_connect_failure_propagates(self, client):
        client.admin.command.side_effect = ServerSelectionTimeoutError("no server")
        database = MongoDatabase("mongodb://localhost:27017", "songs-db", client=client)
        with pytest.raises(ServerSelectionTimeoutError):
            await database.connect()

    @pytest.mark.asyncio
    async def test_close_closes_client(self, client):
        database = MongoDatabase("mongodb://localhost:27017", "songs-db", client=client)
        await database.close()
        client.close.assert_called_once_with()
