"""Tests for the MongoDB users collection adapter."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import AutoReconnect, DuplicateKeyError

from config.settings import Settings
from models.database import UserStore, document_to_user, record_to_document
from schemas.exercise import ExerciseRecord
from utils.errors import Conflict, StorageUnavailable

USER_OID = ObjectId("5f1d7f3e9b1e8a3c4d2b1a0f")


@pytest.fixture
def collection():
    """Motor collection double with coroutine methods."""
    mock = MagicMock()
    mock.find_one = AsyncMock(return_value=None)
    mock.insert_one = AsyncMock()
    mock.find_one_and_update = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def user_store(collection):
    return UserStore(collection)


def user_document(**overrides):
    document = {
        "_id": USER_OID,
        "username": "alice",
        "count": 1,
        "log": [{"description": "run", "duration": 30, "date": datetime(2024, 1, 5)}],
    }
    document.update(overrides)
    return document


class TestConversion:
    """Tests for document conversion helpers."""

    def test_record_stored_at_utc_midnight(self):
        record = ExerciseRecord(description="run", duration=30, date=date(2024, 1, 5))

        document = record_to_document(record)

        assert document == {
            "description": "run",
            "duration": 30,
            "date": datetime(2024, 1, 5, tzinfo=timezone.utc),
        }

    def test_document_to_user(self):
        user = document_to_user(user_document())

        assert user.id == str(USER_OID)
        assert user.username == "alice"
        assert user.log[0].date == date(2024, 1, 5)

    def test_document_without_log(self):
        document = user_document()
        del document["log"]

        assert document_to_user(document).log == []


class TestUserStore:
    """Tests for UserStore."""

    async def test_find_by_username(self, user_store, collection):
        collection.find_one.return_value = user_document()

        user = await user_store.find_by_username("alice")

        assert user.username == "alice"
        collection.find_one.assert_awaited_once_with({"username": "alice"})

    async def test_find_by_username_missing(self, user_store):
        assert await user_store.find_by_username("nobody") is None

    async def test_find_by_id(self, user_store, collection):
        collection.find_one.return_value = user_document()

        user = await user_store.find_by_id(str(USER_OID))

        assert user.id == str(USER_OID)
        collection.find_one.assert_awaited_once_with({"_id": USER_OID})

    async def test_find_by_malformed_id_skips_query(self, user_store, collection):
        assert await user_store.find_by_id("not-an-id") is None
        collection.find_one.assert_not_awaited()

    async def test_create(self, user_store, collection):
        new_id = ObjectId()
        collection.insert_one.return_value = MagicMock(inserted_id=new_id)

        user = await user_store.create("bob")

        assert user.id == str(new_id)
        assert user.log == []
        collection.insert_one.assert_awaited_once_with({"username": "bob", "count": 0, "log": []})

    async def test_create_duplicate_is_conflict(self, user_store, collection):
        collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")

        with pytest.raises(Conflict) as excinfo:
            await user_store.create("alice")

        assert excinfo.value.status_code == 403
        assert excinfo.value.message == "username already taken."

    async def test_append_log(self, user_store, collection):
        collection.find_one_and_update.return_value = user_document()
        record = ExerciseRecord(description="run", duration=30, date=date(2024, 1, 5))

        user = await user_store.append_log(str(USER_OID), record)

        assert user.log == [record]
        collection.find_one_and_update.assert_awaited_once_with(
            {"_id": USER_OID},
            {"$push": {"log": record_to_document(record)}, "$inc": {"count": 1}},
            return_document=ReturnDocument.AFTER,
        )

    async def test_append_log_unknown_user(self, user_store):
        record = ExerciseRecord(description="run", duration=30, date=date(2024, 1, 5))

        assert await user_store.append_log(str(USER_OID), record) is None

    @pytest.mark.parametrize(
        "method, args",
        [
            ("find_by_username", ("alice",)),
            ("find_by_id", (str(USER_OID),)),
            ("create", ("alice",)),
            ("append_log", (str(USER_OID), ExerciseRecord(description="a", duration=1, date=date(2024, 1, 1)))),
        ],
    )
    async def test_driver_errors_become_storage_unavailable(self, user_store, collection, method, args):
        error = AutoReconnect("connection reset by 10.0.0.1")
        collection.find_one.side_effect = error
        collection.insert_one.side_effect = error
        collection.find_one_and_update.side_effect = error

        with pytest.raises(StorageUnavailable) as excinfo:
            await getattr(user_store, method)(*args)

        assert excinfo.value.message == "database error."
        assert excinfo.value.__cause__ is error


class TestSettings:
    """Tests for settings-derived values."""

    @pytest.mark.parametrize(
        "url, name",
        [
            ("mongodb://localhost:27017/exercise-track", "exercise-track"),
            ("mongodb+srv://user:pw@cluster.example.net/tracker?retryWrites=true", "tracker"),
            ("mongodb://db.example:27017", "exercise-track"),
            ("mongodb://db.example:27017/?retryWrites=true", "exercise-track"),
        ],
    )
    def test_database_name(self, url, name):
        assert Settings(mongodb_url=url, _env_file=None).database_name == name

    def test_legacy_env_var(self, monkeypatch):
        monkeypatch.setenv("MLAB_URI", "mongodb://db.example/legacy")

        assert Settings(_env_file=None).database_name == "legacy"
