from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest
from bson import ObjectId
from pymongo.results import InsertOneResult

# Makes the signin_form package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from signin_form.core import config as core_config  # noqa: E402
from signin_form.db.connection import ConnectionManager  # noqa: E402


class FakeCollection:
    def __init__(self, mongo: "FakeMongo", database: str, name: str) -> None:
        self.mongo = mongo
        self.database = database
        self.name = name

    async def insert_one(self, document: dict) -> InsertOneResult:
        if self.mongo.insert_error is not None:
            raise self.mongo.insert_error
        stored = dict(document, _id=ObjectId())
        self.mongo.documents.append((self.database, self.name, stored))
        return InsertOneResult(stored["_id"], True)


class FakeDatabase:
    def __init__(self, mongo: "FakeMongo", name: str) -> None:
        self.mongo = mongo
        self.name = name

    async def command(self, name: str) -> dict:
        self.mongo.commands.append(name)
        if self.mongo.ping_delay:
            await asyncio.sleep(self.mongo.ping_delay)
        if self.mongo.ping_errors:
            raise self.mongo.ping_errors.pop(0)
        return {"ok": 1.0}

    def __getitem__(self, name: str) -> FakeCollection:
        return FakeCollection(self.mongo, self.name, name)


class FakeClient:
    def __init__(self, mongo: "FakeMongo", uri: str, options: dict) -> None:
        self.mongo = mongo
        self.uri = uri
        self.options = options
        self.closed = False

    def __getitem__(self, name: str) -> FakeDatabase:
        return FakeDatabase(self.mongo, name)

    def close(self) -> None:
        self.closed = True


class FakeMongo:
    """Stands in for AsyncIOMotorClient; each call creates one client."""

    def __init__(self) -> None:
        self.clients: list[FakeClient] = []
        self.commands: list[str] = []
        self.documents: list[tuple[str, str, dict]] = []
        self.ping_errors: list[BaseException] = []
        self.ping_delay = 0.0
        self.insert_error: BaseException | None = None

    def __call__(self, uri: str, **options) -> FakeClient:
        client = FakeClient(self, uri, options)
        self.clients.append(client)
        return client


@pytest.fixture()
def clean_env(monkeypatch):
    """Removes Mongo/app variables and resets the settings cache."""
    for name in (
        *core_config.MONGO_URI_VARS,
        "MONGO_DB_NAME",
        "MONGO_SERVER_SELECTION_TIMEOUT_MS",
        "PORT",
        "HOST",
        "APP_ENV",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    core_config.get_settings.cache_clear()
    yield monkeypatch
    core_config.get_settings.cache_clear()


@pytest.fixture()
def fake_mongo() -> FakeMongo:
    return FakeMongo()


@pytest.fixture()
def connection(fake_mongo) -> ConnectionManager:
    return ConnectionManager("mongodb://db.test:27017", "testdb", client_factory=fake_mongo)
