"""
Pytest configuration for the expense store tests.

Provides an in-memory stand-in for the Motor client so the store can be
exercised without a running MongoDB server.
"""

import asyncio
import bson
import os
import sys
from datetime import datetime

import pytest
from bson import ObjectId
from bson.codec_options import CodecOptions
from pymongo.results import DeleteResult, InsertManyResult, InsertOneResult

# Add the project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from database.connection import ConnectionProvider
from models.expense import Expense


# Same decoding options the provider gives the real client
STORED_CODEC_OPTIONS = CodecOptions(tz_aware=True)


def _stored(document):
    """Copy of `document` as it comes back from the server."""
    return bson.decode(bson.encode(document), codec_options=STORED_CODEC_OPTIONS)


def _matches(doc, filter):
    return all(doc.get(key) == value for key, value in filter.items())


class FakeCursor:
    def __init__(self, docs):
        self._docs = list(docs)
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._docs:
            raise StopAsyncIteration
        return self._docs.pop(0)

    async def close(self):
        self.closed = True


class FakeCollection:
    def __init__(self, name):
        self.name = name
        self.docs = []
        self.cursors = []

    async def insert_one(self, document):
        document.setdefault("_id", ObjectId())
        self.docs.append(_stored(document))
        return InsertOneResult(document["_id"], True)

    async def insert_many(self, documents, ordered=True):
        ids = []
        for document in documents:
            document.setdefault("_id", ObjectId())
            self.docs.append(_stored(document))
            ids.append(document["_id"])
        return InsertManyResult(ids, True)

    async def find_one(self, filter):
        for doc in self.docs:
            if _matches(doc, filter):
                return _stored(doc)
        return None

    def find(self, filter):
        cursor = FakeCursor(_stored(doc) for doc in self.docs if _matches(doc, filter))
        self.cursors.append(cursor)
        return cursor

    async def delete_one(self, filter):
        for index, doc in enumerate(self.docs):
            if _matches(doc, filter):
                del self.docs[index]
                return DeleteResult({"n": 1}, True)
        return DeleteResult({"n": 0}, True)

    async def delete_many(self, filter):
        kept = [doc for doc in self.docs if not _matches(doc, filter)]
        deleted = len(self.docs) - len(kept)
        self.docs = kept
        return DeleteResult({"n": deleted}, True)


class FakeDatabase:
    def __init__(self):
        self._collections = {}

    def __getitem__(self, name):
        return self._collections.setdefault(name, FakeCollection(name))


class FakeAdmin:
    def __init__(self, client):
        self._client = client

    async def command(self, name):
        self._client.commands.append(name)
        # Yield so concurrent callers really overlap with the ping
        await asyncio.sleep(0.01)
        if self._client.ping_error is not None:
            raise self._client.ping_error
        return {"ok": 1.0}


class FakeMotorClient:
    def __init__(self, ping_error=None):
        self.ping_error = ping_error
        self.commands = []
        self.closed = False
        self.admin = FakeAdmin(self)
        self._databases = {}

    def __getitem__(self, name):
        return self._databases.setdefault(name, FakeDatabase())

    def close(self):
        self.closed = True


class FakeClientFactory:
    """Returns the prepared clients in order and records every construction."""

    def __init__(self, *clients):
        self._clients = list(clients)
        self.calls = []

    def __call__(self, uri, **kwargs):
        self.calls.append((uri, kwargs))
        return self._clients.pop(0)


@pytest.fixture
def fake_client():
    return FakeMotorClient()


@pytest.fixture
def client_factory(fake_client):
    return FakeClientFactory(fake_client)


@pytest.fixture
def provider(client_factory):
    return ConnectionProvider("mongodb://test:27017", client_factory=client_factory)


@pytest.fixture
def expense_collection(fake_client):
    return fake_client["expenses"]["expense"]


@pytest.fixture
def sample_expense():
    return Expense(
        expense_id="1d",
        title="First expense",
        amount=3.50,
        date=datetime(2024, 5, 17, 12, 30),
    )
