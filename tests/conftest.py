"""
Pytest configuration and shared fixtures.
"""

import copy
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from pymongo.errors import DuplicateKeyError

from api.database import BookStore
from api.models import Book, BookIn


class InMemoryCollection:
    """
    Minimal stand-in for a motor collection, holding documents in a dict.

    Setting ``error`` makes every operation raise it, to simulate a store
    outage.
    """

    def __init__(self, documents=None):
        self.documents = {}
        self.error = None
        self.database = SimpleNamespace(command=AsyncMock(return_value={"ok": 1.0}))
        for document in documents or []:
            self.documents[document["_id"]] = copy.deepcopy(document)

    def _check(self):
        if self.error:
            raise self.error

    def _matches(self, query):
        if "_id" in query:
            document = self.documents.get(query["_id"])
            return [document] if document is not None else []
        return list(self.documents.values())

    def find(self, query):
        return self._iterate(query)

    async def _iterate(self, query):
        self._check()
        for document in self._matches(query):
            yield copy.deepcopy(document)

    async def insert_one(self, document):
        self._check()
        if document["_id"] in self.documents:
            raise DuplicateKeyError(f"duplicate key: {document['_id']}")
        self.documents[document["_id"]] = copy.deepcopy(document)
        return SimpleNamespace(inserted_id=document["_id"])

    async def replace_one(self, query, document):
        self._check()
        matched = self._matches(query)
        if matched:
            self.documents[query["_id"]] = copy.deepcopy(document)
        return SimpleNamespace(matched_count=len(matched), modified_count=len(matched))

    async def delete_one(self, query):
        self._check()
        matched = self._matches(query)
        if matched:
            del self.documents[query["_id"]]
        return SimpleNamespace(deleted_count=len(matched))

    async def count_documents(self, query):
        self._check()
        return len(self._matches(query))


@pytest.fixture
def sample_book():
    """Create a sample stored book."""
    return Book(
        id="0123456789abcdef0123456789abcdef",
        title="A Light in the Attic",
        author="Shel Silverstein",
        year=1981
    )


@pytest.fixture
def sample_payload():
    """Create a sample book payload."""
    return BookIn(title="A", author="B")


@pytest.fixture
def empty_collection():
    """Empty in-memory collection."""
    return InMemoryCollection()


@pytest.fixture
def memory_collection(sample_book):
    """In-memory collection seeded with the sample book."""
    return InMemoryCollection([sample_book.to_document()])


@pytest.fixture
def book_store(memory_collection):
    """Book store backed by the in-memory collection."""
    return BookStore(memory_collection)


@pytest.fixture
def mock_book_store():
    """Create a mock book store for route testing."""
    store = AsyncMock(spec=BookStore)
    store.list_books.return_value = []
    store.get_books_by_id.return_value = []
    store.replace_book.return_value = True
    store.delete_book.return_value = True
    store.health_check.return_value = {"status": "healthy", "books_count": 0}
    return store
