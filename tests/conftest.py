# shared fixtures for innervoice tests
# provides an in-memory motor collection, a fake gemini client, and an httpx test client

import random
import re
from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from pymongo.errors import DuplicateKeyError

from innervoice.main import app
from innervoice.dependencies import get_note_service
from innervoice.models.analysis import AIAnalysis, encode_analysis
from innervoice.services.fallback_analyzer import FallbackAnalyzer
from innervoice.services.note_service import NoteService
from innervoice.services.note_store import NoteStore, format_timestamp
from innervoice.exceptions import ModelInvocationError


BASE_TIME = datetime(2026, 3, 10, 9, 0, 0, tzinfo=timezone.utc)

GOOD_REPLY = """Here is my analysis:
EMOTIONAL_TONE: Calm and content
EMOTIONS: happy, calm
MOOD_SCORE: 3
REFLECTION: You found some peace today.
RESPONSE: That sounds like a lovely day, Deniz.
QUESTION: What made it feel so calm?
COUNTER_NOTE: -
SUGGESTION: Take a walk again tomorrow.
MOTIVATION: Small moments add up.
"""


class TickingClock:
    """deterministic clock, one second later on every call"""

    def __init__(self, start: datetime = BASE_TIME, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


# async cursor mock

class AsyncCursorMock:
    """mock for motor's async cursor, supports async for and chained methods"""

    def __init__(self, data=None):
        self._data = list(data or [])
        self._index = 0

    def sort(self, key, direction=1):
        keys = key if isinstance(key, list) else [(key, direction)]
        for field, order in reversed(keys):
            self._data.sort(key=lambda d: d.get(field) or "", reverse=order < 0)
        return self

    def skip(self, n):
        self._data = self._data[n:]
        return self

    def limit(self, n):
        if n:
            self._data = self._data[:n]
        return self

    def __aiter__(self):
        self._index = 0
        return self

    async def __anext__(self):
        if self._index >= len(self._data):
            raise StopAsyncIteration
        item = self._data[self._index]
        self._index += 1
        return item


class MockCollection:
    """mock for a motor collection with async methods.
    set fail_with to an exception to make the listed operations raise it."""

    def __init__(self, data=None, unique_key: Optional[str] = None):
        self._data = data or []
        self.unique_key = unique_key
        self.fail_with: Optional[Exception] = None
        self.fail_on: set = {"find", "find_one", "insert_one", "update_one", "delete_one"}

    def _maybe_fail(self, operation: str):
        if self.fail_with is not None and operation in self.fail_on:
            raise self.fail_with

    def find(self, query=None, projection=None):
        self._maybe_fail("find")
        results = self._data
        if query:
            results = [d for d in results if self._matches(d, query)]
        return AsyncCursorMock(results)

    async def find_one(self, query=None, projection=None):
        self._maybe_fail("find_one")
        if not query:
            return self._data[0] if self._data else None
        for doc in self._data:
            if self._matches(doc, query):
                return doc
        return None

    async def insert_one(self, doc):
        self._maybe_fail("insert_one")
        if self.unique_key and any(d.get(self.unique_key) == doc.get(self.unique_key) for d in self._data):
            raise DuplicateKeyError(f"E11000 duplicate key error: {doc.get(self.unique_key)}", code=11000)
        oid = doc.get("_id", len(self._data) + 1)
        doc["_id"] = oid
        self._data.append(doc)
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def update_one(self, query, update, upsert=False):
        self._maybe_fail("update_one")
        result = MagicMock()
        result.matched_count = 0
        result.modified_count = 0
        for doc in self._data:
            if self._matches(doc, query):
                if "$set" in update:
                    doc.update(update["$set"])
                result.matched_count = 1
                result.modified_count = 1
                break
        return result

    async def delete_one(self, query):
        self._maybe_fail("delete_one")
        result = MagicMock()
        result.deleted_count = 0
        for i, doc in enumerate(self._data):
            if self._matches(doc, query):
                del self._data[i]
                result.deleted_count = 1
                break
        return result

    async def create_index(self, *args, **kwargs):
        return "mock_index"

    def _matches(self, doc, query):
        """basic mongodb query matching for tests"""
        for key, value in query.items():
            doc_val = doc.get(key)
            if isinstance(value, dict):
                for op, arg in value.items():
                    if op == "$in":
                        if isinstance(doc_val, list):
                            if not set(doc_val) & set(arg):
                                return False
                        elif doc_val not in arg:
                            return False
                    elif op == "$ne":
                        if doc_val == arg or (isinstance(doc_val, list) and arg in doc_val):
                            return False
                    elif op == "$gte":
                        if doc_val is None or doc_val < arg:
                            return False
                    elif op == "$lte":
                        if doc_val is None or doc_val > arg:
                            return False
                    elif op == "$regex":
                        flags = re.IGNORECASE if "i" in value.get("$options", "") else 0
                        if doc_val is None or not re.search(arg, str(doc_val), flags):
                            return False
            elif isinstance(doc_val, list) and not isinstance(value, list):
                if value not in doc_val:
                    return False
            elif doc_val != value:
                return False
        return True


class MockDatabase:
    """mock database that mimics the Database class"""

    def __init__(self):
        self.notes = MockCollection([], unique_key="note_id")


class FakeModelClient:
    """stand-in for GeminiClient. replies are consumed in order, an exception reply is raised."""

    def __init__(self, replies=None, error: Optional[Exception] = None):
        self.replies = list(replies or [])
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if not self.replies:
            raise ModelInvocationError("no reply configured")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def note_doc(
    note_id: str,
    content: str,
    created_at: datetime,
    tags: Optional[list[str]] = None,
    mood_score: Optional[int] = None,
) -> dict:
    """a stored note document as the store would write it"""
    analysis = None
    if mood_score is not None:
        analysis = encode_analysis(AIAnalysis(mainEmotions=tags or [], moodScore=mood_score))
    return {
        "note_id": note_id,
        "content": content,
        "mood": None,
        "emotional_tone": None,
        "ai_analysis": analysis,
        "ai_expansion": None,
        "tags": list(tags or []),
        "created_at": format_timestamp(created_at),
        "updated_at": format_timestamp(created_at),
    }


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def mock_db():
    """create a fresh mock database for each test"""
    return MockDatabase()


@pytest.fixture
def store(mock_db, clock):
    return NoteStore(mock_db, clock=clock)


@pytest.fixture
def fallback():
    return FallbackAnalyzer(rng=random.Random(7))


@pytest.fixture
def failing_model():
    """a gemini client that is always down"""
    return FakeModelClient(error=ModelInvocationError("service unavailable"))


@pytest.fixture
def make_service(store, fallback, clock):
    """build a note service around the given model client"""

    def _make(model_client, **kwargs) -> NoteService:
        kwargs.setdefault("max_length", 500)
        return NoteService(store, model_client, fallback, clock=clock, **kwargs)

    return _make


@pytest.fixture
def note_service(make_service, failing_model):
    return make_service(failing_model)


@pytest.fixture
def seed_notes(mock_db):
    """insert stored note documents directly into the mock collection"""

    def _seed(*docs):
        for doc in docs:
            mock_db.notes._data.append(dict(doc))

    return _seed


@pytest_asyncio.fixture
async def client(note_service):
    """httpx async test client wired to the note service"""

    async def override_get_note_service():
        return note_service

    app.dependency_overrides[get_note_service] = override_get_note_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def bare_client():
    """client with no dependency overrides, as before startup completes"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
