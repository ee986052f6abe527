"""
Postboard Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── posts_collection: In-memory stand-in for the MongoDB posts collection
    ├── upload_env:       Temp working directory with uploads/ and UPLOADS_PATH set
    ├── make_upload:      Builds FastAPI UploadFile objects from bytes
    ├── sample_image_bytes: Fake image content for upload tests
    └── test_client:      HTTPX AsyncClient wired to the app with the in-memory store
"""

import io
import os
from types import SimpleNamespace
from typing import Any, Dict, Mapping

import pytest
import pytest_asyncio
from bson import ObjectId
from fastapi import UploadFile
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["MONGO_URL"] = "mongodb://localhost:27017"
os.environ["MONGO_DATABASE"] = "postboard_test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("UPLOADS_PATH", None)

from app.config import settings  # noqa: E402
from app.database import get_posts_collection  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# In-memory posts collection
# ══════════════════════════════════════════════════════════════════════════

class InMemoryCollection:
    """
    The subset of AsyncCollection that PostStore uses, backed by a dict.

    Documents are copied on the way in and out, like a real round-trip to
    the server.
    """

    def __init__(self):
        self.documents: Dict[ObjectId, Dict[str, Any]] = {}

    async def insert_one(self, document: Mapping[str, Any]):
        oid = ObjectId()
        self.documents[oid] = {**document, "_id": oid}
        return SimpleNamespace(inserted_id=oid, acknowledged=True)

    def find(self, filter: Mapping[str, Any]):
        return self._iterate()

    async def _iterate(self):
        for document in list(self.documents.values()):
            yield dict(document)

    async def find_one(self, filter: Mapping[str, Any]):
        document = self.documents.get(filter["_id"])
        return dict(document) if document else None

    async def find_one_and_update(self, filter, update, return_document=None):
        document = self.documents.get(filter["_id"])
        if document is None:
            return None
        document.update(update["$set"])
        return dict(document)

    async def find_one_and_delete(self, filter: Mapping[str, Any]):
        return self.documents.pop(filter["_id"], None)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def posts_collection():
    """A fresh, empty posts collection for each test."""
    return InMemoryCollection()


@pytest.fixture
def upload_env(tmp_path, monkeypatch):
    """
    Runs the test inside a temporary directory laid out like a deployment.

    upload_dir is the relative "uploads" directory and UPLOADS_PATH is the
    working directory, so a stored imageUrl resolves to tmp_path / imageUrl.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings, "upload_dir", "uploads")
    monkeypatch.setattr(settings, "uploads_path", str(tmp_path))
    return tmp_path


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def make_upload():
    """
    Factory for UploadFile objects, as FastAPI builds them from a multipart part.

    Usage:
        upload = make_upload(b"bytes", "cat.png")
    """
    def _make(content: bytes, filename: str = "photo.jpg") -> UploadFile:
        return UploadFile(file=io.BytesIO(content), filename=filename, size=len(content))
    return _make


@pytest_asyncio.fixture
async def test_client(posts_collection, upload_env):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    The posts collection dependency is overridden with the in-memory
    collection; the lifespan (MongoDB ping) does not run.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/posts")
    """
    from app.main import app

    app.dependency_overrides[get_posts_collection] = lambda: posts_collection
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
