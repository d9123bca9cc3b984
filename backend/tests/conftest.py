"""
Storefront Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── memory_store: In-memory DocumentStore double (no MongoDB needed)
    ├── upload_dir: Temporary directory for ingested uploads
    ├── ingestor: MultipartIngestor writing into upload_dir
    ├── inline_materializer: InlineImageMaterializer
    ├── sample_image_bytes / other_image_bytes: Tiny image payloads
    ├── test_client: HTTPX AsyncClient wired to a fresh app via overrides
    └── lenient_client: same, returning 500 responses for unhandled errors
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

# Override settings for testing BEFORE any app imports
os.environ["MONGO_URL"] = "mongodb://localhost:27017"
os.environ["MONGO_DB_NAME"] = "storefront_test"
os.environ["IMAGE_STORAGE"] = "inline"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="storefront_test_")
os.environ["LOG_LEVEL"] = "WARNING"

from storefront.database import get_store, to_object_id  # noqa: E402
from storefront.services.image_base import get_materializer  # noqa: E402
from storefront.services.ingest_service import MultipartIngestor, get_ingestor  # noqa: E402
from storefront.services.inline_image_service import InlineImageMaterializer  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

class MemoryStore:
    """
    In-memory stand-in for DocumentStore with the same async interface.

    Timestamps advance one second per insert so newest-first ordering is
    deterministic.
    """

    def __init__(self):
        self.collections: Dict[str, List[Dict[str, Any]]] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.healthy = True

    async def ping(self) -> bool:
        return self.healthy

    async def insert(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        self._clock += timedelta(seconds=1)
        doc = dict(document)
        doc["_id"] = ObjectId()
        doc["createdAt"] = self._clock
        doc["updatedAt"] = self._clock
        self.collections.setdefault(collection, []).append(doc)
        return dict(doc)

    async def find_all(self, collection: str, sort=None) -> List[Dict[str, Any]]:
        docs = [dict(d) for d in self.collections.get(collection, [])]
        for key, direction in reversed(list(sort or [])):
            docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return docs

    async def find_by_id(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(doc_id)
        for doc in self.collections.get(collection, []):
            if oid is not None and doc["_id"] == oid:
                return dict(doc)
        return None

    async def delete_by_id(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = await self.find_by_id(collection, doc_id)
        if doc is not None:
            self.collections[collection] = [
                d for d in self.collections[collection] if d["_id"] != doc["_id"]
            ]
        return doc

    def count(self, collection: str) -> int:
        return len(self.collections.get(collection, []))


FORM_BOUNDARY = "storefront-test-boundary"


def encode_text_fields(data: Optional[Dict[str, Any]]) -> bytes:
    """Multipart body holding only text fields (httpx urlencodes these)."""
    lines = []
    for name, value in (data or {}).items():
        lines += [
            f"--{FORM_BOUNDARY}",
            f'Content-Disposition: form-data; name="{name}"',
            "",
            str(value),
        ]
    lines.append(f"--{FORM_BOUNDARY}--")
    return ("\r\n".join(lines) + "\r\n").encode("utf-8")


def make_multipart_request(data=None, files=None, content_type: Optional[str] = None) -> Request:
    """
    Build a Starlette Request carrying a multipart/form-data body.

    Bodies with files are encoded by httpx; text-only bodies are encoded
    here, since httpx would send them urlencoded. `content_type` overrides
    the generated header (e.g. to drop the boundary).
    """
    if files:
        encoded = httpx.Request("POST", "http://test/api/products", data=data, files=files)
        body = encoded.read()
        generated = encoded.headers["content-type"]
    else:
        body = encode_text_fields(data)
        generated = f"multipart/form-data; boundary={FORM_BOUNDARY}"
    header = content_type if content_type is not None else generated
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/products",
        "query_string": b"",
        "headers": [(b"content-type", header.encode("latin-1"))],
    }
    sent = False

    async def receive():
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def ingestor(upload_dir):
    return MultipartIngestor(str(upload_dir))


@pytest.fixture
def inline_materializer():
    return InlineImageMaterializer()


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def other_image_bytes():
    """PNG signature followed by a few filler bytes."""
    return b'\x89PNG\r\n\x1a\n' + b'\x00\x00\x00\rIHDR'


@pytest.fixture
def order_payload():
    return {
        "name": "A",
        "email": "a@b.com",
        "address": "x",
        "age": 20,
        "phone": "123",
        "province": "P",
        "city": "C",
        "braceletColor": "red",
        "gender": "male",
    }


def build_app(store, ingestor, materializer):
    """
    Fresh app wired to test doubles.

    The lifespan does not run under ASGITransport; the store, ingestor and
    materializer are supplied through dependency overrides instead.
    """
    from storefront.main import create_app

    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_ingestor] = lambda: ingestor
    app.dependency_overrides[get_materializer] = lambda: materializer
    return app


@pytest_asyncio.fixture
async def test_client(memory_store, ingestor, inline_materializer):
    """HTTPX AsyncClient talking to a fresh app."""
    app = build_app(memory_store, ingestor, inline_materializer)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def lenient_client(memory_store, ingestor, inline_materializer):
    """
    Like test_client, but unhandled errors come back as the 500 response
    instead of being re-raised into the test.
    """
    app = build_app(memory_store, ingestor, inline_materializer)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
