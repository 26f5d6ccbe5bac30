"""Pytest configuration: path setup and shared fakes for GPO / Elasticsearch."""

import sys
from pathlib import Path

import httpx
import pytest

# Add project root to sys.path so tests can import modules without per-file boilerplate.
_PROJECT_ROOT = str(Path(__file__).parent)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from fetch import Fetcher  # noqa: E402
from utils import RateLimiter  # noqa: E402


class FakeIndex:
    """In-memory stand-in for HearingIndex with call tracking."""

    def __init__(self, existing=()):
        self.docs: dict[str, dict] = {doc_id: {} for doc_id in existing}
        self.exists_calls: list[str] = []
        self.create_calls: list[str] = []

    async def exists(self, doc_id):
        self.exists_calls.append(doc_id)
        return doc_id in self.docs

    async def create(self, doc_id, document):
        self.create_calls.append(doc_id)
        if doc_id in self.docs:
            raise RuntimeError(f"version conflict, document already exists: {doc_id}")
        self.docs[doc_id] = document

    async def close(self):
        pass


def make_fetcher(pages: dict[str, bytes | str], requests_per_second: float = 1000.0,
                 strict_status: bool = True, requested: list | None = None) -> Fetcher:
    """Fetcher backed by httpx.MockTransport serving ``pages``; other URLs are 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if requested is not None:
            requested.append(url)
        body = pages.get(url)
        if body is None:
            return httpx.Response(404, content=b"<html>Not Found</html>")
        if isinstance(body, str):
            body = body.encode()
        return httpx.Response(200, content=body)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Fetcher(client, RateLimiter(requests_per_second), strict_status=strict_status)


@pytest.fixture
def fake_index():
    return FakeIndex()
