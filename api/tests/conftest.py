"""
Shared fixtures: an in-memory GitHub client, an in-memory document store,
and the FastAPI app wired to both through dependency overrides.
"""
from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from tests.fakes import FakeGithubClient, InMemoryDocumentStore


@pytest.fixture
def github_client() -> FakeGithubClient:
    return FakeGithubClient()


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def app_with_fakes(github_client: FakeGithubClient, document_store: InMemoryDocumentStore):
    from explorer.dependencies import get_document_store, get_github_client
    from main import app

    app.dependency_overrides[get_github_client] = lambda: github_client
    app.dependency_overrides[get_document_store] = lambda: document_store
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def http_client(app_with_fakes):
    transport = ASGITransport(app=app_with_fakes)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
