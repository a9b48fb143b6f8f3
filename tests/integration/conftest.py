"""Integration test fixtures.

Builds the full FastAPI application against a SQLite file and drives it
through ``httpx.AsyncClient``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient

from recipe_cms.factory import create_app


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator

    from fastapi import FastAPI

    from recipe_cms.core.config import Settings


pytestmark = pytest.mark.integration


@pytest.fixture
def app(test_settings: Settings) -> Generator[FastAPI]:
    """Create FastAPI app with test settings."""
    app = create_app(test_settings)
    try:
        yield app
    finally:
        app.state.runtime.close()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def user(client: AsyncClient) -> dict:
    """Create a user through the API."""
    response = await client.post(
        "/api/user",
        json={"name": "Ada", "email": "ada@example.com", "password": "correct horse"},
    )
    assert response.status_code == 201
    return response.json()
