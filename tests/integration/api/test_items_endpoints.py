"""Integration tests for the generic item endpoints."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest


if TYPE_CHECKING:
    from httpx import AsyncClient


pytestmark = pytest.mark.integration


class TestCreateItem:
    """Tests for POST /api/{list}."""

    async def test_create_user(self, client: AsyncClient, user: dict) -> None:
        """Should create a user with createdAt set and the password hidden."""
        assert user["name"] == "Ada"
        assert user["createdAt"].endswith("+00:00") or user["createdAt"].endswith("Z")
        assert user["password"] == {"isSet": True}

        response = await client.get(f"/api/user/{user['id']}")

        assert response.status_code == 200
        assert response.json() == user

    async def test_missing_required_field(self, client: AsyncClient) -> None:
        """Should return 400 with a detail per missing field."""
        response = await client.post("/api/user", json={"name": "Ada"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert {detail["field"] for detail in body["details"]} == {"email", "password"}

    async def test_duplicate_email(self, client: AsyncClient, user: dict) -> None:
        """Should return 409 for a second user with the same email."""
        response = await client.post(
            "/api/user",
            json={"name": "Eve", "email": user["email"], "password": "x"},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "UNIQUE_CONSTRAINT"

    async def test_missing_author(self, client: AsyncClient) -> None:
        """Should return 400 when the referenced author does not exist."""
        response = await client.post(
            "/api/recipe",
            json={"title": "Bread", "author": {"connect": {"id": "missing"}}},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "REFERENCE_NOT_FOUND"

    async def test_kebab_case_path(self, client: AsyncClient) -> None:
        """Should serve multi-word lists under their kebab-case path."""
        nutrients = {
            name: "1"
            for name in (
                "calories",
                "carbohydrates",
                "cholesterol",
                "fat",
                "protein",
                "saturatedFat",
                "sodium",
                "sugars",
                "totalFat",
                "totalSaturatedFat",
                "totalSodium",
                "totalSugars",
                "totalTransFat",
            )
        }

        response = await client.post("/api/nutritional-information", json=nutrients)

        assert response.status_code == 201
        assert response.json()["calories"] == "1"


class TestReadItems:
    """Tests for GET /api/{list} and GET /api/{list}/{id}."""

    async def test_find_with_paging(self, client: AsyncClient) -> None:
        """Should page items and report the total count."""
        for name in ("a", "b", "c"):
            await client.post("/api/tag", json={"name": name})

        response = await client.get("/api/tag", params={"skip": 1, "take": 1})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 3
        assert len(body["items"]) == 1

    async def test_unknown_list(self, client: AsyncClient) -> None:
        """Should return 404 for an undeclared list."""
        response = await client.get("/api/chef")

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    async def test_unknown_item(self, client: AsyncClient) -> None:
        """Should return 404 for an unknown id."""
        response = await client.get("/api/user/nope")

        assert response.status_code == 404

    async def test_invalid_paging(self, client: AsyncClient) -> None:
        """Should reject negative skip values."""
        response = await client.get("/api/tag", params={"skip": -1})

        assert response.status_code == 422


class TestUpdateAndDelete:
    """Tests for PATCH and DELETE /api/{list}/{id}."""

    async def test_update_keeps_other_fields(self, client: AsyncClient, user: dict) -> None:
        """Should change only the given fields."""
        response = await client.patch(f"/api/user/{user['id']}", json={"name": "Ada L."})

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Ada L."
        assert body["email"] == user["email"]
        assert body["createdAt"] == user["createdAt"]

    async def test_blanking_required_field(self, client: AsyncClient, user: dict) -> None:
        """Should return 400 when a required field is blanked."""
        response = await client.patch(f"/api/user/{user['id']}", json={"email": ""})

        assert response.status_code == 400

    async def test_link_then_delete_author(self, client: AsyncClient, user: dict) -> None:
        """Should clear the recipe's author when the user is deleted."""
        created = await client.post(
            "/api/recipe",
            json={"title": "Bread", "author": {"connect": {"id": user["id"]}}},
        )
        recipe = created.json()
        assert recipe["author"] == {"id": user["id"]}

        deleted = await client.delete(f"/api/user/{user['id']}")
        assert deleted.status_code == 200

        response = await client.get(f"/api/recipe/{recipe['id']}")
        assert response.json()["author"] is None
        assert (await client.get(f"/api/user/{user['id']}")).status_code == 404


class TestImageRoute:
    """Tests for the /images/ static route."""

    async def test_serves_stored_file(self, client: AsyncClient, test_settings) -> None:
        """Should serve files written to the local storage path."""
        directory = Path(test_settings.storage.local.storage_path)
        (directory / "cover.jpg").write_bytes(b"jpeg-bytes")

        response = await client.get("/images/cover.jpg")

        assert response.status_code == 200
        assert response.content == b"jpeg-bytes"
