"""
Exam Builder Backend — /users Endpoint Tests
==============================================

What:  HTTP-level tests for the user routes and the error envelopes.
How:   HTTPX AsyncClient over ASGITransport with get_user_service overridden
       to use the in-memory repository (see conftest.test_client).
       Full-stack coverage lives in test_user_routes_db.py.

What we test:
    ✅ The create → duplicate → update → delete → 404 scenario end to end
    ✅ 400 vs 404 for malformed vs missing ids
    ✅ camelCase payloads without password
    ✅ Unexpected persistence failures surface as 500 with the error text
    ✅ Unknown routes and unparseable bodies use the same envelope
"""

from unittest.mock import AsyncMock

import pytest


async def create(client, **overrides):
    body = {"name": "A", "email": "a@x.com", "password": "secret1", **overrides}
    return await client.post("/users", json=body)


class TestUserLifecycle:
    """The full request sequence a client goes through."""

    @pytest.mark.asyncio
    async def test_create_update_delete_scenario(self, test_client):
        created = await create(test_client)
        assert created.status_code == 201
        body = created.json()
        assert body["success"] is True
        assert body["message"] == "User created successfully"
        assert body["data"]["email"] == "a@x.com"
        assert "password" not in body["data"]
        user_id = body["data"]["id"]

        duplicate = await create(test_client)
        assert duplicate.status_code == 400
        assert duplicate.json() == {"success": False, "message": "Email already registered"}

        updated = await test_client.put(f"/users/{user_id}", json={"name": "B"})
        assert updated.status_code == 200
        assert updated.json()["data"]["name"] == "B"
        assert updated.json()["data"]["email"] == "a@x.com"

        deleted = await test_client.delete(f"/users/{user_id}")
        assert deleted.status_code == 200
        assert deleted.json()["data"] == {"id": user_id, "name": "B", "email": "a@x.com"}

        gone = await test_client.get(f"/users/{user_id}")
        assert gone.status_code == 404
        assert gone.json()["success"] is False


class TestListUsers:

    @pytest.mark.asyncio
    async def test_list_envelope(self, test_client):
        await create(test_client, email="first@x.com")
        await create(test_client, email="second@x.com")

        response = await test_client.get("/users")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["total"] == 2
        assert [u["email"] for u in body["data"]] == ["second@x.com", "first@x.com"]
        for user in body["data"]:
            assert "password" not in user
            assert {"id", "name", "email", "role", "photo", "createdAt"} <= set(user)

    @pytest.mark.asyncio
    async def test_list_failure_is_500_with_error(self, test_client, repository):
        repository.find_all = AsyncMock(side_effect=RuntimeError("connection refused"))

        response = await test_client.get("/users")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Error listing users",
            "error": "connection refused",
        }


class TestGetUser:

    @pytest.mark.asyncio
    async def test_get_by_id(self, test_client):
        user_id = (await create(test_client)).json()["data"]["id"]

        response = await test_client.get(f"/users/{user_id}")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == user_id
        assert response.json()["data"]["role"] == "PROFESSOR"

    @pytest.mark.asyncio
    async def test_non_numeric_id_is_400(self, test_client):
        response = await test_client.get("/users/abc")

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "Invalid ID" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_missing_id_is_404(self, test_client):
        response = await test_client.get("/users/999999")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "User with ID 999999 not found"}


class TestCreateUser:

    @pytest.mark.asyncio
    async def test_missing_name_is_400(self, test_client):
        response = await test_client.post("/users", json={"email": "a@x.com", "password": "secret1"})

        assert response.status_code == 400
        assert response.json()["message"] == "Name, email and password are required"

    @pytest.mark.asyncio
    async def test_role_and_photo(self, test_client):
        response = await create(test_client, role="admin", photo="https://cdn/x.png")

        assert response.status_code == 201
        assert response.json()["data"]["role"] == "ADMIN"
        assert response.json()["data"]["photo"] == "https://cdn/x.png"

    @pytest.mark.asyncio
    async def test_unknown_role_is_400(self, test_client):
        response = await create(test_client, role="STUDENT")

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Invalid role 'STUDENT'. Must be one of: ADMIN, PROFESSOR",
        }

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, test_client):
        response = await test_client.post(
            "/users", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestUpdateUser:

    @pytest.mark.asyncio
    async def test_email_in_use_is_400(self, test_client):
        first = (await create(test_client)).json()["data"]["id"]
        await create(test_client, email="b@x.com")

        response = await test_client.put(f"/users/{first}", json={"email": "b@x.com"})

        assert response.status_code == 400
        assert response.json()["message"] == "Email already in use by another user"

    @pytest.mark.asyncio
    async def test_update_missing_user_is_404(self, test_client):
        response = await test_client.put("/users/77", json={"name": "X"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_missing_user_is_404_before_role_check(self, test_client):
        response = await test_client.put("/users/999", json={"role": "STUDENT"})

        assert response.status_code == 404
        assert response.json()["message"] == "User with ID 999 not found"

    @pytest.mark.asyncio
    async def test_unknown_role_on_existing_user_is_400(self, test_client):
        user_id = (await create(test_client)).json()["data"]["id"]

        response = await test_client.put(f"/users/{user_id}", json={"role": "STUDENT"})

        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid role")

    @pytest.mark.asyncio
    async def test_role_is_case_insensitive(self, test_client):
        user_id = (await create(test_client)).json()["data"]["id"]

        response = await test_client.put(f"/users/{user_id}", json={"role": " admin "})

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "ADMIN"

    @pytest.mark.asyncio
    async def test_update_without_body(self, test_client):
        created = (await create(test_client)).json()["data"]

        response = await test_client.put(f"/users/{created['id']}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert {k: v for k, v in data.items() if k != "updatedAt"} == {
            k: v for k, v in created.items() if k != "updatedAt"
        }
        assert data["updatedAt"] != created["updatedAt"]

    @pytest.mark.asyncio
    async def test_photo_null_clears_photo(self, test_client):
        user_id = (await create(test_client, photo="https://cdn/x.png")).json()["data"]["id"]

        response = await test_client.put(f"/users/{user_id}", json={"photo": None})

        assert response.status_code == 200
        assert response.json()["data"]["photo"] is None


class TestDeleteUser:

    @pytest.mark.asyncio
    async def test_delete_missing_is_404(self, test_client):
        response = await test_client.delete("/users/12")
        assert response.status_code == 404
        assert response.json()["message"] == "User with ID 12 not found"

    @pytest.mark.asyncio
    async def test_delete_invalid_id_is_400(self, test_client):
        response = await test_client.delete("/users/x1")
        assert response.status_code == 400


class TestRouting:

    @pytest.mark.asyncio
    async def test_unknown_route(self, test_client):
        response = await test_client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route GET /nope not found"}

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.get("/users", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"
