"""
User endpoint tests: registration, login, token rotation, reading and
updating the current user.
"""
import pytest
from httpx import AsyncClient


async def _register(client: AsyncClient, username: str = "alice", password: str = "pw"):
    return await client.post("/api/users", json={
        "user": {"email": f"{username}@test.com", "password": password, "username": username},
    })


async def _login(client: AsyncClient, email: str = "alice@test.com", password: str = "pw"):
    return await client.post("/api/users/login", json={
        "user": {"email": email, "password": password},
    })


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register(async_client: AsyncClient):
    """Registration returns 201 and a user without a token."""
    resp = await _register(async_client)
    assert resp.status_code == 201
    assert resp.json() == {
        "user": {
            "bio": None,
            "email": "alice@test.com",
            "image": None,
            "token": None,
            "username": "alice",
        }
    }


@pytest.mark.asyncio
async def test_register_missing_field(async_client: AsyncClient):
    """Omitting a required field returns 422."""
    resp = await async_client.post("/api/users", json={
        "user": {"email": "nobody@test.com", "password": "pw"},
    })
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_register_duplicate_username(async_client: AsyncClient):
    """A unique-constraint violation surfaces as 500 with an error body."""
    assert (await _register(async_client)).status_code == 201
    resp = await async_client.post("/api/users", json={
        "user": {"email": "other@test.com", "password": "pw", "username": "alice"},
    })
    assert resp.status_code == 500
    assert resp.json()["errors"]["body"]


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_returns_token(async_client: AsyncClient):
    await _register(async_client)
    resp = await _login(async_client)
    assert resp.status_code == 201
    user = resp.json()["user"]
    assert user["username"] == "alice"
    assert user["token"]
    assert "password" not in user


@pytest.mark.asyncio
async def test_login_unknown_email(async_client: AsyncClient):
    resp = await _login(async_client, email="ghost@test.com")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient):
    await _register(async_client)
    resp = await _login(async_client, password="wrong")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_second_login_revokes_first_token(async_client: AsyncClient):
    """Only the most recently issued token is accepted."""
    await _register(async_client)
    first = (await _login(async_client)).json()["user"]["token"]
    second = (await _login(async_client)).json()["user"]["token"]
    assert first != second

    resp = await async_client.get("/api/user", headers={"Authorization": f"Bearer {first}"})
    assert resp.status_code == 401
    resp = await async_client.get("/api/user", headers={"Authorization": f"Bearer {second}"})
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_current_user(async_client: AsyncClient, register_and_login):
    headers = await register_and_login("alice")
    resp = await async_client.get("/api/user", headers=headers)
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["username"] == "alice"
    assert headers["Authorization"].endswith(user["token"])


@pytest.mark.asyncio
async def test_get_current_user_without_token(async_client: AsyncClient):
    resp = await async_client.get("/api/user")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_get_current_user_with_garbage_token(async_client: AsyncClient):
    resp = await async_client.get("/api/user", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_get_current_user_with_empty_bearer(async_client: AsyncClient):
    resp = await async_client.get("/api/user", headers={"Authorization": "Bearer "})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_scheme_is_accepted(async_client: AsyncClient, register_and_login):
    """``Token <t>`` is treated exactly like ``Bearer <t>``."""
    headers = await register_and_login("alice")
    token = headers["Authorization"].removeprefix("Bearer ")
    resp = await async_client.get("/api/user", headers={"Authorization": f"Token {token}"})
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_user_profile_fields(async_client: AsyncClient, register_and_login):
    headers = await register_and_login("alice")
    resp = await async_client.put("/api/user", headers=headers, json={
        "user": {"bio": "I write things", "image": "https://img.test/a.png"},
    })
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["bio"] == "I write things"
    assert user["image"] == "https://img.test/a.png"
    assert user["email"] == "alice@test.com"
    assert headers["Authorization"].endswith(user["token"])


@pytest.mark.asyncio
async def test_update_password_rehashes(async_client: AsyncClient, register_and_login):
    headers = await register_and_login("alice", password="old-pw")
    resp = await async_client.put("/api/user", headers=headers, json={
        "user": {"password": "new-pw"},
    })
    assert resp.status_code == 200

    assert (await _login(async_client, password="old-pw")).status_code == 401
    assert (await _login(async_client, password="new-pw")).status_code == 201


@pytest.mark.asyncio
async def test_update_user_requires_token(async_client: AsyncClient):
    resp = await async_client.put("/api/user", json={"user": {"bio": "x"}})
    assert resp.status_code == 401
