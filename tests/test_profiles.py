"""
Profile endpoint tests: reading profiles and following / unfollowing.
"""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_get_profile_anonymous(async_client: AsyncClient, register_and_login):
    await register_and_login("bob")
    resp = await async_client.get("/api/profiles/bob")
    assert resp.status_code == 200
    assert resp.json() == {
        "profile": {"bio": None, "image": None, "username": "bob", "following": False}
    }


@pytest.mark.asyncio
async def test_get_profile_not_found(async_client: AsyncClient):
    resp = await async_client.get("/api/profiles/nobody")
    assert resp.status_code == 404
    assert resp.json()["errors"]["body"]


@pytest.mark.asyncio
async def test_follow_and_unfollow(async_client: AsyncClient, register_and_login):
    alice = await register_and_login("alice")
    await register_and_login("bob")

    resp = await async_client.post("/api/profiles/bob/follow", headers=alice)
    assert resp.status_code == 200
    assert resp.json()["profile"]["following"] is True

    resp = await async_client.get("/api/profiles/bob", headers=alice)
    assert resp.json()["profile"]["following"] is True

    resp = await async_client.delete("/api/profiles/bob/follow", headers=alice)
    assert resp.status_code == 200
    assert resp.json()["profile"]["following"] is False

    resp = await async_client.get("/api/profiles/bob", headers=alice)
    assert resp.json()["profile"]["following"] is False


@pytest.mark.asyncio
async def test_follow_twice_is_idempotent(async_client: AsyncClient, register_and_login):
    alice = await register_and_login("alice")
    await register_and_login("bob")

    await async_client.post("/api/profiles/bob/follow", headers=alice)
    resp = await async_client.post("/api/profiles/bob/follow", headers=alice)
    assert resp.status_code == 200
    assert resp.json()["profile"]["following"] is True


@pytest.mark.asyncio
async def test_unfollow_without_following(async_client: AsyncClient, register_and_login):
    alice = await register_and_login("alice")
    await register_and_login("bob")
    resp = await async_client.delete("/api/profiles/bob/follow", headers=alice)
    assert resp.status_code == 200
    assert resp.json()["profile"]["following"] is False


@pytest.mark.asyncio
async def test_follow_unknown_user(async_client: AsyncClient, register_and_login):
    alice = await register_and_login("alice")
    resp = await async_client.post("/api/profiles/nobody/follow", headers=alice)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_follow_self(async_client: AsyncClient, register_and_login):
    alice = await register_and_login("alice")
    resp = await async_client.post("/api/profiles/alice/follow", headers=alice)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_follow_requires_auth(async_client: AsyncClient, register_and_login):
    await register_and_login("bob")
    resp = await async_client.post("/api/profiles/bob/follow")
    assert resp.status_code == 401
