"""
Comment endpoint tests: add, list and delete comments on an article.
"""
import pytest
from httpx import AsyncClient


async def _setup_article(client: AsyncClient, headers: dict, title: str = "Commented") -> str:
    resp = await client.post("/api/articles", headers=headers, json={"article": {"title": title}})
    assert resp.status_code == 201, resp.text
    return resp.json()["article"]["slug"]


async def _add_comment(client: AsyncClient, headers: dict, slug: str, body: str):
    return await client.post(
        f"/api/articles/{slug}/comments", headers=headers, json={"comment": {"body": body}}
    )


@pytest.mark.asyncio
async def test_add_comment(async_client: AsyncClient, register_and_login):
    headers = await register_and_login("alice")
    slug = await _setup_article(async_client, headers)

    resp = await _add_comment(async_client, headers, slug, "First!")
    assert resp.status_code == 201
    comment = resp.json()["comment"]
    assert comment["body"] == "First!"
    assert comment["createdAt"].endswith("Z")
    assert comment["author"] == {
        "bio": None, "image": None, "username": "alice", "following": False,
    }


@pytest.mark.asyncio
async def test_add_comment_missing_article(async_client: AsyncClient, register_and_login):
    headers = await register_and_login("alice")
    resp = await _add_comment(async_client, headers, "ghost", "hello?")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_add_comment_requires_auth(async_client: AsyncClient, register_and_login):
    headers = await register_and_login("alice")
    slug = await _setup_article(async_client, headers)
    resp = await _add_comment(async_client, {}, slug, "anonymous")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_list_comments_oldest_first(async_client: AsyncClient, register_and_login):
    alice = await register_and_login("alice")
    bob = await register_and_login("bob")
    slug = await _setup_article(async_client, alice)
    await _add_comment(async_client, alice, slug, "one")
    await _add_comment(async_client, bob, slug, "two")

    resp = await async_client.get(f"/api/articles/{slug}/comments")
    assert resp.status_code == 200
    assert [c["body"] for c in resp.json()["comments"]] == ["one", "two"]


@pytest.mark.asyncio
async def test_list_comments_following_flag(async_client: AsyncClient, register_and_login):
    """``author.following`` reflects whether the requester follows the commenter."""
    alice = await register_and_login("alice")
    bob = await register_and_login("bob")
    slug = await _setup_article(async_client, alice)
    await _add_comment(async_client, bob, slug, "from bob")
    await async_client.post("/api/profiles/bob/follow", headers=alice)

    resp = await async_client.get(f"/api/articles/{slug}/comments", headers=alice)
    assert resp.json()["comments"][0]["author"]["following"] is True

    resp = await async_client.get(f"/api/articles/{slug}/comments")
    assert resp.json()["comments"][0]["author"]["following"] is False


@pytest.mark.asyncio
async def test_list_comments_unknown_article(async_client: AsyncClient):
    resp = await async_client.get("/api/articles/ghost/comments")
    assert resp.status_code == 200
    assert resp.json() == {"comments": []}


@pytest.mark.asyncio
async def test_delete_own_comment(async_client: AsyncClient, register_and_login):
    headers = await register_and_login("alice")
    slug = await _setup_article(async_client, headers)
    comment_id = (await _add_comment(async_client, headers, slug, "oops")).json()["comment"]["id"]

    resp = await async_client.delete(f"/api/articles/{slug}/comments/{comment_id}", headers=headers)
    assert resp.status_code == 204

    resp = await async_client.get(f"/api/articles/{slug}/comments")
    assert resp.json()["comments"] == []


@pytest.mark.asyncio
async def test_delete_someone_elses_comment_is_silent(
    async_client: AsyncClient, register_and_login
):
    """Deleting a comment you did not write succeeds but changes nothing."""
    alice = await register_and_login("alice")
    bob = await register_and_login("bob")
    slug = await _setup_article(async_client, alice)
    comment_id = (await _add_comment(async_client, alice, slug, "mine")).json()["comment"]["id"]

    resp = await async_client.delete(f"/api/articles/{slug}/comments/{comment_id}", headers=bob)
    assert resp.status_code == 204

    resp = await async_client.get(f"/api/articles/{slug}/comments")
    assert [c["id"] for c in resp.json()["comments"]] == [comment_id]


@pytest.mark.asyncio
async def test_comments_removed_with_article(async_client: AsyncClient, register_and_login):
    headers = await register_and_login("alice")
    slug = await _setup_article(async_client, headers)
    await _add_comment(async_client, headers, slug, "soon gone")

    await async_client.delete(f"/api/articles/{slug}", headers=headers)
    resp = await async_client.get(f"/api/articles/{slug}/comments")
    assert resp.json() == {"comments": []}
