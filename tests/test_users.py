"""
User endpoint tests — author profiles and the acting user's own article
listing (which, unlike the public feed, answers 404 when empty).
"""
import pytest
from httpx import AsyncClient


# ---------------------------------------------------------------------------
# Author profiles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_user(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/users", json={
        "name": "New User",
        "email": "newuser@example.com",
        "pfp": "https://img.example.com/new.png",
    })
    assert resp.status_code == 201
    user = resp.json()
    assert user["name"] == "New User"
    assert user["email"] == "newuser@example.com"
    assert user["pfp"] == "https://img.example.com/new.png"
    assert "id" in user
    assert "created_at" in user


@pytest.mark.asyncio
async def test_create_user_minimal_fields(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/users", json={
        "name": "Minimal",
        "email": "minimal@example.com",
    })
    assert resp.status_code == 201
    assert resp.json()["pfp"] is None


@pytest.mark.asyncio
async def test_create_user_missing_email_is_400(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/users", json={"name": "No Email"})
    assert resp.status_code == 400
    assert "email" in resp.json()["message"]


@pytest.mark.asyncio
async def test_duplicate_email_returns_409(async_client: AsyncClient):
    await async_client.post("/api/v1/users", json={"name": "One", "email": "same@example.com"})
    resp = await async_client.post("/api/v1/users", json={"name": "Two", "email": "same@example.com"})
    assert resp.status_code == 409
    assert "message" in resp.json()


@pytest.mark.asyncio
async def test_get_user(async_client: AsyncClient):
    created = (await async_client.post("/api/v1/users", json={
        "name": "Fetched", "email": "fetched@example.com",
    })).json()
    resp = await async_client.get(f"/api/v1/users/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Fetched"


@pytest.mark.asyncio
async def test_get_user_not_found(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/users/99999")
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"


# ---------------------------------------------------------------------------
# Own articles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_my_articles_requires_identity(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/users/me/articles")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authorized"


@pytest.mark.asyncio
async def test_my_articles_empty_is_404(async_client: AsyncClient, auth_headers):
    user = (await async_client.post("/api/v1/users", json={
        "name": "Quiet", "email": "quiet@example.com",
    })).json()
    resp = await async_client.get("/api/v1/users/me/articles", headers=auth_headers(user["id"]))
    assert resp.status_code == 404
    assert resp.json()["message"] == "No articles found for this user"


@pytest.mark.asyncio
async def test_my_articles_lists_only_own_including_drafts(async_client: AsyncClient, auth_headers):
    me = (await async_client.post("/api/v1/users", json={
        "name": "Me", "email": "me@example.com",
    })).json()["id"]
    other = (await async_client.post("/api/v1/users", json={
        "name": "Other", "email": "other@example.com",
    })).json()["id"]

    for title, published in (("Older", True), ("Newer", True), ("Unfinished", False)):
        resp = await async_client.post(
            "/api/v1/articles",
            json={"title": title, "content": "C", "is_published": published},
            headers=auth_headers(me),
        )
        assert resp.status_code == 201
    await async_client.post(
        "/api/v1/articles", json={"title": "Theirs", "content": "C"}, headers=auth_headers(other)
    )

    resp = await async_client.get("/api/v1/users/me/articles", headers=auth_headers(me))
    assert resp.status_code == 200
    items = resp.json()["items"]
    assert [i["slug"] for i in items] == ["newer", "older", "unfinished"]
    assert all(i["author_id"] == me for i in items)
    assert items[-1]["published_at"] is None
