"""
tests.test_user_tags

Tags of a user: add, read, update, remove.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio


def _add(tagname: str, **meta) -> dict:
    doc: dict = {"data": {"type": "tags", "id": tagname}}
    if meta:
        doc["data"]["meta"] = meta
    return doc


@pytest_asyncio.fixture
async def alice_and_tag(client: httpx.AsyncClient, make_user, as_user) -> None:
    await make_user("alice")
    await make_user("bob")
    r = await client.post(
        "/tags",
        json={"data": {"type": "tags", "attributes": {"tagname": "hiking"}}},
        auth=as_user("alice"),
    )
    assert r.status_code == 201


@pytest.mark.asyncio
async def test_add_user_tag(client: httpx.AsyncClient, alice_and_tag, as_user) -> None:
    r = await client.post(
        "/users/alice/tags",
        json=_add("hiking", story="I walk a lot", relevance=5),
        auth=as_user("alice"),
    )
    assert r.status_code == 201
    body = r.json()
    assert body["data"]["id"] == "hiking"
    assert body["meta"]["story"] == "I walk a lot"
    assert body["meta"]["relevance"] == 5
    assert body["links"]["self"] == "https://dev.ditup.org/api/users/alice/relationships/tags/hiking"
    assert r.headers["location"] == "https://dev.ditup.org/api/users/alice/tags/hiking"

    r = await client.post("/users/alice/tags", json=_add("hiking"), auth=as_user("alice"))
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_add_user_tag_defaults(client: httpx.AsyncClient, alice_and_tag, as_user) -> None:
    r = await client.post("/users/alice/tags", json=_add("hiking"), auth=as_user("alice"))
    assert r.status_code == 201
    assert r.json()["meta"]["story"] == ""
    assert r.json()["meta"]["relevance"] == 3


@pytest.mark.asyncio
async def test_add_user_tag_rules(client: httpx.AsyncClient, alice_and_tag, as_user) -> None:
    r = await client.post("/users/alice/tags", json=_add("hiking"), auth=as_user("bob"))
    assert r.status_code == 403

    r = await client.post("/users/alice/tags", json=_add("sailing"), auth=as_user("alice"))
    assert r.status_code == 404

    r = await client.post(
        "/users/alice/tags", json=_add("hiking", relevance=6), auth=as_user("alice")
    )
    assert r.status_code == 400

    r = await client.post(
        "/users/alice/tags", json=_add("hiking", story="x" * 1025), auth=as_user("alice")
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_read_user_tags(client: httpx.AsyncClient, alice_and_tag, tag_user, as_user) -> None:
    await tag_user("alice", "hiking", relevance=2)
    await tag_user("alice", "cooking", relevance=4, story="pasta")

    r = await client.get("/users/alice/tags", auth=as_user("bob"))
    assert r.status_code == 200
    data = r.json()["data"]
    assert [t["id"] for t in data] == ["cooking", "hiking"]
    assert data[0]["meta"]["story"] == "pasta"

    r = await client.get("/users/alice/tags/cooking", auth=as_user("bob"))
    assert r.status_code == 200
    assert r.json()["meta"]["relevance"] == 4

    r = await client.get("/users/alice/tags/sailing", auth=as_user("bob"))
    assert r.status_code == 404

    r = await client.get("/users/nobody/tags", auth=as_user("bob"))
    assert r.status_code == 404

    r = await client.get("/users/alice/tags")
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_update_user_tag(client: httpx.AsyncClient, alice_and_tag, tag_user, as_user) -> None:
    await tag_user("alice", "hiking", relevance=2, story="old")

    def patch(id_: str, meta: dict) -> dict:
        return {"data": {"type": "tags", "id": id_, "meta": meta}}

    r = await client.patch(
        "/users/alice/tags/hiking", json=patch("hiking", {"relevance": 5}), auth=as_user("alice")
    )
    assert r.status_code == 200
    assert r.json()["meta"] == {
        "story": "old",
        "relevance": 5,
        "created": r.json()["meta"]["created"],
    }

    r = await client.patch(
        "/users/alice/tags/hiking", json=patch("hiking", {"story": "new"}), auth=as_user("alice")
    )
    assert r.json()["meta"]["story"] == "new"
    assert r.json()["meta"]["relevance"] == 5

    r = await client.patch(
        "/users/alice/tags/hiking", json=patch("hiking", {}), auth=as_user("alice")
    )
    assert r.status_code == 400

    r = await client.patch(
        "/users/alice/tags/hiking", json=patch("cooking", {"story": "x"}), auth=as_user("alice")
    )
    assert r.status_code == 400

    r = await client.patch(
        "/users/alice/tags/hiking", json=patch("hiking", {"story": "x"}), auth=as_user("bob")
    )
    assert r.status_code == 403

    r = await client.patch(
        "/users/alice/tags/cooking", json=patch("cooking", {"story": "x"}), auth=as_user("alice")
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_remove_user_tag(client: httpx.AsyncClient, alice_and_tag, tag_user, as_user) -> None:
    await tag_user("alice", "hiking")

    r = await client.delete("/users/alice/tags/hiking", auth=as_user("bob"))
    assert r.status_code == 403

    r = await client.delete("/users/alice/tags/hiking", auth=as_user("alice"))
    assert r.status_code == 204

    r = await client.get("/users/alice/tags/hiking", auth=as_user("alice"))
    assert r.status_code == 404

    r = await client.delete("/users/alice/tags/hiking", auth=as_user("alice"))
    assert r.status_code == 404

    # The tag itself stays until the cleanup job runs.
    r = await client.get("/tags/hiking", auth=as_user("alice"))
    assert r.status_code == 200
