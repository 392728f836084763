"""
tests.test_messages

Private messages: sending, conversations, threads and read receipts.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio


def _message(to: str, body: str) -> dict:
    return {
        "data": {
            "type": "messages",
            "attributes": {"body": body},
            "relationships": {"to": {"data": {"type": "users", "id": to}}},
        }
    }


def _read(message_id: str, read: bool = True) -> dict:
    return {"data": {"type": "messages", "id": message_id, "attributes": {"read": read}}}


@pytest_asyncio.fixture
async def people(make_user) -> None:
    for name in ("alice", "bob", "carol"):
        await make_user(name)


@pytest.mark.asyncio
async def test_send_message(client: httpx.AsyncClient, people, as_user) -> None:
    r = await client.post("/messages", json=_message("bob", "  hello bob  "), auth=as_user("alice"))
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["attributes"]["body"] == "hello bob"
    assert data["attributes"]["read"] is False
    assert data["relationships"]["from"]["data"]["id"] == "alice"
    assert data["relationships"]["to"]["data"]["id"] == "bob"
    assert r.headers["location"] == f"https://dev.ditup.org/api/messages/{data['id']}"


@pytest.mark.asyncio
async def test_send_message_rules(client: httpx.AsyncClient, people, as_user) -> None:
    r = await client.post("/messages", json=_message("alice", "me"), auth=as_user("alice"))
    assert r.status_code == 400
    assert r.json()["errors"][0]["detail"] == "Receiver can't be the sender"

    r = await client.post("/messages", json=_message("bob", "   "), auth=as_user("alice"))
    assert r.status_code == 400

    r = await client.post("/messages", json=_message("bob", "x" * 2049), auth=as_user("alice"))
    assert r.status_code == 400

    r = await client.post("/messages", json=_message("nobody", "hi"), auth=as_user("alice"))
    assert r.status_code == 404

    r = await client.post("/messages", json=_message("bob", "hi"))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_conversation(client: httpx.AsyncClient, people, as_user) -> None:
    await client.post("/messages", json=_message("bob", "one"), auth=as_user("alice"))
    await client.post("/messages", json=_message("alice", "two"), auth=as_user("bob"))
    await client.post("/messages", json=_message("carol", "elsewhere"), auth=as_user("alice"))
    await client.post("/messages", json=_message("bob", "three"), auth=as_user("alice"))

    r = await client.get("/messages", params={"filter[with]": "bob"}, auth=as_user("alice"))
    assert r.status_code == 200
    assert [m["attributes"]["body"] for m in r.json()["data"]] == ["one", "two", "three"]

    r = await client.get("/messages", params={"filter[with]": "alice"}, auth=as_user("bob"))
    assert [m["attributes"]["body"] for m in r.json()["data"]] == ["one", "two", "three"]

    r = await client.get("/messages", params={"filter[with]": "nobody"}, auth=as_user("alice"))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_threads(client: httpx.AsyncClient, people, as_user) -> None:
    await client.post("/messages", json=_message("bob", "to bob"), auth=as_user("alice"))
    await client.post("/messages", json=_message("alice", "from carol"), auth=as_user("carol"))
    await client.post("/messages", json=_message("alice", "bob again"), auth=as_user("bob"))

    r = await client.get("/messages?filter[threads]", auth=as_user("alice"))
    assert r.status_code == 200
    assert [m["attributes"]["body"] for m in r.json()["data"]] == ["bob again", "from carol"]

    r = await client.get("/messages?filter[threads]", auth=as_user("carol"))
    assert [m["attributes"]["body"] for m in r.json()["data"]] == ["from carol"]


@pytest.mark.asyncio
async def test_messages_need_a_filter(client: httpx.AsyncClient, people, as_user) -> None:
    r = await client.get("/messages", auth=as_user("alice"))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_mark_read(client: httpx.AsyncClient, people, as_user) -> None:
    ids = []
    for body in ("one", "two", "three"):
        r = await client.post("/messages", json=_message("bob", body), auth=as_user("alice"))
        ids.append(r.json()["data"]["id"])
    r = await client.post("/messages", json=_message("alice", "reply"), auth=as_user("bob"))
    reply_id = r.json()["data"]["id"]

    # The sender can't mark their own message read.
    r = await client.patch(f"/messages/{ids[1]}", json=_read(ids[1]), auth=as_user("alice"))
    assert r.status_code == 403

    r = await client.patch(f"/messages/{ids[1]}", json=_read(ids[1]), auth=as_user("bob"))
    assert r.status_code == 200
    assert r.json()["data"]["attributes"]["read"] is True

    # Older messages in the same direction are read too; newer ones and replies are not.
    r = await client.get("/messages", params={"filter[with]": "alice"}, auth=as_user("bob"))
    read = {m["id"]: m["attributes"]["read"] for m in r.json()["data"]}
    assert read == {ids[0]: True, ids[1]: True, ids[2]: False, reply_id: False}


@pytest.mark.asyncio
async def test_mark_read_rules(client: httpx.AsyncClient, people, as_user) -> None:
    r = await client.post("/messages", json=_message("bob", "hi"), auth=as_user("alice"))
    message_id = r.json()["data"]["id"]

    r = await client.patch(f"/messages/{message_id}", json=_read("999"), auth=as_user("bob"))
    assert r.status_code == 400

    r = await client.patch(
        f"/messages/{message_id}", json=_read(message_id, read=False), auth=as_user("bob")
    )
    assert r.status_code == 400

    r = await client.patch("/messages/999", json=_read("999"), auth=as_user("bob"))
    assert r.status_code == 404

    r = await client.patch(f"/messages/{message_id}", json=_read(message_id), auth=as_user("carol"))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_threads_pick_the_newest_message_per_conversation(
    client: httpx.AsyncClient, people, as_user
) -> None:
    await client.post("/messages", json=_message("bob", "b1"), auth=as_user("alice"))
    await client.post("/messages", json=_message("alice", "c1"), auth=as_user("carol"))
    await client.post("/messages", json=_message("alice", "b2"), auth=as_user("bob"))
    await client.post("/messages", json=_message("carol", "c2"), auth=as_user("alice"))
    await client.post("/messages", json=_message("carol", "bob to carol"), auth=as_user("bob"))
    await client.post("/messages", json=_message("bob", "b3"), auth=as_user("alice"))

    r = await client.get("/messages?filter[threads]", auth=as_user("alice"))
    assert [m["attributes"]["body"] for m in r.json()["data"]] == ["b3", "c2"]

    r = await client.get("/messages?filter[threads]", auth=as_user("carol"))
    assert [m["attributes"]["body"] for m in r.json()["data"]] == ["bob to carol", "c2"]
