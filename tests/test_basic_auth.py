"""
tests.test_basic_auth

HTTP Basic credentials: UTF-8 passwords, malformed headers, password checks
off the event loop.
"""

from __future__ import annotations

import base64
import threading

import httpx
import pytest

from ditup_api.auth import deps


def _basic(raw: bytes) -> dict[str, str]:
    return {"Authorization": "Basic " + base64.b64encode(raw).decode("ascii")}


@pytest.mark.asyncio
async def test_non_ascii_password(client: httpx.AsyncClient, make_user) -> None:
    await make_user("zoe", password="pässwörd-123")

    r = await client.get("/users/zoe", auth=("zoe", "pässwörd-123"))
    assert r.status_code == 200
    assert "givenName" in r.json()["data"]["attributes"]

    r = await client.get("/tags?filter[random]", auth=("zoe", "pässwörd-123"))
    assert r.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [
        {"Authorization": "Basic %%%"},
        {"Authorization": "Basic"},
        _basic(b"no-colon-here"),
        _basic(b"zoe:\xff\xfe"),
        {"Authorization": "Bearer abc.def.ghi"},
    ],
)
async def test_malformed_credentials_are_anonymous(
    client: httpx.AsyncClient, make_user, headers: dict[str, str]
) -> None:
    await make_user("zoe")

    r = await client.post(
        "/tags",
        json={"data": {"type": "tags", "attributes": {"tagname": "hiking"}}},
        headers=headers,
    )
    assert r.status_code == 403
    assert "www-authenticate" not in r.headers

    r = await client.get("/users/zoe", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["attributes"] == {"username": "zoe"}


@pytest.mark.asyncio
async def test_password_check_runs_in_a_worker_thread(
    client: httpx.AsyncClient, make_user, as_user, monkeypatch
) -> None:
    await make_user("zoe")
    loop_thread = threading.get_ident()
    seen: list[int] = []
    verify = deps.verify_password

    def recording_verify(password: str, stored: str) -> bool:
        seen.append(threading.get_ident())
        return verify(password, stored)

    monkeypatch.setattr(deps, "verify_password", recording_verify)

    r = await client.get("/tags?filter[random]", auth=as_user("zoe"))
    assert r.status_code == 200
    assert seen
    assert loop_thread not in seen
