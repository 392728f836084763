"""
tests.test_account

Email verification and password reset through mailed codes.
"""

from __future__ import annotations

import httpx
import pytest

from ditup_api.auth.codes import issue_reset_password_code


async def _register(client: httpx.AsyncClient, username: str, email: str) -> None:
    r = await client.post(
        "/users",
        json={
            "data": {
                "type": "users",
                "attributes": {"username": username, "email": email, "password": "a-long-password"},
            }
        },
    )
    assert r.status_code == 201


def _verify_doc(username: str, code: str) -> dict:
    return {
        "data": {
            "type": "users",
            "id": username,
            "attributes": {"emailVerificationCode": code},
        }
    }


def _reset_doc(username: str, code: str, password: str) -> dict:
    return {
        "data": {
            "type": "users",
            "id": username,
            "attributes": {"code": code, "password": password},
        }
    }


@pytest.mark.asyncio
async def test_verify_email(client: httpx.AsyncClient, mailer) -> None:
    await _register(client, "alice", "alice@example.com")
    creds = ("alice", "a-long-password")

    r = await client.get("/tags?filter[random]", auth=creds)
    assert r.status_code == 403

    r = await client.patch("/account", json=_verify_doc("alice", mailer.last_code("verify-email")))
    assert r.status_code == 200
    assert r.json()["data"]["id"] == "alice"

    r = await client.get("/tags?filter[random]", auth=creds)
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_verify_email_code_is_single_use(client: httpx.AsyncClient, mailer) -> None:
    await _register(client, "alice", "alice@example.com")
    code = mailer.last_code("verify-email")

    r = await client.patch("/account", json=_verify_doc("alice", code))
    assert r.status_code == 200

    r = await client.patch("/account", json=_verify_doc("alice", code))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_verify_email_rejects_bad_codes(client: httpx.AsyncClient, mailer) -> None:
    await _register(client, "alice", "alice@example.com")
    await _register(client, "bob", "bob@example.com")
    bobs_code = mailer.last_code("verify-email")

    r = await client.patch("/account", json=_verify_doc("alice", "not-a-code"))
    assert r.status_code == 400
    [error] = r.json()["errors"]
    assert error["source"]["pointer"] == "/data/attributes/emailVerificationCode"
    assert error["meta"]["value"] is None

    r = await client.patch("/account", json=_verify_doc("alice", bobs_code))
    assert r.status_code == 400

    r = await client.patch("/account", json=_verify_doc("nobody", bobs_code))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_verify_email_already_taken(client: httpx.AsyncClient, mailer) -> None:
    await _register(client, "alice", "same@example.com")
    alices_code = mailer.last_code("verify-email")
    await _register(client, "bob", "same@example.com")
    bobs_code = mailer.last_code("verify-email")

    r = await client.patch("/account", json=_verify_doc("bob", bobs_code))
    assert r.status_code == 200

    r = await client.patch("/account", json=_verify_doc("alice", alices_code))
    assert r.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize("identifier", ["alice", "alice@example.com"])
async def test_reset_password(
    client: httpx.AsyncClient, mailer, make_user, as_user, identifier: str
) -> None:
    await make_user("alice")

    r = await client.post(
        "/account/reset-password", json={"data": {"type": "users", "id": identifier}}
    )
    assert r.status_code == 204
    [mail] = mailer.sent
    assert mail.to == "alice@example.com"
    code = mailer.last_code("reset-password")

    r = await client.patch(
        "/account/reset-password", json=_reset_doc("alice", code, "brand-new-password")
    )
    assert r.status_code == 204

    r = await client.get("/tags?filter[random]", auth=as_user("alice"))
    assert r.status_code == 403
    r = await client.get("/tags?filter[random]", auth=("alice", "brand-new-password"))
    assert r.status_code == 200

    # The code is bound to the old password, so it can't be used twice.
    r = await client.patch(
        "/account/reset-password", json=_reset_doc("alice", code, "another-password")
    )
    assert r.status_code == 400
    assert r.json()["errors"][0]["source"]["pointer"] == "/data/attributes/code"


@pytest.mark.asyncio
async def test_reset_request_for_unknown_account(client: httpx.AsyncClient, mailer, make_user) -> None:
    await make_user("pending", verified=False)

    for identifier in ("nobody", "nobody@example.com", "pending"):
        r = await client.post(
            "/account/reset-password", json={"data": {"type": "users", "id": identifier}}
        )
        assert r.status_code == 204
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_reset_password_rejects_bad_codes(
    client: httpx.AsyncClient, settings, make_user, mailer
) -> None:
    await make_user("alice")
    await make_user("bob")

    r = await client.patch(
        "/account/reset-password", json=_reset_doc("alice", "garbage", "brand-new-password")
    )
    assert r.status_code == 400

    # A code issued for bob does not reset alice's password.
    await client.post("/account/reset-password", json={"data": {"type": "users", "id": "bob"}})
    r = await client.patch(
        "/account/reset-password",
        json=_reset_doc("alice", mailer.last_code("reset-password"), "brand-new-password"),
    )
    assert r.status_code == 400

    forged = issue_reset_password_code(
        settings=settings.model_copy(update={"code_secret": "other-secret"}),
        username="alice",
        password_fingerprint="whatever",
    )
    r = await client.patch(
        "/account/reset-password", json=_reset_doc("alice", forged, "brand-new-password")
    )
    assert r.status_code == 400

    r = await client.patch(
        "/account/reset-password", json=_reset_doc("alice", "garbage", "short")
    )
    assert r.status_code == 400
    assert "short" not in r.text
