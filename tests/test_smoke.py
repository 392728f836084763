"""
tests.test_smoke

Minimal smoke tests to validate the service can boot and serve core endpoints.

Responsibilities:
- Ensure the FastAPI app starts and the DB readiness probe works in test mode.
- Ensure responses carry the request id and errors use the JSON:API envelope.
"""

from __future__ import annotations

import json

import httpx
import pytest

from ditup_api.api.jsonapi import MEDIA_TYPE


@pytest.mark.asyncio
async def test_health_endpoints(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.json()["service"] == "ditup-api"

    r = await client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_request_id_is_propagated(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz", headers={"x-request-id": "abc123"})
    assert r.headers["x-request-id"] == "abc123"

    r = await client.get("/healthz")
    assert r.headers["x-request-id"]


@pytest.mark.asyncio
async def test_errors_are_json_api_documents(client: httpx.AsyncClient) -> None:
    r = await client.get("/tags/some-tag")
    assert r.status_code == 403
    assert r.headers["content-type"].startswith(MEDIA_TYPE)
    [error] = r.json()["errors"]
    assert error["status"] == "403"
    assert error["title"] == "Forbidden"


@pytest.mark.asyncio
async def test_unknown_route_is_404(client: httpx.AsyncClient) -> None:
    r = await client.get("/nothing-here")
    assert r.status_code == 404
    assert r.json()["errors"][0]["status"] == "404"


@pytest.mark.asyncio
async def test_json_api_request_bodies(client: httpx.AsyncClient) -> None:
    r = await client.post(
        "/users",
        content=json.dumps(
            {
                "data": {
                    "type": "users",
                    "attributes": {
                        "username": "abc",
                        "email": "abc@example.com",
                        "password": "a-long-password",
                    },
                }
            }
        ),
        headers={"content-type": MEDIA_TYPE},
    )
    assert r.status_code == 201


@pytest.mark.asyncio
async def test_malformed_json_is_400(client: httpx.AsyncClient) -> None:
    r = await client.post(
        "/users", content=b"{not json", headers={"content-type": MEDIA_TYPE}
    )
    assert r.status_code == 400
    assert r.json()["errors"][0]["status"] == "400"


# --- Module Notes -----------------------------------------------------------
# Resource behavior is covered per router in the sibling test modules.
