"""
tests.conftest

Shared fixtures: a test-mode app on a throwaway SQLite file, an HTTP client,
a mailer that records instead of sending, and helpers that seed users, tags
and user tags directly through the repositories.
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterator, Awaitable, Callable

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from ditup_api.api.app import create_app
from ditup_api.auth.passwords import hash_password
from ditup_api.db.repositories.tags import TagRepo
from ditup_api.db.repositories.user_tags import UserTagRepo
from ditup_api.db.repositories.users import UserRepo
from ditup_api.db.session import session_scope
from ditup_api.services.mailer import Mail, Mailer
from ditup_api.settings import Settings

PASSWORD = "correct-horse-battery"

_JWT = r"([\w-]+\.[\w-]+\.[\w-]+)"
_CODE_IN_LINK = {
    "verify-email": re.compile(r"/verify-email/" + _JWT),
    "reset-password": re.compile(r"/reset-password/[^/\s]+/" + _JWT),
}


class RecordingMailer(Mailer):
    def __init__(self, *, settings: Settings) -> None:
        super().__init__(settings=settings)
        self.sent: list[Mail] = []

    async def send(self, mail: Mail) -> None:
        self.sent.append(mail)

    def last_code(self, kind: str) -> str:
        """Code from the newest mailed link of `kind` ("verify-email" or "reset-password")."""
        for mail in reversed(self.sent):
            match = _CODE_IN_LINK[kind].search(mail.text)
            if match:
                return match.group(1)
        raise AssertionError(f"no {kind} mail was sent")


@pytest_asyncio.fixture
async def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'ditup.db'}",
        password_hash_iterations=1000,
        code_secret="test-secret",
        abandoned_tags_interval_seconds=0,
    )


@pytest_asyncio.fixture
async def mailer(settings: Settings) -> RecordingMailer:
    return RecordingMailer(settings=settings)


@pytest_asyncio.fixture
async def app(settings: Settings, mailer: RecordingMailer) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings, mailer=mailer)
    # httpx ASGITransport does not run the lifespan; drive it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def make_user(app: FastAPI) -> Callable[..., Awaitable[str]]:
    async def _make(username: str, *, verified: bool = True, password: str = PASSWORD) -> str:
        async with session_scope(app.state.sessionmaker) as session:
            users = UserRepo(session)
            user = await users.create(
                username=username,
                email=f"{username}@example.com",
                password_hash=hash_password(
                    password, iterations=app.state.settings.password_hash_iterations
                ),
            )
            if verified:
                await users.verify_email(user)
            await session.commit()
        return username

    return _make


@pytest_asyncio.fixture
async def tag_user(app: FastAPI) -> Callable[..., Awaitable[None]]:
    """Give `username` the tag `tagname` (created on first use)."""

    async def _tag(username: str, tagname: str, *, relevance: int = 3, story: str = "") -> None:
        async with session_scope(app.state.sessionmaker) as session:
            user = await UserRepo(session).get_by_username(username)
            assert user is not None
            tags = TagRepo(session)
            tag = await tags.get(tagname) or await tags.create(tagname=tagname, creator=user)
            await UserTagRepo(session).create(user=user, tag=tag, story=story, relevance=relevance)
            await session.commit()

    return _tag


@pytest.fixture
def as_user() -> Callable[[str], tuple[str, str]]:
    """Basic auth credentials of a seeded user."""
    return lambda username: (username, PASSWORD)
