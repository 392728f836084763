"""
ditup_api.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the mailer.
- Encapsulate app.state access patterns (engine/sessionmaker/mailer).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ditup_api.services.mailer import Mailer
from ditup_api.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The app carries the settings it was created with (see `api.app.create_app`).
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def mailer_dep(request: Request) -> Mailer:
    return request.app.state.mailer  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Routers commit explicitly after their writes.
    async with session_factory() as session:
        yield session
