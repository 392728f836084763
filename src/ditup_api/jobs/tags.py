"""
ditup_api.jobs.tags

Tag maintenance jobs.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ditup_api.db.repositories.tags import TagRepo
from ditup_api.db.session import session_scope
from ditup_api.observability.logging import get_logger

log = get_logger(__name__)


async def delete_abandoned(session_factory: async_sessionmaker[AsyncSession]) -> list[str]:
    """Delete every tag that no user has; return the deleted tagnames."""
    async with session_scope(session_factory) as session:
        deleted = await TagRepo(session).delete_abandoned()
        await session.commit()
    log.info("abandoned_tags_deleted", count=len(deleted), tagnames=deleted)
    return deleted
