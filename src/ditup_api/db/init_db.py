"""
ditup_api.db.init_db

Create the schema straight from the ORM models in dev and test.
Deployed databases are migrated with Alembic (`alembic upgrade head`).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from ditup_api.db import models  # noqa: F401  # registers tables on Base.metadata
from ditup_api.db.base import Base
from ditup_api.observability.logging import get_logger

log = get_logger(__name__)


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("schema_ready", tables=sorted(Base.metadata.tables))
