"""
ditup_api.api.routers.health

Liveness and readiness probes.

`/healthz` answers as long as the process serves HTTP; `/readyz` also needs
the database and answers 503 while it can't be queried.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from ditup_api import __version__
from ditup_api.api.deps import db_session, settings_dep
from ditup_api.observability.logging import get_logger
from ditup_api.settings import Settings

log = get_logger(__name__)

router = APIRouter()


@router.get("/healthz")
async def healthz(settings: Settings = Depends(settings_dep)) -> dict[str, str]:
    return {"status": "ok", "service": settings.service_name, "version": __version__}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, str]:
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        log.warning("database_unavailable", error=str(e))
        raise HTTPException(
            status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="database unavailable"
        ) from e
    return {"status": "ready"}
