"""
ditup_api.api.app

FastAPI app factory for the ditup API service.

Responsibilities:
- Build the FastAPI application and register routers, middleware and error handlers.
- Initialize and dispose shared infrastructure (DB engine/session factory, mailer, jobs).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial

from fastapi import FastAPI

from ditup_api import __version__
from ditup_api.api.errors import install_error_handlers
from ditup_api.api.jsonapi import JsonApiResponse
from ditup_api.api.routers.account import router as account_router
from ditup_api.api.routers.contacts import router as contacts_router
from ditup_api.api.routers.health import router as health_router
from ditup_api.api.routers.messages import router as messages_router
from ditup_api.api.routers.tags import router as tags_router
from ditup_api.api.routers.user_tags import router as user_tags_router
from ditup_api.api.routers.users import router as users_router
from ditup_api.db.init_db import init_db
from ditup_api.db.session import create_engine, create_sessionmaker
from ditup_api.jobs.runner import PeriodicJob
from ditup_api.jobs.tags import delete_abandoned
from ditup_api.observability.logging import configure_logging, get_logger
from ditup_api.observability.middleware import RequestContextMiddleware
from ditup_api.services.mailer import Mailer
from ditup_api.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, mailer: Mailer | None = None) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Prod runs Alembic migrations instead.
            await init_db(engine)

        jobs: list[PeriodicJob] = []
        if settings.abandoned_tags_interval_seconds > 0 and settings.env != "test":
            jobs.append(
                PeriodicJob(
                    name="delete-abandoned-tags",
                    interval=settings.abandoned_tags_interval_seconds,
                    func=partial(delete_abandoned, app.state.sessionmaker),
                )
            )
        for job in jobs:
            job.start()

        try:
            yield
        finally:
            for job in jobs:
                await job.stop()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="ditup API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        default_response_class=JsonApiResponse,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.mailer = mailer or Mailer(settings=settings)

    app.add_middleware(RequestContextMiddleware)
    install_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(users_router)
    app.include_router(account_router)
    app.include_router(user_tags_router)
    app.include_router(tags_router)
    app.include_router(contacts_router)
    app.include_router(messages_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Business rules live in validators and repositories; this file only composes them.
