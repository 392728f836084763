"""
ditup_api.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert HTTP Basic credentials into a typed `Auth`.
- Guard routes: only logged users, only the user named in the URL.
"""

from __future__ import annotations

import asyncio
import base64
import binascii

import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_403_FORBIDDEN

from ditup_api.api.deps import db_session
from ditup_api.auth.models import Auth
from ditup_api.auth.passwords import verify_password
from ditup_api.db.repositories.users import UserRepo
from ditup_api.observability.logging import get_logger

log = get_logger(__name__)


class BasicCredentials(HTTPBasic):
    """
    HTTP Basic credentials decoded as UTF-8.

    A missing or malformed header yields `None` instead of a 401, so the
    caller is treated as anonymous.
    """

    def __init__(self) -> None:
        super().__init__(auto_error=False)

    async def __call__(self, request: Request) -> HTTPBasicCredentials | None:
        scheme, param = get_authorization_scheme_param(request.headers.get("Authorization"))
        if scheme.lower() != "basic" or not param:
            return None
        try:
            decoded = base64.b64decode(param, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            log.info("malformed_credentials")
            return None
        username, separator, password = decoded.partition(":")
        if not separator:
            log.info("malformed_credentials")
            return None
        return HTTPBasicCredentials(username=username, password=password)


_basic = BasicCredentials()


async def get_auth(
    creds: HTTPBasicCredentials | None = Depends(_basic),
    session: AsyncSession = Depends(db_session),
) -> Auth:
    # Missing or wrong credentials are not an error here; the caller is just anonymous.
    if creds is None or not creds.username:
        return Auth.anonymous()

    user = await UserRepo(session).get_by_username(creds.username)
    if user is None or not await asyncio.to_thread(
        verify_password, creds.password, user.password_hash
    ):
        log.info("authentication_failed", username=creds.username)
        return Auth.anonymous()

    structlog.contextvars.bind_contextvars(username=user.username)
    if user.is_verified:
        return Auth(username=user.username, logged=True)
    return Auth(username=user.username, logged_unverified=True)


def only_logged(auth: Auth = Depends(get_auth)) -> Auth:
    if not auth.logged:
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Not Authorized")
    return auth


def only_logged_self(username: str, auth: Auth = Depends(only_logged)) -> Auth:
    # `username` is the path parameter of the route this guards.
    if not auth.is_self(username):
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Not Authorized")
    return auth


# --- Module Notes -----------------------------------------------------------
# Unauthenticated callers get 403 (not 401) on protected routes, so browsers
# never pop up a Basic auth dialog.
