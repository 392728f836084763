"""
ditup_api.api.routers.account

Account maintenance reached through links mailed to the user.

Responsibilities:
- Verify the pending email address with a mailed code.
- Request a password reset mail; reset the password with the mailed code.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_204_NO_CONTENT, HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from ditup_api.api.deps import db_session, mailer_dep, settings_dep
from ditup_api.api.errors import Issue, ValidationFailed
from ditup_api.api.jsonapi import JsonApiResponse
from ditup_api.api.serializers import user_document
from ditup_api.api.validators.account import (
    ResetPasswordDocument,
    ResetRequestDocument,
    VerifyEmailDocument,
)
from ditup_api.auth.codes import (
    CodeConfig,
    InvalidCode,
    decode_code,
    issue_reset_password_code,
)
from ditup_api.auth.passwords import fingerprint, hash_password
from ditup_api.db.repositories.users import UserRepo
from ditup_api.observability.logging import get_logger
from ditup_api.services.mailer import Mailer, deliver, reset_password_mail
from ditup_api.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/account", tags=["account"])


def _invalid_code(pointer: str, reason: str) -> ValidationFailed:
    return ValidationFailed([Issue(msg=f"invalid code: {reason}", param="code", pointer=pointer)])


@router.patch("")
async def verify_email(
    body: VerifyEmailDocument,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    username = body.data.id
    pointer = "/data/attributes/emailVerificationCode"

    users = UserRepo(session)
    user = await users.get_by_username(username)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user not found")

    try:
        payload = decode_code(
            cfg=CodeConfig.from_settings(settings),
            token=body.data.attributes.email_verification_code,
            purpose="verify-email",
            subject=username,
        )
    except InvalidCode as e:
        raise _invalid_code(pointer, str(e)) from e

    if user.email_temporary is None or payload.get("email") != user.email_temporary:
        raise _invalid_code(pointer, "no pending email for this code")

    if await users.email_exists(user.email_temporary):
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="email already exists")

    try:
        await users.verify_email(user)
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="email already exists") from e

    log.info("email_verified", username=username)
    return JsonApiResponse(user_document(user, settings=settings, full=True))


@router.post("/reset-password", status_code=HTTP_204_NO_CONTENT)
async def request_password_reset(
    body: ResetRequestDocument,
    background: BackgroundTasks,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    mailer: Mailer = Depends(mailer_dep),
) -> Response:
    users = UserRepo(session)
    identifier = body.data.id
    if "@" in identifier:
        user = await users.get_by_email(identifier)
    else:
        user = await users.get_by_username(identifier)

    # The answer is the same whether or not the account exists.
    if user is None or user.email is None:
        log.info("password_reset_skipped", identifier=identifier)
        return Response(status_code=HTTP_204_NO_CONTENT)

    code = issue_reset_password_code(
        settings=settings,
        username=user.username,
        password_fingerprint=fingerprint(user.password_hash),
    )
    background.add_task(
        deliver,
        mailer,
        reset_password_mail(settings=settings, username=user.username, email=user.email, code=code),
    )
    log.info("password_reset_requested", username=user.username)
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.patch("/reset-password", status_code=HTTP_204_NO_CONTENT)
async def reset_password(
    body: ResetPasswordDocument,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> Response:
    username = body.data.id
    pointer = "/data/attributes/code"

    users = UserRepo(session)
    user = await users.get_by_username(username)
    if user is None:
        raise _invalid_code(pointer, "unknown user")

    try:
        payload = decode_code(
            cfg=CodeConfig.from_settings(settings),
            token=body.data.attributes.code,
            purpose="reset-password",
            subject=username,
        )
    except InvalidCode as e:
        raise _invalid_code(pointer, str(e)) from e

    if payload.get("pwd") != fingerprint(user.password_hash):
        raise _invalid_code(pointer, "code was already used")

    await users.set_password_hash(
        user,
        await asyncio.to_thread(
            hash_password,
            body.data.attributes.password,
            iterations=settings.password_hash_iterations,
        ),
    )
    await session.commit()
    log.info("password_reset", username=username)
    return Response(status_code=HTTP_204_NO_CONTENT)
