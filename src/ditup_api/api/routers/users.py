"""
ditup_api.api.routers.users

User accounts and profiles.

Responsibilities:
- Register a user and mail an email verification link.
- Read a profile (full for logged users and for oneself, simplified otherwise).
- Update one's own profile fields.
- List users by tag.
"""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Path, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from ditup_api.api.deps import db_session, mailer_dep, settings_dep
from ditup_api.api.jsonapi import JsonApiResponse
from ditup_api.api.serializers import user_document, user_link, users_document
from ditup_api.api.validators.rules import USERNAME_PATTERN, Tagname
from ditup_api.api.validators.users import NewUserDocument, ProfileDocument, check_profile_patch
from ditup_api.auth.codes import issue_verify_email_code
from ditup_api.auth.deps import get_auth, only_logged, only_logged_self
from ditup_api.auth.models import Auth
from ditup_api.auth.passwords import hash_password
from ditup_api.db.repositories.users import UserRepo
from ditup_api.observability.logging import get_logger
from ditup_api.services.mailer import Mailer, deliver, verify_email_mail
from ditup_api.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

UsernamePath = Annotated[str, Path(min_length=2, max_length=32, pattern=USERNAME_PATTERN)]


@router.post("", status_code=HTTP_201_CREATED)
async def create_user(
    body: NewUserDocument,
    background: BackgroundTasks,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    mailer: Mailer = Depends(mailer_dep),
) -> JsonApiResponse:
    attrs = body.data.attributes
    users = UserRepo(session)

    if await users.username_exists(attrs.username):
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="username already exists")
    if await users.email_exists(attrs.email):
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="email already exists")

    try:
        user = await users.create(
            username=attrs.username,
            email=attrs.email,
            password_hash=await asyncio.to_thread(
                hash_password, attrs.password, iterations=settings.password_hash_iterations
            ),
        )
        await session.commit()
    except IntegrityError as e:
        # A concurrent registration won the race for the username.
        await session.rollback()
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="username already exists") from e

    log.info("user_created", username=user.username)

    code = issue_verify_email_code(settings=settings, username=user.username, email=attrs.email)
    background.add_task(
        deliver,
        mailer,
        verify_email_mail(settings=settings, username=user.username, email=attrs.email, code=code),
    )

    return JsonApiResponse(
        user_document(user, settings=settings, full=True),
        status_code=HTTP_201_CREATED,
        headers={"Location": user_link(settings, user.username)},
    )


@router.get("")
async def list_users(
    tag: Annotated[Tagname | None, Query(alias="filter[tag]")] = None,
    _: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
) -> JsonApiResponse:
    if tag is None:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="unsupported filter")
    users = await UserRepo(session).list_with_tag(tag)
    return JsonApiResponse(users_document(users))


@router.get("/{username}")
async def read_user(
    username: UsernamePath,
    auth: Auth = Depends(get_auth),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    user = await UserRepo(session).get_by_username(username)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user not found")

    # Unverified users may read their own full profile but nobody else's.
    full = auth.logged or auth.is_self(username)
    return JsonApiResponse(user_document(user, settings=settings, full=full))


@router.patch("/{username}")
async def update_user(
    username: UsernamePath,
    body: ProfileDocument,
    _: Auth = Depends(only_logged_self),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    check_profile_patch(body, username=username)

    users = UserRepo(session)
    user = await users.get_by_username(username)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user not found")

    attrs = body.data.attributes
    await users.update_profile(
        user,
        given_name=attrs.given_name,
        family_name=attrs.family_name,
        description=attrs.description,
    )
    await session.commit()
    log.info("profile_updated", username=username, fields=sorted(attrs.model_fields_set))
    return JsonApiResponse(user_document(user, settings=settings, full=True))
