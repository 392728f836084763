"""
ditup_api.api.routers.user_tags

Tags of a user (user -> tag edges with a story and a relevance).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_204_NO_CONTENT,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from ditup_api.api.deps import db_session, settings_dep
from ditup_api.api.jsonapi import JsonApiResponse
from ditup_api.api.routers.tags import TagnamePath
from ditup_api.api.routers.users import UsernamePath
from ditup_api.api.serializers import user_tag_document, user_tag_links, user_tags_document
from ditup_api.api.validators.user_tags import (
    NewUserTagDocument,
    UserTagPatchDocument,
    check_user_tag_patch,
)
from ditup_api.auth.deps import only_logged, only_logged_self
from ditup_api.auth.models import Auth
from ditup_api.db.repositories.tags import TagRepo
from ditup_api.db.repositories.user_tags import UserTagRepo
from ditup_api.db.repositories.users import UserRepo
from ditup_api.observability.logging import get_logger
from ditup_api.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/users/{username}/tags", tags=["user-tags"])


@router.get("")
async def list_user_tags(
    username: UsernamePath,
    _: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    user = await UserRepo(session).get_by_username(username)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user not found")
    user_tags = await UserTagRepo(session).list_for_user(user.id)
    return JsonApiResponse(user_tags_document(user_tags, settings=settings))


@router.post("", status_code=HTTP_201_CREATED)
async def add_user_tag(
    username: UsernamePath,
    body: NewUserTagDocument,
    _: Auth = Depends(only_logged_self),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    tagname = body.data.id
    user = await UserRepo(session).get_by_username(username)
    tag = await TagRepo(session).get(tagname)
    if user is None or tag is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="tag not found")

    user_tags = UserTagRepo(session)
    if await user_tags.get(username=username, tagname=tagname) is not None:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="user already has the tag")

    try:
        user_tag = await user_tags.create(
            user=user, tag=tag, story=body.data.meta.story, relevance=body.data.meta.relevance
        )
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="user already has the tag") from e

    log.info("user_tag_added", username=username, tagname=tagname)
    return JsonApiResponse(
        user_tag_document(user_tag, settings=settings),
        status_code=HTTP_201_CREATED,
        headers={"Location": user_tag_links(settings, user_tag)["related"]},
    )


@router.get("/{tagname}")
async def read_user_tag(
    username: UsernamePath,
    tagname: TagnamePath,
    _: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    user_tag = await UserTagRepo(session).get(username=username, tagname=tagname)
    if user_tag is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user doesn't have the tag")
    return JsonApiResponse(user_tag_document(user_tag, settings=settings))


@router.patch("/{tagname}")
async def update_user_tag(
    username: UsernamePath,
    tagname: TagnamePath,
    body: UserTagPatchDocument,
    _: Auth = Depends(only_logged_self),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    check_user_tag_patch(body, tagname=tagname)

    user_tags = UserTagRepo(session)
    user_tag = await user_tags.get(username=username, tagname=tagname)
    if user_tag is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user doesn't have the tag")

    await user_tags.update(
        user_tag, story=body.data.meta.story, relevance=body.data.meta.relevance
    )
    await session.commit()
    return JsonApiResponse(user_tag_document(user_tag, settings=settings))


@router.delete("/{tagname}", status_code=HTTP_204_NO_CONTENT)
async def remove_user_tag(
    username: UsernamePath,
    tagname: TagnamePath,
    _: Auth = Depends(only_logged_self),
    session: AsyncSession = Depends(db_session),
) -> Response:
    user_tags = UserTagRepo(session)
    user_tag = await user_tags.get(username=username, tagname=tagname)
    if user_tag is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user doesn't have the tag")

    await user_tags.delete(user_tag)
    await session.commit()
    log.info("user_tag_removed", username=username, tagname=tagname)
    return Response(status_code=HTTP_204_NO_CONTENT)
