"""
ditup_api.api.routers.tags

Tags.

Responsibilities:
- Create and read tags.
- Tag lists: name search, recommendations related to the caller's tags, random tags.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from ditup_api.api.deps import db_session, settings_dep
from ditup_api.api.jsonapi import JsonApiResponse
from ditup_api.api.serializers import tag_document, tag_link, tag_resource, tags_document
from ditup_api.api.validators.rules import TAGNAME_PATTERN, TagnameLike
from ditup_api.api.validators.tags import NewTagDocument
from ditup_api.auth.deps import only_logged
from ditup_api.auth.models import Auth
from ditup_api.db.repositories.tags import TagRepo
from ditup_api.db.repositories.users import UserRepo
from ditup_api.observability.logging import get_logger
from ditup_api.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/tags", tags=["tags"])

TagnamePath = Annotated[str, Path(min_length=2, max_length=64, pattern=TAGNAME_PATTERN)]


@router.post("", status_code=HTTP_201_CREATED)
async def create_tag(
    body: NewTagDocument,
    auth: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    tagname = body.data.attributes.tagname
    tags = TagRepo(session)
    if await tags.exists(tagname):
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="tag already exists")

    creator = await UserRepo(session).get_by_username(auth.username or "")
    if creator is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user not found")

    try:
        tag = await tags.create(tagname=tagname, creator=creator)
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="tag already exists") from e

    log.info("tag_created", tagname=tagname, creator=creator.username)
    return JsonApiResponse(
        tag_document(tag, settings=settings),
        status_code=HTTP_201_CREATED,
        headers={"Location": tag_link(settings, tagname)},
    )


@router.get("")
async def list_tags(
    like: Annotated[TagnameLike | None, Query(alias="filter[tagname][like]")] = None,
    related_to_my_tags: Annotated[str | None, Query(alias="filter[relatedToMyTags]")] = None,
    random: Annotated[str | None, Query(alias="filter[random]")] = None,
    limit: Annotated[int, Query(alias="page[limit]", ge=1, le=20)] = 1,
    auth: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    tags = TagRepo(session)

    if like is not None:
        found = await tags.filter_like(like)
        return JsonApiResponse(tags_document([tag_resource(t) for t in found]))

    if related_to_my_tags is not None:
        user = await UserRepo(session).get_by_username(auth.username or "")
        if user is None:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user not found")
        related = await tags.related_to_user_tags(user.id, limit=settings.related_tags_limit)
        return JsonApiResponse(
            tags_document([tag_resource(r.tag, meta={"relevance": r.relevance}) for r in related])
        )

    if random is not None:
        found = await tags.random(limit)
        return JsonApiResponse(tags_document([tag_resource(t) for t in found]))

    raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="unsupported filter")


@router.get("/{tagname}")
async def read_tag(
    tagname: TagnamePath,
    _: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    tag = await TagRepo(session).get(tagname)
    if tag is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="tag not found")
    return JsonApiResponse(tag_document(tag, settings=settings))
