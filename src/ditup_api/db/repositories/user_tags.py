from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ditup_api.db.models import Tag, User, UserTag


class UserTagRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, user: User, tag: Tag, story: str, relevance: int) -> UserTag:
        user_tag = UserTag(user_id=user.id, tag_id=tag.id, story=story, relevance=relevance)
        self._session.add(user_tag)
        await self._session.flush()
        user_tag.user = user
        user_tag.tag = tag
        return user_tag

    async def get(self, *, username: str, tagname: str) -> UserTag | None:
        stmt = (
            select(UserTag)
            .join(User, User.id == UserTag.user_id)
            .join(Tag, Tag.id == UserTag.tag_id)
            .where(User.username == username, Tag.tagname == tagname)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_for_user(self, user_id: uuid.UUID) -> list[UserTag]:
        stmt = (
            select(UserTag)
            .where(UserTag.user_id == user_id)
            .order_by(UserTag.relevance.desc(), UserTag.created)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(
        self, user_tag: UserTag, *, story: str | None = None, relevance: int | None = None
    ) -> UserTag:
        if story is not None:
            user_tag.story = story
        if relevance is not None:
            user_tag.relevance = relevance
        await self._session.flush()
        return user_tag

    async def delete(self, user_tag: UserTag) -> None:
        await self._session.delete(user_tag)
        await self._session.flush()
