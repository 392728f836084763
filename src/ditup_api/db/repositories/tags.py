"""
ditup_api.db.repositories.tags

Repository for `Tag` entities.

Responsibilities:
- Create/read tags and answer existence and count questions.
- Name filtering (prefix or right after a hyphen) and random sampling.
- Recommend tags related to a user's tags by walking the user-tag graph.
- Delete abandoned tags (no user-tag edges left).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from sqlalchemy import and_, delete, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from ditup_api.db.models import Tag, User, UserTag


@dataclass(frozen=True, slots=True)
class RelatedTag:
    tag: Tag
    relevance: float


def path_weight(*relevances: int) -> float:
    """Geometric mean of the edge relevances along one path."""
    product = 1.0
    for r in relevances:
        product *= r
    return product ** (1 / len(relevances))


def rank_related(paths: list[tuple[Tag, int, int, int]], *, limit: int) -> list[RelatedTag]:
    """
    Sum the path weights per end tag and keep the `limit` strongest tags.

    Ties are ordered by tagname so the output is deterministic.
    """
    tags: dict[uuid.UUID, Tag] = {}
    weights: dict[uuid.UUID, float] = {}
    for tag, r0, r1, r2 in paths:
        tags[tag.id] = tag
        weights[tag.id] = weights.get(tag.id, 0.0) + path_weight(r0, r1, r2)

    ranked = sorted(weights, key=lambda tag_id: (-weights[tag_id], tags[tag_id].tagname))
    return [RelatedTag(tag=tags[tag_id], relevance=weights[tag_id]) for tag_id in ranked[:limit]]


class TagRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, tagname: str, creator: User) -> Tag:
        tag = Tag(tagname=tagname, creator_id=creator.id)
        self._session.add(tag)
        await self._session.flush()
        # Make the eager-loaded creator available without another round trip.
        tag.creator = creator
        return tag

    async def get(self, tagname: str) -> Tag | None:
        stmt = select(Tag).where(Tag.tagname == tagname)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def exists(self, tagname: str) -> bool:
        stmt = select(func.count()).select_from(Tag).where(Tag.tagname == tagname)
        return (await self._session.execute(stmt)).scalar_one() > 0

    async def count(self) -> int:
        stmt = select(func.count()).select_from(Tag)
        return (await self._session.execute(stmt)).scalar_one()

    async def random(self, limit: int = 1) -> list[Tag]:
        stmt = select(Tag).order_by(func.random()).limit(limit)
        return list((await self._session.execute(stmt)).scalars().all())

    async def filter_like(self, like: str) -> list[Tag]:
        # `like` is validated to [a-z0-9-], so no LIKE wildcard escaping is needed.
        stmt = (
            select(Tag)
            .where(or_(Tag.tagname.like(f"{like}%"), Tag.tagname.like(f"%-{like}%")))
            .order_by(Tag.tagname)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def related_to_user_tags(self, user_id: uuid.UUID, *, limit: int = 5) -> list[RelatedTag]:
        """
        Find tags related to the tags of a user.

        Walks every path user -(ut0)- tag -(ut1)- other user -(ut2)- tag, where each edge
        is used once per path, and drops paths that end in one of the user's own tags.
        """
        ut0 = aliased(UserTag)
        ut1 = aliased(UserTag)
        ut2 = aliased(UserTag)
        own_tags = select(UserTag.tag_id).where(UserTag.user_id == user_id)

        stmt = (
            select(Tag, ut0.relevance, ut1.relevance, ut2.relevance)
            .select_from(ut0)
            .join(ut1, and_(ut1.tag_id == ut0.tag_id, ut1.user_id != ut0.user_id))
            .join(ut2, and_(ut2.user_id == ut1.user_id, ut2.tag_id != ut1.tag_id))
            .join(Tag, Tag.id == ut2.tag_id)
            .where(ut0.user_id == user_id, ut2.tag_id.not_in(own_tags))
        )
        rows = (await self._session.execute(stmt)).all()
        return rank_related([tuple(row) for row in rows], limit=limit)

    async def delete_abandoned(self) -> list[str]:
        has_users = exists().where(UserTag.tag_id == Tag.id)
        stmt = select(Tag.tagname).where(~has_users).order_by(Tag.tagname)
        tagnames = list((await self._session.execute(stmt)).scalars().all())
        if tagnames:
            await self._session.execute(delete(Tag).where(Tag.tagname.in_(tagnames)))
        return tagnames
