"""
ditup_api.db.repositories.users

Repository for `User` entities.

Responsibilities:
- Create accounts with a pending (temporary) email.
- Look users up by username/email; list users sharing a tag.
- Persist email verification, profile edits and password changes.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ditup_api.db.models import Tag, User, UserTag


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, username: str, email: str, password_hash: str) -> User:
        user = User(
            username=username,
            email=None,
            email_temporary=email,
            password_hash=password_hash,
            given_name="",
            family_name="",
            description="",
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        # Only verified addresses identify a user.
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def username_exists(self, username: str) -> bool:
        stmt = select(func.count()).select_from(User).where(User.username == username)
        return (await self._session.execute(stmt)).scalar_one() > 0

    async def email_exists(self, email: str) -> bool:
        return await self.get_by_email(email) is not None

    async def verify_email(self, user: User) -> None:
        user.email = user.email_temporary
        user.email_temporary = None
        await self._session.flush()

    async def update_profile(
        self,
        user: User,
        *,
        given_name: str | None = None,
        family_name: str | None = None,
        description: str | None = None,
    ) -> User:
        if given_name is not None:
            user.given_name = given_name
        if family_name is not None:
            user.family_name = family_name
        if description is not None:
            user.description = description
        await self._session.flush()
        return user

    async def set_password_hash(self, user: User, password_hash: str) -> None:
        user.password_hash = password_hash
        await self._session.flush()

    async def list_with_tag(self, tagname: str) -> list[User]:
        stmt = (
            select(User)
            .join(UserTag, UserTag.user_id == User.id)
            .join(Tag, Tag.id == UserTag.tag_id)
            .where(Tag.tagname == tagname)
            .order_by(User.username)
        )
        return list((await self._session.execute(stmt)).scalars().all())
