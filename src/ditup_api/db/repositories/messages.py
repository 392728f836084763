"""
ditup_api.db.repositories.messages

Repository for `Message` edges.

Responsibilities:
- Store messages between two users.
- Read a conversation and the latest message of every conversation (threads).
- Mark messages as read.
"""

from __future__ import annotations

import uuid

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ditup_api.db.models import Message, User


class MessageRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, from_user: User, to_user: User, body: str) -> Message:
        message = Message(from_id=from_user.id, to_id=to_user.id, body=body, read=False)
        self._session.add(message)
        await self._session.flush()
        message.from_user = from_user
        message.to_user = to_user
        return message

    async def get(self, message_id: int) -> Message | None:
        return await self._session.get(Message, message_id)

    async def conversation(self, a: uuid.UUID, b: uuid.UUID) -> list[Message]:
        stmt = (
            select(Message)
            .where(
                or_(
                    and_(Message.from_id == a, Message.to_id == b),
                    and_(Message.from_id == b, Message.to_id == a),
                )
            )
            .order_by(Message.created, Message.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def threads(self, user_id: uuid.UUID) -> list[Message]:
        """Latest message of each conversation of the user, newest first."""
        # Ids grow with time, so the newest message of a conversation has its max id.
        peer = case((Message.from_id == user_id, Message.to_id), else_=Message.from_id)
        latest_ids = (
            select(func.max(Message.id))
            .where(or_(Message.from_id == user_id, Message.to_id == user_id))
            .group_by(peer)
        )
        stmt = (
            select(Message)
            .where(Message.id.in_(latest_ids))
            .order_by(Message.created.desc(), Message.id.desc())
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def mark_read(self, message: Message) -> int:
        """Mark the message and all older ones in the same direction as read."""
        stmt = (
            update(Message)
            .where(
                Message.from_id == message.from_id,
                Message.to_id == message.to_id,
                Message.id <= message.id,
                Message.read.is_(False),
            )
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        message.read = True
        await self._session.flush()
        return result.rowcount
