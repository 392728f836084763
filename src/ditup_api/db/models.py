"""
ditup_api.db.models

Persistence schema for the trust network.

Responsibilities:
- Define the vertices of the social graph:
  - User: account, credentials and profile
  - Tag: globally unique topic label
- Define the edges between them:
  - UserTag: user -> tag, with story and relevance weight
  - Contact: user -> user, with trust levels and references from both sides
  - Message: user -> user, with body and read flag
"""

from __future__ import annotations

import time
import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid as SAUuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ditup_api.db.base import Base


def now_ms() -> int:
    # Timestamps are milliseconds since the epoch, the unit exposed by the API.
    return int(time.time() * 1000)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    username: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    # `email` is set only once verified; a pending address waits in `email_temporary`.
    email: Mapped[str | None] = mapped_column(String(256), nullable=True, unique=True)
    email_temporary: Mapped[str | None] = mapped_column(String(256), nullable=True)

    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)

    given_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    family_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)

    @property
    def is_verified(self) -> bool:
        return self.email is not None


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    tagname: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    creator_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)

    creator: Mapped[User | None] = relationship(lazy="joined")


class UserTag(Base):
    __tablename__ = "user_tags"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    tag_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("tags.id", ondelete="CASCADE"), nullable=False
    )

    story: Mapped[str] = mapped_column(Text, nullable=False, default="")
    relevance: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    created: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)

    user: Mapped[User] = relationship(lazy="joined")
    tag: Mapped[Tag] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "tag_id", name="uq_user_tags_user_tag"),
        Index("ix_user_tags_tag", "tag_id"),
    )


class Contact(Base):
    __tablename__ = "contacts"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # `from` requested the contact, `to` received (and possibly confirmed) it.
    from_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    to_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # The two participant ids in sorted order; one row per pair in either direction.
    user_low_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False)
    user_high_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False)

    is_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    trust_from: Mapped[int] = mapped_column(Integer, nullable=False)
    reference_from: Mapped[str] = mapped_column(Text, nullable=False, default="")
    trust_to: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reference_to: Mapped[str | None] = mapped_column(Text, nullable=True)

    message: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    confirmed: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    from_user: Mapped[User] = relationship(foreign_keys=[from_id], lazy="joined")
    to_user: Mapped[User] = relationship(foreign_keys=[to_id], lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_contacts_pair"),
        Index("ix_contacts_to", "to_id"),
    )


class Message(Base):
    __tablename__ = "messages"

    # Sequential ids order messages sent within the same millisecond.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    from_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    to_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    body: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)

    from_user: Mapped[User] = relationship(foreign_keys=[from_id], lazy="joined")
    to_user: Mapped[User] = relationship(foreign_keys=[to_id], lazy="joined")

    __table_args__ = (
        Index("ix_messages_from_to_created", "from_id", "to_id", "created"),
        Index("ix_messages_to_created", "to_id", "created"),
    )


# --- Module Notes -----------------------------------------------------------
# Edge rows eagerly join their endpoints (lazy="joined") because async sessions
# cannot lazy-load relationships after the query returns.
