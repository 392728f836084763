"""
ditup_api.db.repositories.contacts

Repository for `Contact` edges.

Responsibilities:
- Create contact requests and confirm them.
- Find the contact between two users in either direction.
- Update one side's trust/reference; delete contacts; list a user's contacts.
"""

from __future__ import annotations

import uuid

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ditup_api.db.models import Contact, User, now_ms


def contact_pair(a: uuid.UUID, b: uuid.UUID) -> tuple[uuid.UUID, uuid.UUID]:
    """Participant ids in a fixed order, whoever requested the contact."""
    return (a, b) if a < b else (b, a)


class ContactRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, *, from_user: User, to_user: User, trust: int, reference: str, message: str
    ) -> Contact:
        low, high = contact_pair(from_user.id, to_user.id)
        contact = Contact(
            from_id=from_user.id,
            to_id=to_user.id,
            user_low_id=low,
            user_high_id=high,
            is_confirmed=False,
            trust_from=trust,
            reference_from=reference,
            trust_to=None,
            reference_to=None,
            message=message,
        )
        self._session.add(contact)
        await self._session.flush()
        contact.from_user = from_user
        contact.to_user = to_user
        return contact

    async def get(self, *, from_id: uuid.UUID, to_id: uuid.UUID) -> Contact | None:
        """The contact requested by `from_id` and received by `to_id`."""
        stmt = select(Contact).where(Contact.from_id == from_id, Contact.to_id == to_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def between(self, a: uuid.UUID, b: uuid.UUID) -> Contact | None:
        """The contact between two users, whoever requested it."""
        low, high = contact_pair(a, b)
        stmt = select(Contact).where(Contact.user_low_id == low, Contact.user_high_id == high)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def confirm(self, contact: Contact, *, trust: int, reference: str) -> Contact:
        contact.is_confirmed = True
        contact.trust_to = trust
        contact.reference_to = reference
        contact.confirmed = now_ms()
        await self._session.flush()
        return contact

    async def update_side(
        self,
        contact: Contact,
        *,
        user_id: uuid.UUID,
        trust: int | None = None,
        reference: str | None = None,
    ) -> Contact:
        # Each participant owns the trust/reference they gave, never the other's.
        if user_id == contact.from_id:
            if trust is not None:
                contact.trust_from = trust
            if reference is not None:
                contact.reference_from = reference
        elif user_id == contact.to_id:
            if trust is not None:
                contact.trust_to = trust
            if reference is not None:
                contact.reference_to = reference
        else:
            raise ValueError("user is not a participant of the contact")
        await self._session.flush()
        return contact

    async def delete(self, contact: Contact) -> None:
        await self._session.delete(contact)
        await self._session.flush()

    async def list_for_user(
        self, user_id: uuid.UUID, *, include_unconfirmed: bool = False
    ) -> list[Contact]:
        stmt = select(Contact).where(or_(Contact.from_id == user_id, Contact.to_id == user_id))
        if not include_unconfirmed:
            stmt = stmt.where(Contact.is_confirmed.is_(True))
        stmt = stmt.order_by(Contact.created.desc())
        return list((await self._session.execute(stmt)).scalars().all())
