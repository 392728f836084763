"""
ditup_api.api.routers.contacts

Contacts between users, with trust levels.

Responsibilities:
- Send a contact request (trust, reference, message) and notify the receiver.
- Read a contact from either participant's perspective.
- Confirm a request, update one's own trust/reference, delete or refuse a contact.
- List the contacts of a user.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_204_NO_CONTENT,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from ditup_api.api.deps import db_session, mailer_dep, settings_dep
from ditup_api.api.jsonapi import JsonApiResponse
from ditup_api.api.routers.users import UsernamePath
from ditup_api.api.serializers import contact_document, contact_resource
from ditup_api.api.validators.contacts import (
    ContactPatchDocument,
    check_contact_patch,
    parse_new_contact,
)
from ditup_api.auth.deps import only_logged
from ditup_api.auth.models import Auth
from ditup_api.db.models import Contact, User
from ditup_api.db.repositories.contacts import ContactRepo
from ditup_api.db.repositories.users import UserRepo
from ditup_api.observability.logging import get_logger
from ditup_api.services.mailer import Mailer, contact_request_mail, deliver
from ditup_api.settings import Settings

log = get_logger(__name__)

router = APIRouter(tags=["contacts"])


async def _participants(session: AsyncSession, from_: str, to: str) -> tuple[User, User]:
    users = UserRepo(session)
    from_user = await users.get_by_username(from_)
    to_user = await users.get_by_username(to)
    if from_user is None or to_user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="contact not found")
    return from_user, to_user


def _visible(contact: Contact, *, perspective: str, viewer: str) -> tuple[bool, bool]:
    """
    Whether `viewer` may see `contact` from `perspective`, and whether the
    trust/reference of that perspective are shown.
    """
    if contact.is_confirmed:
        return True, True
    participants = {contact.from_user.username, contact.to_user.username}
    # Unconfirmed: only the requester's side exists, and only participants see it.
    if viewer not in participants or perspective != contact.from_user.username:
        return False, False
    return True, viewer == contact.from_user.username


@router.post("/contacts", status_code=HTTP_201_CREATED)
async def create_contact(
    raw: Annotated[dict[str, Any], Body()],
    background: BackgroundTasks,
    auth: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    mailer: Mailer = Depends(mailer_dep),
) -> JsonApiResponse:
    body = parse_new_contact(raw, auth=auth)

    users = UserRepo(session)
    me = await users.get_by_username(auth.username or "")
    other = await users.get_by_username(body.data.relationships.to.data.id)
    if me is None or other is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user not found")

    contacts = ContactRepo(session)
    if await contacts.between(me.id, other.id) is not None:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="contact already exists")

    attrs = body.data.attributes
    try:
        contact = await contacts.create(
            from_user=me,
            to_user=other,
            trust=attrs.trust,
            reference=attrs.reference,
            message=attrs.message,
        )
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="contact already exists") from e

    log.info("contact_requested", from_=me.username, to=other.username, trust=attrs.trust)

    if other.email is not None:
        background.add_task(
            deliver,
            mailer,
            contact_request_mail(
                settings=settings,
                from_username=me.username,
                to_username=other.username,
                email=other.email,
                message=attrs.message,
            ),
        )

    document = contact_document(
        contact_resource(contact, perspective=me.username), settings=settings
    )
    return JsonApiResponse(
        document,
        status_code=HTTP_201_CREATED,
        headers={"Location": document["links"]["self"]},
    )


@router.get("/contacts/{from_}/{to}")
async def read_contact(
    from_: UsernamePath,
    to: UsernamePath,
    auth: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    from_user, to_user = await _participants(session, from_, to)
    contact = await ContactRepo(session).between(from_user.id, to_user.id)
    if contact is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="contact not found")

    visible, show_trust = _visible(contact, perspective=from_, viewer=auth.username or "")
    if not visible:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="contact not found")

    resource = contact_resource(contact, perspective=from_, show_trust=show_trust)
    return JsonApiResponse(contact_document(resource, settings=settings))


@router.patch("/contacts/{from_}/{to}")
async def update_contact(
    from_: UsernamePath,
    to: UsernamePath,
    body: ContactPatchDocument,
    auth: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    # Each participant edits only their own side: `from` in the url is the caller.
    if not auth.is_self(from_):
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Not Authorized")
    check_contact_patch(body, from_=from_, to=to)

    me, other = await _participants(session, from_, to)
    contacts = ContactRepo(session)
    attrs = body.data.attributes

    if body.is_confirmation:
        # Confirming the request that `other` sent to me.
        contact = await contacts.get(from_id=other.id, to_id=me.id)
        if contact is None:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="contact not found")
        if contact.is_confirmed:
            raise HTTPException(status_code=HTTP_409_CONFLICT, detail="contact already confirmed")
        await contacts.confirm(contact, trust=attrs.trust, reference=attrs.reference)
        await session.commit()
        log.info("contact_confirmed", from_=other.username, to=me.username)
    else:
        contact = await contacts.between(me.id, other.id)
        if contact is None:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="contact not found")
        if not contact.is_confirmed and contact.from_id != me.id:
            # The receiver has no side until they confirm.
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="contact not found")
        await contacts.update_side(
            contact, user_id=me.id, trust=attrs.trust, reference=attrs.reference
        )
        await session.commit()
        log.info("contact_updated", from_=me.username, to=other.username)

    resource = contact_resource(contact, perspective=me.username)
    return JsonApiResponse(contact_document(resource, settings=settings))


@router.delete("/contacts/{from_}/{to}", status_code=HTTP_204_NO_CONTENT)
async def delete_contact(
    from_: UsernamePath,
    to: UsernamePath,
    auth: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
) -> Response:
    if not (auth.is_self(from_) or auth.is_self(to)):
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Not Authorized")

    from_user, to_user = await _participants(session, from_, to)
    contacts = ContactRepo(session)
    contact = await contacts.between(from_user.id, to_user.id)
    if contact is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="contact not found")

    await contacts.delete(contact)
    await session.commit()
    log.info("contact_deleted", by=auth.username, between=[from_, to])
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.get("/users/{username}/contacts")
async def list_user_contacts(
    username: UsernamePath,
    auth: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
) -> JsonApiResponse:
    user = await UserRepo(session).get_by_username(username)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user not found")

    is_self = auth.is_self(username)
    contacts = await ContactRepo(session).list_for_user(user.id, include_unconfirmed=is_self)

    data = []
    for contact in contacts:
        if contact.is_confirmed:
            data.append(contact_resource(contact, perspective=username))
        else:
            # Pending requests are shown as the requester sees them.
            data.append(
                contact_resource(
                    contact,
                    perspective=contact.from_user.username,
                    show_trust=contact.from_id == user.id,
                )
            )
    return JsonApiResponse({"data": data})
