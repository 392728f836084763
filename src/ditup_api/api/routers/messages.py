"""
ditup_api.api.routers.messages

Private messages between users.

Responsibilities:
- Send a message.
- Read a conversation with another user, or the latest message of every conversation.
- Mark received messages as read.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
)

from ditup_api.api.deps import db_session, settings_dep
from ditup_api.api.jsonapi import JsonApiResponse
from ditup_api.api.serializers import message_document, messages_document
from ditup_api.api.validators.messages import (
    MessagePatchDocument,
    NewMessageDocument,
    check_message_patch,
    check_new_message,
)
from ditup_api.api.validators.rules import Username
from ditup_api.auth.deps import only_logged
from ditup_api.auth.models import Auth
from ditup_api.db.models import User
from ditup_api.db.repositories.messages import MessageRepo
from ditup_api.db.repositories.users import UserRepo
from ditup_api.observability.logging import get_logger
from ditup_api.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])


async def _me(session: AsyncSession, auth: Auth) -> User:
    me = await UserRepo(session).get_by_username(auth.username or "")
    if me is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user not found")
    return me


@router.post("", status_code=HTTP_201_CREATED)
async def send_message(
    body: NewMessageDocument,
    auth: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    check_new_message(body, auth=auth)

    me = await _me(session, auth)
    receiver = await UserRepo(session).get_by_username(body.data.relationships.to.data.id)
    if receiver is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="receiver not found")

    message = await MessageRepo(session).create(
        from_user=me, to_user=receiver, body=body.data.attributes.body
    )
    await session.commit()
    log.info("message_sent", from_=me.username, to=receiver.username, message_id=message.id)

    document = message_document(message, settings=settings)
    return JsonApiResponse(
        document,
        status_code=HTTP_201_CREATED,
        headers={"Location": document["links"]["self"]},
    )


@router.get("")
async def list_messages(
    with_: Annotated[Username | None, Query(alias="filter[with]")] = None,
    threads: Annotated[str | None, Query(alias="filter[threads]")] = None,
    auth: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
) -> JsonApiResponse:
    me = await _me(session, auth)
    messages = MessageRepo(session)

    if with_ is not None:
        other = await UserRepo(session).get_by_username(with_)
        if other is None:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="user not found")
        return JsonApiResponse(messages_document(await messages.conversation(me.id, other.id)))

    if threads is not None:
        return JsonApiResponse(messages_document(await messages.threads(me.id)))

    raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="unsupported filter")


@router.patch("/{message_id}")
async def update_message(
    message_id: int,
    body: MessagePatchDocument,
    auth: Auth = Depends(only_logged),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JsonApiResponse:
    check_message_patch(body, message_id=message_id)

    messages = MessageRepo(session)
    message = await messages.get(message_id)
    if message is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="message not found")
    if not auth.is_self(message.to_user.username):
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Not Authorized")

    updated = await messages.mark_read(message)
    await session.commit()
    log.info("messages_read", username=auth.username, up_to=message_id, updated=updated)
    return JsonApiResponse(message_document(message, settings=settings))
