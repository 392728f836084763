from __future__ import annotations

from typing import Literal

from ditup_api.api.errors import Issue, ValidationFailed
from ditup_api.api.validators.rules import MessageBody, Strict, ToRelationship
from ditup_api.auth.models import Auth


class NewMessageAttributes(Strict):
    # Surrounding whitespace is trimmed before the length is checked.
    body: MessageBody


class NewMessageData(Strict):
    type: Literal["messages"]
    attributes: NewMessageAttributes
    relationships: ToRelationship


class NewMessageDocument(Strict):
    data: NewMessageData


class MessagePatchAttributes(Strict):
    read: bool


class MessagePatchData(Strict):
    type: Literal["messages"]
    id: str
    attributes: MessagePatchAttributes


class MessagePatchDocument(Strict):
    data: MessagePatchData


def check_new_message(doc: NewMessageDocument, *, auth: Auth) -> None:
    receiver = doc.data.relationships.to.data.id
    if auth.is_self(receiver):
        raise ValidationFailed(
            [
                Issue(
                    msg="Receiver can't be the sender",
                    param="to",
                    value=receiver,
                    pointer="/data/relationships/to/data/id",
                )
            ]
        )


def check_message_patch(doc: MessagePatchDocument, *, message_id: int) -> None:
    issues: list[Issue] = []
    if doc.data.id != str(message_id):
        issues.append(
            Issue(
                msg="ids in request body and url don't match",
                param="id",
                value=doc.data.id,
                pointer="/data/id",
            )
        )
    if doc.data.attributes.read is not True:
        issues.append(
            Issue(
                msg="Invalid value for the attribute 'read' provided",
                param="read",
                value=doc.data.attributes.read,
                pointer="/data/attributes/read",
            )
        )
    if issues:
        raise ValidationFailed(issues)
