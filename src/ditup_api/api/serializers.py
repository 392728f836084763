"""
ditup_api.api.serializers

Build JSON:API documents from ORM rows.

Responsibilities:
- One resource builder per type (users, tags, user tags, contacts, messages).
- Document wrappers adding top-level `links`/`meta`.
"""

from __future__ import annotations

from typing import Any

from ditup_api.db.models import Contact, Message, Tag, User, UserTag
from ditup_api.settings import Settings

Document = dict[str, Any]
Resource = dict[str, Any]


def _identifier(type_: str, id_: str) -> dict[str, str]:
    return {"type": type_, "id": id_}


def user_link(settings: Settings, username: str) -> str:
    return f"{settings.url_all}/users/{username}"


def user_resource(user: User, *, full: bool) -> Resource:
    attributes: dict[str, Any] = {"username": user.username}
    if full:
        attributes.update(
            givenName=user.given_name,
            familyName=user.family_name,
            description=user.description,
        )
    return {"type": "users", "id": user.username, "attributes": attributes}


def user_document(user: User, *, settings: Settings, full: bool) -> Document:
    return {
        "data": user_resource(user, full=full),
        "links": {"self": user_link(settings, user.username)},
    }


def users_document(users: list[User]) -> Document:
    return {"data": [user_resource(u, full=False) for u in users]}


def tag_link(settings: Settings, tagname: str) -> str:
    return f"{settings.url_all}/tags/{tagname}"


def tag_resource(tag: Tag, *, meta: dict[str, Any] | None = None) -> Resource:
    resource: Resource = {
        "type": "tags",
        "id": tag.tagname,
        "attributes": {"tagname": tag.tagname, "created": tag.created},
    }
    if tag.creator is not None:
        resource["relationships"] = {
            "creator": {"data": _identifier("users", tag.creator.username)}
        }
    if meta is not None:
        resource["meta"] = meta
    return resource


def tag_document(tag: Tag, *, settings: Settings) -> Document:
    return {"data": tag_resource(tag), "links": {"self": tag_link(settings, tag.tagname)}}


def tags_document(resources: list[Resource]) -> Document:
    return {"data": resources}


def user_tag_links(settings: Settings, user_tag: UserTag) -> dict[str, str]:
    username, tagname = user_tag.user.username, user_tag.tag.tagname
    return {
        "self": f"{settings.url_all}/users/{username}/relationships/tags/{tagname}",
        "related": f"{settings.url_all}/users/{username}/tags/{tagname}",
    }


def user_tag_meta(user_tag: UserTag) -> dict[str, Any]:
    return {
        "story": user_tag.story,
        "relevance": user_tag.relevance,
        "created": user_tag.created,
    }


def user_tag_document(user_tag: UserTag, *, settings: Settings) -> Document:
    return {
        "data": {
            "type": "tags",
            "id": user_tag.tag.tagname,
            "attributes": {"tagname": user_tag.tag.tagname},
        },
        "links": user_tag_links(settings, user_tag),
        "meta": user_tag_meta(user_tag),
    }


def user_tags_document(user_tags: list[UserTag], *, settings: Settings) -> Document:
    return {
        "data": [
            {
                "type": "tags",
                "id": ut.tag.tagname,
                "attributes": {"tagname": ut.tag.tagname},
                "links": user_tag_links(settings, ut),
                "meta": user_tag_meta(ut),
            }
            for ut in user_tags
        ]
    }


def contact_id(from_username: str, to_username: str) -> str:
    return f"{from_username}--{to_username}"


def contact_resource(contact: Contact, *, perspective: str, show_trust: bool = True) -> Resource:
    """
    Contact seen by `perspective`: `trust` and `reference` are what that user
    says about the other participant.
    """
    if perspective == contact.from_user.username:
        me, other = contact.from_user, contact.to_user
        trust, reference = contact.trust_from, contact.reference_from
    else:
        me, other = contact.to_user, contact.from_user
        trust, reference = contact.trust_to, contact.reference_to

    attributes: dict[str, Any] = {
        "isConfirmed": contact.is_confirmed,
        "created": contact.created,
        "confirmed": contact.confirmed,
        "message": contact.message,
    }
    if show_trust:
        attributes.update(trust=trust, reference=reference)

    return {
        "type": "contacts",
        "id": contact_id(me.username, other.username),
        "attributes": attributes,
        "relationships": {
            "from": {"data": _identifier("users", me.username)},
            "to": {"data": _identifier("users", other.username)},
        },
    }


def contact_document(resource: Resource, *, settings: Settings) -> Document:
    from_username = resource["relationships"]["from"]["data"]["id"]
    to_username = resource["relationships"]["to"]["data"]["id"]
    return {
        "data": resource,
        "links": {"self": f"{settings.url_all}/contacts/{from_username}/{to_username}"},
    }


def message_resource(message: Message) -> Resource:
    return {
        "type": "messages",
        "id": str(message.id),
        "attributes": {
            "body": message.body,
            "created": message.created,
            "read": message.read,
        },
        "relationships": {
            "from": {"data": _identifier("users", message.from_user.username)},
            "to": {"data": _identifier("users", message.to_user.username)},
        },
    }


def message_document(message: Message, *, settings: Settings) -> Document:
    return {
        "data": message_resource(message),
        "links": {"self": f"{settings.url_all}/messages/{message.id}"},
    }


def messages_document(messages: list[Message]) -> Document:
    return {"data": [message_resource(m) for m in messages]}
