from __future__ import annotations

from typing import Literal

from pydantic import Field

from ditup_api.api.errors import Issue, ValidationFailed
from ditup_api.api.validators.rules import Relevance, Story, Strict, Tagname


class NewUserTagMeta(Strict):
    story: Story = ""
    relevance: Relevance = 3


class NewUserTagData(Strict):
    type: Literal["tags"]
    id: Tagname
    meta: NewUserTagMeta = Field(default_factory=NewUserTagMeta)


class NewUserTagDocument(Strict):
    data: NewUserTagData


class UserTagPatchMeta(Strict):
    story: Story | None = None
    relevance: Relevance | None = None


class UserTagPatchData(Strict):
    type: Literal["tags"]
    id: Tagname
    meta: UserTagPatchMeta


class UserTagPatchDocument(Strict):
    data: UserTagPatchData


def check_user_tag_patch(doc: UserTagPatchDocument, *, tagname: str) -> None:
    issues: list[Issue] = []
    if doc.data.id != tagname:
        issues.append(
            Issue(
                msg="document id doesn't match the url parameter",
                param="id",
                value=doc.data.id,
                pointer="/data/id",
            )
        )
    meta = doc.data.meta
    if meta.story is None and meta.relevance is None:
        issues.append(Issue(msg="nothing to update", param="meta", pointer="/data/meta"))
    if issues:
        raise ValidationFailed(issues)
