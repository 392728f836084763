from __future__ import annotations

from typing import Literal

from pydantic import EmailStr, Field

from ditup_api.api.errors import Issue, ValidationFailed
from ditup_api.api.validators.rules import (
    Description,
    FamilyName,
    GivenName,
    Password,
    Strict,
    Username,
)


class NewUserAttributes(Strict):
    username: Username
    email: EmailStr
    password: Password


class NewUserData(Strict):
    type: Literal["users"]
    attributes: NewUserAttributes


class NewUserDocument(Strict):
    data: NewUserData


class ProfileAttributes(Strict):
    # Profile fields only; anything else (email, password, ...) is rejected.
    given_name: GivenName | None = Field(default=None, alias="givenName")
    family_name: FamilyName | None = Field(default=None, alias="familyName")
    description: Description | None = None


class ProfileData(Strict):
    type: Literal["users"]
    id: Username
    attributes: ProfileAttributes


class ProfileDocument(Strict):
    data: ProfileData


def check_profile_patch(doc: ProfileDocument, *, username: str) -> None:
    issues: list[Issue] = []
    if doc.data.id != username:
        issues.append(
            Issue(
                msg="document id doesn't match the url parameter",
                param="id",
                value=doc.data.id,
                pointer="/data/id",
            )
        )
    if not doc.data.attributes.model_fields_set:
        issues.append(
            Issue(msg="no attributes to update", param="attributes", pointer="/data/attributes")
        )
    # Profile fields can be emptied ("") but never nulled.
    for name in sorted(doc.data.attributes.model_fields_set):
        if getattr(doc.data.attributes, name) is None:
            member = ProfileAttributes.model_fields[name].alias or name
            issues.append(
                Issue(
                    msg=f"{member} can't be null",
                    param=member,
                    pointer=f"/data/attributes/{member}",
                )
            )
    if issues:
        raise ValidationFailed(issues)
