"""
ditup_api.api.validators.rules

Field rules shared by the request documents.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

USERNAME_PATTERN = r"^[a-z0-9]+([_\-.][a-z0-9]+)*$"
TAGNAME_PATTERN = r"^[a-z0-9]+(-[a-z0-9]+)*$"

Username = Annotated[str, StringConstraints(min_length=2, max_length=32, pattern=USERNAME_PATTERN)]
Tagname = Annotated[str, StringConstraints(min_length=2, max_length=64, pattern=TAGNAME_PATTERN)]
# Partial tagname typed into a search box.
TagnameLike = Annotated[str, StringConstraints(min_length=1, max_length=64, pattern=r"^[a-z0-9\-]+$")]

Password = Annotated[str, StringConstraints(min_length=8, max_length=512)]

GivenName = Annotated[str, StringConstraints(max_length=128)]
FamilyName = Annotated[str, StringConstraints(max_length=128)]
Description = Annotated[str, StringConstraints(max_length=2048)]

Story = Annotated[str, StringConstraints(max_length=1024)]
Relevance = Annotated[int, Field(ge=1, le=5)]

Trust = Literal[1, 2, 4, 8]
Reference = Annotated[str, StringConstraints(max_length=2048)]
ContactMessage = Annotated[str, StringConstraints(max_length=2048)]

MessageBody = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2048)
]

Code = Annotated[str, StringConstraints(min_length=1, max_length=2048)]


class Strict(BaseModel):
    # Unknown members are errors, so typos never pass silently.
    model_config = ConfigDict(extra="forbid")


class UserIdentifier(Strict):
    type: Literal["users"]
    id: Username


class ToUser(Strict):
    data: UserIdentifier


class ToRelationship(Strict):
    to: ToUser
