from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field, StringConstraints

from ditup_api.api.validators.rules import Code, Password, Strict, Username


class VerifyEmailAttributes(Strict):
    email_verification_code: Code = Field(alias="emailVerificationCode")


class VerifyEmailData(Strict):
    type: Literal["users"]
    id: Username
    attributes: VerifyEmailAttributes


class VerifyEmailDocument(Strict):
    data: VerifyEmailData


class ResetRequestData(Strict):
    type: Literal["users"]
    # username or email
    id: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=256)]


class ResetRequestDocument(Strict):
    data: ResetRequestData


class ResetPasswordAttributes(Strict):
    code: Code
    password: Password


class ResetPasswordData(Strict):
    type: Literal["users"]
    id: Username
    attributes: ResetPasswordAttributes


class ResetPasswordDocument(Strict):
    data: ResetPasswordData
