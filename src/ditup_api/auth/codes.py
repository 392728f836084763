"""
ditup_api.auth.codes

Signed account codes (JWT) mailed to users.

Responsibilities:
- Issue short-lived codes for email verification and password reset.
- Decode and validate codes with strict claim requirements (iss/exp/iat/sub/purpose).

A verification code is bound to the pending email; a reset code is bound to a
fingerprint of the current password hash, so it stops working once used.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import jwt
from jwt import InvalidTokenError

from ditup_api.settings import Settings

Purpose = Literal["verify-email", "reset-password"]


@dataclass(frozen=True, slots=True)
class CodeConfig:
    alg: str
    issuer: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> CodeConfig:
        return cls(alg=settings.code_alg, issuer=settings.code_issuer, secret=settings.code_secret)


class InvalidCode(Exception):
    pass


def issue_code(
    *,
    cfg: CodeConfig,
    purpose: Purpose,
    subject: str,
    ttl: timedelta,
    claims: dict[str, Any] | None = None,
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        **(claims or {}),
        "iss": cfg.issuer,
        "sub": subject,
        "purpose": purpose,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_code(*, cfg: CodeConfig, token: str, purpose: Purpose, subject: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            options={"require": ["exp", "iat", "iss", "sub"]},
        )
    except InvalidTokenError as e:
        raise InvalidCode(str(e)) from e

    if payload.get("purpose") != purpose:
        raise InvalidCode("code issued for another purpose")
    if payload.get("sub") != subject:
        raise InvalidCode("code issued for another user")
    return payload


def issue_verify_email_code(*, settings: Settings, username: str, email: str) -> str:
    return issue_code(
        cfg=CodeConfig.from_settings(settings),
        purpose="verify-email",
        subject=username,
        ttl=timedelta(hours=settings.verify_email_ttl_hours),
        claims={"email": email},
    )


def issue_reset_password_code(*, settings: Settings, username: str, password_fingerprint: str) -> str:
    return issue_code(
        cfg=CodeConfig.from_settings(settings),
        purpose="reset-password",
        subject=username,
        ttl=timedelta(minutes=settings.reset_password_ttl_minutes),
        claims={"pwd": password_fingerprint},
    )
