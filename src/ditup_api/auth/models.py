"""
ditup_api.auth.models

Auth domain models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Auth:
    """
    Identity of the caller.

    `logged` means valid credentials of a user with a verified email.
    `logged_unverified` means valid credentials of a user who has not verified yet.
    """

    username: str | None = None
    logged: bool = False
    logged_unverified: bool = False

    @classmethod
    def anonymous(cls) -> Auth:
        return cls()

    def is_self(self, username: str) -> bool:
        return self.username is not None and self.username == username
