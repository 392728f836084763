"""
ditup_api.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Build public API links and front-end links (verify email, reset password).
- Hide secrets from repr/logging (e.g., account code secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DITUP_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "ditup-api"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./ditup.db"

    # Public url of this API (used in JSON:API links and Location headers)
    url_protocol: str = "https"
    url_host: str = "dev.ditup.org"
    url_path: str = "/api"

    # Front-end app (links sent by mail)
    app_url: str = "https://dev.ditup.org"

    # Mail
    mailer_host: str = "0.0.0.0"
    mailer_port: int = 25
    mailer_from: str = "info@ditup.org"

    # Signed account codes (email verification, password reset)
    code_alg: str = "HS256"
    code_issuer: str = "ditup-api"
    code_secret: str = Field(default="dev-secret-change-me", repr=False)
    verify_email_ttl_hours: int = 48
    reset_password_ttl_minutes: int = 30

    password_hash_iterations: int = 260_000

    # Jobs; 0 disables the periodic cleanup.
    abandoned_tags_interval_seconds: int = 3600

    related_tags_limit: int = 5

    @property
    def url_all(self) -> str:
        return f"{self.url_protocol}://{self.url_host}{self.url_path}"

    def verify_email_link(self, username: str, code: str) -> str:
        return f"{self.app_url}/user/{username}/verify-email/{code}"

    def reset_password_link(self, username: str, code: str) -> str:
        return f"{self.app_url}/reset-password/{username}/{code}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()
