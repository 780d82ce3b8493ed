from __future__ import annotations

import os
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")
    backend_session_secret: str = Field(..., alias="BACKEND_SESSION_SECRET")

    allowed_emails_raw: str = Field("", alias="ALLOWED_EMAILS")

    session_cookie_name: str = Field("habits_session", alias="SESSION_COOKIE_NAME")
    session_max_age_seconds: int = Field(3600, alias="SESSION_MAX_AGE_SECONDS")
    session_cookie_secure: bool = Field(False, alias="SESSION_COOKIE_SECURE")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("session_max_age_seconds")
    @classmethod
    def _positive_max_age(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("SESSION_MAX_AGE_SECONDS must be positive")
        return value

    @property
    def allowed_emails(self) -> List[str]:
        return [email.strip().lower() for email in self.allowed_emails_raw.split(",") if email.strip()]


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None


# For local dev convenience only.
if os.getenv("BACKEND_DEBUG_SETTINGS"):
    print(get_settings())
