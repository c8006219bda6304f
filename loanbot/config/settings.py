"""Environment configuration and validation.

Settings are loaded once at startup from environment variables (optionally via a local `.env`
file) and passed explicitly to the components that need them.
"""

from __future__ import annotations

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from loanbot.loans.dates import DEFAULT_TIMEZONE


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    telegram_bot_token: str = Field(alias="TELEGRAM_BOT_TOKEN")
    database_url: str = Field(alias="DATABASE_URL")
    loans_table: str = Field(default="loans", alias="LOANS_TABLE")
    timezone: str = Field(default=DEFAULT_TIMEZONE, alias="BOT_TIMEZONE")
    reply_max_length: int = Field(default=4096, gt=0, le=4096, alias="REPLY_MAX_LENGTH")

    @field_validator("loans_table")
    @classmethod
    def validate_loans_table(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("LOANS_TABLE must not be blank")
        return value

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Validate that the timezone is a known IANA zone.

        "Today" (which decides between cancelling and early-returning a loan) is computed in this
        zone, so a typo must fail at startup rather than silently fall back to UTC.
        """

        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        RuntimeError: If the environment configuration is missing or invalid.
    """

    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc
