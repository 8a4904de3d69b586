"""Configuration objects and helpers for the RTOC bot."""

from __future__ import annotations

from typing import List

from pydantic import Field, HttpUrl, SecretStr, TypeAdapter, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_vehicles(raw: str) -> List[str]:
    """Split a comma separated registration list into normalised identifiers."""
    vehicles: List[str] = []
    for part in raw.split(","):
        value = part.strip()
        if value:
            vehicles.append(value.upper())
    return vehicles


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables."""

    bot_token: SecretStr = Field(..., alias="TG_BOT_TOKEN")
    vehicles: str = Field(..., alias="VEHICLES")
    master_id: int = Field(..., alias="MASTER_ID")
    api_url: str = Field(..., alias="RTOC_API_URL")
    timeout_seconds: float = Field(30.0, alias="RTOC_TIMEOUT_SECONDS", gt=0)
    sweep_hour: int = Field(18, alias="RTOC_SWEEP_HOUR", ge=0, le=23)
    sweep_minute: int = Field(0, alias="RTOC_SWEEP_MINUTE", ge=0, le=59)
    utc_offset_hours: int = Field(3, alias="RTOC_UTC_OFFSET_HOURS", ge=-12, le=14)
    sweep_cooldown_minutes: float = Field(30.0, alias="RTOC_SWEEP_COOLDOWN_MINUTES", ge=0)
    check_cooldown_minutes: float = Field(10.0, alias="RTOC_CHECK_COOLDOWN_MINUTES", ge=0)
    notify_attempts: int = Field(3, alias="RTOC_NOTIFY_ATTEMPTS", ge=1)
    log_level: str = Field("INFO", alias="RTOC_LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("vehicles")
    @classmethod
    def require_vehicles(cls, value: str) -> str:
        """Reject lists that contain no registration at all."""
        if not parse_vehicles(value):
            raise ValueError("at least one vehicle registration must be provided")
        return value

    @field_validator("api_url")
    @classmethod
    def valid_api_url(cls, value: str) -> str:
        """Check the endpoint is an http(s) URL but keep the configured text unchanged."""
        value = value.strip()
        try:
            TypeAdapter(HttpUrl).validate_python(value)
        except ValidationError as exc:
            raise ValueError(f"invalid API URL: {value!r}") from exc
        return value

    @field_validator("bot_token")
    @classmethod
    def require_token(cls, value: SecretStr) -> SecretStr:
        """Reject a blank bot token."""
        if not value.get_secret_value().strip():
            raise ValueError("bot token must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        """Normalise the level name and reject unknown ones."""
        level = value.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    @property
    def vehicle_list(self) -> List[str]:
        """Configured registrations, trimmed and upper-cased."""
        return parse_vehicles(self.vehicles)

    @property
    def sweep_cooldown_seconds(self) -> float:
        """Pause between vehicles during the daily sweep."""
        return self.sweep_cooldown_minutes * 60

    @property
    def check_cooldown_seconds(self) -> float:
        """Pause between vehicles for an on-demand check."""
        return self.check_cooldown_minutes * 60
