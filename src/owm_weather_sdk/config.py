"""Typed settings loader for the OpenWeatherMap SDK."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5/forecast"
DEFAULT_FRESHNESS_WINDOW_SECONDS = 10 * 60
DEFAULT_REFRESH_PERIOD_SECONDS = 5 * 60


class Settings(BaseSettings):
    """SDK settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    openweather_api_key: str | None = Field(
        default=None, alias="OPENWEATHER_API_KEY", repr=False
    )
    openweather_base_url: str = Field(default=DEFAULT_BASE_URL, alias="OPENWEATHER_BASE_URL")
    request_timeout_seconds: float = Field(default=10.0, alias="OPENWEATHER_TIMEOUT_SECONDS")
    units: Literal["standard", "metric", "imperial"] | None = Field(
        default=None, alias="OPENWEATHER_UNITS"
    )
    lang: str | None = Field(default=None, alias="OPENWEATHER_LANG")

    freshness_window_seconds: float = Field(
        default=DEFAULT_FRESHNESS_WINDOW_SECONDS,
        alias="WEATHER_FRESHNESS_WINDOW_SECONDS",
    )
    refresh_period_seconds: float = Field(
        default=DEFAULT_REFRESH_PERIOD_SECONDS,
        alias="WEATHER_REFRESH_PERIOD_SECONDS",
    )
    refresh_workers: int = Field(default=2, alias="WEATHER_REFRESH_WORKERS")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    @field_validator("openweather_api_key", "units", "lang", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat empty env-string values as unset."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def validate_limits(self) -> Settings:
        """Reject non-positive durations and pool sizes."""
        if not self.openweather_base_url.startswith(("http://", "https://")):
            raise ValueError("OPENWEATHER_BASE_URL must be an http(s) URL.")
        if self.request_timeout_seconds <= 0:
            raise ValueError("OPENWEATHER_TIMEOUT_SECONDS must be > 0.")
        if self.freshness_window_seconds <= 0:
            raise ValueError("WEATHER_FRESHNESS_WINDOW_SECONDS must be > 0.")
        if self.refresh_period_seconds <= 0:
            raise ValueError("WEATHER_REFRESH_PERIOD_SECONDS must be > 0.")
        if self.refresh_workers < 1:
            raise ValueError("WEATHER_REFRESH_WORKERS must be >= 1.")
        return self

    def safe_summary(self) -> dict[str, Any]:
        """Return non-secret settings for startup logs."""
        return {
            "base_url": self.openweather_base_url,
            "api_key_configured": bool(self.openweather_api_key),
            "request_timeout_seconds": self.request_timeout_seconds,
            "units": self.units,
            "lang": self.lang,
            "freshness_window_seconds": self.freshness_window_seconds,
            "refresh_period_seconds": self.refresh_period_seconds,
            "refresh_workers": self.refresh_workers,
        }


def load_settings(**overrides: Any) -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
