"""Typed models for the simplified weather record."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class WeatherCondition(_FrozenModel):
    """Headline condition of the first forecast slot."""

    main: str = ""
    description: str = ""


class Temperature(_FrozenModel):
    temp: float
    feels_like: float = 0.0


class Wind(_FrozenModel):
    speed: float = 0.0


class SunTimes(_FrozenModel):
    sunrise: int = 0
    sunset: int = 0


class SimplifiedWeather(_FrozenModel):
    """Simplified view of a forecast response, cached and returned to callers.

    Serialized with `to_dict()` it has the shape::

        {
          "weather": {"main": "...", "description": "..."},
          "temperature": {"temp": ..., "feels_like": ...},
          "visibility": ...,
          "wind": {"speed": ...},
          "datetime": ...,
          "sys": {"sunrise": ..., "sunset": ...},
          "timezone": ...,
          "name": "..."
        }
    """

    weather: WeatherCondition | None = None
    temperature: Temperature
    visibility: int = 0
    wind: Wind = Field(default_factory=Wind)
    forecast_time: int = Field(default=0, alias="datetime")
    sys: SunTimes = Field(default_factory=SunTimes)
    timezone: int = 0
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready dict, omitting `weather` when it is absent."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
