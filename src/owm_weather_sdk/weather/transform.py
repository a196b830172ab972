"""Map a raw OpenWeatherMap forecast payload to a SimplifiedWeather."""

from __future__ import annotations

from typing import Any

from ..exceptions import MalformedDataError
from .base import RawRecord
from .models import SimplifiedWeather, SunTimes, Temperature, WeatherCondition, Wind


def simplify(raw: RawRecord) -> SimplifiedWeather:
    """Build the simplified record from the first forecast slot and city data.

    Raises MalformedDataError when the forecast list is missing or empty, or
    when the first slot lacks a numeric `main.temp`. Other absent scalars fall
    back to zero or the empty string.
    """
    if not isinstance(raw, dict):
        raise MalformedDataError(
            f"Forecast payload must be an object, got {type(raw).__name__}."
        )

    forecasts = raw.get("list")
    if not isinstance(forecasts, list):
        raise MalformedDataError("Forecast payload missing 'list' array.")
    if not forecasts:
        raise MalformedDataError("Forecast payload contained no forecast entries.")

    first = forecasts[0]
    if not isinstance(first, dict):
        raise MalformedDataError("First forecast entry is not an object.")

    main = _as_dict(first.get("main"))
    temp = main.get("temp")
    if not _is_number(temp):
        raise MalformedDataError("First forecast entry missing numeric 'main.temp'.")

    condition: WeatherCondition | None = None
    weather_list = first.get("weather")
    if isinstance(weather_list, list) and weather_list:
        weather = _as_dict(weather_list[0])
        condition = WeatherCondition(
            main=_as_str(weather.get("main")),
            description=_as_str(weather.get("description")),
        )

    city = _as_dict(raw.get("city"))
    return SimplifiedWeather(
        weather=condition,
        temperature=Temperature(temp=float(temp), feels_like=_as_float(main.get("feels_like"))),
        visibility=_as_int(first.get("visibility")),
        wind=Wind(speed=_as_float(_as_dict(first.get("wind")).get("speed"))),
        forecast_time=_as_int(first.get("dt")),
        sys=SunTimes(
            sunrise=_as_int(city.get("sunrise")),
            sunset=_as_int(city.get("sunset")),
        ),
        timezone=_as_int(city.get("timezone")),
        name=_as_str(city.get("name")),
    )


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_float(value: Any) -> float:
    return float(value) if _is_number(value) else 0.0


def _as_int(value: Any) -> int:
    return int(value) if _is_number(value) else 0


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""
