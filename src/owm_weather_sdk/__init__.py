"""OpenWeatherMap forecast SDK with per-city caching and background refresh."""

from .config import Settings, load_settings
from .exceptions import (
    ClosedError,
    ConfigError,
    FetchError,
    InvalidArgumentError,
    MalformedDataError,
    WeatherSDKError,
)
from .registry import WeatherSDKRegistry
from .sdk import WeatherSDK
from .weather.models import SimplifiedWeather

__version__ = "0.1.0"

__all__ = [
    "ClosedError",
    "ConfigError",
    "FetchError",
    "InvalidArgumentError",
    "MalformedDataError",
    "Settings",
    "SimplifiedWeather",
    "WeatherSDK",
    "WeatherSDKError",
    "WeatherSDKRegistry",
    "load_settings",
]
