"""Weather collaborators: fetcher contract, OpenWeatherMap fetcher and transformer."""

from .base import RawRecord, WeatherFetcher
from .models import SimplifiedWeather, SunTimes, Temperature, WeatherCondition, Wind
from .openweather import OpenWeatherFetcher
from .transform import simplify

__all__ = [
    "OpenWeatherFetcher",
    "RawRecord",
    "SimplifiedWeather",
    "SunTimes",
    "Temperature",
    "WeatherCondition",
    "WeatherFetcher",
    "Wind",
    "simplify",
]
