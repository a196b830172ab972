"""OpenWeatherMap (api.openweathermap.org) forecast fetcher."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import FetchError, InvalidArgumentError, MalformedDataError
from ..redaction import sanitize_for_logging, sanitize_text
from .base import RawRecord, WeatherFetcher


def _status_category(status: int) -> str:
    if status == 401:
        return "auth"
    if status == 404:
        return "not_found"
    if status == 429:
        return "rate_limited"
    if 500 <= status < 600:
        return "server"
    return "http"


class OpenWeatherFetcher(WeatherFetcher):
    """Fetches raw 5-day/3-hour forecast payloads for a city name."""

    def __init__(
        self,
        settings: Settings,
        api_key: str,
        logger: logging.Logger,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise InvalidArgumentError("API key must not be empty.")
        self.settings = settings
        self.logger = logger
        self._api_key = api_key
        self._base_url = settings.openweather_base_url
        self._client = httpx.Client(
            timeout=settings.request_timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> OpenWeatherFetcher:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def fetch(self, key: str) -> RawRecord:
        params: dict[str, str] = {"q": key, "appid": self._api_key}
        if self.settings.units:
            params["units"] = self.settings.units
        if self.settings.lang:
            params["lang"] = self.settings.lang

        self.logger.debug(
            "Requesting forecast for %s",
            key,
            extra={"city": key, "params": sanitize_for_logging(params)},
        )
        try:
            response = self._client.get(self._base_url, params=params)
        except httpx.TimeoutException as exc:
            raise FetchError(
                f"Forecast request for '{key}' timed out after "
                f"{self.settings.request_timeout_seconds:g}s.",
                category="timeout",
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(
                f"Forecast request for '{key}' failed: {sanitize_text(str(exc))}",
                category="network",
            ) from exc

        if response.status_code != 200:
            raise FetchError(
                f"Forecast request for '{key}' failed with HTTP {response.status_code}: "
                f"{sanitize_text(response.text[:300])}",
                category=_status_category(response.status_code),
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedDataError(
                f"Forecast response for '{key}' was not valid JSON."
            ) from exc

        if not isinstance(payload, dict):
            raise MalformedDataError(
                f"Forecast response for '{key}' has unexpected payload type "
                f"{type(payload).__name__}."
            )
        self.logger.debug(
            "Fetched forecast for %s (%d bytes)", key, len(response.content), extra={"city": key}
        )
        return payload
