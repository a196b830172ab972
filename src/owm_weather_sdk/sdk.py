"""Public entry point: cached, background-refreshed OpenWeatherMap forecasts."""

from __future__ import annotations

import logging
import threading
from typing import Any

from .cache.freshness import Clock, FreshnessCache
from .cache.outcomes import LookupOutcome
from .cache.scheduler import RefreshScheduler
from .config import Settings, load_settings
from .exceptions import ClosedError, FetchError, InvalidArgumentError
from .log_setup import get_logger
from .weather.base import WeatherFetcher
from .weather.models import SimplifiedWeather
from .weather.openweather import OpenWeatherFetcher
from .weather.transform import simplify


class WeatherSDK:
    """Query forecasts by city name with caching and background refresh.

    Example::

        with WeatherSDK("YOUR_API_KEY") as sdk:
            weather = sdk.get_weather("London")
            print(weather.to_dict())

    The first request for a city fetches synchronously and starts a background
    task that keeps the city warm every `refresh_period_seconds`. Later
    requests are served from cache while the data is younger than
    `freshness_window_seconds`; older data triggers a synchronous reload that
    falls back to the cached value if the API is unreachable.
    """

    def __init__(
        self,
        api_key: str,
        *,
        settings: Settings | None = None,
        fetcher: WeatherFetcher | None = None,
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if not isinstance(api_key, str) or not api_key.strip():
            raise InvalidArgumentError("API key must not be empty.")
        self.settings = settings if settings is not None else load_settings()
        self.logger = logger or get_logger()
        self._api_key = api_key

        self._owns_fetcher = fetcher is None
        self._fetcher = fetcher or OpenWeatherFetcher(
            settings=self.settings, api_key=api_key, logger=self.logger
        )
        cache_kwargs: dict[str, Any] = {}
        if clock is not None:
            cache_kwargs["clock"] = clock
        self._cache: FreshnessCache[SimplifiedWeather] = FreshnessCache(
            self._load,
            freshness_window=self.settings.freshness_window_seconds,
            logger=self.logger,
            **cache_kwargs,
        )
        self._scheduler = RefreshScheduler(
            self.settings.refresh_period_seconds,
            max_workers=self.settings.refresh_workers,
            logger=self.logger,
        )
        self._seen_versions: dict[str, int] = {}
        self._state_lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> WeatherSDK:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.shutdown()

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cache(self) -> FreshnessCache[SimplifiedWeather]:
        return self._cache

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    def get_weather(self, city: str) -> SimplifiedWeather:
        """Return the simplified forecast for `city`.

        Raises InvalidArgumentError for a blank city, FetchError when the
        first fetch for the city fails, MalformedDataError for unexpected
        payloads and ClosedError after shutdown.
        """
        return self.lookup(city).unwrap()

    def lookup(self, city: str) -> LookupOutcome[SimplifiedWeather]:
        """Like get_weather, but report hit/loaded/stale_fallback/failed explicitly."""
        if self._closed:
            raise ClosedError("WeatherSDK has been shut down.")
        if not isinstance(city, str) or not city.strip():
            raise InvalidArgumentError("City must not be empty.")
        key = city.strip()

        try:
            self._scheduler.ensure_scheduled(key, self._background_refresh)
        except ClosedError as exc:
            raise ClosedError("WeatherSDK has been shut down.") from exc
        return self._cache.lookup(key)

    def cached_cities(self) -> list[str]:
        return self._cache.keys()

    def shutdown(self, *, wait: bool = False) -> None:
        """Stop background refreshes and release resources. Idempotent."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
        self._scheduler.cancel_all(wait=wait)
        if self._owns_fetcher:
            self._fetcher.close()
        self.logger.info("WeatherSDK shut down")

    close = shutdown

    def _load(self, key: str) -> SimplifiedWeather:
        # Validate before the cache stores anything, so malformed payloads never get cached.
        return simplify(self._fetcher.fetch(key))

    def _background_refresh(self, key: str) -> None:
        seen = self._seen_versions.get(key, 0)
        outcome = self._cache.refresh(key, if_version=seen)
        self._seen_versions[key] = self._cache.version(key)

        context = {"city": key, "outcome": outcome.kind}
        if outcome.kind == "skipped":
            self.logger.debug(
                "Background refresh for %s skipped; already refreshed", key, extra=context
            )
        elif outcome.kind == "refreshed":
            self.logger.debug("Background refresh for %s stored new data", key, extra=context)
        elif isinstance(outcome.error, FetchError):
            self.logger.warning(
                "Background refresh for %s failed: %s", key, outcome.error, extra=context
            )
        else:
            self.logger.error(
                "Background refresh for %s failed: %s",
                key,
                outcome.error,
                exc_info=outcome.error,
                extra=context,
            )
