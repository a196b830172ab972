"""Explicit registry handing out one WeatherSDK per API key."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .config import Settings
from .exceptions import InvalidArgumentError
from .log_setup import get_logger
from .sdk import WeatherSDK

SDKFactory = Callable[[str], WeatherSDK]


class WeatherSDKRegistry:
    """Owns WeatherSDK instances keyed by API key.

    The application creates one registry and passes it where needed. An
    instance is created on the first `get_instance` for a key and torn down
    by `delete_instance` or `shutdown_all`. Creation runs under the registry
    lock, so concurrent requests for the same key receive the same instance.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
        factory: SDKFactory | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or get_logger()
        self._factory = factory or self._default_factory
        self._lock = threading.Lock()
        self._instances: dict[str, WeatherSDK] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)

    def __contains__(self, api_key: object) -> bool:
        with self._lock:
            return api_key in self._instances

    def get_instance(self, api_key: str) -> WeatherSDK:
        """Return the SDK for `api_key`, creating it if needed."""
        if not isinstance(api_key, str) or not api_key.strip():
            raise InvalidArgumentError("API key must not be empty.")
        with self._lock:
            sdk = self._instances.get(api_key)
            if sdk is not None and not sdk.closed:
                return sdk
            sdk = self._factory(api_key)
            self._instances[api_key] = sdk
        self.logger.info("Created WeatherSDK instance (%d registered)", len(self))
        return sdk

    def delete_instance(self, api_key: str) -> bool:
        """Shut down and forget the SDK for `api_key`. Returns False if absent."""
        with self._lock:
            sdk = self._instances.pop(api_key, None)
        if sdk is None:
            return False
        sdk.shutdown()
        return True

    def shutdown_all(self) -> None:
        with self._lock:
            instances = list(self._instances.values())
            self._instances.clear()
        for sdk in instances:
            sdk.shutdown()

    def _default_factory(self, api_key: str) -> WeatherSDK:
        return WeatherSDK(api_key, settings=self.settings, logger=self.logger)
