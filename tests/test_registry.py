"""Tests for the per-API-key WeatherSDK registry."""

from __future__ import annotations

import logging
import threading
import time
from types import SimpleNamespace

import pytest
from tests.fakes import FakeFetcher

from owm_weather_sdk.exceptions import InvalidArgumentError
from owm_weather_sdk.registry import WeatherSDKRegistry
from owm_weather_sdk.sdk import WeatherSDK

_SETTINGS = SimpleNamespace(
    freshness_window_seconds=600.0,
    refresh_period_seconds=300.0,
    refresh_workers=1,
)


class CountingFactory:
    def __init__(self, delay: float = 0.0) -> None:
        self.created: list[str] = []
        self.delay = delay
        self._lock = threading.Lock()

    def __call__(self, api_key: str) -> WeatherSDK:
        time.sleep(self.delay)
        with self._lock:
            self.created.append(api_key)
        return WeatherSDK(
            api_key,
            settings=_SETTINGS,
            fetcher=FakeFetcher(),
            logger=logging.getLogger("test_registry"),
        )


def test_same_key_returns_same_instance() -> None:
    factory = CountingFactory()
    registry = WeatherSDKRegistry(factory=factory)
    try:
        first = registry.get_instance("key-a")
        second = registry.get_instance("key-a")
        other = registry.get_instance("key-b")

        assert first is second
        assert other is not first
        assert factory.created == ["key-a", "key-b"]
        assert len(registry) == 2
    finally:
        registry.shutdown_all()


def test_concurrent_creation_builds_one_instance() -> None:
    factory = CountingFactory(delay=0.05)
    registry = WeatherSDKRegistry(factory=factory)
    instances: list[WeatherSDK] = []
    lock = threading.Lock()

    def worker() -> None:
        sdk = registry.get_instance("key-a")
        with lock:
            instances.append(sdk)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    try:
        assert factory.created == ["key-a"]
        assert len({id(sdk) for sdk in instances}) == 1
    finally:
        registry.shutdown_all()


def test_delete_instance_shuts_down_and_removes() -> None:
    registry = WeatherSDKRegistry(factory=CountingFactory())
    sdk = registry.get_instance("key-a")

    assert registry.delete_instance("key-a") is True
    assert sdk.closed
    assert "key-a" not in registry
    assert registry.delete_instance("key-a") is False


def test_closed_instance_is_replaced() -> None:
    factory = CountingFactory()
    registry = WeatherSDKRegistry(factory=factory)
    first = registry.get_instance("key-a")
    first.shutdown()

    second = registry.get_instance("key-a")
    try:
        assert second is not first
        assert not second.closed
        assert factory.created == ["key-a", "key-a"]
    finally:
        registry.shutdown_all()


def test_shutdown_all_closes_every_instance() -> None:
    registry = WeatherSDKRegistry(factory=CountingFactory())
    a = registry.get_instance("key-a")
    b = registry.get_instance("key-b")

    registry.shutdown_all()

    assert a.closed and b.closed
    assert len(registry) == 0


@pytest.mark.parametrize("api_key", ["", "  "])
def test_blank_key_is_rejected(api_key: str) -> None:
    registry = WeatherSDKRegistry(factory=CountingFactory())
    with pytest.raises(InvalidArgumentError):
        registry.get_instance(api_key)
