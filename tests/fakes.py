"""Test doubles shared across the suite: a scriptable fetcher, a manual clock and payloads."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any

from owm_weather_sdk.weather.base import RawRecord, WeatherFetcher


def forecast_payload(temp: float = 15.0, *, name: str = "London") -> dict[str, Any]:
    return {
        "cod": "200",
        "list": [
            {
                "dt": 1700000000,
                "main": {"temp": temp, "feels_like": temp - 1.5},
                "weather": [{"main": "Clouds", "description": "overcast clouds"}],
                "visibility": 10000,
                "wind": {"speed": 4.1},
            },
            {
                "dt": 1700010800,
                "main": {"temp": temp + 2, "feels_like": temp},
                "weather": [{"main": "Clear", "description": "clear sky"}],
                "visibility": 10000,
                "wind": {"speed": 3.0},
            },
        ],
        "city": {
            "name": name,
            "timezone": 0,
            "sunrise": 1699946400,
            "sunset": 1699979400,
        },
    }


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher(WeatherFetcher):
    """Records calls and returns `payload` (or raises `error`)."""

    def __init__(self, payload: RawRecord | None = None) -> None:
        self.payload: RawRecord = payload if payload is not None else forecast_payload()
        self.payloads: dict[str, RawRecord] = {}
        self.error: Exception | None = None
        self.gate: threading.Event | None = None
        self.started = threading.Event()
        self.closed = False
        self._calls: list[str] = []
        self._lock = threading.Lock()

    @property
    def calls(self) -> list[str]:
        with self._lock:
            return list(self._calls)

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._calls)

    def fetch(self, key: str) -> RawRecord:
        with self._lock:
            self._calls.append(key)
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.payloads.get(key, self.payload)

    def close(self) -> None:
        self.closed = True


def wait_for(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
