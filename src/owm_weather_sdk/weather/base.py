"""Provider-agnostic fetcher interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

RawRecord = dict[str, Any]


class WeatherFetcher(ABC):
    """Base contract for collaborators that fetch raw forecast payloads."""

    @abstractmethod
    def fetch(self, key: str) -> RawRecord:
        """Fetch the raw forecast payload for `key`, raising FetchError on failure."""

    @abstractmethod
    def close(self) -> None:
        """Release fetcher resources."""
