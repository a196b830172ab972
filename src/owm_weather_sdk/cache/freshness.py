"""Per-key cache with a freshness window, stale fallback and single-flight loads."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .outcomes import LoadResult, LookupOutcome, RefreshOutcome

V = TypeVar("V")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """Immutable snapshot of one cached key."""

    key: str
    value: V
    last_updated: float
    version: int

    def age(self, now: float) -> float:
        return now - self.last_updated


class _Flight(Generic[V]):
    """One in-progress load that concurrent callers for the same key can join."""

    def __init__(self) -> None:
        self._done = threading.Event()
        self._result: LoadResult[V] | None = None

    def finish(self, result: LoadResult[V]) -> None:
        self._result = result
        self._done.set()

    def wait(self) -> LoadResult[V]:
        self._done.wait()
        if self._result is None:
            raise RuntimeError("In-flight load finished without a result.")
        return self._result


class FreshnessCache(Generic[V]):
    """Map of key -> (value, last_updated) that answers with fresh-enough data.

    A value younger than `freshness_window` seconds is returned without
    loading. An unseen or stale key is loaded synchronously. When a stale
    reload fails with a recoverable error the previous value is returned
    instead; fatal errors always propagate.

    All loads for one key go through a single in-flight slot: concurrent
    callers wait for the running load and share its result. Writes are
    last-write-wins by completion order.
    """

    def __init__(
        self,
        loader: Callable[[str], V],
        *,
        freshness_window: float,
        clock: Clock = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        if freshness_window <= 0:
            raise ValueError("freshness_window must be > 0.")
        self._loader = loader
        self.freshness_window = freshness_window
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry[V]] = {}
        self._inflight: dict[str, _Flight[V]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def entry(self, key: str) -> CacheEntry[V] | None:
        with self._lock:
            return self._entries.get(key)

    def peek(self, key: str) -> V | None:
        """Return whatever is cached for `key` without ever loading."""
        entry = self.entry(key)
        return entry.value if entry is not None else None

    def version(self, key: str) -> int:
        entry = self.entry(key)
        return entry.version if entry is not None else 0

    def put(self, key: str, value: V) -> CacheEntry[V]:
        """Replace (or create) the entry for `key` with a fresh timestamp."""
        now = self.clock()
        with self._lock:
            previous = self._entries.get(key)
            if previous is None:
                entry = CacheEntry(key=key, value=value, last_updated=now, version=1)
            else:
                entry = CacheEntry(
                    key=key,
                    value=value,
                    last_updated=max(now, previous.last_updated),
                    version=previous.version + 1,
                )
            self._entries[key] = entry
        return entry

    def get(self, key: str) -> V:
        """Return a value no older than the freshness window, or the stale fallback."""
        return self.lookup(key).unwrap()

    def lookup(self, key: str) -> LookupOutcome[V]:
        entry = self.entry(key)
        if entry is not None and entry.age(self.clock()) < self.freshness_window:
            return LookupOutcome(kind="hit", value=entry.value)

        result = self._load(key)
        if result.kind == "loaded":
            return LookupOutcome(kind="loaded", value=result.value)

        if result.kind == "recoverable":
            fallback = self.entry(key)
            if fallback is not None:
                self.logger.warning(
                    "Refresh for %s failed; serving cached value aged %.0fs: %s",
                    key,
                    fallback.age(self.clock()),
                    result.error,
                    extra={"city": key},
                )
                return LookupOutcome(kind="stale_fallback", value=fallback.value, error=result.error)
        return LookupOutcome(kind="failed", error=result.error)

    def refresh(self, key: str, *, if_version: int | None = None) -> RefreshOutcome[V]:
        """Reload `key` through the shared in-flight slot; never raises loader errors.

        With `if_version`, the reload is skipped when the entry's version no
        longer matches, meaning another write landed since the caller last
        looked.
        """
        with self._lock:
            if if_version is not None:
                current = self._entries.get(key)
                if (current.version if current is not None else 0) != if_version:
                    return RefreshOutcome(kind="skipped")
            flight, leader = self._join_or_start(key)

        result = self._run_flight(key, flight) if leader else flight.wait()
        if result.kind == "loaded":
            return RefreshOutcome(kind="refreshed", value=result.value)
        return RefreshOutcome(kind="failed", error=result.error)

    def _join_or_start(self, key: str) -> tuple[_Flight[V], bool]:
        # Caller must hold self._lock.
        flight = self._inflight.get(key)
        if flight is not None:
            return flight, False
        flight = _Flight()
        self._inflight[key] = flight
        return flight, True

    def _load(self, key: str) -> LoadResult[V]:
        with self._lock:
            flight, leader = self._join_or_start(key)
        if not leader:
            self.logger.debug("Joining in-flight load for %s", key)
            return flight.wait()
        return self._run_flight(key, flight)

    def _run_flight(self, key: str, flight: _Flight[V]) -> LoadResult[V]:
        result: LoadResult[V] | None = None
        try:
            value = self._loader(key)
            self.put(key, value)
            result = LoadResult.loaded(value)
        except Exception as exc:
            result = LoadResult.from_error(exc)
        finally:
            with self._lock:
                self._inflight.pop(key, None)
            # Waiters must be released even when the loader was interrupted.
            flight.finish(
                result
                if result is not None
                else LoadResult(kind="fatal", error=RuntimeError(f"Load for {key!r} was interrupted."))
            )
        return result
