"""Tagged results that make the cache's swallow-or-propagate decisions explicit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from ..exceptions import FetchError

V = TypeVar("V")

LoadKind = Literal["loaded", "recoverable", "fatal"]
LookupKind = Literal["hit", "loaded", "stale_fallback", "failed"]
RefreshKind = Literal["refreshed", "skipped", "failed"]


@dataclass(frozen=True)
class LoadResult(Generic[V]):
    """Outcome of one loader call, shared by every caller joined to the flight."""

    kind: LoadKind
    value: V | None = None
    error: Exception | None = None

    @classmethod
    def loaded(cls, value: V) -> LoadResult[V]:
        return cls(kind="loaded", value=value)

    @classmethod
    def from_error(cls, error: Exception) -> LoadResult[V]:
        """Classify a loader failure: fetch errors can fall back, the rest cannot."""
        kind: LoadKind = "recoverable" if isinstance(error, FetchError) else "fatal"
        return cls(kind=kind, error=error)


@dataclass(frozen=True)
class LookupOutcome(Generic[V]):
    """Result of a synchronous cache lookup."""

    kind: LookupKind
    value: V | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.kind != "failed"

    def unwrap(self) -> V:
        """Return the value, raising the stored error for a failed lookup."""
        if self.kind == "failed":
            if self.error is None:
                raise RuntimeError("Lookup failed without an error.")
            raise self.error
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True)
class RefreshOutcome(Generic[V]):
    """Result of a background refresh attempt; never raised."""

    kind: RefreshKind
    value: V | None = None
    error: Exception | None = None
