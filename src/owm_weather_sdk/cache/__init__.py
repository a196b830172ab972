"""Freshness cache and background refresh scheduling."""

from .freshness import CacheEntry, FreshnessCache
from .outcomes import LoadResult, LookupOutcome, RefreshOutcome
from .scheduler import RefreshScheduler, RefreshTask

__all__ = [
    "CacheEntry",
    "FreshnessCache",
    "LoadResult",
    "LookupOutcome",
    "RefreshOutcome",
    "RefreshScheduler",
    "RefreshTask",
]
