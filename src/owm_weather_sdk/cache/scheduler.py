"""Periodic background refresh, one APScheduler interval job per key."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler

from ..exceptions import ClosedError

RefreshFn = Callable[[str], object]


class RefreshTask:
    """Handle for one key's periodic refresh."""

    def __init__(self, key: str, period: float, refresh_fn: RefreshFn) -> None:
        self.key = key
        self.period = period
        self.refresh_fn = refresh_fn
        self.runs = 0
        self.failures = 0
        self._cancelled = threading.Event()
        self._idle = threading.Event()
        self._idle.set()

    @property
    def job_id(self) -> str:
        return f"refresh:{self.key}"

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop future runs. A run already in progress is left to finish."""
        self._cancelled.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the in-flight run, if any. Returns False on timeout."""
        return self._idle.wait(timeout=timeout)


class RefreshScheduler:
    """Owns one periodic RefreshTask per key.

    Each task is an `interval` job on a BackgroundScheduler whose thread pool
    has `max_workers` threads. Jobs run with `max_instances=1` and
    `coalesce=True`, so runs for the same key never overlap and missed runs
    collapse into one. Failures are logged and never stop the schedule.
    """

    def __init__(
        self,
        period: float,
        *,
        max_workers: int = 2,
        logger: logging.Logger | None = None,
    ) -> None:
        if period <= 0:
            raise ValueError("period must be > 0.")
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1.")
        self.period = period
        self.logger = logger or logging.getLogger(__name__)
        self._scheduler = BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(max_workers)},
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": None},
            timezone="UTC",
        )
        self._lock = threading.Lock()
        self._tasks: dict[str, RefreshTask] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def is_scheduled(self, key: str) -> bool:
        with self._lock:
            return key in self._tasks

    def scheduled_keys(self) -> list[str]:
        with self._lock:
            return list(self._tasks)

    def task(self, key: str) -> RefreshTask | None:
        with self._lock:
            return self._tasks.get(key)

    def ensure_scheduled(self, key: str, refresh_fn: RefreshFn) -> bool:
        """Start a periodic task for `key` unless one exists. Returns True if started."""
        with self._lock:
            if self._closed:
                raise ClosedError("Refresh scheduler has been shut down.")
            if key in self._tasks:
                return False
            task = RefreshTask(key, self.period, refresh_fn)
            self._scheduler.add_job(
                self._run,
                "interval",
                seconds=self.period,
                args=[task],
                id=task.job_id,
                name=task.job_id,
                replace_existing=False,
                next_run_time=datetime.now(UTC),
            )
            self._tasks[key] = task
            if not self._scheduler.running:
                self._scheduler.start()
        self.logger.info(
            "Scheduled background refresh for %s every %gs",
            key,
            self.period,
            extra={"city": key},
        )
        return True

    def cancel_all(self, *, wait: bool = False) -> None:
        """Stop scheduling future runs for every key; safe to call repeatedly."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for task in self._tasks.values():
                task.cancel()
            running = self._scheduler.running
            count = len(self._tasks)
        if running:
            self._scheduler.shutdown(wait=wait)
        self.logger.info("Cancelled %d background refresh task(s)", count)

    def _run(self, task: RefreshTask) -> None:
        if task.cancelled:
            return
        task._idle.clear()
        task.runs += 1
        try:
            task.refresh_fn(task.key)
        except Exception:
            task.failures += 1
            self.logger.exception(
                "Background refresh for %s failed", task.key, extra={"city": task.key}
            )
        finally:
            task._idle.set()
