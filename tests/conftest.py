"""Fixtures built on the fakes in tests/fakes.py."""

from __future__ import annotations

import pytest

from tests.fakes import FakeClock, FakeFetcher


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()
