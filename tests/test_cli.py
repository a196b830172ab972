"""Tests for the owm-weather command-line flow with a fake fetcher."""

from __future__ import annotations

import json
from typing import Any

import pytest
from tests.fakes import FakeFetcher, forecast_payload

from owm_weather_sdk import cli
from owm_weather_sdk.config import Settings
from owm_weather_sdk.exceptions import ConfigError, FetchError
from owm_weather_sdk.sdk import WeatherSDK


def _patch_sdk(monkeypatch: pytest.MonkeyPatch, fetcher: FakeFetcher, **settings: Any) -> None:
    loaded = Settings(_env_file=None, openweather_api_key="cli-key", **settings)
    monkeypatch.setattr(cli, "load_settings", lambda: loaded)

    def _factory(api_key: str, **kwargs: Any) -> WeatherSDK:
        assert api_key == "cli-key"
        return WeatherSDK(api_key, fetcher=fetcher, **kwargs)

    monkeypatch.setattr(cli, "WeatherSDK", _factory)


def test_json_output_for_each_city(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    fetcher = FakeFetcher()
    fetcher.payloads["Paris"] = forecast_payload(temp=18.0, name="Paris")
    _patch_sdk(monkeypatch, fetcher)

    exit_code = cli.main(["London", "Paris", "--json"])

    assert exit_code == 0
    out = capsys.readouterr().out
    documents = [json.loads(line) for line in out.splitlines() if line.strip()]
    assert [doc["query"] for doc in documents] == ["London", "Paris"]
    assert documents[1]["temperature"]["temp"] == 18.0


def test_repeat_rounds_are_served_from_cache(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    fetcher = FakeFetcher()
    _patch_sdk(monkeypatch, fetcher)

    exit_code = cli.main(["London", "--repeat", "3"])

    assert exit_code == 0
    assert fetcher.calls.count("London") == 1
    assert "round 3" in capsys.readouterr().out


def test_failed_city_sets_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    fetcher = FakeFetcher()
    fetcher.error = FetchError("HTTP 404", category="not_found", status_code=404)
    _patch_sdk(monkeypatch, fetcher)

    assert cli.main(["Nowhere"]) == 4


def test_missing_api_key_is_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "load_settings", lambda: Settings(_env_file=None, openweather_api_key=None))
    assert cli.main(["London"]) == 2


def test_invalid_settings_exit_with_config_code(monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken() -> Settings:
        raise ConfigError("Invalid configuration")

    monkeypatch.setattr(cli, "load_settings", _broken)
    assert cli.main(["London"]) == 2
