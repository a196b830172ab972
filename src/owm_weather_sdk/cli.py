"""Command-line tool: print cached OpenWeatherMap forecasts for one or more cities."""

from __future__ import annotations

import argparse
import json
import sys
import time
from datetime import UTC, datetime

from rich.console import Console
from rich.table import Table

from .config import Settings, load_settings
from .exceptions import ConfigError, WeatherSDKError
from .log_setup import setup_logger
from .sdk import WeatherSDK
from .weather.models import SimplifiedWeather


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse owm-weather CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Fetch OpenWeatherMap forecasts through the caching SDK."
    )
    parser.add_argument("cities", nargs="+", help="City names, e.g. London 'New York'.")
    parser.add_argument(
        "--json", action="store_true", help="Print one JSON object per line instead of a table."
    )
    parser.add_argument(
        "--repeat",
        type=int,
        default=1,
        help="Query every city this many times (later rounds are served from cache).",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=0.0,
        help="Seconds to sleep between rounds when --repeat > 1.",
    )
    return parser.parse_args(argv)


def _validate_cli_input(args: argparse.Namespace, settings: Settings) -> str:
    if args.repeat <= 0:
        raise ConfigError("--repeat must be > 0.")
    if args.interval < 0:
        raise ConfigError("--interval must be >= 0.")
    if not settings.openweather_api_key:
        raise ConfigError("OPENWEATHER_API_KEY is required to query the API.")
    return settings.openweather_api_key


def _format_time(epoch: int, offset_seconds: int = 0) -> str:
    if not epoch:
        return "-"
    return datetime.fromtimestamp(epoch + offset_seconds, tz=UTC).strftime("%Y-%m-%d %H:%M")


def _print_table(console: Console, rows: list[tuple[str, SimplifiedWeather]], round_no: int) -> None:
    table = Table(title=f"OpenWeatherMap forecast (round {round_no})")
    table.add_column("City", overflow="fold")
    table.add_column("Forecast (local)")
    table.add_column("Temp")
    table.add_column("Feels like")
    table.add_column("Wind")
    table.add_column("Conditions", overflow="fold")

    for city, weather in rows:
        conditions = (
            f"{weather.weather.main} ({weather.weather.description})"
            if weather.weather is not None and weather.weather.description
            else (weather.weather.main if weather.weather is not None else "-")
        )
        table.add_row(
            weather.name or city,
            _format_time(weather.forecast_time, weather.timezone),
            f"{weather.temperature.temp:g}",
            f"{weather.temperature.feels_like:g}",
            f"{weather.wind.speed:g}",
            conditions or "-",
        )
    console.print(table)


def main(argv: list[str] | None = None) -> int:
    """Run the forecast lookup flow."""
    args = parse_args(argv)
    console = Console()

    try:
        settings = load_settings()
    except ConfigError as exc:
        setup_logger().error("Configuration failure: %s", exc)
        return 2

    logger = setup_logger(level=settings.log_level)
    logger.info("Starting owm-weather with settings %s", json.dumps(settings.safe_summary()))

    try:
        api_key = _validate_cli_input(args, settings)
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2

    exit_code = 0
    try:
        with WeatherSDK(api_key, settings=settings, logger=logger) as sdk:
            for round_no in range(1, args.repeat + 1):
                if round_no > 1 and args.interval:
                    time.sleep(args.interval)
                rows: list[tuple[str, SimplifiedWeather]] = []
                for city in args.cities:
                    try:
                        outcome = sdk.lookup(city)
                        weather = outcome.unwrap()
                    except WeatherSDKError as exc:
                        exit_code = 4
                        logger.error("Forecast lookup for %s failed: %s", city, exc)
                        continue
                    logger.info("Forecast for %s served as %s", city, outcome.kind)
                    rows.append((city, weather))

                if args.json:
                    for city, weather in rows:
                        print(json.dumps({"query": city, **weather.to_dict()}))
                elif rows:
                    _print_table(console, rows, round_no)
    except WeatherSDKError as exc:
        exit_code = 4
        logger.error("Weather SDK failure: %s", exc)
    except Exception as exc:  # pragma: no cover - defensive catch for CLI runtime
        exit_code = 99
        logger.exception("Unexpected owm-weather failure: %s", exc)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
