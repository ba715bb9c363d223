"""Command line entry point: look up the weather for one place."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from place_weather.config import DISPLAY_TIMEZONE
from place_weather.logging_config import configure_logging
from place_weather.weather.place import Place
from place_weather.weather.service import WeatherService

logger = logging.getLogger(__name__)

EXIT_INVALID_PLACE = 1
EXIT_UNAVAILABLE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="place-weather",
        description="Current temperature and 7-day forecast for a place"
    )
    parser.add_argument("--lat", dest="latitude", help="Latitude in decimal degrees")
    parser.add_argument("--lon", dest="longitude", help="Longitude in decimal degrees")
    parser.add_argument("--postal-code", dest="postal_code", help="Postal code")
    parser.add_argument("--country", dest="country_code", help="ISO 3166-1 alpha-2 country code")
    parser.add_argument("--city", help="City name")
    parser.add_argument("--state", help="State or region")
    parser.add_argument("--unit", dest="temp_unit", default="fahrenheit", help="fahrenheit or celsius")
    parser.add_argument("--timezone", default=DISPLAY_TIMEZONE, help="Timezone for the download time")
    return parser


def format_weather(place: Place, timezone_name: str) -> List[str]:
    """Render a retrieved place as output lines."""
    weather = place.weather
    unit = place.request.temp_unit
    symbol = "°C" if unit.value == "celsius" else "°F"
    source = "cache" if weather.retrieved_from_cache else "provider"

    lines = [
        f"Current: {weather.current_temp(unit)}{symbol}",
        f"Downloaded: {weather.downloaded_at_local(timezone_name)} ({source})",
    ]
    index = 0
    day = weather.day(index)
    while day is not None:
        lines.append(f"{day.label(timezone_name)}: low {day.low(unit)}{symbol}, high {day.high(unit)}{symbol}")
        index += 1
        day = weather.day(index)
    return lines


async def run(args: argparse.Namespace) -> int:
    params = {
        "latitude": args.latitude,
        "longitude": args.longitude,
        "postal_code": args.postal_code,
        "country_code": args.country_code,
        "city": args.city,
        "state": args.state,
        "temp_unit": args.temp_unit,
    }

    async with WeatherService() as service:
        place = Place(params, service)
        if not place.is_valid():
            for field, messages in place.errors.items():
                print(f"{field} {', '.join(messages)}", file=sys.stderr)
            return EXIT_INVALID_PLACE

        if not await place.retrieve_weather():
            print(f"Weather {', '.join(place.errors['weather_data'])}", file=sys.stderr)
            return EXIT_UNAVAILABLE

        for line in format_weather(place, args.timezone):
            print(line)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    configure_logging()
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
