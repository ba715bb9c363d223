"""Shared fixtures for the place weather tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from place_weather.weather.cache import MemoryCacheStore
from place_weather.weather.client import OpenWeatherClient
from place_weather.weather.models import PlaceRequest
from place_weather.weather.service import WeatherService

DOWNLOAD_TIME = datetime(2023, 9, 1, 16, 0, 0, tzinfo=timezone.utc)
FIRST_DAY = datetime(2023, 10, 7, 19, 0, 0, tzinfo=timezone.utc)

# (min, max) in Kelvin for today and the next seven days
DAILY_KELVIN = [
    (294.61, 304.82),
    (295.77, 304.76),
    (292.9, 300.5),
    (290.95, 296.3),
    (291.47, 295.51),
    (290.68, 296.23),
    (291.02, 296.48),
    (290.71, 296.79),
]


class FakeClock:
    """Monotonic-style clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_payload(current_temp=303.82, daily=None):
    """One Call style payload with unix ``dt`` values."""
    if daily is None:
        daily = [
            {
                "dt": int((FIRST_DAY + timedelta(days=i)).timestamp()),
                "temp": {"day": high - 2, "min": low, "max": high},
            }
            for i, (low, high) in enumerate(DAILY_KELVIN)
        ]
    return {
        "lat": 32.6503,
        "lon": -116.9838,
        "timezone": "America/Los_Angeles",
        "current": {"dt": 1693584000, "temp": current_temp},
        "daily": daily,
    }


@pytest.fixture
def payload():
    return make_payload()


@pytest.fixture
def place_params():
    return {
        "latitude": 32.6502944,
        "longitude": -116.983784,
        "city": "Chula Vista",
        "state": "CA",
        "postal_code": "91913",
        "country_code": "US",
        "temp_unit": "fahrenheit",
    }


@pytest.fixture
def request_place(place_params):
    return PlaceRequest(**place_params)


@pytest.fixture
def cache_clock():
    return FakeClock()


@pytest.fixture
def cache_store(cache_clock):
    return MemoryCacheStore(time_func=cache_clock)


@pytest.fixture
def provider(payload):
    """Provider client stub counting calls to fetch_daily_forecast."""
    client = Mock(spec=OpenWeatherClient)
    client.api_key = "test_key"
    client.fetch_daily_forecast = AsyncMock(return_value=payload)
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def service(provider, cache_store):
    return WeatherService(
        client=provider,
        cache_store=cache_store,
        cache_ttl=1800,
        clock=lambda: DOWNLOAD_TIME
    )
