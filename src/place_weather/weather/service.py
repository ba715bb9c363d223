"""Weather retrieval for a place: cache first, provider on a miss."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Union

import redis

from place_weather.config import CACHE_EXPIRE_SECONDS, DISPLAY_TIMEZONE
from place_weather.weather.cache import CacheStore, cache_key, create_cache_store, serialize_snapshot
from place_weather.weather.client import OpenWeatherClient
from place_weather.weather.errors import (
    CorruptCacheData, InvalidProviderData, MissingInput, ProviderError, WeatherError
)
from place_weather.weather.models import (
    OneCallResponse, PlaceRequest, WeatherDay, WeatherSnapshot,
    parse_cached_snapshot, parse_provider_payload
)
from place_weather.weather.units import TempUnit, kelvin_to_celsius

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("latitude", "longitude", "postal_code", "country_code")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RetrievalState(str, Enum):
    """Steps a retrieval passes through; READY and UNAVAILABLE are final."""
    START = "start"
    INPUTS_CHECKED = "inputs_checked"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    READY = "ready"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class WeatherResult:
    """Outcome of one retrieval: a snapshot, or the error that prevented one.

    The accessors mirror ``WeatherSnapshot`` and return None when the
    retrieval failed, so callers never see partial data.
    """
    state: RetrievalState
    snapshot: Optional[WeatherSnapshot] = None
    error: Optional[WeatherError] = None

    @classmethod
    def ready(cls, snapshot: WeatherSnapshot) -> "WeatherResult":
        return cls(state=RetrievalState.READY, snapshot=snapshot)

    @classmethod
    def unavailable(cls, error: WeatherError) -> "WeatherResult":
        return cls(state=RetrievalState.UNAVAILABLE, error=error)

    @property
    def ok(self) -> bool:
        return self.state is RetrievalState.READY and self.snapshot is not None

    @property
    def retrieved_from_cache(self) -> bool:
        return self.ok and self.snapshot.retrieved_from_cache

    def current_temp(self, unit: Union[TempUnit, str, None] = TempUnit.FAHRENHEIT) -> Optional[int]:
        return self.snapshot.current_temp(unit) if self.ok else None

    def downloaded_at_local(self, timezone_name: str = DISPLAY_TIMEZONE) -> Optional[str]:
        return self.snapshot.downloaded_at_local(timezone_name) if self.ok else None

    def day(self, index: int) -> Optional[WeatherDay]:
        return self.snapshot.day(index) if self.ok else None


class WeatherService:
    """Retrieves weather snapshots for places, backed by a shared cache."""

    def __init__(
        self,
        client: Optional[OpenWeatherClient] = None,
        cache_store: Optional[CacheStore] = None,
        cache_ttl: int = CACHE_EXPIRE_SECONDS,
        clock: Callable[[], datetime] = utc_now
    ):
        """Initialize the weather service.

        Args:
            client: Provider client instance (creates default if None)
            cache_store: Cache store (Redis or in-memory per config if None)
            cache_ttl: Seconds a fetched snapshot stays in the cache
            clock: Returns the aware "now" recorded as download time
        """
        self.client = client or OpenWeatherClient()
        self.cache_store = cache_store or create_cache_store()
        self.cache_ttl = cache_ttl
        self.clock = clock

    async def retrieve_weather(self, request: PlaceRequest) -> WeatherResult:
        """Get a weather snapshot for a place.

        Never raises: every failure is logged and returned as an
        unavailable result.

        Args:
            request: Validated place request

        Returns:
            WeatherResult holding the snapshot or the error
        """
        state = RetrievalState.START
        try:
            self._check_inputs(request)
            state = RetrievalState.INPUTS_CHECKED

            key = cache_key(request)
            snapshot = await self._read_cache(key)
            if snapshot is not None:
                state = RetrievalState.CACHE_HIT
                logger.info(f"Serving weather for {key} from cache")
                return WeatherResult.ready(snapshot)

            state = RetrievalState.CACHE_MISS
            snapshot = await self._fetch_snapshot(request.latitude, request.longitude)
            await self._write_cache(key, snapshot)
            return WeatherResult.ready(snapshot)

        except MissingInput as e:
            logger.warning(f"Not retrieving weather: {e}")
            return WeatherResult.unavailable(e)
        except ProviderError as e:
            logger.error(f"Weather provider call failed: {e}")
            return WeatherResult.unavailable(e)
        except InvalidProviderData as e:
            logger.warning(f"Discarding weather provider data: {e}")
            return WeatherResult.unavailable(e)
        except Exception as e:
            logger.exception(f"Unexpected error retrieving weather in state {state.value}: {e}")
            return WeatherResult.unavailable(WeatherError(f"Unexpected error: {e}"))

    def _check_inputs(self, request: PlaceRequest) -> None:
        """Fail fast, before any I/O, when a required value is empty."""
        missing = [
            field for field in REQUIRED_FIELDS
            if getattr(request, field, None) in (None, "")
        ]
        if not self.client.api_key:
            missing.append("api_key")
        if missing:
            raise MissingInput(missing)

    async def _read_cache(self, key: str) -> Optional[WeatherSnapshot]:
        """Return a valid cached snapshot, or None to fall through to the provider."""
        try:
            raw = await self.cache_store.get(key)
        except (redis.RedisError, OSError) as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

        if raw is None:
            return None

        try:
            return parse_cached_snapshot(raw)
        except CorruptCacheData as e:
            # The entry is overwritten by the fresh fetch that follows
            logger.warning(f"Bypassing corrupt cache entry {key}: {e}")
            return None

    async def _write_cache(self, key: str, snapshot: WeatherSnapshot) -> None:
        try:
            await self.cache_store.set(key, serialize_snapshot(snapshot), self.cache_ttl)
            logger.debug(f"Cached weather for {key} for {self.cache_ttl}s")
        except (redis.RedisError, OSError) as e:
            logger.warning(f"Failed to cache weather for {key}: {e}")

    async def _fetch_snapshot(self, lat: float, lon: float) -> WeatherSnapshot:
        raw_data = await self.client.fetch_daily_forecast(lat, lon)
        payload = parse_provider_payload(raw_data)
        return self._create_snapshot(payload)

    def _create_snapshot(self, payload: OneCallResponse) -> WeatherSnapshot:
        """Normalize a validated provider payload into a Celsius snapshot.

        Args:
            payload: Payload holding exactly eight daily entries

        Returns:
            Snapshot with today as current_day and the next seven as forecast_days
        """
        days = [
            WeatherDay(
                date=entry.dt,
                low_celsius=kelvin_to_celsius(entry.temp.min),
                high_celsius=kelvin_to_celsius(entry.temp.max)
            )
            for entry in payload.daily
        ]

        return WeatherSnapshot(
            current_temp_celsius=kelvin_to_celsius(payload.current.temp),
            downloaded_at=self.clock(),
            current_day=days[0],
            forecast_days=days[1:],
            retrieved_from_cache=False
        )

    async def aclose(self):
        """Close the provider client and the cache store."""
        try:
            await self.client.aclose()
        finally:
            await self.cache_store.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        try:
            await self.aclose()
        except Exception as e:
            logger.error(f"Error during weather service cleanup in __aexit__: {e}")
