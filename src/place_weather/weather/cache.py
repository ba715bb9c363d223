"""Cache store adapters and the weather cache key scheme.

The store only moves bytes; what is written is the JSON form of a
``WeatherSnapshot`` (always Celsius) and the store enforces the TTL.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple, Union

import redis.asyncio as redis

from place_weather.config import CACHE_KEY_PREFIX, REDIS_URL
from place_weather.weather.models import PlaceRequest, WeatherSnapshot

logger = logging.getLogger(__name__)


def cache_key(request: PlaceRequest) -> str:
    """Build the cache key for a place.

    Missing city or state leave an empty segment, so places that differ only
    in an omitted segment share a slot.
    """
    parts = [request.city, request.state, request.postal_code, request.country_code]
    return "/".join([CACHE_KEY_PREFIX, *("" if part is None else str(part) for part in parts)])


def serialize_snapshot(snapshot: WeatherSnapshot) -> bytes:
    """JSON form of a snapshot as stored in the cache."""
    return snapshot.model_dump_json().encode("utf-8")


class CacheStore(ABC):
    """Key-value store with per-entry expiry."""

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """
        Get a value by key

        Args:
            key: Cache key

        Returns:
            Stored bytes if present and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Union[bytes, str], ttl: int) -> None:
        """
        Store a value, replacing any previous one

        Args:
            key: Cache key
            value: Bytes (or text) to store
            ttl: Seconds until the entry expires
        """
        pass

    async def aclose(self) -> None:
        """Release any connection held by the store."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


class RedisCacheStore(CacheStore):
    """Cache store backed by Redis ``GET`` / ``SET EX``."""

    def __init__(self, redis_client: Optional[redis.Redis] = None, url: str = REDIS_URL):
        """Initialize the store.

        Args:
            redis_client: Optional Redis client. If None, creates one from url.
            url: Redis connection URL
        """
        self.redis_client = redis_client or redis.from_url(url)

    async def get(self, key: str) -> Optional[bytes]:
        value = await self.redis_client.get(key)
        if isinstance(value, str):
            return value.encode("utf-8")
        return value

    async def set(self, key: str, value: Union[bytes, str], ttl: int) -> None:
        await self.redis_client.set(key, value, ex=ttl)

    async def aclose(self) -> None:
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()


class MemoryCacheStore(CacheStore):
    """Process-local TTL store behaving like the Redis one.

    Args:
        time_func: Clock returning seconds, monotonic by default
    """

    def __init__(self, time_func: Callable[[], float] = time.monotonic):
        self._time_func = time_func
        self._storage: Dict[str, Tuple[float, Optional[bytes]]] = {}

    async def get(self, key: str) -> Optional[bytes]:
        item = self._storage.get(key)
        if not item:
            return None
        expires_at, value = item
        if expires_at <= self._time_func():
            self._storage.pop(key, None)
            logger.debug(f"Expired cache entry: {key}")
            return None
        return value

    async def set(self, key: str, value: Union[bytes, str, None], ttl: int) -> None:
        if isinstance(value, str):
            value = value.encode("utf-8")
        now = self._time_func()
        self._evict_expired(now)
        self._storage[key] = (now + ttl, value)

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._storage.items() if expires_at <= now]
        for key in expired:
            del self._storage[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired cache entries")

    def clear(self) -> None:
        self._storage.clear()


def create_cache_store(url: str = REDIS_URL) -> CacheStore:
    """Redis store when a URL is configured, in-memory store otherwise."""
    if url:
        logger.info(f"Using Redis cache at {url}")
        return RedisCacheStore(url=url)
    logger.info("REDIS_URL not set, using in-memory cache")
    return MemoryCacheStore()
