"""HTTP client for the OpenWeatherMap One Call API."""

import logging
from typing import Any, Dict, Optional

import httpx

from place_weather.config import (
    OPENWEATHER_API_KEY, OPENWEATHER_API_URL, OPENWEATHER_EXCLUDE, REQUEST_TIMEOUT_SECONDS
)
from place_weather.weather.errors import ConnectionFailure, HttpError, ProviderFault

logger = logging.getLogger(__name__)


class OpenWeatherClient:
    """Async client for fetching daily forecasts from OpenWeatherMap.

    Each call is made once; retry policy belongs to the caller.
    """

    def __init__(
        self,
        api_key: str = OPENWEATHER_API_KEY,
        base_url: str = OPENWEATHER_API_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the weather client.

        Args:
            api_key: OpenWeatherMap API key (sent as ``appid``)
            base_url: One Call endpoint URL
            timeout: Request timeout in seconds
            http_client: Optional preconfigured httpx client (owned by the caller)
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=timeout
        )

    async def fetch_daily_forecast(self, lat: float, lon: float) -> Dict[str, Any]:
        """Fetch current conditions and the daily forecast for coordinates.

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees

        Returns:
            Decoded JSON body; temperatures are in Kelvin

        Raises:
            ConnectionFailure: If the provider is unreachable or the request times out
            HttpError: If the provider answers with a non-2xx status
            ProviderFault: If the body is not a JSON object or is a provider error
        """
        params = {
            "lat": lat,
            "lon": lon,
            "exclude": OPENWEATHER_EXCLUDE,
            "appid": self.api_key,
        }

        logger.info(f"Fetching forecast for lat={lat}, lon={lon}")

        try:
            response = await self.client.get(self.base_url, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout requesting OpenWeatherMap: {e!r}")
            raise ConnectionFailure(f"Request to weather provider timed out: {e!r}") from e
        except httpx.RequestError as e:
            logger.error(f"Request error to OpenWeatherMap: {e!r}")
            raise ConnectionFailure(f"Could not reach weather provider: {e!r}") from e

        if not response.is_success:
            message = self._error_message(response)
            logger.error(f"HTTP error from OpenWeatherMap: {response.status_code} - {message or response.text}")
            raise HttpError(response.status_code, message)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"OpenWeatherMap returned a body that is not JSON: {e}")
            raise ProviderFault("Weather provider returned a body that is not JSON") from e

        if not isinstance(data, dict):
            logger.error(f"OpenWeatherMap returned {type(data).__name__} instead of an object")
            raise ProviderFault("Weather provider returned an unexpected body")

        if "current" not in data and "cod" in data and "message" in data:
            logger.error(f"OpenWeatherMap fault: {data['cod']} - {data['message']}")
            raise ProviderFault(f"Weather provider fault {data['cod']}: {data['message']}")

        logger.info(f"Successfully fetched forecast with {len(data.get('daily') or [])} daily entries")
        return data

    @staticmethod
    def _error_message(response: httpx.Response) -> Optional[str]:
        """Pull the provider's ``message`` out of an error body, if it has one."""
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return None

    async def aclose(self):
        """Close the async HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
