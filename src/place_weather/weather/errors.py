"""Errors raised while retrieving weather for a place.

All of them are absorbed by ``WeatherService.retrieve_weather`` and handed
to the caller as the ``error`` of an unavailable ``WeatherResult``.
"""

from typing import Dict, List, Optional


class WeatherError(Exception):
    """Base class for weather retrieval errors."""
    pass


class MissingInput(WeatherError):
    """Raised when a required request field or the API key is empty."""

    def __init__(self, fields: List[str]):
        self.fields = list(fields)
        super().__init__(f"Missing required input: {', '.join(self.fields)}")


class InvalidInput(WeatherError):
    """Raised when a place fails field validation."""

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        details = "; ".join(f"{field} {', '.join(messages)}" for field, messages in errors.items())
        super().__init__(f"Invalid place: {details}")


class ProviderError(WeatherError):
    """Base class for failed calls to the weather provider."""
    pass


class ProviderFault(ProviderError):
    """Raised when the provider answers with a structured error or an unusable body."""
    pass


class ConnectionFailure(ProviderError):
    """Raised when the provider cannot be reached or the request times out."""
    pass


class HttpError(ProviderError):
    """Raised when the provider answers with a non-2xx status."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        text = f"HTTP {status_code} from weather provider"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)


class CorruptCacheData(WeatherError):
    """Raised when a cache entry is missing, malformed or out of range."""
    pass


class InvalidProviderData(WeatherError):
    """Raised when the provider payload is malformed or out of the sane range."""
    pass
