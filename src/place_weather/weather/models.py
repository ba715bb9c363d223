"""Data models for the place weather service.

The same models carry the acceptance rules for provider payloads and cache
entries, so a value that made it into a ``WeatherSnapshot`` is in range.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Union
from zoneinfo import ZoneInfo

import pycountry
from pydantic import (
    BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
)
from pydantic_core import PydanticCustomError

from place_weather.config import DISPLAY_TIMEZONE
from place_weather.weather.errors import CorruptCacheData, InvalidProviderData
from place_weather.weather.postal_codes import DEFAULT_POSTAL_CODE_CHECKER
from place_weather.weather.units import TempUnit, to_display_unit

logger = logging.getLogger(__name__)

# Sanity bounds, not physical limits: anything outside is treated as garbled data
MIN_CELSIUS = -100.0
MAX_CELSIUS = 100.0
MIN_KELVIN = 173.15
MAX_KELVIN = 373.15

FORECAST_DAYS = 7
PROVIDER_DAYS = FORECAST_DAYS + 1


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PlaceRequest(BaseModel):
    """A place to retrieve weather for, as supplied by the presentation layer.

    Validate with ``PlaceRequest.model_validate(data, context={...})`` to pass
    a custom ``postal_code_checker``; the regex checker is used otherwise.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")
    city: Optional[str] = Field(None, description="City name if known")
    state: Optional[str] = Field(None, description="State or region if known")
    country_code: str = Field(..., description="ISO 3166-1 alpha-2 country code")
    postal_code: Optional[str] = Field(None, validate_default=True, description="Postal code")
    temp_unit: TempUnit = Field(TempUnit.FAHRENHEIT, description="Display unit")

    @field_validator("country_code")
    @classmethod
    def check_country_code(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("country_blank", "can't be blank")
        code = value.upper()
        if len(code) != 2 or pycountry.countries.get(alpha_2=code) is None:
            raise PydanticCustomError("country_unknown", "is invalid")
        return code

    @field_validator("postal_code")
    @classmethod
    def check_postal_code(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if not value:
            raise PydanticCustomError("postal_code_blank", "can't be blank")
        country_code = info.data.get("country_code")
        if country_code:
            checker = (info.context or {}).get("postal_code_checker") or DEFAULT_POSTAL_CODE_CHECKER
            if not checker.is_valid(value, country_code):
                raise PydanticCustomError("postal_code_format", "is invalid for selected country")
        return value

    @field_validator("temp_unit", mode="before")
    @classmethod
    def parse_temp_unit_name(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return TempUnit.FAHRENHEIT
        if isinstance(value, str):
            value = value.strip().lower()
            if value not in (TempUnit.FAHRENHEIT.value, TempUnit.CELSIUS.value):
                raise PydanticCustomError("temp_unit", "must be 'fahrenheit' or 'celsius'")
        return value


class WeatherDay(BaseModel):
    """Low and high temperature for one day, stored in Celsius."""
    date: datetime = Field(..., description="Start of the forecast day")
    low_celsius: float = Field(..., ge=MIN_CELSIUS, le=MAX_CELSIUS)
    high_celsius: float = Field(..., ge=MIN_CELSIUS, le=MAX_CELSIUS)

    @field_validator("date")
    @classmethod
    def date_as_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def low(self, unit: Union[TempUnit, str, None] = TempUnit.FAHRENHEIT) -> Optional[int]:
        return to_display_unit(self.low_celsius, unit)

    def high(self, unit: Union[TempUnit, str, None] = TempUnit.FAHRENHEIT) -> Optional[int]:
        return to_display_unit(self.high_celsius, unit)

    def label(self, timezone_name: Optional[str] = None) -> str:
        """Short day label such as "Sat 07"."""
        date = self.date
        if timezone_name:
            date = date.astimezone(ZoneInfo(timezone_name))
        return date.strftime("%a %d")


class WeatherSnapshot(BaseModel):
    """Current temperature plus today and the next seven days.

    ``retrieved_from_cache`` describes where this copy came from and is
    never written to the cache.
    """
    current_temp_celsius: float = Field(..., ge=MIN_CELSIUS, le=MAX_CELSIUS)
    downloaded_at: datetime
    current_day: WeatherDay
    forecast_days: List[WeatherDay] = Field(..., min_length=FORECAST_DAYS, max_length=FORECAST_DAYS)
    retrieved_from_cache: bool = Field(False, exclude=True)

    @field_validator("downloaded_at")
    @classmethod
    def downloaded_at_as_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @property
    def days(self) -> List[WeatherDay]:
        """Today followed by the forecast days."""
        return [self.current_day, *self.forecast_days]

    def current_temp(self, unit: Union[TempUnit, str, None] = TempUnit.FAHRENHEIT) -> Optional[int]:
        return to_display_unit(self.current_temp_celsius, unit)

    def downloaded_at_local(self, timezone_name: str = DISPLAY_TIMEZONE) -> str:
        """Download time of day in the given timezone, e.g. "9:00am PDT"."""
        local = self.downloaded_at.astimezone(ZoneInfo(timezone_name))
        hour = local.hour % 12 or 12
        meridiem = "am" if local.hour < 12 else "pm"
        return f"{hour}:{local.minute:02d}{meridiem} {local.tzname()}"

    def day(self, index: int) -> Optional[WeatherDay]:
        """Day by offset from today (0) to the last forecast day (7)."""
        days = self.days
        if index < 0 or index >= len(days):
            return None
        return days[index]


class OneCallTemperature(BaseModel):
    """Daily temperature block of the One Call API, in Kelvin."""
    min: float = Field(..., ge=MIN_KELVIN, le=MAX_KELVIN)
    max: float = Field(..., ge=MIN_KELVIN, le=MAX_KELVIN)


class OneCallDay(BaseModel):
    """Daily entry of the One Call API; ``dt`` is unix time or ISO-8601."""
    dt: datetime
    temp: OneCallTemperature

    @field_validator("dt")
    @classmethod
    def dt_as_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class OneCallCurrent(BaseModel):
    temp: float = Field(..., ge=MIN_KELVIN, le=MAX_KELVIN)


class OneCallResponse(BaseModel):
    """The part of a One Call API response this service relies on."""
    current: OneCallCurrent
    daily: List[OneCallDay]

    @field_validator("daily", mode="before")
    @classmethod
    def first_provider_days(cls, value: Any) -> Any:
        if not isinstance(value, list):
            raise PydanticCustomError("daily_type", "daily must be a list")
        if len(value) < PROVIDER_DAYS:
            raise PydanticCustomError(
                "daily_too_short",
                "daily must contain at least {expected} entries, got {actual}",
                {"expected": PROVIDER_DAYS, "actual": len(value)},
            )
        return value[:PROVIDER_DAYS]


def parse_provider_payload(data: Any) -> OneCallResponse:
    """Validate a raw One Call payload.

    Args:
        data: Decoded JSON body from the provider

    Returns:
        Parsed payload holding exactly the first eight days

    Raises:
        InvalidProviderData: If a required field is missing or out of range
    """
    try:
        return OneCallResponse.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Invalid weather provider data: {e}")
        raise InvalidProviderData(f"Invalid weather provider data: {e}") from e


def parse_cached_snapshot(raw: Union[bytes, str, None]) -> WeatherSnapshot:
    """Rebuild a snapshot from a cache entry.

    Args:
        raw: JSON text as read from the cache store

    Returns:
        Snapshot marked as retrieved from cache

    Raises:
        CorruptCacheData: If the entry is empty, not JSON or fails validation
    """
    if not raw:
        logger.warning("Cache entry is empty")
        raise CorruptCacheData("Cache entry is empty")
    try:
        snapshot = WeatherSnapshot.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Invalid cache data {raw!r}: {e}")
        raise CorruptCacheData(f"Invalid cache data: {e}") from e
    return snapshot.model_copy(update={"retrieved_from_cache": True})
