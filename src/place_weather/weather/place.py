"""Place validation and the place-level weather lookup."""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from place_weather.weather.errors import InvalidInput
from place_weather.weather.models import PlaceRequest
from place_weather.weather.postal_codes import PostalCodeChecker
from place_weather.weather.service import WeatherResult, WeatherService

logger = logging.getLogger(__name__)

WEATHER_UNAVAILABLE_MESSAGE = "could not be retrieved from weather service"


def validate_place(
    params: Mapping[str, Any],
    postal_code_checker: Optional[PostalCodeChecker] = None
) -> Tuple[Optional[PlaceRequest], Dict[str, List[str]]]:
    """
    Validate raw place parameters.

    Args:
        params: Field values, typically straight from a form or query string
        postal_code_checker: Postal code format collaborator (regex checker if None)

    Returns:
        Tuple of (request, errors). request is None when errors is non-empty;
        errors maps each failing field to its messages.
    """
    context = {"postal_code_checker": postal_code_checker} if postal_code_checker else None
    data = {field: value for field, value in params.items() if value is not None}
    try:
        return PlaceRequest.model_validate(data, context=context), {}
    except ValidationError as e:
        errors: Dict[str, List[str]] = defaultdict(list)
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "place"
            message = "can't be blank" if error["type"] == "missing" else error["msg"]
            errors[field].append(message)
        logger.info(f"Place validation failed: {dict(errors)}")
        return None, dict(errors)


class Place:
    """A place entered by a user, validated up front.

    Example usage:
        place = Place({"latitude": 32.65, "longitude": -116.98,
                       "postal_code": "91913", "country_code": "US"}, service)
        if await place.retrieve_weather():
            print(place.weather.current_temp(place.request.temp_unit))
        else:
            print(place.errors)
    """

    def __init__(
        self,
        params: Mapping[str, Any],
        service: WeatherService,
        postal_code_checker: Optional[PostalCodeChecker] = None
    ):
        self.params = dict(params)
        self.service = service
        self.request, self.errors = validate_place(self.params, postal_code_checker)
        self.weather: Optional[WeatherResult] = None

    def is_valid(self) -> bool:
        return self.request is not None

    async def retrieve_weather(self) -> bool:
        """Retrieve weather for this place.

        Safe to call again after a failure; the previous ``weather_data``
        error is dropped before retrying.

        Returns:
            True when a snapshot is available on ``self.weather``
        """
        self.errors.pop("weather_data", None)
        if not self.is_valid():
            self.weather = WeatherResult.unavailable(InvalidInput(self.errors))
            return False

        self.weather = await self.service.retrieve_weather(self.request)
        if not self.weather.ok:
            self.errors.setdefault("weather_data", []).append(WEATHER_UNAVAILABLE_MESSAGE)
        return self.weather.ok
