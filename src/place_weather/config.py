"""Configuration settings for the place weather service."""

import os
from typing import Final
from dotenv import load_dotenv

load_dotenv()

# OpenWeatherMap configuration
OPENWEATHER_API_URL: str = os.getenv(
    "OPENWEATHER_API_URL", "https://api.openweathermap.org/data/3.0/onecall"
)
OPENWEATHER_API_KEY: str = os.getenv("OPENWEATHER_API_KEY", "")
OPENWEATHER_EXCLUDE: Final[str] = "minutely,hourly,alerts"
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))

# Cache configuration (empty REDIS_URL keeps the cache in process memory)
REDIS_URL: str = os.getenv("REDIS_URL", "")
CACHE_EXPIRE_SECONDS: int = int(os.getenv("CACHE_EXPIRE_SECONDS", "1800"))  # 30 minutes default
CACHE_KEY_PREFIX: Final[str] = "WEATHER"

# Display
DISPLAY_TIMEZONE: str = os.getenv("DISPLAY_TIMEZONE", "America/Los_Angeles")

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
