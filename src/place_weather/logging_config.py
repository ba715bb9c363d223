"""Centralized logging configuration."""

import logging

from place_weather.config import LOG_LEVEL


def configure_logging(level: str = LOG_LEVEL):
    """
    Configure a consistent logging format for the entire application.

    Args:
        level: Level name applied to the root logger and the library loggers
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # HTTP and cache client libraries log under their own names
    loggers_to_configure = [
        "httpx",
        "httpcore",
        "redis",
    ]

    for logger_name in loggers_to_configure:
        logger = logging.getLogger(logger_name)
        # httpcore is chatty at INFO
        logger.setLevel(logging.WARNING if logger_name == "httpcore" else level)

        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        # Don't propagate to avoid duplicate messages
        logger.propagate = False

        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(formatter)

        logger.addHandler(handler)
