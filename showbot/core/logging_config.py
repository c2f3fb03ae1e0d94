"""
Central logging level configuration for showbot.

Suppresses verbose debug logs from third-party libraries (HTTP client,
calendar parser, event loop) while keeping showbot's own diagnostics.
"""

import logging
import os
from typing import Optional

# Third-party loggers that are noisy at DEBUG level
NOISY_LOGGERS: dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "asyncio": logging.WARNING,
    "icalendar": logging.INFO,
}

SHOWBOT_LOGGERS = [
    "showbot",
    "showbot.calendar.feed_fetcher",
    "showbot.calendar.feed_parser",
    "showbot.domain.recurrence_expander",
    "showbot.domain.schedule_assembler",
]


def configure_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logger levels for showbot.

    Args:
        debug_mode: Whether to enable debug logging for showbot modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        SHOWBOT_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        SHOWBOT_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("SHOWBOT_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("SHOWBOT_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    logger_config = dict(NOISY_LOGGERS)
    showbot_level = logging.DEBUG if final_debug else logging.INFO
    for module in SHOWBOT_LOGGERS:
        logger_config[module] = showbot_level

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    if final_debug:
        root_logger.debug("Debug logging enabled for showbot modules; third-party debug logs suppressed")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}

    for logger_name in ["showbot", *NOISY_LOGGERS]:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)

    return status
