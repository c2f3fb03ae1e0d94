"""Core infrastructure: configuration, errors, logging, HTTP and timezone helpers."""

from .config_loader import Config, load_config
from .exceptions import (
    ConfigurationMissing,
    FeedFetchFailed,
    InvalidDateArgument,
    MalformedRecurrence,
    ShowBotError,
)

__all__ = [
    "Config",
    "ConfigurationMissing",
    "FeedFetchFailed",
    "InvalidDateArgument",
    "MalformedRecurrence",
    "ShowBotError",
    "load_config",
]
