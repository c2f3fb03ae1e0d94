"""Environment and .env configuration for showbot."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Environment variable names. ICAL_URL is the historical name; the prefixed
# variant is accepted as well.
ENV_ICAL_URL = "ICAL_URL"
ENV_ICAL_URL_PREFIXED = "SHOWBOT_ICAL_URL"
ENV_TIMEZONE = "SHOWBOT_TIMEZONE"
ENV_ZONE_SUFFIX = "SHOWBOT_ZONE_SUFFIX"
ENV_FETCH_TIMEOUT = "SHOWBOT_FETCH_TIMEOUT"
ENV_MAX_OCCURRENCES = "SHOWBOT_MAX_OCCURRENCES"
ENV_LOG_LEVEL = "SHOWBOT_LOG_LEVEL"
ENV_VERIFY_SSL = "SHOWBOT_VERIFY_SSL"


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file and return key-value pairs.

    Args:
        path: Path to .env file

    Returns:
        Dictionary of key-value pairs. Empty if the file doesn't exist or
        cannot be read.

    Note:
        - Skips empty lines and comments (lines starting with #)
        - Strips single and double quotes from values
        - Accepts an optional leading ``export``
    """
    if not path.exists():
        return {}

    result: dict[str, str] = {}

    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        logger.debug("Failed to read .env file (continuing): %s", path, exc_info=True)
        return result

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, val = line.split("=", 1)
        key = key.strip()
        if key.startswith("export "):
            key = key[len("export ") :].strip()
        val = val.strip().strip('"').strip("'")

        if key:
            result[key] = val

    return result


class ConfigManager:
    """Builds configuration values from environment variables and a .env file."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load the .env file into os.environ.

        Only sets variables that are not already present so the user's real
        environment always wins.

        Returns:
            Keys that were loaded from the .env file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []
        for key, val in parse_env_file(self.env_file_path).items():
            if key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))

        return set_keys

    def build_config_from_env(self) -> dict[str, Any]:
        """Build a configuration mapping from environment variables.

        Recognizes:
        - ICAL_URL or SHOWBOT_ICAL_URL -> 'ical_url'
        - SHOWBOT_TIMEZONE -> 'timezone'
        - SHOWBOT_ZONE_SUFFIX -> 'zone_suffix'
        - SHOWBOT_FETCH_TIMEOUT -> 'fetch_timeout_seconds'
        - SHOWBOT_MAX_OCCURRENCES -> 'max_occurrences_per_rule'
        - SHOWBOT_LOG_LEVEL -> 'log_level'
        - SHOWBOT_VERIFY_SSL -> 'verify_ssl'

        Numeric and boolean values are passed through as strings; Config.from_dict
        coerces them.
        """
        cfg: dict[str, Any] = {}

        ical_url = os.environ.get(ENV_ICAL_URL) or os.environ.get(ENV_ICAL_URL_PREFIXED)
        if ical_url:
            cfg["ical_url"] = ical_url

        mapping = {
            ENV_TIMEZONE: "timezone",
            ENV_ZONE_SUFFIX: "zone_suffix",
            ENV_FETCH_TIMEOUT: "fetch_timeout_seconds",
            ENV_MAX_OCCURRENCES: "max_occurrences_per_rule",
            ENV_LOG_LEVEL: "log_level",
            ENV_VERIFY_SSL: "verify_ssl",
        }
        for env_name, key in mapping.items():
            value = os.environ.get(env_name)
            if value:
                cfg[key] = value

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load the .env file, then build configuration from the environment."""
        self.load_env_file()
        return self.build_config_from_env()
