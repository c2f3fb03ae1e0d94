"""showbot.core.config_loader

Typed configuration for showbot.

- Reads an optional YAML config file (JSON is valid YAML, so both work).
- Layers environment values (including .env defaults) on top.
- Exposes a `Config` dataclass and a `load_config()` helper that accepts an
  optional path override.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .config_manager import ConfigManager
from .exceptions import ConfigurationMissing
from .timezone_utils import DEFAULT_FIXED_TIMEZONE, DEFAULT_ZONE_SUFFIX

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "showbot" / "config.yaml"

MIN_FETCH_TIMEOUT = 1
MAX_FETCH_TIMEOUT = 300

_FALSE_STRINGS = ("0", "false", "no", "off")


@dataclass
class Config:
    """Typed configuration for showbot.

    Fields:
        ical_url: calendar feed URL; required before fetching
        timezone: IANA name of the fixed display timezone
        zone_suffix: literal suffix appended to display times
        fetch_timeout_seconds: timeout wrapped around the single feed fetch (1..300)
        max_occurrences_per_rule: upper bound on RRULE occurrences inspected per event
        log_level: logging level name
        feed_headers: extra HTTP headers sent with the feed request
        verify_ssl: whether the feed server's TLS certificate is verified
    """

    ical_url: str | None = None
    timezone: str = DEFAULT_FIXED_TIMEZONE
    zone_suffix: str = DEFAULT_ZONE_SUFFIX
    fetch_timeout_seconds: int = 30
    max_occurrences_per_rule: int = 250
    log_level: str = "INFO"
    feed_headers: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int and fetch_timeout_seconds is
        clamped into 1..300, logging a warning whenever a coercion happens.
        The legacy key ``ics_url`` is accepted for ``ical_url``.
        """
        if data is None:
            data = {}

        ical_url = data.get("ical_url") if "ical_url" in data else data.get("ics_url")
        ical_url = str(ical_url).strip() if ical_url else None

        def _coerce_int(key: str, default: int) -> int:
            raw = data.get(key, default)
            try:
                return int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default

        timeout = _coerce_int("fetch_timeout_seconds", 30)
        if timeout < MIN_FETCH_TIMEOUT:
            logger.warning("fetch_timeout_seconds %d below minimum; coercing to %d", timeout, MIN_FETCH_TIMEOUT)
            timeout = MIN_FETCH_TIMEOUT
        elif timeout > MAX_FETCH_TIMEOUT:
            logger.warning("fetch_timeout_seconds %d above maximum; coercing to %d", timeout, MAX_FETCH_TIMEOUT)
            timeout = MAX_FETCH_TIMEOUT

        max_occurrences = _coerce_int("max_occurrences_per_rule", 250)
        if max_occurrences < 1:
            logger.warning("max_occurrences_per_rule %d invalid; using default 250", max_occurrences)
            max_occurrences = 250

        timezone = str(data.get("timezone") or DEFAULT_FIXED_TIMEZONE)
        zone_suffix = str(data.get("zone_suffix") or DEFAULT_ZONE_SUFFIX)

        log_level = data.get("log_level", "INFO")
        log_level = str(log_level).upper() if log_level is not None else "INFO"

        feed_headers = data.get("feed_headers") or {}
        if not isinstance(feed_headers, dict):
            logger.warning("Config feed_headers=%r is not a mapping; ignoring it", feed_headers)
            feed_headers = {}
        feed_headers = {str(k): str(v) for k, v in feed_headers.items()}

        verify_ssl = data.get("verify_ssl")
        if verify_ssl is None:
            verify_ssl = True
        elif isinstance(verify_ssl, str):
            verify_ssl = verify_ssl.strip().lower() not in _FALSE_STRINGS
        verify_ssl = bool(verify_ssl)
        if not verify_ssl:
            logger.warning("TLS certificate verification is disabled for the feed")

        return cls(
            ical_url=ical_url,
            timezone=timezone,
            zone_suffix=zone_suffix,
            fetch_timeout_seconds=timeout,
            max_occurrences_per_rule=max_occurrences,
            log_level=log_level,
            feed_headers=feed_headers,
            verify_ssl=verify_ssl,
        )

    def require_feed_url(self) -> str:
        """Return the feed URL or raise ConfigurationMissing."""
        if not self.ical_url:
            raise ConfigurationMissing("ICAL_URL")
        return self.ical_url


def _load_yaml(path: Path) -> Any:
    """Load a YAML (or JSON) document; empty files yield an empty mapping.

    Raises:
        ValueError: If the document is not valid YAML
    """
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        logger.warning("Config file %s is not valid YAML: %s", path, e)
        raise ValueError(f"Config file {path} is not valid YAML: {e}") from e
    if loaded is None:
        return {}
    return loaded


def load_config(path: str | Path | None = None, env_file: Path | None = None) -> Config:
    """Load configuration from file and environment.

    Args:
        path: Optional path to a YAML/JSON config file. Defaults to
              ~/.config/showbot/config.yaml.
        env_file: Optional .env file path (defaults to ./.env)

    Returns:
        Config instance. Environment values override file values.

    Behavior:
    - Missing file: file values are empty, defaults apply.
    - File that is not valid YAML, or whose top level is not a mapping:
      raises ValueError.
    - The feed URL is not required here; see Config.require_feed_url().
    """
    p = Path(path) if path else DEFAULT_CONFIG_PATH
    logger.debug("Attempting to load config from %s", p)

    raw: dict[str, Any] = {}
    if p.exists():
        loaded = _load_yaml(p)
        if not isinstance(loaded, dict):
            logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, loaded)
            raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004
        raw.update(loaded)
        logger.info("Loaded configuration from %s", p)
    else:
        logger.debug("Config file %s not found; using defaults", p)

    raw.update(ConfigManager(env_file).load_full_config())

    cfg = Config.from_dict(raw)
    logger.debug("Configuration values: %s", cfg)
    return cfg
