"""Fixed-timezone date utilities for showbot.

Every display string and every date-membership decision is made in one fixed
timezone (US Eastern by default), independent of the server locale. Helpers
take the zone as an optional argument; the module default never changes at
runtime. All conversions go through zoneinfo so DST transitions are honored.
"""

from __future__ import annotations

import datetime
import logging
import os
from typing import Any, NamedTuple, Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

DEFAULT_FIXED_TIMEZONE = "America/New_York"
DEFAULT_ZONE_SUFFIX = "ET"

# Indexed by datetime.date.weekday(); independent of the process locale.
WEEKDAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# Process defaults. Callers needing another zone pass it per call; see
# zone_from_settings().
_fixed_timezone: ZoneInfo = ZoneInfo(DEFAULT_FIXED_TIMEZONE)
_zone_suffix: str = DEFAULT_ZONE_SUFFIX


class DateDescription(NamedTuple):
    """Long-form calendar description of a date in the fixed timezone."""

    weekday: str
    month: str
    day_number: int
    year: int


def get_fixed_timezone() -> ZoneInfo:
    """Return the default timezone for display and date-membership decisions."""
    return _fixed_timezone


def get_zone_suffix() -> str:
    """Return the default literal suffix appended to display times (e.g. ``ET``)."""
    return _zone_suffix


def resolve_timezone(name: str) -> ZoneInfo:
    """Look up an IANA timezone identifier.

    Raises:
        ValueError: If the timezone identifier is unknown
    """
    try:
        return ZoneInfo(name)
    except Exception as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def zone_from_settings(settings: Any) -> tuple[ZoneInfo, str]:
    """Timezone and display suffix named by a config-like object.

    Falls back to the process defaults for attributes the object does not
    carry, so a bare settings object keeps the module-level zone.

    Raises:
        ValueError: If the configured timezone identifier is unknown
    """
    name = getattr(settings, "timezone", None)
    tz = resolve_timezone(name) if name else _fixed_timezone
    suffix = getattr(settings, "zone_suffix", None) or _zone_suffix
    return tz, suffix


def ensure_timezone_aware(dt: datetime.datetime) -> datetime.datetime:
    """Return ``dt`` unchanged if aware, otherwise treat it as UTC."""
    if not isinstance(dt, datetime.datetime):
        raise TypeError(f"Expected datetime, got {type(dt).__name__}")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=datetime.UTC)
    return dt


def _to_fixed_zone(instant: datetime.datetime, tz: Optional[ZoneInfo]) -> datetime.datetime:
    return ensure_timezone_aware(instant).astimezone(tz or _fixed_timezone)


def to_fixed_zone_date_key(
    instant: datetime.datetime, tz: Optional[ZoneInfo] = None
) -> str:
    """Format an instant as ``YYYY-MM-DD`` in the fixed timezone.

    Args:
        instant: Timezone-aware datetime (naive values are treated as UTC)
        tz: Optional timezone override

    Returns:
        Calendar date key in the fixed timezone
    """
    return _to_fixed_zone(instant, tz).strftime("%Y-%m-%d")


def format_display_time(
    instant: datetime.datetime,
    tz: Optional[ZoneInfo] = None,
    suffix: Optional[str] = None,
) -> str:
    """Render an instant as ``"H:MM  AM/ET"`` in the fixed timezone.

    The hour is unpadded (1-12), the minute always has two digits, and two
    spaces separate the clock time from the period.

    Examples:
        >>> from datetime import datetime, UTC
        >>> format_display_time(datetime(2025, 6, 7, 14, 0, tzinfo=UTC))
        '10:00  AM/ET'
        >>> format_display_time(datetime(2025, 1, 11, 5, 5, tzinfo=UTC))
        '12:05  AM/ET'
    """
    local = _to_fixed_zone(instant, tz)
    hour = local.hour % 12 or 12
    period = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d}  {period}/{suffix or _zone_suffix}"


def describe_date(
    instant: datetime.datetime, tz: Optional[ZoneInfo] = None
) -> DateDescription:
    """Describe the fixed-timezone calendar date of an instant.

    Returns:
        DateDescription with long weekday and month names plus numeric day/year
    """
    local = _to_fixed_zone(instant, tz)
    return DateDescription(
        weekday=WEEKDAY_NAMES[local.weekday()],
        month=MONTH_NAMES[local.month - 1],
        day_number=local.day,
        year=local.year,
    )


def parse_date_key(date_key: str) -> datetime.date:
    """Parse a ``YYYY-MM-DD`` key into a date.

    Raises:
        ValueError: If the key is not a real calendar date
    """
    return datetime.date.fromisoformat(date_key)


def local_noon(date_key: str, tz: Optional[ZoneInfo] = None) -> datetime.datetime:
    """Return noon on ``date_key`` in the fixed timezone.

    Noon is never ambiguous or skipped by a DST transition, unlike midnight.
    """
    day = parse_date_key(date_key)
    return datetime.datetime.combine(day, datetime.time(12, 0), tzinfo=tz or _fixed_timezone)


def local_midnight(day: datetime.date, tz: Optional[ZoneInfo] = None) -> datetime.datetime:
    """Return the start of ``day`` in the fixed timezone (used for all-day values)."""
    return datetime.datetime.combine(day, datetime.time(0, 0), tzinfo=tz or _fixed_timezone)


def instant_key(instant: datetime.datetime) -> str:
    """Canonical UTC key for an instant, used to index per-instance overrides."""
    return ensure_timezone_aware(instant).astimezone(datetime.UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class TimeProvider:
    """Provides the current instant with a test override hook."""

    ENV_VAR = "SHOWBOT_TEST_TIME"

    def now_utc(self) -> datetime.datetime:
        """Return the current UTC time with tzinfo.

        Can be overridden via the SHOWBOT_TEST_TIME environment variable
        (ISO 8601, e.g. "2025-06-07T09:00:00-04:00"). Naive override values
        are assumed to be UTC.
        """
        test_time = os.environ.get(self.ENV_VAR)
        if test_time:
            try:
                from dateutil import parser as date_parser

                dt = date_parser.isoparse(test_time)
                if dt.tzinfo is not None:
                    return dt.astimezone(datetime.UTC)
                return dt.replace(tzinfo=datetime.UTC)
            except Exception as e:
                logger.warning("Failed to parse %s=%r: %s", self.ENV_VAR, test_time, e)

        return datetime.datetime.now(datetime.UTC)


_time_provider = TimeProvider()


def now_utc() -> datetime.datetime:
    """Get current UTC time (convenience function)."""
    return _time_provider.now_utc()
