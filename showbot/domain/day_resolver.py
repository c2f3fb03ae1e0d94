"""Maps a user-supplied day token to a target date key in the fixed timezone."""

import logging
import re
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from showbot.core.exceptions import InvalidDateArgument
from showbot.core.timezone_utils import WEEKDAY_NAMES, get_fixed_timezone, to_fixed_zone_date_key

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _local_today(now: datetime, tz: Optional[ZoneInfo] = None):
    return now.astimezone(tz or get_fixed_timezone()).date()


def resolve_target_date(
    token: Optional[str], now: datetime, tz: Optional[ZoneInfo] = None
) -> str:
    """Resolve a day token to a ``YYYY-MM-DD`` key.

    Args:
        token: None/"" for today, an ISO date used verbatim, or a
               case-sensitive English weekday name
        now: The current instant; passed explicitly for determinism
        tz: Zone that decides what "today" is; defaults to the fixed timezone

    Returns:
        Target date key in the fixed timezone

    Raises:
        InvalidDateArgument: For any other token
    """
    if not token:
        return to_fixed_zone_date_key(now, tz)

    if ISO_DATE_RE.match(token):
        return token

    if token in WEEKDAY_NAMES:
        today = _local_today(now, tz)
        diff = (WEEKDAY_NAMES.index(token) - today.weekday() + 7) % 7
        target = today + timedelta(days=diff)
        logger.debug("Resolved %s to %s (+%d days)", token, target.isoformat(), diff)
        return target.isoformat()

    raise InvalidDateArgument(token)


def expand_relative_token(
    token: Optional[str], now: datetime, tz: Optional[ZoneInfo] = None
) -> Optional[str]:
    """Translate the CLI aliases ``today`` and ``tomorrow`` (any case).

    Other tokens are returned unchanged for resolve_target_date().
    """
    if token is None:
        return None

    lowered = token.strip().lower()
    if lowered == "today":
        return ""
    if lowered == "tomorrow":
        return (_local_today(now, tz) + timedelta(days=1)).isoformat()
    return token
