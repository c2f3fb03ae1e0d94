"""Assembles the ordered, de-duplicated show schedule for one day."""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo

from showbot.calendar.feed_fetcher import FeedFetcher
from showbot.calendar.feed_parser import FeedParser
from showbot.calendar.models import (
    CalendarEvent,
    ExpansionDiagnostic,
    FeedSource,
    Occurrence,
    Schedule,
    ScheduleResult,
    ScheduleStatus,
    Show,
)
from showbot.core.config_loader import Config
from showbot.core.exceptions import FeedFetchFailed
from showbot.core.timezone_utils import (
    describe_date,
    format_display_time,
    local_noon,
    now_utc,
    parse_date_key,
    resolve_timezone,
    zone_from_settings,
)
from showbot.domain.day_resolver import resolve_target_date
from showbot.domain.recurrence_expander import RecurrenceExpander

logger = logging.getLogger(__name__)

EventFeed = Union[Mapping[str, CalendarEvent], Iterable[CalendarEvent]]


def dedupe_key(
    occurrence: Occurrence, tz: Optional[ZoneInfo] = None, suffix: Optional[str] = None
) -> str:
    """Identity of a show line: formatted time plus cleaned name."""
    return f"{format_display_time(occurrence.start, tz, suffix)}|{occurrence.name}"


def dedupe_and_sort(
    occurrences: Iterable[Occurrence],
    tz: Optional[ZoneInfo] = None,
    suffix: Optional[str] = None,
) -> list[Occurrence]:
    """Drop later duplicates, then order by start instant.

    The sort is stable, so equal instants keep first-inserted order.
    """
    seen: set[str] = set()
    unique: list[Occurrence] = []
    for occurrence in occurrences:
        key = dedupe_key(occurrence, tz, suffix)
        if key in seen:
            continue
        seen.add(key)
        unique.append(occurrence)
    return sorted(unique, key=lambda occurrence: occurrence.start)


class ScheduleAssembler:
    """Runs recurrence expansion over a whole feed and builds the Schedule.

    The timezone and display suffix come from ``settings`` and stay with the
    instance, so assemblers for different zones can run side by side.
    """

    def __init__(self, settings: Any = None, expander: Optional[RecurrenceExpander] = None) -> None:
        self.tz, self.suffix = zone_from_settings(settings)
        self.expander = expander or RecurrenceExpander(settings, tz=self.tz)

    def assemble(
        self,
        events: EventFeed,
        token: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ScheduleResult:
        """Resolve the schedule for a day token against a parsed feed.

        Args:
            events: Parsed feed, either {uid: CalendarEvent} or an iterable of events
            token: Day token (None, ISO date, or weekday name)
            now: Current instant; defaults to timezone_utils.now_utc()

        Returns:
            ScheduleResult; status is NO_SHOWS_FOUND when no show matched

        Raises:
            InvalidDateArgument: If the token is not recognized
        """
        target_date = resolve_target_date(token, now or now_utc(), self.tz)
        return self.assemble_for_date(events, target_date)

    def assemble_for_date(self, events: EventFeed, target_date: str) -> ScheduleResult:
        """Build the schedule for an already-resolved ``YYYY-MM-DD`` key."""
        logger.info("Resolving schedule for %s...", target_date)

        try:
            parse_date_key(target_date)
        except ValueError:
            logger.warning("Target date %s is not a calendar date; no shows can match", target_date)
            return ScheduleResult(
                schedule=Schedule(target_date=target_date),
                status=ScheduleStatus.NO_SHOWS_FOUND,
            )

        event_list = list(events.values()) if isinstance(events, Mapping) else list(events)

        candidates: list[Occurrence] = []
        diagnostics: list[ExpansionDiagnostic] = []
        for event in event_list:
            outcome = self.expander.expand(event, target_date)
            candidates.extend(outcome.occurrences)
            if outcome.diagnostic is not None:
                diagnostics.append(outcome.diagnostic)

        ordered = dedupe_and_sort(candidates, self.tz, self.suffix)
        shows = tuple(
            Show(time=format_display_time(o.start, self.tz, self.suffix), name=o.name)
            for o in ordered
        )

        info = describe_date(local_noon(target_date, self.tz), self.tz)
        schedule = Schedule(
            target_date=target_date,
            weekday=info.weekday,
            month=info.month,
            day_number=info.day_number,
            year=info.year,
            shows=shows,
        )

        logger.info("Found %d shows for %s %s %d", len(shows), info.weekday, info.month, info.day_number)
        if diagnostics:
            logger.info("%d events skipped with malformed recurrence rules", len(diagnostics))

        return ScheduleResult(
            schedule=schedule,
            status=ScheduleStatus.OK if shows else ScheduleStatus.NO_SHOWS_FOUND,
            diagnostics=tuple(diagnostics),
        )


async def fetch_schedule(
    config: Config,
    token: Optional[str] = None,
    now: Optional[datetime] = None,
    fetcher: Optional[FeedFetcher] = None,
) -> ScheduleResult:
    """Fetch the feed once and resolve the schedule for a day token.

    The day token is resolved before any network activity so an invalid
    token fails fast. The configured timeout wraps only the fetch. The
    configured timezone applies to this call only.

    Raises:
        ConfigurationMissing: If no feed URL is configured
        ValueError: If the configured timezone is unknown
        InvalidDateArgument: If the token is not recognized
        FeedFetchFailed: If the feed cannot be downloaded or parsed
    """
    url = config.require_feed_url()
    tz = resolve_timezone(config.timezone)

    target_date = resolve_target_date(token, now or now_utc(), tz)
    source = FeedSource(
        url=url,
        timeout=config.fetch_timeout_seconds,
        custom_headers=config.feed_headers,
        validate_ssl=config.verify_ssl,
    )

    logger.info("Fetching calendar for %s...", target_date)
    owned = fetcher is None
    active = fetcher or FeedFetcher()
    try:
        content = await asyncio.wait_for(active.fetch(source), timeout=config.fetch_timeout_seconds)
    except asyncio.TimeoutError as e:
        raise FeedFetchFailed(
            f"Feed fetch exceeded {config.fetch_timeout_seconds}s", url=url
        ) from e
    finally:
        if owned:
            await active.close()

    events = FeedParser(default_timezone=tz).parse(content)
    return ScheduleAssembler(config).assemble_for_date(events, target_date)
