"""Recurrence expansion of one calendar event against one target date."""

import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime, time, timedelta
from typing import Any, Optional
from zoneinfo import ZoneInfo

from dateutil.rrule import rrulestr

from showbot.calendar.models import CalendarEvent, ExpansionDiagnostic, Occurrence, OverrideInstance
from showbot.core.exceptions import MalformedRecurrence
from showbot.core.timezone_utils import (
    instant_key,
    parse_date_key,
    to_fixed_zone_date_key,
    zone_from_settings,
)
from showbot.domain.summary_cleaner import clean_summary

logger = logging.getLogger(__name__)

# 04:00 UTC precedes local midnight for any US zone offset in use (UTC-4..-5);
# 05:59:59 UTC on the next day follows local end-of-day. The window overshoots
# and the per-candidate date-key check narrows it back to the exact day.
WINDOW_START_UTC_HOUR = 4
WINDOW_END_UTC = (5, 59, 59)

# UNTIL given as a bare date or a floating date-time (no trailing Z)
_LOCAL_UNTIL_RE = re.compile(r"(?<![A-Z])UNTIL=(\d{8})(T\d{6})?(?=;|$)", re.IGNORECASE)


@dataclass
class RecurrenceExpanderConfig:
    """Settings for recurrence expansion."""

    max_occurrences_per_rule: int = 250

    @classmethod
    def from_settings(cls, settings: Any) -> "RecurrenceExpanderConfig":
        """Extract expansion settings from any config-like object."""
        return cls(
            max_occurrences_per_rule=getattr(settings, "max_occurrences_per_rule", 250),
        )


@dataclass
class ExpansionOutcome:
    """Occurrences for one event, plus a diagnostic if the event was skipped."""

    occurrences: list[Occurrence] = field(default_factory=list)
    diagnostic: Optional[ExpansionDiagnostic] = None


def expansion_window(target_date: str) -> tuple[datetime, datetime]:
    """UTC window guaranteed to cover ``target_date`` in the fixed timezone.

    Raises:
        ValueError: If target_date is not a real calendar date
    """
    day = parse_date_key(target_date)
    window_start = datetime(day.year, day.month, day.day, WINDOW_START_UTC_HOUR, tzinfo=UTC)
    next_day = day + timedelta(days=1)
    window_end = datetime(next_day.year, next_day.month, next_day.day, *WINDOW_END_UTC, tzinfo=UTC)
    return window_start, window_end


def normalize_until(rrule: str, start: datetime) -> str:
    """Rewrite a local UNTIL as a UTC instant in the event's own zone.

    dateutil only accepts a UTC UNTIL once DTSTART is timezone-aware. A bare
    date becomes 23:59:59 of that day, so the last day stays included. A
    floating date-time is read in the zone of ``start``.

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> start = datetime(2025, 1, 4, tzinfo=ZoneInfo("America/New_York"))
        >>> normalize_until("FREQ=WEEKLY;BYDAY=SA;UNTIL=20250301", start)
        'FREQ=WEEKLY;BYDAY=SA;UNTIL=20250302T045959Z'

    Raises:
        ValueError: If the UNTIL value is not a real date
    """
    match = _LOCAL_UNTIL_RE.search(rrule)
    if match is None or start.tzinfo is None:
        return rrule

    day = datetime.strptime(match.group(1), "%Y%m%d").date()
    if match.group(2):
        clock = datetime.strptime(match.group(2), "T%H%M%S").time()
    else:
        clock = time(23, 59, 59)
    until = datetime.combine(day, clock, tzinfo=start.tzinfo).astimezone(UTC)
    return rrule[: match.start(1)] + until.strftime("%Y%m%dT%H%M%SZ") + rrule[match.end() :]


def find_override(
    event: CalendarEvent, target_date: str, candidate: datetime
) -> Optional[OverrideInstance]:
    """Look up the override for one candidate occurrence.

    The date-keyed override is checked first; the instant-keyed one is used
    only when no override is keyed by the target date.
    """
    if not event.overrides:
        return None
    return event.overrides.get(target_date) or event.overrides.get(instant_key(candidate))


def is_excluded_on(
    event: CalendarEvent, target_date: str, tz: Optional[ZoneInfo] = None
) -> bool:
    """True if any exclusion falls on ``target_date``.

    Date-grained: one excluded instant suppresses every occurrence
    of the event on that date.
    """
    return any(to_fixed_zone_date_key(exdate, tz) == target_date for exdate in event.exdates)


class RecurrenceExpander:
    """Produces the occurrences of a single event that fall on a target date."""

    def __init__(self, settings: Any = None, tz: Optional[ZoneInfo] = None) -> None:
        """Initialize expander.

        Args:
            settings: Optional config object with max_occurrences_per_rule
                      and timezone
            tz: Zone for date membership; overrides settings.timezone
        """
        config = RecurrenceExpanderConfig.from_settings(settings)
        self.max_occurrences = config.max_occurrences_per_rule
        self.tz = tz or zone_from_settings(settings)[0]

    def expand(self, event: CalendarEvent, target_date: str) -> ExpansionOutcome:
        """Expand one event for one target date.

        Never raises for bad event data: a malformed recurrence rule yields an
        outcome carrying a diagnostic, and other per-event failures yield an
        empty outcome.

        Args:
            event: Parsed calendar event
            target_date: ``YYYY-MM-DD`` key in the fixed timezone

        Returns:
            ExpansionOutcome with zero or more occurrences
        """
        try:
            if event.is_recurring:
                return ExpansionOutcome(occurrences=self._expand_recurring(event, target_date))
            return ExpansionOutcome(occurrences=self._expand_plain(event, target_date))
        except MalformedRecurrence as e:
            logger.warning("Skipping event %s (%r): %s", event.uid, event.summary, e.reason)
            return ExpansionOutcome(
                diagnostic=ExpansionDiagnostic(
                    event_uid=event.uid,
                    summary=event.summary,
                    rrule=event.rrule,
                    message=str(e),
                )
            )
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Skipping event %s with bad data: %s", event.uid, e)
            return ExpansionOutcome()

    def _expand_plain(self, event: CalendarEvent, target_date: str) -> list[Occurrence]:
        occurrence = self._accept(event.uid, event.start, event.summary, target_date)
        return [occurrence] if occurrence else []

    def _expand_recurring(self, event: CalendarEvent, target_date: str) -> list[Occurrence]:
        occurrences: list[Occurrence] = []

        for candidate in self._candidates(event, target_date):
            summary = event.summary
            start = candidate

            override = find_override(event, target_date, candidate)
            if override is not None:
                summary = override.summary or summary
                start = override.start or start

            if event.has_exclusions and is_excluded_on(event, target_date, self.tz):
                logger.debug("Occurrence of %s excluded on %s", event.uid, target_date)
                continue

            occurrence = self._accept(event.uid, start, summary, target_date)
            if occurrence:
                occurrences.append(occurrence)

        # Overrides rescheduled onto the target date from another original date
        for override in event.overrides.values():
            if override.start is None:
                continue
            occurrence = self._accept(
                event.uid, override.start, override.summary or event.summary, target_date
            )
            if occurrence:
                occurrences.append(occurrence)

        return occurrences

    def _candidates(self, event: CalendarEvent, target_date: str) -> list[datetime]:
        """Expand the event's RRULE over the target date's window (both ends inclusive).

        Raises:
            MalformedRecurrence: If the rule cannot be parsed or iterated
        """
        window_start, window_end = expansion_window(target_date)
        try:
            rule = rrulestr(normalize_until(event.rrule, event.start), dtstart=event.start)
            candidates = []
            for occurrence in rule.xafter(window_start, inc=True):
                if occurrence > window_end:
                    break
                if len(candidates) >= self.max_occurrences:
                    logger.debug(
                        "Event %s limited to %d occurrences", event.uid, self.max_occurrences
                    )
                    break
                candidates.append(occurrence)
        except Exception as e:
            raise MalformedRecurrence(event.uid, event.rrule, str(e)) from e

        logger.debug("Event %s: %d candidates in window for %s", event.uid, len(candidates), target_date)
        return candidates

    def _accept(
        self, event_uid: str, start: datetime, summary: str, target_date: str
    ) -> Optional[Occurrence]:
        """Keep a candidate only if it falls on the target date and has a usable name."""
        if to_fixed_zone_date_key(start, self.tz) != target_date:
            return None
        name = clean_summary(summary)
        if not name:
            return None
        return Occurrence(start=start, name=name, event_uid=event_uid)
