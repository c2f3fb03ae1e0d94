"""iCalendar feed parsing into CalendarEvent records."""

import logging
from datetime import date, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from icalendar import Calendar, Event as ICalEvent

from showbot.calendar.models import CalendarEvent, EventKind, OverrideInstance
from showbot.core.exceptions import FeedFetchFailed
from showbot.core.timezone_utils import get_fixed_timezone, instant_key, local_midnight

logger = logging.getLogger(__name__)


class FeedParser:
    """Turns raw iCalendar text into a mapping of event UID to CalendarEvent.

    VEVENTs carrying a RECURRENCE-ID are folded into their recurring master
    as OverrideInstance entries, regardless of the order they appear in.
    """

    def __init__(self, default_timezone: Optional[ZoneInfo] = None) -> None:
        """Initialize parser.

        Args:
            default_timezone: Fixed zone of this run. All-day values start at
                              its midnight, and floating (naive) times use it
                              when the feed declares no X-WR-TIMEZONE.
                              Defaults to the module-level fixed zone.
        """
        self.default_timezone = default_timezone or get_fixed_timezone()

    def parse(self, ics_content: str) -> dict[str, CalendarEvent]:
        """Parse feed text.

        Args:
            ics_content: Raw iCalendar text

        Returns:
            Mapping of event identity to CalendarEvent

        Raises:
            FeedFetchFailed: If the text is not a parseable VCALENDAR
        """
        try:
            calendar = Calendar.from_ical(ics_content)
        except Exception as e:
            raise FeedFetchFailed(f"Failed to parse calendar feed: {e}") from e

        floating_tz = self._resolve_floating_timezone(calendar)

        masters: dict[str, dict[str, Any]] = {}
        pending_overrides: list[tuple[str, OverrideInstance]] = []

        for index, component in enumerate(calendar.walk("VEVENT")):
            uid = str(component.get("UID") or f"event-{index}")
            try:
                if component.get("RECURRENCE-ID") is not None:
                    pending_overrides.append((uid, self._parse_override(component, floating_tz)))
                    continue

                fields = self._parse_master(component, uid, floating_tz)
            except Exception as e:
                logger.warning("Skipping malformed VEVENT %s: %s", uid, e)
                continue

            if uid in masters:
                logger.debug("Duplicate VEVENT UID %s; keeping the later definition", uid)
            masters[uid] = fields

        events: dict[str, CalendarEvent] = {}
        for uid, override in pending_overrides:
            master = masters.get(uid)
            if master is not None and master["kind"] == EventKind.RECURRING:
                master["overrides"][override.recurrence_key] = override
                continue

            # Orphan override: no recurring master to attach to
            if override.start is None:
                logger.debug("Dropping orphan override %s#%s without start", uid, override.recurrence_key)
                continue
            events[f"{uid}#{override.recurrence_key}"] = CalendarEvent(
                uid=uid,
                summary=override.summary or "",
                start=override.start,
                kind=EventKind.PLAIN,
            )

        for uid, fields in masters.items():
            try:
                events[uid] = CalendarEvent(**fields)
            except ValueError as e:
                logger.warning("Skipping invalid event %s: %s", uid, e)

        logger.debug(
            "Parsed %d events (%d overrides) from feed", len(events), len(pending_overrides)
        )
        return events

    def _resolve_floating_timezone(self, calendar: Calendar) -> ZoneInfo:
        declared = calendar.get("X-WR-TIMEZONE")
        if declared:
            try:
                return ZoneInfo(str(declared))
            except Exception:
                logger.warning("Unknown X-WR-TIMEZONE %r; using fixed timezone", str(declared))
        return self.default_timezone

    def _parse_master(
        self, component: ICalEvent, uid: str, floating_tz: ZoneInfo
    ) -> dict[str, Any]:
        start = self._to_instant(component.decoded("DTSTART"), floating_tz)
        rrule_string = self._rrule_string(component.get("RRULE"))
        exdates = self._collect_exdates(component, floating_tz)

        if rrule_string is None and exdates:
            logger.debug("Ignoring EXDATE on non-recurring event %s", uid)
            exdates = []

        return {
            "uid": uid,
            "summary": str(component.get("SUMMARY", "")),
            "start": start,
            "kind": EventKind.RECURRING if rrule_string else EventKind.PLAIN,
            "rrule": rrule_string,
            "overrides": {},
            "exdates": exdates,
        }

    def _parse_override(self, component: ICalEvent, floating_tz: ZoneInfo) -> OverrideInstance:
        recurrence_id = component.decoded("RECURRENCE-ID")
        if isinstance(recurrence_id, datetime):
            key = instant_key(self._to_instant(recurrence_id, floating_tz))
        else:
            key = recurrence_id.isoformat()

        start = None
        if component.get("DTSTART") is not None:
            start = self._to_instant(component.decoded("DTSTART"), floating_tz)

        summary = component.get("SUMMARY")
        return OverrideInstance(
            recurrence_key=key,
            summary=str(summary) if summary is not None else None,
            start=start,
        )

    def _to_instant(self, value: Any, floating_tz: ZoneInfo) -> datetime:
        """Normalize a decoded DATE / DATE-TIME into an aware datetime."""
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=floating_tz)
            return value
        if isinstance(value, date):
            return local_midnight(value, self.default_timezone)
        raise ValueError(f"Unsupported date value: {value!r}")

    @staticmethod
    def _rrule_string(rrule_prop: Any) -> Optional[str]:
        if rrule_prop is None:
            return None
        if isinstance(rrule_prop, list):
            if len(rrule_prop) > 1:
                logger.warning("Multiple RRULE properties found; using the first")
            rrule_prop = rrule_prop[0]
        if hasattr(rrule_prop, "to_ical"):
            return rrule_prop.to_ical().decode("utf-8")
        return str(rrule_prop)

    def _collect_exdates(self, component: ICalEvent, floating_tz: ZoneInfo) -> list[datetime]:
        """Collect every EXDATE value, across repeated and comma-separated properties."""
        raw = component.get("EXDATE")
        if raw is None:
            return []
        props = raw if isinstance(raw, list) else [raw]

        exdates: list[datetime] = []
        for prop in props:
            for entry in getattr(prop, "dts", []):
                try:
                    exdates.append(self._to_instant(entry.dt, floating_tz))
                except ValueError as e:
                    logger.debug("Failed to parse EXDATE entry: %s", e)
        return exdates
