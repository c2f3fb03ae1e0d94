"""Shared fixtures for showbot tests."""

from collections.abc import Callable, Generator
from datetime import UTC, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

import pytest

from showbot.calendar.models import CalendarEvent, EventKind, OverrideInstance

EASTERN = ZoneInfo("America/New_York")

SHOWBOT_ENV_VARS = (
    "ICAL_URL",
    "SHOWBOT_ICAL_URL",
    "SHOWBOT_TIMEZONE",
    "SHOWBOT_ZONE_SUFFIX",
    "SHOWBOT_FETCH_TIMEOUT",
    "SHOWBOT_MAX_OCCURRENCES",
    "SHOWBOT_LOG_LEVEL",
    "SHOWBOT_VERIFY_SSL",
    "SHOWBOT_DEBUG",
    "SHOWBOT_TEST_TIME",
)


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, Any, None]:
    """Remove showbot environment variables for the duration of each test.

    Setting then deleting registers every variable with monkeypatch, so values
    written later (e.g. by ConfigManager.load_env_file) are undone as well.
    """
    for name in SHOWBOT_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    yield


@pytest.fixture
def eastern() -> ZoneInfo:
    """The default fixed timezone."""
    return EASTERN


@pytest.fixture
def saturday_morning() -> datetime:
    """Saturday 2025-06-07 10:00 EDT as a UTC instant."""
    return datetime(2025, 6, 7, 14, 0, tzinfo=UTC)


@pytest.fixture
def make_event() -> Callable[..., CalendarEvent]:
    """Factory for CalendarEvent values with sensible defaults."""

    def _make(
        uid: str = "event-1",
        summary: str = "Deep Cuts",
        start: Optional[datetime] = None,
        rrule: Optional[str] = None,
        overrides: Optional[list[OverrideInstance]] = None,
        exdates: Optional[list[datetime]] = None,
    ) -> CalendarEvent:
        return CalendarEvent(
            uid=uid,
            summary=summary,
            start=start or datetime(2025, 1, 4, 10, 0, tzinfo=EASTERN),
            kind=EventKind.RECURRING if rrule else EventKind.PLAIN,
            rrule=rrule,
            overrides={o.recurrence_key: o for o in overrides or []},
            exdates=exdates or [],
        )

    return _make


def _vevent(lines: list[str]) -> str:
    return "\n".join(["BEGIN:VEVENT", *lines, "END:VEVENT"])


@pytest.fixture
def build_ics() -> Callable[..., str]:
    """Build a VCALENDAR document from lists of VEVENT property lines."""

    def _build(*vevents: list[str], timezone: Optional[str] = "America/New_York") -> str:
        header = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//showbot//tests//EN"]
        if timezone:
            header.append(f"X-WR-TIMEZONE:{timezone}")
        body = [_vevent(list(lines)) for lines in vevents]
        return "\n".join([*header, *body, "END:VCALENDAR"]) + "\n"

    return _build


@pytest.fixture
def station_feed(build_ics: Callable[..., str]) -> str:
    """A small realistic feed.

    - weekly "Deep Cuts" Saturdays 10:00 ET from 2025-01-04
    - Jan 11 excluded; Jan 18 moved to Friday Jan 24 20:00 ET
    - a restream one-off and a special broadcast on Saturday Jan 25
    """
    return build_ics(
        [
            "UID:deep-cuts@test",
            "DTSTART;TZID=America/New_York:20250104T100000",
            "DTEND;TZID=America/New_York:20250104T120000",
            "RRULE:FREQ=WEEKLY;BYDAY=SA",
            "EXDATE;TZID=America/New_York:20250111T100000",
            "SUMMARY:\U0001f3b5Deep Cuts",
        ],
        [
            "UID:deep-cuts@test",
            "RECURRENCE-ID;TZID=America/New_York:20250118T100000",
            "DTSTART;TZID=America/New_York:20250124T200000",
            "DTEND;TZID=America/New_York:20250124T220000",
            "SUMMARY:Deep Cuts (Rescheduled)",
        ],
        [
            "UID:restream@test",
            "DTSTART:20250125T190000Z",
            "SUMMARY:Weekly Restream of Deep Cuts",
        ],
        [
            "UID:special@test",
            "DTSTART:20250125T230000Z",
            "SUMMARY:Special Broadcast",
        ],
    )
