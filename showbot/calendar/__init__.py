"""Calendar feed download, parsing and data models."""

from .feed_fetcher import FeedFetcher
from .feed_parser import FeedParser
from .models import (
    CalendarEvent,
    EventKind,
    ExpansionDiagnostic,
    FeedSource,
    Occurrence,
    OverrideInstance,
    Schedule,
    ScheduleResult,
    ScheduleStatus,
    Show,
)

__all__ = [
    "CalendarEvent",
    "EventKind",
    "ExpansionDiagnostic",
    "FeedFetcher",
    "FeedParser",
    "FeedSource",
    "Occurrence",
    "OverrideInstance",
    "Schedule",
    "ScheduleResult",
    "ScheduleStatus",
    "Show",
]
