"""Data models for calendar feeds and resolved show schedules."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator


class EventKind(str, Enum):
    """Closed set of calendar event shapes."""

    PLAIN = "plain"
    RECURRING = "recurring"


class FeedSource(BaseModel):
    """Configuration for the calendar feed download."""

    url: str = Field(..., description="iCalendar feed URL")
    timeout: float = Field(default=30, description="HTTP timeout in seconds")
    custom_headers: dict[str, str] = Field(default_factory=dict, description="Custom HTTP headers")
    validate_ssl: bool = Field(default=True, description="Validate SSL certificates")


class OverrideInstance(BaseModel):
    """Replacement summary and/or start for one occurrence of a recurring event.

    ``recurrence_key`` is either the original occurrence date (``YYYY-MM-DD``)
    or the original occurrence instant in UTC (``YYYY-MM-DDTHH:MM:SSZ``).
    """

    model_config = ConfigDict(frozen=True)

    recurrence_key: str = Field(..., description="Original occurrence date or instant key")
    summary: Optional[str] = Field(default=None, description="Replacement summary")
    start: Optional[datetime] = Field(default=None, description="Replacement start instant")


class CalendarEvent(BaseModel):
    """One event from the parsed feed, either plain or recurring."""

    uid: str = Field(..., description="Event UID")
    summary: str = Field(default="", description="Event summary/title")
    start: datetime = Field(..., description="Start instant (timezone-aware)")
    kind: EventKind = Field(default=EventKind.PLAIN, description="Plain or recurring")
    rrule: Optional[str] = Field(default=None, description="RRULE value, recurring events only")
    overrides: dict[str, OverrideInstance] = Field(
        default_factory=dict, description="Per-occurrence overrides keyed by date or instant"
    )
    exdates: list[datetime] = Field(default_factory=list, description="Excluded instants")

    @model_validator(mode="after")
    def _check_kind(self) -> "CalendarEvent":
        if self.kind == EventKind.PLAIN:
            if self.rrule or self.overrides or self.exdates:
                raise ValueError("plain events cannot carry a recurrence rule, overrides or exclusions")
        elif not self.rrule:
            raise ValueError("recurring events require a recurrence rule")
        return self

    @property
    def is_recurring(self) -> bool:
        return self.kind == EventKind.RECURRING

    @property
    def has_overrides(self) -> bool:
        return bool(self.overrides)

    @property
    def has_exclusions(self) -> bool:
        return bool(self.exdates)


class Occurrence(BaseModel):
    """A concrete candidate instance produced during expansion."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    name: str
    event_uid: str


class Show(BaseModel):
    """One line of the resolved schedule."""

    model_config = ConfigDict(frozen=True)

    time: str = Field(..., description='Formatted start time, e.g. "10:00  AM/ET"')
    name: str = Field(..., description="Cleaned show name")


class ExpansionDiagnostic(BaseModel):
    """A recovered per-event failure reported alongside the schedule."""

    model_config = ConfigDict(frozen=True)

    event_uid: str
    summary: str = ""
    rrule: Optional[str] = None
    message: str


class Schedule(BaseModel):
    """The resolved, ordered show list for one target date.

    Date description fields are None only when the target date key is not a
    real calendar date (such a schedule never has shows).
    """

    model_config = ConfigDict(frozen=True)

    target_date: str
    weekday: Optional[str] = None
    month: Optional[str] = None
    day_number: Optional[int] = None
    year: Optional[int] = None
    shows: tuple[Show, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        """Mapping handed to downstream renderers."""
        return {
            "weekday": self.weekday,
            "month": self.month,
            "dayNumber": self.day_number,
            "year": self.year,
            "shows": [{"time": show.time, "name": show.name} for show in self.shows],
        }


class ScheduleStatus(str, Enum):
    """Outcome of a schedule resolution."""

    OK = "ok"
    NO_SHOWS_FOUND = "no_shows_found"


class ScheduleResult(BaseModel):
    """Schedule plus status and recovered diagnostics."""

    model_config = ConfigDict(frozen=True)

    schedule: Schedule
    status: ScheduleStatus = ScheduleStatus.OK
    diagnostics: tuple[ExpansionDiagnostic, ...] = ()

    @property
    def no_shows_found(self) -> bool:
        return self.status == ScheduleStatus.NO_SHOWS_FOUND

    @field_serializer("status")
    def serialize_status(self, status: ScheduleStatus) -> str:
        return status.value
