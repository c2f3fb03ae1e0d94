"""
Unit tests for showbot.domain.schedule_assembler.ScheduleAssembler

Covers:
- de-duplication by display time and cleaned name
- stable ordering by start instant
- date description fields and the no-shows status
- diagnostics collected from malformed recurrence rules
- per-assembler timezone and display suffix
- all-day and timed series bounded by a date-only UNTIL
"""

from collections.abc import Callable
from datetime import UTC, datetime
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from showbot.calendar.feed_parser import FeedParser
from showbot.calendar.models import CalendarEvent, Occurrence, ScheduleStatus
from showbot.core.exceptions import InvalidDateArgument
from showbot.core.timezone_utils import get_fixed_timezone, get_zone_suffix
from showbot.domain.schedule_assembler import ScheduleAssembler, dedupe_and_sort, dedupe_key

pytestmark = [pytest.mark.unit, pytest.mark.fast]

EASTERN = ZoneInfo("America/New_York")

MakeEvent = Callable[..., CalendarEvent]


def _occurrence(hour: int, name: str, minute: int = 0) -> Occurrence:
    return Occurrence(start=datetime(2025, 1, 25, hour, minute, tzinfo=EASTERN), name=name, event_uid=name)


def test_dedupe_key_when_occurrence_then_time_and_name() -> None:
    assert dedupe_key(_occurrence(10, "Deep Cuts")) == "10:00  AM/ET|Deep Cuts"


def test_dedupe_key_when_zone_and_suffix_given_then_used() -> None:
    key = dedupe_key(_occurrence(10, "Deep Cuts"), ZoneInfo("America/Los_Angeles"), "PT")
    assert key == "7:00  AM/PT|Deep Cuts"


def test_dedupe_and_sort_when_duplicates_then_first_kept_and_ordered() -> None:
    first = _occurrence(18, "Special")
    duplicate = Occurrence(start=first.start, name="Special", event_uid="other")
    ordered = dedupe_and_sort([first, _occurrence(10, "Deep Cuts"), duplicate])

    assert [o.name for o in ordered] == ["Deep Cuts", "Special"]
    assert ordered[1].event_uid == "Special"


def test_dedupe_and_sort_when_equal_instants_then_insertion_order_kept() -> None:
    ordered = dedupe_and_sort([_occurrence(12, "B Side"), _occurrence(12, "A Side")])
    assert [o.name for o in ordered] == ["B Side", "A Side"]


def test_dedupe_and_sort_when_same_name_different_time_then_both_kept() -> None:
    ordered = dedupe_and_sort([_occurrence(20, "Deep Cuts"), _occurrence(10, "Deep Cuts")])
    assert [o.start.hour for o in ordered] == [10, 20]


def test_assemble_for_date_when_weekly_show_then_schedule_populated(make_event: MakeEvent) -> None:
    event = make_event(summary="\U0001f3b5Deep Cuts", rrule="FREQ=WEEKLY;BYDAY=SA")
    result = ScheduleAssembler().assemble_for_date({event.uid: event}, "2025-06-07")

    assert result.status == ScheduleStatus.OK
    assert not result.no_shows_found
    schedule = result.schedule
    assert (schedule.weekday, schedule.month, schedule.day_number, schedule.year) == (
        "Saturday",
        "June",
        7,
        2025,
    )
    assert [(s.time, s.name) for s in schedule.shows] == [("10:00  AM/ET", "Deep Cuts")]


def test_assemble_for_date_when_events_out_of_order_then_sorted(make_event: MakeEvent) -> None:
    events = [
        make_event(uid="late", summary="Night Owls", start=datetime(2025, 1, 25, 22, 0, tzinfo=EASTERN)),
        make_event(uid="early", summary="Sunrise", start=datetime(2025, 1, 25, 6, 0, tzinfo=EASTERN)),
        make_event(uid="noon", summary="Lunch Beats", start=datetime(2025, 1, 25, 12, 0, tzinfo=EASTERN)),
    ]
    result = ScheduleAssembler().assemble_for_date(events, "2025-01-25")

    assert [s.name for s in result.schedule.shows] == ["Sunrise", "Lunch Beats", "Night Owls"]
    assert [s.time for s in result.schedule.shows] == ["6:00  AM/ET", "12:00  PM/ET", "10:00  PM/ET"]


def test_assemble_for_date_when_same_show_from_two_events_then_listed_once(make_event: MakeEvent) -> None:
    start = datetime(2025, 1, 25, 15, 0, tzinfo=UTC)
    events = [
        make_event(uid="a", summary="\U0001f3b5Deep Cuts", start=start),
        make_event(uid="b", summary="Deep Cuts", start=start),
    ]
    result = ScheduleAssembler().assemble_for_date(events, "2025-01-25")

    assert [(s.time, s.name) for s in result.schedule.shows] == [("10:00  AM/ET", "Deep Cuts")]


def test_assemble_for_date_when_only_restreams_then_no_shows_found(make_event: MakeEvent) -> None:
    event = make_event(summary="Restream: Deep Cuts", start=datetime(2025, 1, 25, 15, 0, tzinfo=UTC))
    result = ScheduleAssembler().assemble_for_date([event], "2025-01-25")

    assert result.status == ScheduleStatus.NO_SHOWS_FOUND
    assert result.no_shows_found
    assert result.schedule.shows == ()
    assert result.schedule.weekday == "Saturday"


def test_assemble_for_date_when_no_events_then_no_shows_found() -> None:
    result = ScheduleAssembler().assemble_for_date({}, "2025-01-25")
    assert result.no_shows_found
    assert result.diagnostics == ()


def test_assemble_for_date_when_date_key_not_a_date_then_no_shows_without_description(
    make_event: MakeEvent,
) -> None:
    result = ScheduleAssembler().assemble_for_date([make_event()], "2025-02-30")

    assert result.no_shows_found
    assert result.schedule.target_date == "2025-02-30"
    assert result.schedule.weekday is None
    assert result.schedule.year is None


def test_assemble_for_date_when_malformed_rule_then_other_events_survive(make_event: MakeEvent) -> None:
    events = [
        make_event(uid="broken", summary="Broken", rrule="FREQ=SOMETIMES"),
        make_event(uid="good", summary="Deep Cuts", rrule="FREQ=WEEKLY;BYDAY=SA"),
    ]
    result = ScheduleAssembler().assemble_for_date(events, "2025-01-25")

    assert [s.name for s in result.schedule.shows] == ["Deep Cuts"]
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].event_uid == "broken"


def test_assemble_when_weekday_token_then_resolved_against_now(make_event: MakeEvent) -> None:
    event = make_event(rrule="FREQ=WEEKLY;BYDAY=SA")
    # Wednesday 2025-01-22 noon Eastern
    now = datetime(2025, 1, 22, 17, 0, tzinfo=UTC)
    result = ScheduleAssembler().assemble([event], "Saturday", now)

    assert result.schedule.target_date == "2025-01-25"
    assert [s.name for s in result.schedule.shows] == ["Deep Cuts"]


def test_assemble_when_invalid_token_then_raises(make_event: MakeEvent) -> None:
    with pytest.raises(InvalidDateArgument):
        ScheduleAssembler().assemble([make_event()], "someday", datetime(2025, 1, 22, tzinfo=UTC))


def test_schedule_to_payload_when_assembled_then_downstream_shape(make_event: MakeEvent) -> None:
    event = make_event(summary="Deep Cuts", rrule="FREQ=WEEKLY;BYDAY=SA")
    payload = ScheduleAssembler().assemble_for_date([event], "2025-01-25").schedule.to_payload()

    assert payload == {
        "weekday": "Saturday",
        "month": "January",
        "dayNumber": 25,
        "year": 2025,
        "shows": [{"time": "10:00  AM/ET", "name": "Deep Cuts"}],
    }


def test_assembler_when_settings_name_zone_then_display_and_date_follow_it(
    make_event: MakeEvent,
) -> None:
    # 00:30 Eastern on Saturday is 21:30 Friday in Los Angeles
    event = make_event(summary="Night Owls", start=datetime(2025, 1, 25, 5, 30, tzinfo=UTC))
    pacific = ScheduleAssembler(SimpleNamespace(timezone="America/Los_Angeles", zone_suffix="PT"))

    result = pacific.assemble_for_date([event], "2025-01-24")

    assert [(s.time, s.name) for s in result.schedule.shows] == [("9:30  PM/PT", "Night Owls")]
    assert result.schedule.weekday == "Friday"
    assert get_fixed_timezone() == EASTERN
    assert get_zone_suffix() == "ET"

    eastern = ScheduleAssembler().assemble_for_date([event], "2025-01-25")
    assert [s.time for s in eastern.schedule.shows] == ["12:30  AM/ET"]


def test_assemble_when_assembler_zone_then_today_resolved_in_it(make_event: MakeEvent) -> None:
    event = make_event(summary="Late Show", start=datetime(2025, 1, 25, 3, 0, tzinfo=UTC))
    now = datetime(2025, 1, 25, 4, 0, tzinfo=UTC)

    result = ScheduleAssembler(SimpleNamespace(timezone="America/Los_Angeles")).assemble([event], None, now)

    assert result.schedule.target_date == "2025-01-24"
    assert [s.name for s in result.schedule.shows] == ["Late Show"]


def test_assemble_for_date_when_series_end_on_a_date_then_all_day_and_timed_listed(
    build_ics: Callable[..., str],
) -> None:
    ics = build_ics(
        [
            "UID:marathon@test",
            "DTSTART;VALUE=DATE:20250104",
            "RRULE:FREQ=WEEKLY;BYDAY=SA;UNTIL=20250301",
            "SUMMARY:Marathon Day",
        ],
        [
            "UID:deep-cuts@test",
            "DTSTART;TZID=America/New_York:20250104T100000",
            "RRULE:FREQ=WEEKLY;BYDAY=SA;UNTIL=20250301",
            "SUMMARY:Deep Cuts",
        ],
    )
    events = FeedParser().parse(ics)
    assembler = ScheduleAssembler()

    result = assembler.assemble_for_date(events, "2025-01-11")

    assert result.diagnostics == ()
    assert [(s.time, s.name) for s in result.schedule.shows] == [
        ("12:00  AM/ET", "Marathon Day"),
        ("10:00  AM/ET", "Deep Cuts"),
    ]
    assert [s.name for s in assembler.assemble_for_date(events, "2025-03-01").schedule.shows] == [
        "Marathon Day",
        "Deep Cuts",
    ]
    assert assembler.assemble_for_date(events, "2025-03-08").no_shows_found
