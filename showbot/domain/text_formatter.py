"""Plain-text and JSON renderings of a ScheduleResult for the command line."""

import json
from typing import Any

from showbot.calendar.models import ScheduleResult


def render_text(result: ScheduleResult) -> str:
    """Human-readable schedule: a date header, then one line per show."""
    schedule = result.schedule
    if result.no_shows_found:
        return f"No shows found for {schedule.target_date}"

    lines = [f"{schedule.weekday} {schedule.month} {schedule.day_number}, {schedule.year}"]
    lines.extend(f"{show.time}  {show.name}" for show in schedule.shows)
    return "\n".join(lines)


def build_json_payload(result: ScheduleResult) -> dict[str, Any]:
    payload = result.schedule.to_payload()
    payload["targetDate"] = result.schedule.target_date
    payload["status"] = result.status.value
    payload["diagnostics"] = [d.model_dump() for d in result.diagnostics]
    return payload


def render_json(result: ScheduleResult) -> str:
    return json.dumps(build_json_payload(result), indent=2, ensure_ascii=False)
