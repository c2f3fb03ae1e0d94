"""Schedule resolution: day tokens, recurrence expansion and assembly."""

from .day_resolver import expand_relative_token, resolve_target_date
from .recurrence_expander import ExpansionOutcome, RecurrenceExpander, expansion_window
from .schedule_assembler import ScheduleAssembler, dedupe_and_sort, fetch_schedule
from .summary_cleaner import clean_summary, is_restream

__all__ = [
    "ExpansionOutcome",
    "RecurrenceExpander",
    "ScheduleAssembler",
    "clean_summary",
    "dedupe_and_sort",
    "expand_relative_token",
    "expansion_window",
    "fetch_schedule",
    "is_restream",
    "resolve_target_date",
]
