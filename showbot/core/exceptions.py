"""Exception hierarchy for showbot.

Argument-level and feed-level errors are fatal to a single schedule request.
Per-event recurrence failures are recovered inside the expander and reported
as diagnostics instead of propagating.
"""

from typing import Optional


class ShowBotError(Exception):
    """Base exception for all showbot errors."""


class ConfigurationMissing(ShowBotError):
    """A required setting (the feed location) is absent.

    Raised before any network activity so the caller can surface it immediately.
    """

    def __init__(self, setting: str, message: Optional[str] = None):
        super().__init__(message or f"{setting} not set in environment or config file")
        self.setting = setting


class InvalidDateArgument(ShowBotError, ValueError):
    """The day token is neither empty, an ISO date, nor a weekday name."""

    def __init__(self, token: str):
        super().__init__(f"Invalid date: {token}. Use YYYY-MM-DD or day name.")
        self.token = token


class FeedFetchFailed(ShowBotError):
    """The calendar feed could not be downloaded or parsed.

    Raised for timeouts, network errors, non-2xx responses, empty bodies and
    unparseable calendar text. There is no internal retry.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class MalformedRecurrence(ShowBotError):
    """A single event's recurrence rule could not be expanded.

    Never escapes the recurrence expander: the event is skipped and the
    failure is recorded as an ExpansionDiagnostic.
    """

    def __init__(self, event_uid: str, rrule: Optional[str], reason: str):
        super().__init__(f"Cannot expand RRULE {rrule!r} for event {event_uid}: {reason}")
        self.event_uid = event_uid
        self.rrule = rrule
        self.reason = reason
