"""
Unit tests for showbot.domain.summary_cleaner
"""

import pytest

from showbot.domain.summary_cleaner import clean_summary, is_restream

pytestmark = [pytest.mark.unit, pytest.mark.fast]


@pytest.mark.parametrize(
    ("summary", "expected"),
    [
        ("\U0001f3b5Deep Cuts", "Deep Cuts"),
        ("\U0001f503 Morning Mix", "Morning Mix"),
        ("\u2728\u2b50 Star Hour ", "Star Hour"),
        ("\u2600\ufe0f Sunny Side", "Sunny Side"),
        # Woman singer with skin tone, joined by ZWJ
        ("\U0001f469\U0001f3fd\u200d\U0001f3a4 Singer Hour", "Singer Hour"),
        ("\U0001f1fa\U0001f1f8 Anthem Hour", "Anthem Hour"),
        ("1\ufe0f\u20e3 Number One", "Number One"),
        ("   Padded Name   ", "Padded Name"),
    ],
)
def test_clean_summary_when_leading_emoji_then_stripped(summary: str, expected: str) -> None:
    assert clean_summary(summary) == expected


@pytest.mark.parametrize(
    ("summary", "expected"),
    [
        ("24 Hour Party", "Hour Party"),
        ("#1 Hits", "Hits"),
        ("*Starred* Session", "Starred* Session"),
        ("\U0001f3b5 2 Tone Tuesday", "Tone Tuesday"),
    ],
)
def test_clean_summary_when_leading_digits_or_keycap_symbols_then_stripped(
    summary: str, expected: str
) -> None:
    assert clean_summary(summary) == expected


@pytest.mark.parametrize(
    "summary",
    ["Deep \U0001f3b5 Cuts", "Jazz \u2728", "Top 40 Countdown", "Hits #1"],
)
def test_clean_summary_when_no_leading_emoji_then_only_trimmed(summary: str) -> None:
    assert clean_summary(summary) == summary


@pytest.mark.parametrize(
    "summary",
    [
        "Weekly Restream of Deep Cuts",
        "RESTREAM: Morning Mix",
        "\U0001f3b5 restreamed classics",
        "Deep Cuts (ReStream)",
    ],
)
def test_clean_summary_when_restream_then_dropped(summary: str) -> None:
    assert is_restream(summary)
    assert clean_summary(summary) == ""


@pytest.mark.parametrize("summary", [None, "", "   ", "\U0001f3b5", "\U0001f3b5 \u2728"])
def test_clean_summary_when_nothing_left_then_empty(summary: str | None) -> None:
    assert clean_summary(summary) == ""


def test_is_restream_when_plain_name_then_false() -> None:
    assert not is_restream("Deep Cuts")
    assert not is_restream("")
