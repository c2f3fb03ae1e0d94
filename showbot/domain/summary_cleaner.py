"""Show name cleanup: restream filtering and emoji prefix stripping."""

import re

_RESTREAM_RE = re.compile(r"restream", re.IGNORECASE)

# Pictographic blocks plus the Unicode emoji components: ASCII digits, '#',
# '*', ZWJ, variation selectors, keycap, skin tones, regional indicators and
# tags. A name that starts with a number loses it, e.g. "24 Hour Party".
_EMOJI_CHARS = (
    "\u00a9\u00ae\u203c\u2049\u2122\u2139\u2194-\u2199\u21a9\u21aa"
    "\u231a\u231b\u2328\u23cf\u23e9-\u23f3\u23f8-\u23fa\u24c2"
    "\u25aa\u25ab\u25b6\u25c0\u25fb-\u25fe\u2600-\u27bf\u2934\u2935"
    "\u2b05-\u2b07\u2b1b\u2b1c\u2b50\u2b55\u3030\u303d\u3297\u3299"
    "0-9#*\u200d\u20e3\ufe0e\ufe0f"
    "\U0001f000-\U0001faff\U000e0020-\U000e007f"
)
_LEADING_EMOJI_RE = re.compile("^[" + _EMOJI_CHARS + r"\s]+")


def is_restream(summary: str) -> bool:
    """True when the summary mentions a restream anywhere, in any case."""
    return bool(_RESTREAM_RE.search(summary or ""))


def clean_summary(summary: str | None) -> str:
    """Return the display name for a summary, or "" if it should be dropped.

    Restreams are dropped entirely. Otherwise a leading run of emoji,
    emoji components and whitespace is removed and the result trimmed.
    Leading digits count as emoji components.

    Examples:
        >>> clean_summary("\U0001f3b5Deep Cuts")
        'Deep Cuts'
        >>> clean_summary("Weekly Restream of Deep Cuts")
        ''
        >>> clean_summary("24 Hour Party")
        'Hour Party'
    """
    if not summary:
        return ""
    if is_restream(summary):
        return ""
    return _LEADING_EMOJI_RE.sub("", summary).strip()
