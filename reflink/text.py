"""String helpers for building links and footnotes."""

import re
from datetime import datetime, timezone
from urllib.parse import quote

_MARKDOWN_ESCAPE = re.compile(r"([\\`*_{}\[\]()#+\-.!|<>~])")
_SUPERSCRIPTS = str.maketrans("0123456789", "⁰¹²³⁴⁵⁶⁷⁸⁹")

# Characters encodeURI leaves alone, plus % so pre-encoded sequences survive
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#%"

_UNITS = (
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("week", 7 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
)


def escape_markdown(s: str) -> str:
    """Backslash-escape markdown control characters."""
    return _MARKDOWN_ESCAPE.sub(r"\\\1", s)


def encode_uri(url: str) -> str:
    """Percent-encode a URL the way a browser's ``encodeURI`` does."""
    return quote(url, safe=_URI_SAFE)


def get_superscript(n: int) -> str:
    return str(n).translate(_SUPERSCRIPTS)


def capitalize(s: str) -> str:
    return s[:1].upper() + s[1:]


def from_now(date: datetime, now: datetime | None = None) -> str:
    """Describe how long ago ``date`` was, e.g. ``"3 days ago"``.

    Args:
        date: The moment to describe (naive values are treated as UTC)
        now: Reference time (defaults to the current time)

    Returns:
        A short relative description
    """
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = int((now - date).total_seconds())
    future = seconds < 0
    seconds = abs(seconds)
    for unit, size in _UNITS:
        count = seconds // size
        if count >= 1:
            label = f"{count} {unit}{'s' if count != 1 else ''}"
            return f"in {label}" if future else f"{label} ago"
    return "just now"
