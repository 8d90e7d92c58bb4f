"""Timestamp parsing for exported chat transcripts.

WhatsApp exports prefix each message with a date/time token whose shape
depends on the phone's locale, e.g.::

    [3/15/24, 10:30:15 PM] Alice: ...
    3/15/24, 22:30 - Bob: ...

Tokens are converted to a canonical UTC instant.  The wall-clock values in
the export are taken as UTC; the device timezone is not recoverable from the
file.  The canonical text form is ISO-8601 with milliseconds and a ``Z``
suffix, and it is itself a recognised pattern so normalised content can be
re-read by the same parser.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime

# Horizontal whitespace only; a token must never swallow a line break.
_HSPACE = r"[^\S\r\n]"

_TWELVE_HOUR_RE = re.compile(
    r"(\d{1,2})/(\d{1,2})/(\d{2,4}),\s(\d{1,2}):(\d{2}):?(\d{2})?(?:\s?(AM|PM)(?![A-Za-z]))?",
    re.IGNORECASE,
)
_TWENTY_FOUR_HOUR_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{2,4}),\s(\d{2}):(\d{2})")
_CANONICAL_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,6}))?)?Z?"
)

# Raw export token as it appears inside a line (any of / . - as separator).
# A meridiem only counts when no letter follows it ("10:30 Amsterdam").
EXPORT_TOKEN_PATTERN = (
    r"\[?\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4},"
    + _HSPACE
    + r"\d{1,2}:\d{2}(?::\d{2})?(?:"
    + _HSPACE
    + r"?[AaPp][Mm](?![A-Za-z]))?\]?"
)
CANONICAL_TOKEN_PATTERN = r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{1,6})?Z"

_LINE_TOKEN_RE = re.compile(f"{CANONICAL_TOKEN_PATTERN}|{EXPORT_TOKEN_PATTERN}")


def _expand_year(year: str) -> int:
    """Two-digit years are always 2000+YY; three-digit years are rejected."""
    if len(year) == 2:
        return 2000 + int(year)
    if len(year) != 4:
        raise ValueError(f"unsupported year: {year!r}")
    return int(year)


def _from_twelve_hour(match: re.Match[str]) -> datetime:
    month, day, year, hours, minutes, seconds, period = match.groups()
    hour = int(hours)
    if period:
        period = period.upper()
        if period == "PM":
            hour = 12 if hour == 12 else hour + 12
        else:
            hour = 0 if hour == 12 else hour
    return datetime(
        _expand_year(year),
        int(month),
        int(day),
        hour,
        int(minutes),
        int(seconds or 0),
        tzinfo=UTC,
    )


def _from_twenty_four_hour(match: re.Match[str]) -> datetime:
    month, day, year, hours, minutes = match.groups()
    return datetime(
        _expand_year(year), int(month), int(day), int(hours), int(minutes), tzinfo=UTC
    )


def _from_canonical(match: re.Match[str]) -> datetime:
    year, month, day, hours, minutes, seconds, fraction = match.groups()
    microsecond = int((fraction or "0").ljust(6, "0"))
    return datetime(
        int(year),
        int(month),
        int(day),
        int(hours),
        int(minutes),
        int(seconds or 0),
        microsecond,
        tzinfo=UTC,
    )


# Order matters: the 12-hour pattern also matches 24-hour strings, and must win
# whenever a meridiem is present.
_PATTERNS: list[tuple[re.Pattern[str], Callable[[re.Match[str]], datetime]]] = [
    (_TWELVE_HOUR_RE, _from_twelve_hour),
    (_TWENTY_FOUR_HOUR_RE, _from_twenty_four_hour),
    (_CANONICAL_RE, _from_canonical),
]


def parse_timestamp(token: str) -> datetime | None:
    """Parse a chat-export timestamp token into an aware UTC datetime.

    Args:
        token: The raw token, with or without enclosing brackets.

    Returns:
        The parsed instant, or ``None`` if no pattern matches or the matched
        values do not form a valid date (e.g. month 13).
    """
    token = token.replace("[", "").replace("]", "")

    for pattern, handler in _PATTERNS:
        match = pattern.search(token)
        if match:
            try:
                return handler(match)
            except ValueError:
                return None
    return None


def format_timestamp(moment: datetime) -> str:
    """Render *moment* in canonical form, e.g. ``2024-03-15T22:30:00.000Z``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment = moment.astimezone(UTC)
    # %Y is not zero-padded for years below 1000 on every platform.
    return (
        f"{moment.year:04d}-"
        + moment.strftime("%m-%dT%H:%M:%S")
        + f".{moment.microsecond // 1000:03d}Z"
    )


def standardize_timestamp(token: str) -> str:
    """Return the canonical form of *token*, or *token* unchanged if unparseable."""
    moment = parse_timestamp(token)
    if moment is None:
        return token
    return format_timestamp(moment)


def find_timestamp(line: str) -> datetime | None:
    """Return the first parseable timestamp on *line* (raw or canonical form)."""
    for match in _LINE_TOKEN_RE.finditer(line):
        moment = parse_timestamp(match.group(0))
        if moment is not None:
            return moment
    return None
