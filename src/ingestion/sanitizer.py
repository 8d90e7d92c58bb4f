"""Validation and cleanup of chat transcripts before they reach the LLM."""

from __future__ import annotations

import re
from typing import Any

from src.errors import InvalidFormatError, TooShortError
from src.ingestion.timestamps import (
    CANONICAL_TOKEN_PATTERN,
    EXPORT_TOKEN_PATTERN,
    standardize_timestamp,
)

MIN_CONTENT_LENGTH = 50
MAX_CONTENT_LENGTH = 100_000  # characters

TRUNCATION_MARKER = "[Content truncated due to length...]\n"

# Export token plus the " - " / " " separator that follows it on Android and
# iOS exports respectively.
_TIMESTAMP_TOKEN_RE = re.compile(
    r"(?P<token>" + EXPORT_TOKEN_PATTERN + r")(?P<sep>(?:[^\S\r\n]?-)?[^\S\r\n]?)"
)
_DIRECTIONAL_MARKS_RE = re.compile("[\u200e\u200f]")
# Anything outside the Basic Multilingual Plane: emoji and pictographs.
_ASTRAL_RE = re.compile("[\U00010000-\U0010ffff]")
_WHITESPACE_RE = re.compile(r"\s+")

_CANONICAL_TOKEN_RE = re.compile(CANONICAL_TOKEN_PATTERN)
# A canonical timestamp is 24 characters; the shortest export token ("1/2/24, 1:05") is 12.
_CANONICAL_GROWTH = 12


def _rewrite_timestamp(match: re.Match[str]) -> str:
    token = match.group("token")
    standardized = standardize_timestamp(token)
    if standardized == token:
        # Unparseable: leave the whole match exactly as it was.
        return match.group(0)
    return f"{standardized} " if match.group("sep") else standardized


def measured_length(content: str) -> int:
    """Length of *content* as counted against the maximum.

    A leading truncation marker is not counted, and each canonical timestamp
    is discounted by the most it can outgrow the export token it replaced, so
    sanitizing content never pushes it over the limit.
    """
    body = content.removeprefix(TRUNCATION_MARKER)
    return len(body) - _CANONICAL_GROWTH * len(_CANONICAL_TOKEN_RE.findall(body))


def _tail_start(body: str, max_length: int) -> int:
    start = len(body) - max_length
    if body[start - 1] == "\n":
        return start
    newline = body.find("\n", start)
    if newline != -1 and newline + 1 < len(body):
        return newline + 1
    space = _WHITESPACE_RE.search(body, start - 1)
    if space and space.end() < len(body):
        return space.end()
    return start


def truncate_to_tail(content: str, max_length: int = MAX_CONTENT_LENGTH) -> str:
    """Keep at most the last *max_length* characters, prefixed by a marker.

    The cut moves forward to the next line start, or failing that the next
    word, so the kept text never begins part-way through a timestamp.
    Content that already carries the marker is measured without it, so
    truncating twice is the same as truncating once.
    """
    body = content.removeprefix(TRUNCATION_MARKER)
    if len(body) <= max_length:
        return content
    return TRUNCATION_MARKER + body[_tail_start(body, max_length) :]


def validate_content(
    content: Any,
    min_length: int = MIN_CONTENT_LENGTH,
    max_length: int = MAX_CONTENT_LENGTH,
) -> str:
    """Validate and sanitize a chat transcript.

    Args:
        content: The submitted transcript; anything other than a non-empty
            ``str`` is rejected.
        min_length: Minimum number of characters required.
        max_length: Maximum number of characters kept.  Longer transcripts
            keep their tail, since recent messages matter most.

    Returns:
        The sanitized transcript: triple backticks neutralised, embedded
        timestamps rewritten to canonical form, directional marks and emoji
        removed, surrounding whitespace trimmed.

    Raises:
        InvalidFormatError: If *content* is missing or not a string.
        TooShortError: If *content* is shorter than *min_length*.
    """
    if not content or not isinstance(content, str):
        raise InvalidFormatError()

    if len(content) < min_length:
        raise TooShortError()

    # Decided on the submitted text; the cut itself is made after cleanup.
    over_limit = measured_length(content) > max_length

    content = content.replace("```", "'''")
    content = _TIMESTAMP_TOKEN_RE.sub(_rewrite_timestamp, content)
    content = _DIRECTIONAL_MARKS_RE.sub("", content)
    content = _ASTRAL_RE.sub("", content)
    content = content.strip()

    if over_limit:
        content = truncate_to_tail(content, max_length)
    return content
