"""Recency window filter: keep only the trailing slice of a transcript."""

from __future__ import annotations

import calendar
import logging
from datetime import UTC, datetime

from src.ingestion.timestamps import find_timestamp

logger = logging.getLogger(__name__)


def subtract_months(moment: datetime, months: int = 1) -> datetime:
    """Step *moment* back by calendar months, clamping the day to the target month.

    ``2024-03-31`` minus one month is ``2024-02-29``.
    """
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def latest_timestamp(content: str) -> datetime | None:
    """Return the last parseable timestamp in *content*, scanning bottom-up."""
    for line in reversed(content.split("\n")):
        moment = find_timestamp(line)
        if moment is not None:
            return moment
    return None


def filter_to_window(
    content: str,
    reference: datetime | None = None,
    months: int = 1,
) -> str:
    """Drop lines older than *months* before the reference instant.

    Lines without a timestamp inherit the most recent timestamp seen above
    them (multi-line messages).  Lines before the first timestamp are kept.

    Args:
        content: Transcript text, raw or sanitized.
        reference: End of the window.  Defaults to the latest timestamp in
            the transcript, or the current time if there is none.
        months: Window length in calendar months.

    Returns:
        The filtered transcript, or *content* unchanged if filtering would
        leave nothing.
    """
    if reference is None:
        reference = latest_timestamp(content) or datetime.now(UTC)
    elif reference.tzinfo is None:
        reference = reference.replace(tzinfo=UTC)

    lower_bound = subtract_months(reference, months)

    kept: list[str] = []
    current: datetime | None = None
    for line in content.split("\n"):
        moment = find_timestamp(line)
        if moment is not None:
            current = moment
        if current is None or current >= lower_bound:
            kept.append(line)

    if not any(line.strip() for line in kept):
        logger.info("Recency filter would remove every line; keeping full transcript")
        return content

    logger.debug(
        "Recency filter kept %d of %d lines (since %s)",
        len(kept),
        content.count("\n") + 1,
        lower_bound.isoformat(),
    )
    return "\n".join(kept)
