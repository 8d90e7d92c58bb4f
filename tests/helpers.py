"""Fakes and transcript builders shared across tests (no external API calls)."""

from __future__ import annotations

import asyncio
import json
import re
from collections.abc import Callable
from datetime import datetime

_CONCEPT_IN_PROMPT_RE = re.compile(r'(?:related to|discussion about) "(.+?)"')


def concept_in_prompt(user_prompt: str) -> str | None:
    """Return the concept a thread prompt asks about, or None for a concept prompt."""
    match = _CONCEPT_IN_PROMPT_RE.search(user_prompt)
    return match.group(1) if match else None


def discussion_json(concept: str, **overrides: object) -> str:
    data: dict[str, object] = {
        "title": f"{concept} Discussion",
        "language": "en",
        "threads": [
            {
                "timestamp": "2024-03-15T22:30:00.000Z",
                "participants": ["Alice", "Bob"],
                "summary": f"Alice and Bob talked about {concept}.",
            }
        ],
    }
    data.update(overrides)
    return json.dumps(data)


class FakeBackend:
    """Scripted GenerativeBackend.

    ``concepts`` is the concept-call reply (str, or an exception to raise).
    Thread calls are answered by ``thread_reply(concept)``, which may raise.
    Tracks concurrent in-flight calls so batching can be asserted.
    """

    def __init__(
        self,
        concepts: str | Exception = '["Weekend Hiking Trip", "Rent Split"]',
        thread_reply: Callable[[str], str] = discussion_json,
    ) -> None:
        self.concepts = concepts
        self.thread_reply = thread_reply
        self.calls: list[tuple[str, str]] = []
        self.thread_concepts: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.batch_marks: list[int] = []

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        concept = concept_in_prompt(user_prompt)
        if concept is None:
            if isinstance(self.concepts, Exception):
                raise self.concepts
            return self.concepts

        self.thread_concepts.append(concept)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Yield so sibling calls in the same batch overlap.
            await asyncio.sleep(0)
            return self.thread_reply(concept)
        finally:
            self.in_flight -= 1
            self.batch_marks.append(self.in_flight)

    @property
    def concept_calls(self) -> list[tuple[str, str]]:
        return [c for c in self.calls if concept_in_prompt(c[1]) is None]


class StatusError(Exception):
    """Stand-in for an SDK error carrying an HTTP status code."""

    def __init__(self, status_code: int, message: str = "backend error") -> None:
        super().__init__(f"{status_code} {message}")
        self.status_code = status_code


def export_line(moment: datetime, sender: str, text: str) -> str:
    """Format one iOS-style export line, e.g. ``[3/15/24, 10:30:15 PM] Alice: hi``."""
    hour = moment.hour % 12 or 12
    period = "AM" if moment.hour < 12 else "PM"
    return (
        f"[{moment.month}/{moment.day}/{moment.year % 100:02d}, "
        f"{hour}:{moment.minute:02d}:{moment.second:02d} {period}] {sender}: {text}"
    )


def build_transcript(start: datetime, end: datetime, count: int) -> str:
    """*count* messages spread evenly from *start* to *end*."""
    step = (end - start) / (count - 1)
    senders = ["Alice", "Bob", "Carol"]
    lines = [
        export_line(start + step * i, senders[i % 3], f"message number {i} about the trip")
        for i in range(count)
    ]
    return "\n".join(lines)
