"""Schemas for LLM-generated thread discussions and extraction results.

The generative backend is asked to emit JSON matching
:class:`ThreadDiscussion`.  Its output is validated right after parsing with
strict leaf types: a number where text is expected is rejected, not
coerced.  Keys the schema does not know about are ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class _ResponseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SubThread(_ResponseModel):
    """One chronological slice of the discussion around a concept."""

    timestamp: StrictStr
    participants: list[StrictStr]
    summary: StrictStr
    additional_context: StrictStr | None = None
    attachments: list[StrictStr] | None = None
    unresolved_questions: list[StrictStr] | None = None
    notes: StrictStr | None = None


class FollowUp(_ResponseModel):
    """An action item raised in the discussion."""

    task: StrictStr
    assigned_to: StrictStr | None = None
    due_date: StrictStr | None = None
    status: StrictStr | None = None


class ThreadDiscussion(_ResponseModel):
    """Structured summary of everything said about one concept.

    When the concept was not substantively discussed, ``threads`` is empty
    and ``notes`` says so.
    """

    title: StrictStr
    language: StrictStr = "en"
    threads: list[SubThread]
    related_topics: list[StrictStr] | None = None
    follow_ups: list[FollowUp] | None = None
    notes: StrictStr | None = None


class ThreadResponse(BaseModel):
    """A concept paired with its discussion summary."""

    concept: str
    discussion: ThreadDiscussion


class ConceptExtractionResult(BaseModel):
    """Outcome of concept extraction; ``error`` is set instead of raising."""

    concepts: list[str] = Field(default_factory=list)
    error: str | None = None


def error_discussion(concept: str) -> ThreadDiscussion:
    """Placeholder used when a concept could not be summarised."""
    return ThreadDiscussion(title=f"Error Processing: {concept}", language="en", threads=[])
