"""Per-concept thread summaries, generated in bounded concurrent batches."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from src.errors import InvalidResponseStructureError
from src.extraction.backend import GenerativeBackend, parse_json_response
from src.extraction.models import ThreadDiscussion, ThreadResponse, error_discussion
from src.extraction.prompts import PromptTemplates, get_prompt_templates
from src.extraction.retry import with_retry

logger = logging.getLogger(__name__)

MAX_PARALLEL_THREADS = 10


def validate_discussion(data: Any) -> ThreadDiscussion:
    """Validate parsed backend output against the ThreadDiscussion schema.

    Raises:
        InvalidResponseStructureError: If *data* is not an object with at
            least ``title`` and ``threads``, or any field has the wrong type.
    """
    if not isinstance(data, dict) or "title" not in data or "threads" not in data:
        raise InvalidResponseStructureError()
    try:
        return ThreadDiscussion.model_validate(data)
    except ValidationError as exc:
        raise InvalidResponseStructureError(
            f"Invalid response structure: {exc.error_count()} validation error(s)"
        ) from exc


async def generate_discussion(
    backend: GenerativeBackend,
    transcript: str,
    concept: str,
    *,
    templates: PromptTemplates | None = None,
    max_attempts: int = 3,
    base_delay: float = 1.0,
) -> ThreadDiscussion:
    """Generate and validate the discussion for one concept; raises on failure."""
    prompts = (templates or get_prompt_templates()).thread_prompts(transcript, concept)
    raw = await with_retry(
        lambda: backend.generate(prompts.system, prompts.user),
        max_attempts=max_attempts,
        base_delay=base_delay,
    )
    return validate_discussion(parse_json_response(raw))


async def summarize_concept(
    backend: GenerativeBackend,
    transcript: str,
    concept: str,
    *,
    templates: PromptTemplates | None = None,
    max_attempts: int = 3,
    base_delay: float = 1.0,
) -> ThreadResponse:
    """Summarize one concept, degrading to a placeholder if anything fails."""
    try:
        discussion = await generate_discussion(
            backend,
            transcript,
            concept,
            templates=templates,
            max_attempts=max_attempts,
            base_delay=base_delay,
        )
    except Exception as exc:
        logger.exception(
            "Thread generation failed for concept %r (%s)", concept, type(exc).__name__
        )
        discussion = error_discussion(concept)
    return ThreadResponse(concept=concept, discussion=discussion)


async def summarize_all(
    backend: GenerativeBackend,
    transcript: str,
    concepts: list[str],
    *,
    batch_size: int = MAX_PARALLEL_THREADS,
    templates: PromptTemplates | None = None,
    max_attempts: int = 3,
    base_delay: float = 1.0,
) -> list[ThreadResponse]:
    """Summarize every concept, *batch_size* at a time.

    Calls within a batch run concurrently; the next batch starts only after
    the previous one has fully settled.  The result list is in the same
    order as *concepts*.
    """
    threads: list[ThreadResponse] = []

    for start in range(0, len(concepts), batch_size):
        batch = concepts[start : start + batch_size]
        logger.debug("Summarizing concepts %d-%d of %d", start + 1, start + len(batch), len(concepts))
        results = await asyncio.gather(
            *(
                summarize_concept(
                    backend,
                    transcript,
                    concept,
                    templates=templates,
                    max_attempts=max_attempts,
                    base_delay=base_delay,
                )
                for concept in batch
            )
        )
        threads.extend(results)

    return threads
