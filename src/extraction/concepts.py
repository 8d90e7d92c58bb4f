"""Concept extraction: one LLM call that lists the chat's salient topics."""

from __future__ import annotations

import logging
from typing import Any

from src.errors import InvalidConceptsFormatError
from src.extraction.backend import GenerativeBackend, parse_json_response
from src.extraction.models import ConceptExtractionResult
from src.extraction.prompts import PromptTemplates, get_prompt_templates
from src.extraction.retry import with_retry

logger = logging.getLogger(__name__)


def _validate_concepts(data: Any) -> list[str]:
    """Check that *data* is a JSON array of strings and tidy the entries."""
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise InvalidConceptsFormatError()
    return [item.strip() for item in data if item.strip()]


async def extract_concepts(
    backend: GenerativeBackend,
    transcript: str,
    *,
    templates: PromptTemplates | None = None,
    max_attempts: int = 3,
    base_delay: float = 1.0,
) -> ConceptExtractionResult:
    """Ask the backend for the transcript's key topics.

    Transient backend failures are retried.  Nothing is raised past this
    function: every failure, including a malformed answer, is returned as
    ``ConceptExtractionResult(concepts=[], error=...)``.

    Args:
        backend: The generative backend to call.
        transcript: Sanitized chat transcript.
        templates: Prompt bundle; defaults to the current version.
        max_attempts: Total backend invocations allowed.
        base_delay: Initial backoff delay in seconds.
    """
    prompts = (templates or get_prompt_templates()).concept_prompts(transcript)

    try:
        raw = await with_retry(
            lambda: backend.generate(prompts.system, prompts.user),
            max_attempts=max_attempts,
            base_delay=base_delay,
        )
        concepts = _validate_concepts(parse_json_response(raw))
    except Exception as exc:
        logger.exception("Concept extraction failed (%s)", type(exc).__name__)
        return ConceptExtractionResult(
            concepts=[],
            error=f"Failed to extract concepts: {exc}",
        )

    logger.info("Extracted %d concepts", len(concepts))
    return ConceptExtractionResult(concepts=concepts)
