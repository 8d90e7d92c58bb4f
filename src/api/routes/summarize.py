"""Summarize endpoint: a plain-prose summary of a transcript."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from src.api.models import ErrorResponse, SummarizeRequest, SummarizeResponse
from src.config import settings
from src.errors import ContentValidationError
from src.extraction.backend import create_backend
from src.extraction.summary import summarize_transcript
from src.ingestion.sanitizer import validate_content

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(exclude_none=True),
    )


@router.post(
    "/api/summarize",
    response_model=SummarizeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def summarize(body: SummarizeRequest) -> SummarizeResponse | JSONResponse:
    """Summarize the submitted text in 3-4 paragraphs."""
    if not body.api_key:
        return _error(400, "API key is required")

    try:
        content = validate_content(
            body.content,
            min_length=settings.min_content_length,
            max_length=settings.max_content_length,
        )
    except ContentValidationError as exc:
        return _error(400, str(exc))

    backend = create_backend(settings.llm_provider, body.api_key, settings)
    try:
        summary = await summarize_transcript(
            backend,
            content,
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
        )
    except Exception as exc:
        logger.exception("Summarization failed (%s)", type(exc).__name__)
        return _error(500, "Failed to summarize content")

    return SummarizeResponse(summary=summary)
