"""API key check: one tiny generation call against the configured provider."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from src.api.models import ApiKeyCheckRequest, ApiKeyCheckResponse, ErrorResponse
from src.config import settings
from src.extraction.backend import create_backend

logger = logging.getLogger(__name__)

router = APIRouter()

CHECK_SYSTEM_PROMPT = "Reply with a single short greeting."
CHECK_USER_PROMPT = "Hello, World!"


@router.post(
    "/api/test-api-key",
    response_model=ApiKeyCheckResponse,
    responses={400: {"model": ErrorResponse}},
)
async def check_api_key(body: ApiKeyCheckRequest) -> ApiKeyCheckResponse | JSONResponse:
    """Report whether the submitted key can make a generation call."""
    if not body.api_key:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="API key is required").model_dump(exclude_none=True),
        )

    backend = create_backend(settings.llm_provider, body.api_key, settings)
    try:
        await backend.generate(CHECK_SYSTEM_PROMPT, CHECK_USER_PROMPT)
    except Exception as exc:
        # Any failure counts as an unusable key.
        logger.warning("API key check failed (%s)", type(exc).__name__)
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="Invalid API key").model_dump(exclude_none=True),
        )

    return ApiKeyCheckResponse(success=True)
