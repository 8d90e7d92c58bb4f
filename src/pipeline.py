"""End-to-end analysis pipeline: sanitize -> window -> concepts -> threads -> store.

:class:`ThreadsPipeline` guarantees that every request ends in exactly one of
four outcomes (see :class:`OutcomeKind`); nothing escapes as an exception.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import ValidationError

from src.api.models import ErrorResponse, ThreadsApiResponse, ThreadsRequest
from src.errors import ContentValidationError
from src.extraction.backend import GenerativeBackend
from src.extraction.concepts import extract_concepts
from src.extraction.models import ThreadResponse
from src.extraction.prompts import get_prompt_templates
from src.extraction.threads import summarize_all
from src.ingestion.recency import filter_to_window
from src.ingestion.sanitizer import validate_content
from src.ingestion.storage import StoredAnalysis
from src.pipeline_config import AnalysisConfig

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Analysis completed successfully"
EMPTY_MESSAGE = "No significant topics found in the conversation"

BackendFactory = Callable[[str], GenerativeBackend]
PersistFn = Callable[[str, list[str], list[ThreadResponse]], Awaitable[StoredAnalysis]]


class OutcomeKind(str, Enum):
    """Terminal states of an analysis request."""

    SUCCESS = "success"
    EMPTY = "empty"
    BAD_REQUEST = "bad_request"
    SERVER_ERROR = "server_error"


_STATUS_CODES = {
    OutcomeKind.SUCCESS: 200,
    OutcomeKind.EMPTY: 200,
    OutcomeKind.BAD_REQUEST: 400,
    OutcomeKind.SERVER_ERROR: 500,
}


@dataclass(frozen=True)
class AnalysisOutcome:
    """The response-level result of one analysis request."""

    kind: OutcomeKind
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.kind]

    @classmethod
    def bad_request(cls, error: str) -> AnalysisOutcome:
        return cls(OutcomeKind.BAD_REQUEST, ErrorResponse(error=error).model_dump(exclude_none=True))

    @classmethod
    def server_error(cls, error: str, details: str | None = None) -> AnalysisOutcome:
        body = ErrorResponse(error=error, details=details).model_dump(exclude_none=True)
        return cls(OutcomeKind.SERVER_ERROR, body)


class ThreadsPipeline:
    """Orchestrates one chat analysis.

    Args:
        backend_factory: Builds a generative backend from the caller's API key.
        config: Limits and knobs; defaults to :class:`AnalysisConfig()`.
        persist: Optional coroutine storing the finished analysis.  Left as
            ``None`` outside production.
    """

    def __init__(
        self,
        backend_factory: BackendFactory,
        config: AnalysisConfig | None = None,
        persist: PersistFn | None = None,
    ) -> None:
        self.backend_factory = backend_factory
        self.config = config or AnalysisConfig()
        self.persist = persist
        self.templates = get_prompt_templates(self.config.prompt_version)

    async def analyze(
        self,
        payload: Mapping[str, Any] | None,
        reference_time: datetime | None = None,
    ) -> AnalysisOutcome:
        """Run the full pipeline on a request payload.

        Args:
            payload: ``{"content": str, "apiKey": str, "onlyLastMonth": bool}``.
            reference_time: End of the recency window.  Defaults to the
                latest timestamp in the transcript.
        """
        try:
            return await self._analyze(payload, reference_time)
        except Exception as exc:
            logger.exception("Error in threads pipeline (%s)", type(exc).__name__)
            return AnalysisOutcome.server_error("Failed to process chat history", details=str(exc))

    async def _analyze(
        self,
        payload: Mapping[str, Any] | None,
        reference_time: datetime | None,
    ) -> AnalysisOutcome:
        # 1. Request shape
        try:
            request = ThreadsRequest.model_validate(payload or {})
        except ValidationError:
            return AnalysisOutcome.bad_request("Invalid request body")

        if not request.api_key:
            return AnalysisOutcome.bad_request("API key is required")

        # 2. Sanitize
        try:
            content = validate_content(
                request.content,
                min_length=self.config.min_content_length,
                max_length=self.config.max_content_length,
            )
        except ContentValidationError as exc:
            return AnalysisOutcome.bad_request(str(exc))

        # 3. Recency window
        if request.only_last_month:
            content = filter_to_window(
                content,
                reference=reference_time,
                months=self.config.recency_window_months,
            )

        backend = self.backend_factory(request.api_key)

        # 4. Concepts
        extraction = await extract_concepts(
            backend,
            content,
            templates=self.templates,
            max_attempts=self.config.max_attempts,
            base_delay=self.config.base_delay,
        )
        if extraction.error:
            return AnalysisOutcome.server_error(extraction.error)

        # 5. Nothing worth summarising
        if not extraction.concepts:
            body = ThreadsApiResponse(concepts=[], threads=[], message=EMPTY_MESSAGE)
            return AnalysisOutcome(OutcomeKind.EMPTY, body.model_dump(mode="json", exclude_none=True))

        # 6. Threads
        threads = await summarize_all(
            backend,
            content,
            extraction.concepts,
            batch_size=self.config.batch_size,
            templates=self.templates,
            max_attempts=self.config.max_attempts,
            base_delay=self.config.base_delay,
        )

        # 7. Persist the original submission, not the sanitized text
        stored: StoredAnalysis | None = None
        if self.persist is not None:
            stored = await self.persist(request.content, extraction.concepts, threads)
            logger.info("Saved analysis with ID %s (share ID %s)", stored.id, stored.share_id)

        # 8. Done
        body = ThreadsApiResponse(
            concepts=extraction.concepts,
            threads=threads,
            message=SUCCESS_MESSAGE,
            id=stored.id if stored else None,
        )
        return AnalysisOutcome(OutcomeKind.SUCCESS, body.model_dump(mode="json", exclude_none=True))
