"""Pydantic request/response schemas for the Chat Thread Intelligence API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.extraction.models import ThreadResponse


class ThreadsRequest(BaseModel):
    """Request body for the /api/threads endpoint.

    ``content`` is deliberately untyped: a non-string transcript is an
    "Invalid content format" error (400), not a schema error (422).
    """

    model_config = ConfigDict(populate_by_name=True)

    content: Any = None
    api_key: str | None = Field(default=None, alias="apiKey")
    only_last_month: bool | None = Field(default=False, alias="onlyLastMonth")


class ThreadsApiResponse(BaseModel):
    """Response body for a completed (or empty) analysis."""

    concepts: list[str]
    threads: list[ThreadResponse]
    message: str
    id: str | None = None


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx answer from the analysis endpoints."""

    error: str
    details: str | None = None


class StoredThreadResponse(BaseModel):
    """A persisted analysis, as served to share links."""

    id: str
    share_id: str | None = None
    concepts: list[str] = []
    threads: list[ThreadResponse] = []
    created_at: str | None = None


class SummarizeRequest(BaseModel):
    """Request body for the /api/summarize endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    content: Any = None
    api_key: str | None = Field(default=None, alias="apiKey")


class SummarizeResponse(BaseModel):
    """Response body for the /api/summarize endpoint."""

    summary: str


class ApiKeyCheckRequest(BaseModel):
    """Request body for the /api/test-api-key endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    api_key: str | None = Field(default=None, alias="apiKey")


class ApiKeyCheckResponse(BaseModel):
    success: bool
