"""Threads endpoints: analyse a chat export and read stored analyses."""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from src.api.models import ErrorResponse, StoredThreadResponse, ThreadsApiResponse
from src.config import settings
from src.extraction.backend import GenerativeBackend, create_backend
from src.extraction.models import ThreadResponse
from src.ingestion.storage import (
    StoredAnalysis,
    get_analysis,
    get_analysis_by_share_id,
    get_supabase_client,
    store_analysis,
)
from src.pipeline import ThreadsPipeline
from src.pipeline_config import AnalysisConfig

router = APIRouter()


def _backend_factory(api_key: str) -> GenerativeBackend:
    return create_backend(settings.llm_provider, api_key, settings)


async def _persist_to_supabase(
    content: str,
    concepts: list[str],
    threads: list[ThreadResponse],
) -> StoredAnalysis:
    # The Supabase client is synchronous; keep it off the event loop.
    client = get_supabase_client()
    return await asyncio.to_thread(store_analysis, client, content, concepts, threads)


def build_pipeline() -> ThreadsPipeline:
    """Pipeline wired to the configured backend, persisting only in production."""
    return ThreadsPipeline(
        backend_factory=_backend_factory,
        config=AnalysisConfig.from_settings(settings),
        persist=_persist_to_supabase if settings.persistence_enabled else None,
    )


@router.post(
    "/api/threads",
    response_model=ThreadsApiResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze_threads(request: Request) -> JSONResponse:
    """Extract concepts from a chat transcript and summarise each one.

    Body: ``{"content": str, "apiKey": str, "onlyLastMonth": bool}``.
    Always answers with a JSON object: 200 on success (including when no
    topics were found), 400 on bad input, 500 on failure.
    """
    payload: Any
    try:
        payload = await request.json()
    except ValueError:
        # Unparseable body: treated as an empty request, which fails validation.
        payload = {}

    outcome = await build_pipeline().analyze(payload)
    return JSONResponse(
        status_code=outcome.status_code,
        content=outcome.body,
        headers={"Cache-Control": "no-store"},
    )


def _to_stored_response(row: dict[str, Any]) -> StoredThreadResponse:
    thread_data = row.get("thread_data") or {}
    return StoredThreadResponse(
        id=str(row["id"]),
        share_id=str(row["share_id"]) if row.get("share_id") else None,
        concepts=row.get("concepts") or [],
        threads=thread_data.get("threads", []),
        created_at=row.get("created_at"),
    )


@router.get("/api/threads/{thread_id}", response_model=StoredThreadResponse)
async def get_thread(thread_id: str) -> StoredThreadResponse:
    """Fetch a stored analysis by id."""
    row = get_analysis(get_supabase_client(), thread_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Thread not found")
    return _to_stored_response(row)


@router.get("/api/threads/shared/{share_id}", response_model=StoredThreadResponse)
async def get_shared_thread(share_id: str) -> StoredThreadResponse:
    """Fetch a stored analysis by its public share id."""
    row = get_analysis_by_share_id(get_supabase_client(), share_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Thread not found")
    return _to_stored_response(row)
