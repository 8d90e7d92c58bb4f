"""Supabase storage helpers for analysed chat threads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

from supabase import Client, create_client

from src.config import settings

if TYPE_CHECKING:
    from src.extraction.models import ThreadResponse

THREADS_TABLE = "threads"


@dataclass(frozen=True)
class StoredAnalysis:
    """Identifiers of a persisted analysis."""

    id: str
    share_id: str | None = None


def get_supabase_client() -> Client:
    """Create and return a Supabase client from settings."""
    return create_client(settings.supabase_url, settings.supabase_key)


def store_analysis(
    client: Client,
    content: str,
    concepts: list[str],
    threads: list[ThreadResponse],
) -> StoredAnalysis:
    """Insert one analysis record and return its generated id and share id.

    The table generates both ``id`` and the public ``share_id``.
    """
    result = (
        client.table(THREADS_TABLE)
        .insert(
            {
                "content": content,
                "concepts": concepts,
                "thread_data": {
                    "threads": [t.model_dump(mode="json", exclude_none=True) for t in threads]
                },
            }
        )
        .execute()
    )
    rows = cast(list[dict[str, Any]], result.data)
    if not rows:
        raise RuntimeError("Supabase insert returned no rows")
    row = rows[0]
    share_id = row.get("share_id")
    return StoredAnalysis(id=str(row["id"]), share_id=str(share_id) if share_id else None)


def _fetch_one(client: Client, column: str, value: str) -> dict[str, Any] | None:
    result = client.table(THREADS_TABLE).select("*").eq(column, value).execute()
    rows = cast(list[dict[str, Any]], result.data)
    return rows[0] if rows else None


def get_analysis(client: Client, analysis_id: str) -> dict[str, Any] | None:
    """Fetch a stored analysis by its id, or ``None`` if absent."""
    return _fetch_one(client, "id", analysis_id)


def get_analysis_by_share_id(client: Client, share_id: str) -> dict[str, Any] | None:
    """Fetch a stored analysis by its public share id, or ``None`` if absent."""
    return _fetch_one(client, "share_id", share_id)
