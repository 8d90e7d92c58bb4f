"""Pipeline configuration: provider enum and AnalysisConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.config import Settings


class LLMProvider(str, Enum):
    """Generative backends the pipeline can talk to."""

    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


@dataclass(frozen=True)
class AnalysisConfig:
    """Immutable configuration for the chat analysis pipeline.

    Passed to the orchestrator at construction so tests can override limits
    without touching process-wide settings.  Defaults mirror the production
    values in :class:`src.config.Settings`.
    """

    min_content_length: int = 50
    max_content_length: int = 100_000
    batch_size: int = 10
    max_attempts: int = 3
    base_delay: float = 1.0  # seconds
    recency_window_months: int = 1
    prompt_version: str = "v1"

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.min_content_length > self.max_content_length:
            raise ValueError("min_content_length cannot exceed max_content_length")

    @classmethod
    def from_settings(cls, settings: Settings) -> AnalysisConfig:
        return cls(
            min_content_length=settings.min_content_length,
            max_content_length=settings.max_content_length,
            batch_size=settings.batch_size,
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            recency_window_months=settings.recency_window_months,
            prompt_version=settings.prompt_version,
        )
