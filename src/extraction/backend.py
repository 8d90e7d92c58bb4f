"""Generative backends: a text-in/text-out contract over Claude and Gemini."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any, Protocol

from anthropic import AsyncAnthropic
from anthropic.types import TextBlock

from src.errors import EmptyResponseError, MalformedResponseError
from src.pipeline_config import LLMProvider

if TYPE_CHECKING:
    from src.config import Settings

_CODE_FENCE_RE = re.compile(r"```(?:json)?\n?", re.IGNORECASE)


class GenerativeBackend(Protocol):
    """Anything that turns a system + user prompt pair into text."""

    async def generate(self, system_prompt: str, user_prompt: str) -> str: ...


class AnthropicBackend:
    """Claude via the async Anthropic SDK.

    SDK-level retries are disabled; retrying is the pipeline's job so that
    attempt counts and backoff stay under one policy.
    """

    def __init__(self, api_key: str, model: str, max_tokens: int = 8192) -> None:
        self._client = AsyncAnthropic(api_key=api_key, max_retries=0)
        self.model = model
        self.max_tokens = max_tokens

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        response = await self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        text = "".join(block.text for block in response.content if isinstance(block, TextBlock))
        if not text.strip():
            raise EmptyResponseError(f"Empty response from {self.model}")
        return text


class GeminiBackend:
    """Gemini via ``google.generativeai``.

    The SDK keeps the API key in module-global state, so ``configure`` is
    called before every request.
    """

    def __init__(self, api_key: str, model: str) -> None:
        self._api_key = api_key
        self.model = model

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        import google.generativeai as genai

        genai.configure(api_key=self._api_key)  # type: ignore[attr-defined]
        model = genai.GenerativeModel(  # type: ignore[attr-defined]
            self.model, system_instruction=system_prompt
        )
        response = await model.generate_content_async(user_prompt)
        try:
            text: str = response.text
        except ValueError as exc:
            # Raised when the candidate was blocked or has no text parts.
            raise EmptyResponseError(f"Empty response from {self.model}: {exc}") from exc
        if not text.strip():
            raise EmptyResponseError(f"Empty response from {self.model}")
        return text


def create_backend(
    provider: str | LLMProvider,
    api_key: str,
    settings: Settings,
) -> GenerativeBackend:
    """Build the backend for *provider* using the caller's *api_key*.

    Raises:
        ValueError: If *provider* is not a known :class:`LLMProvider`.
    """
    provider = LLMProvider(provider)
    if provider is LLMProvider.GEMINI:
        return GeminiBackend(api_key, settings.gemini_model)
    return AnthropicBackend(api_key, settings.llm_model, max_tokens=settings.llm_max_tokens)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```` ```json ```` / ```` ``` ````) and trim."""
    return _CODE_FENCE_RE.sub("", text).strip()


def parse_json_response(text: str) -> Any:
    """Parse backend output as JSON after stripping code fences.

    Raises:
        MalformedResponseError: If the cleaned text is not valid JSON.
    """
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Backend returned invalid JSON: {exc}") from exc
