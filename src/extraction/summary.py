"""Free-form prose summary of a transcript."""

from __future__ import annotations

from src.extraction.backend import GenerativeBackend, strip_code_fences
from src.extraction.retry import with_retry

SUMMARY_SYSTEM_PROMPT = (
    "You are a chat summarization assistant. Write plain prose, no markdown "
    "headings and no JSON. Keep names, dates, and decisions exact."
)

_SUMMARY_USER_TEMPLATE = """\
Please summarize the following text in 3-4 paragraphs, highlighting the main points and key ideas:

{content}"""


async def summarize_transcript(
    backend: GenerativeBackend,
    content: str,
    max_attempts: int = 3,
    base_delay: float = 1.0,
) -> str:
    """Return a 3-4 paragraph summary of *content*."""
    text = await with_retry(
        lambda: backend.generate(SUMMARY_SYSTEM_PROMPT, _SUMMARY_USER_TEMPLATE.format(content=content)),
        max_attempts=max_attempts,
        base_delay=base_delay,
    )
    return strip_code_fences(text)
