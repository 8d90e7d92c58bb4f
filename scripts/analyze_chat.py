"""Analyse an exported chat file from the command line (no persistence).

Usage::

    python scripts/analyze_chat.py data/WhatsApp_Chat.txt --output result.json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import settings
from src.extraction.backend import create_backend
from src.pipeline import ThreadsPipeline
from src.pipeline_config import AnalysisConfig, LLMProvider


def _default_api_key(provider: str) -> str:
    if provider == LLMProvider.GEMINI.value:
        return settings.gemini_api_key
    return settings.anthropic_api_key


def analyze_chat(
    path: str,
    provider: str,
    api_key: str,
    all_history: bool = False,
    output: str | None = None,
) -> int:
    """Run the analysis pipeline on *path*; return a process exit code."""
    content = Path(path).read_text(encoding="utf-8")

    pipeline = ThreadsPipeline(
        backend_factory=lambda key: create_backend(provider, key, settings),
        config=AnalysisConfig.from_settings(settings),
    )
    outcome = asyncio.run(
        pipeline.analyze(
            {"content": content, "apiKey": api_key, "onlyLastMonth": not all_history}
        )
    )

    rendered = json.dumps(outcome.body, indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(rendered + "\n", encoding="utf-8")
        print(f"Wrote {outcome.kind.value} result to {output}")
    else:
        print(rendered)

    if outcome.status_code != 200:
        print(f"Analysis failed ({outcome.status_code}): {outcome.body.get('error')}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Extract topics and thread summaries from a chat export.")
    parser.add_argument("path", help="Exported chat transcript (.txt)")
    parser.add_argument("--provider", default=settings.llm_provider, choices=[p.value for p in LLMProvider])
    parser.add_argument("--api-key", default=None, help="Defaults to the key for --provider from .env")
    parser.add_argument("--all-history", action="store_true", help="Do not restrict to the last month")
    parser.add_argument("--output", default=None, help="Write JSON here instead of stdout")
    args = parser.parse_args()

    sys.exit(
        analyze_chat(
            args.path,
            args.provider,
            args.api_key or _default_api_key(args.provider),
            all_history=args.all_history,
            output=args.output,
        )
    )
