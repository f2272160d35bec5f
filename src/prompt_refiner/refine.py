"""
CLI entry point to refine a prompt file without running the HTTP service.

Example:
    python -m prompt_refiner.refine --prompt-file song.txt --type style --seed 7
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Optional

from .app.models import RefinementRequest, RefinementType
from .app.settings import Settings
from .services.ollama import OllamaClient
from .services.rng import create_seeded_rng, seed_from_text
from .services.router import RefinementRouter
from .services.trace import DecisionTrace


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Refine a music prompt deterministically.")
    parser.add_argument(
        "--prompt-file",
        type=Path,
        required=True,
        help="File holding the current prompt text.",
    )
    parser.add_argument(
        "--type",
        choices=[item.value for item in RefinementType],
        default=None,
        help="Refinement type (defaults to combined).",
    )
    parser.add_argument("--feedback", default="", help="Feedback to apply to the lyrics.")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reproducible output (defaults to a hash of the prompt).",
    )
    parser.add_argument(
        "--style",
        action="append",
        default=[],
        help="Explicit style for Direct Mode (repeatable).",
    )
    parser.add_argument(
        "--lyrics-file",
        type=Path,
        default=None,
        help="Optional file holding the current lyrics.",
    )
    parser.add_argument("--title", default="", help="Current song title.")
    parser.add_argument("--locked-phrase", default=None, help="Phrase that must survive refinement.")
    parser.add_argument("--trace", action="store_true", help="Print the decision trace.")
    return parser.parse_args()


async def _run(
    prompt_file: Path,
    *,
    refinement_type: Optional[str],
    feedback: str,
    seed: Optional[int],
    styles: list[str],
    lyrics_file: Optional[Path] = None,
    title: str = "",
    locked_phrase: Optional[str] = None,
    show_trace: bool = False,
) -> None:
    settings = Settings()
    ollama = OllamaClient(
        settings.ollama_endpoint,
        settings.ollama_model,
        availability_timeout_ms=settings.availability_timeout_ms,
        cache_ttl_seconds=settings.availability_cache_ttl_seconds,
    )
    refinement_router = RefinementRouter(settings.capabilities(), ollama, ollama)

    prompt = prompt_file.read_text(encoding="utf-8")
    request = RefinementRequest(
        current_prompt=prompt,
        current_title=title,
        feedback=feedback,
        current_lyrics=lyrics_file.read_text(encoding="utf-8") if lyrics_file else None,
        locked_phrase=locked_phrase,
        suno_styles=styles,
        refinement_type=refinement_type,
        seed=seed,
    )
    # Without an explicit seed the same prompt file refines the same way.
    effective_seed = seed if seed is not None else settings.default_seed
    if effective_seed is None:
        effective_seed = seed_from_text(prompt)
    rng = create_seeded_rng(effective_seed)
    trace = DecisionTrace() if show_trace else None

    try:
        result = await refinement_router.refine(request, rng, trace)
    finally:
        await ollama.close()

    print(result.text)
    if result.lyrics:
        print()
        print(result.lyrics)
    if result.story_mode_fallback:
        print("story_mode    : fallback")
    if trace is not None:
        for decision in trace.decisions:
            print(f"{decision.key:<32}: {decision.branch_taken} ({decision.why})")


def main() -> None:
    args = _parse_args()
    asyncio.run(
        _run(
            args.prompt_file,
            refinement_type=args.type,
            feedback=args.feedback,
            seed=args.seed,
            styles=args.style,
            lyrics_file=args.lyrics_file,
            title=args.title,
            locked_phrase=args.locked_phrase,
            show_trace=args.trace,
        )
    )


if __name__ == "__main__":
    main()
