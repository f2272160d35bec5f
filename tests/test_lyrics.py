from __future__ import annotations

from prompt_refiner.services.fields import MAX_MODE_HEADER
from prompt_refiner.services.lyrics import (
    build_lyrics_bootstrap_prompt,
    build_lyrics_bootstrap_user_prompt,
    build_lyrics_refinement_prompt,
    build_lyrics_refinement_user_prompt,
    clean_lyrics,
    lyrics_seed,
    optional_topic,
)


def test_refinement_prompt_mentions_genre_and_mood() -> None:
    prompt = build_lyrics_refinement_prompt("blues", "gritty", use_suno_tags=False, max_mode=False)
    assert "blues song with a gritty mood" in prompt
    assert "standard section markers" in prompt
    assert MAX_MODE_HEADER not in prompt


def test_max_mode_asks_for_header_first() -> None:
    prompt = build_lyrics_bootstrap_prompt(max_mode=True, use_suno_tags=True)
    assert MAX_MODE_HEADER in prompt
    assert "Suno-compatible" in prompt


def test_user_prompts() -> None:
    assert build_lyrics_refinement_user_prompt("la la", "more hope") == (
        "Current lyrics:\nla la\n\nFeedback to apply:\nmore hope"
    )
    assert build_lyrics_refinement_user_prompt("la la", "x", "trains").endswith("Topic/theme: trains")
    assert build_lyrics_bootstrap_user_prompt("rivers", "folk", "calm") == (
        "Write lyrics about: rivers\nGenre: folk\nMood: calm"
    )


def test_seed_and_cleanup_helpers() -> None:
    assert lyrics_seed(" harbour ", "sadder") == "harbour"
    assert lyrics_seed("  ", "sadder") == "sadder"
    assert lyrics_seed(None, None) == "Untitled"
    assert optional_topic("  ") is None
    assert clean_lyrics("\n[Verse]\nhi\n") == "[Verse]\nhi"
    assert clean_lyrics("   ") is None
