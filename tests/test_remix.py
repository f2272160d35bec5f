from __future__ import annotations

import pytest

from prompt_refiner.services.fields import MAX_MODE_HEADER, extract_field, raw_genre_tokens
from prompt_refiner.services.genres import GENRE_REGISTRY, MOOD_POOL
from prompt_refiner.services.instruments import MAX_INSTRUMENTS
from prompt_refiner.services.recording import has_recording_conflict
from prompt_refiner.services.remix import (
    remix_genre,
    remix_instruments,
    remix_mood,
    remix_recording,
    remix_style_tags,
)
from prompt_refiner.services.rng import create_seeded_rng
from prompt_refiner.services.trace import DecisionTrace

ROCK_PROMPT = 'genre: "rock"\nbpm: "120"\nmood: "energetic"\ninstruments: "guitar, drums"'

FULL_MAX_PROMPT = (
    f"{MAX_MODE_HEADER}\n"
    'genre: "jazz, rock, funk"\n'
    'bpm: "between 100 and 125"\n'
    'mood: "smooth, gritty"\n'
    'instruments: "Rhodes, bass"\n'
    'style tags: "warm, wide"\n'
    'recording: "studio session warmth"'
)

STANDARD_PROMPT = (
    "[dreamy, ambient]\n"
    "\n"
    "Genre: ambient\n"
    "BPM: between 60 and 90\n"
    "Instruments: synth pad, felt piano\n"
    "Style Tags: airy, wide\n"
    "Recording: home studio intimacy"
)

STRATEGIES = [remix_mood, remix_style_tags, remix_recording, remix_instruments]


def _untouched(before: str, after: str, prefix: str) -> bool:
    def keep(text: str) -> list[str]:
        return [line for line in text.split("\n") if not line.lower().startswith(prefix.lower())]

    return keep(before) == keep(after)


def test_mood_remix_keeps_other_fields_verbatim() -> None:
    for seed in range(25):
        result = remix_mood(ROCK_PROMPT, create_seeded_rng(seed))
        lines = result.text.split("\n")
        assert lines[0] == 'genre: "rock"'
        assert lines[1] == 'bpm: "120"'
        assert lines[3] == 'instruments: "guitar, drums"'
        moods = [mood.strip() for mood in extract_field(result.text, "mood").split(",")]
        assert 2 <= len(moods) <= 3
        assert "energetic" not in moods
        assert set(moods) <= set(MOOD_POOL)


def test_mood_remix_count_is_randomised() -> None:
    counts = {
        len(extract_field(remix_mood(ROCK_PROMPT, create_seeded_rng(seed)).text, "mood").split(","))
        for seed in range(40)
    }
    assert counts == {2, 3}


@pytest.mark.parametrize(
    ("requested", "expected"),
    [(-5, 1), (0, 1), (1, 1), (2, 2), (3, 3), (4, 4), (5, 4), (100, 4)],
)
def test_genre_remix_bounded_count(requested: int, expected: int) -> None:
    result = remix_genre(FULL_MAX_PROMPT, requested, create_seeded_rng(requested + 10))
    tokens = raw_genre_tokens(result.text)
    assert len(tokens) == expected
    assert len(set(tokens)) == expected
    assert all(token in GENRE_REGISTRY for token in tokens)


def test_genre_remix_preserves_slot_count() -> None:
    for seed in range(20):
        result = remix_genre(FULL_MAX_PROMPT, rng=create_seeded_rng(seed))
        assert len(raw_genre_tokens(result.text)) == 3
        assert _untouched(FULL_MAX_PROMPT, result.text, "genre:")


def test_genre_remix_counts_unknown_raw_tokens() -> None:
    text = "Genre: polka, sea shanty\nBPM: 100"
    result = remix_genre(text, rng=create_seeded_rng(3))
    assert len(raw_genre_tokens(result.text)) == 2
    assert result.text.endswith("\nBPM: 100")
    assert result.text.startswith("Genre: ")


def test_genre_remix_with_empty_genre_line_uses_one_slot() -> None:
    text = "Genre:\nMood: calm\nBPM: 90"
    result = remix_genre(text, rng=create_seeded_rng(5))
    assert len(raw_genre_tokens(result.text)) == 1
    assert result.text.endswith("\nMood: calm\nBPM: 90")


def test_genre_remix_to_single_genre() -> None:
    result = remix_genre(FULL_MAX_PROMPT, 1, create_seeded_rng(77))
    value = extract_field(result.text, "genre")
    assert "," not in value
    assert value in GENRE_REGISTRY


def test_genre_remix_changes_single_genre() -> None:
    for seed in range(30):
        result = remix_genre(ROCK_PROMPT, rng=create_seeded_rng(seed))
        assert raw_genre_tokens(result.text) != ["rock"]


def test_genre_remix_does_not_touch_bpm() -> None:
    result = remix_genre(FULL_MAX_PROMPT, 2, create_seeded_rng(4))
    assert 'bpm: "between 100 and 125"' in result.text


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_strategies_are_no_ops_without_their_field(strategy) -> None:
    text = "Title: nothing to see\nnotes: plain text"
    assert strategy(text, create_seeded_rng(1)).text == text


def test_genre_remix_is_no_op_without_field() -> None:
    text = 'bpm: "120"'
    assert remix_genre(text, 3, create_seeded_rng(1)).text == text


@pytest.mark.parametrize(
    ("strategy", "prefix"),
    [
        (remix_style_tags, "style tags:"),
        (remix_recording, "recording:"),
        (remix_instruments, "instruments:"),
        (remix_mood, "mood:"),
    ],
)
def test_strategies_only_touch_their_field(strategy, prefix: str) -> None:
    for seed in range(10):
        result = strategy(FULL_MAX_PROMPT, create_seeded_rng(seed))
        assert _untouched(FULL_MAX_PROMPT, result.text, prefix)
        assert result.text.count("\n") == FULL_MAX_PROMPT.count("\n")


def test_standard_prompt_without_mood_keeps_dialect() -> None:
    assert remix_mood(STANDARD_PROMPT, create_seeded_rng(1)).text == STANDARD_PROMPT
    result = remix_style_tags(STANDARD_PROMPT, create_seeded_rng(1))
    assert _untouched(STANDARD_PROMPT, result.text, "Style Tags:")
    line = next(line for line in result.text.split("\n") if line.startswith("Style Tags:"))
    assert '"' not in line


def test_style_tags_remix_is_deterministic_and_unique() -> None:
    first = remix_style_tags(FULL_MAX_PROMPT, create_seeded_rng(5)).text
    assert first == remix_style_tags(FULL_MAX_PROMPT, create_seeded_rng(5)).text
    tags = [tag.strip() for tag in extract_field(first, "style tags").split(",")]
    assert len(tags) == len(set(tags))
    assert len(tags) >= 3


def test_recording_remix_has_no_conflicts() -> None:
    for seed in range(50):
        result = remix_recording(FULL_MAX_PROMPT, create_seeded_rng(seed))
        tags = [tag.strip() for tag in extract_field(result.text, "recording").split(",")]
        assert len(tags) == 3
        assert not has_recording_conflict(tags)


def test_instruments_remix_draws_from_genre_pools() -> None:
    pool = set()
    for genre in ("jazz", "rock", "funk"):
        pool.update(GENRE_REGISTRY[genre].instruments)
    result = remix_instruments(FULL_MAX_PROMPT, create_seeded_rng(12))
    items = [item.strip() for item in extract_field(result.text, "instruments").split(",")]
    instruments = [item for item in items if any(item.endswith(name) for name in pool)]
    assert 1 <= len(instruments) <= MAX_INSTRUMENTS
    assert any(item.endswith(" harmony") for item in items)
    assert any(item.endswith(" vocals") for item in items)


def test_remix_records_trace_decisions() -> None:
    trace = DecisionTrace()
    remix_genre(FULL_MAX_PROMPT, 2, create_seeded_rng(1), trace)
    remix_style_tags(FULL_MAX_PROMPT, create_seeded_rng(1), trace)
    assert trace.keys() == ["genre.count", "style_tags.blend"]
    assert trace.decisions[0].branch_taken == "requested"
