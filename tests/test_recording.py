from __future__ import annotations

import pytest

from prompt_refiner.services.recording import (
    CONFLICTING_RECORDING_PAIRS,
    ENVIRONMENT,
    GENRE_RECORDING_CONTEXTS,
    PRODUCTION_QUALITY,
    TECHNIQUE,
    has_recording_conflict,
    preferred_environment,
    preferred_technique,
    recording_keys_for,
    select_recording_context,
    select_recording_descriptors,
)
from prompt_refiner.services.rng import create_seeded_rng


def test_conflicting_pairs_cover_declared_contradictions() -> None:
    assert ("quality", "professional", "demo") in CONFLICTING_RECORDING_PAIRS
    assert ("technique", "analog", "digital") in CONFLICTING_RECORDING_PAIRS


@pytest.mark.parametrize("genre", [None, "jazz", "electronic", "rock", "punk", "classical"])
def test_descriptors_never_contain_conflicting_pairs(genre: str | None) -> None:
    for seed in range(200):
        tags = select_recording_descriptors(create_seeded_rng(seed), 4, genre)
        assert not has_recording_conflict(tags), tags
        assert len(tags) == len(set(tags))


def test_descriptor_count_is_clamped() -> None:
    rng = create_seeded_rng(11)
    assert len(select_recording_descriptors(rng, 0)) == 1
    assert len(select_recording_descriptors(rng, 2)) == 2
    assert len(select_recording_descriptors(rng, 9)) == 4


def test_quality_descriptor_always_comes_first() -> None:
    quality_tags = {tag for values in PRODUCTION_QUALITY.values() for tag in values}
    for seed in range(20):
        tags = select_recording_descriptors(create_seeded_rng(seed), 3)
        assert tags[0] in quality_tags


def test_genre_bias_prefers_matching_technique() -> None:
    analog = set(TECHNIQUE["analog"])
    hits = 0
    for seed in range(200):
        tags = select_recording_descriptors(create_seeded_rng(seed), 3, "smooth jazz")
        hits += tags[2] in analog
    assert hits > 140


def test_substring_heuristics() -> None:
    assert preferred_technique("deep house") == "digital"
    assert preferred_technique("delta blues") == "analog"
    assert preferred_technique("indie rock") == "hybrid"
    assert preferred_technique("polka") is None
    assert preferred_environment("symphonic metal") == "live"
    assert preferred_environment(None) is None


def test_environment_bias_for_jazz() -> None:
    live = set(ENVIRONMENT["live"])
    tags = [select_recording_descriptors(create_seeded_rng(seed), 2, "jazz")[1] for seed in range(100)]
    assert sum(tag in live for tag in tags) > 60


def test_recording_context_prefers_curated_list() -> None:
    for seed in range(20):
        assert select_recording_context("pop", create_seeded_rng(seed)) in GENRE_RECORDING_CONTEXTS["pop"]


def test_recording_context_falls_back_to_quality_descriptor() -> None:
    quality_tags = {tag for values in PRODUCTION_QUALITY.values() for tag in values}
    assert "polka" not in GENRE_RECORDING_CONTEXTS
    assert select_recording_context("polka", create_seeded_rng(2)) in quality_tags


def test_recording_keys_for_groups_tags_by_pool() -> None:
    tags = [PRODUCTION_QUALITY["professional"][0], PRODUCTION_QUALITY["demo"][0]]
    assert recording_keys_for(tags) == {"quality": {"professional", "demo"}}
    assert has_recording_conflict(tags)
