from __future__ import annotations

import pytest

from prompt_refiner.services import selection
from prompt_refiner.services.genres import TagWeights
from prompt_refiner.services.rng import create_seeded_rng
from prompt_refiner.services.selection import (
    MAX_STYLE_TAGS,
    TagDomain,
    assemble_style_tags,
    flatten_pool,
    select_domain_tags,
    select_electronic_tags,
    select_realism_tags,
    select_vocal_tags,
)
from prompt_refiner.services.tag_pools import (
    ELECTRONIC_CLARITY_TAGS,
    REALISM_TAGS,
    TEXTURE_TAGS,
    VOCAL_PERFORMANCE_TAGS,
)


def _weights(vocal: float) -> TagWeights:
    return TagWeights(vocal=vocal, spatial=0.5, harmonic=0.5, dynamic=0.5, temporal=0.5)


def test_selection_is_deterministic_for_a_seed() -> None:
    first = assemble_style_tags(["jazz", "soul"], create_seeded_rng(123))
    second = assemble_style_tags(["jazz", "soul"], create_seeded_rng(123))
    assert first == second


@pytest.mark.parametrize("domain", list(TagDomain))
def test_domain_selection_is_duplicate_free(domain: TagDomain) -> None:
    for seed in range(30):
        tags = select_domain_tags(domain, 5, create_seeded_rng(seed))
        assert len(tags) == len(set(tags)) == 5


def test_vocal_tags_are_empty_when_probability_is_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(selection, "weights_for", lambda genre: _weights(0.0))
    for seed in range(100):
        assert select_vocal_tags("pop", 2, create_seeded_rng(seed)) == []
    assert select_vocal_tags("pop", 2, lambda: 0.0) == []


def test_vocal_tags_always_present_when_probability_is_one(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(selection, "weights_for", lambda genre: _weights(1.0))
    vocal_pool = set(flatten_pool(VOCAL_PERFORMANCE_TAGS))
    for seed in range(100):
        tags = select_vocal_tags("pop", 2, create_seeded_rng(seed))
        assert len(tags) == 2
        assert set(tags) <= vocal_pool


def test_realism_tags_respect_genre_categories() -> None:
    allowed = set(flatten_pool(REALISM_TAGS, ("room_acoustics", "mic_character", "performance",
                                               "human_sounds", "analog_character")))
    for seed in range(20):
        tags = select_realism_tags("jazz", 3, create_seeded_rng(seed))
        assert set(tags) <= allowed


def test_realism_tags_use_every_category_for_unknown_genre() -> None:
    tags = select_realism_tags("polka", 4, create_seeded_rng(4))
    assert len(tags) == 4
    assert set(tags) <= set(flatten_pool(REALISM_TAGS))


def test_electronic_tags_come_from_clarity_pool() -> None:
    tags = select_electronic_tags(3, create_seeded_rng(8))
    assert set(tags) <= set(flatten_pool(ELECTRONIC_CLARITY_TAGS))


def test_assembled_tags_are_bounded_and_unique() -> None:
    texture = set(flatten_pool(TEXTURE_TAGS))
    for seed in range(50):
        result = assemble_style_tags(["ambient"], create_seeded_rng(seed))
        assert 0 < len(result.tags) <= MAX_STYLE_TAGS
        assert len(result.tags) == len(set(result.tags))
        assert len(result.sources["texture"]) == 2
        assert set(result.sources["texture"]) <= texture
        assert len(result.sources["recording"]) == 1


def test_zero_count_returns_nothing() -> None:
    assert select_domain_tags(TagDomain.SPATIAL, 0, create_seeded_rng(1)) == []
