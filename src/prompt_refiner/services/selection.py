"""Genre-weighted descriptor selection across the tag domains."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Sequence

from loguru import logger

from .genres import DEFAULT_GENRE, canonical_genres, weights_for
from .recording import select_recording_context
from .rng import Rng, shuffle
from .tag_pools import (
    DYNAMIC_TAGS,
    ELECTRONIC_CLARITY_TAGS,
    GENRE_REALISM_CATEGORIES,
    HARMONIC_TAGS,
    REALISM_TAGS,
    SPATIAL_TAGS,
    TEMPORAL_TAGS,
    TEXTURE_TAGS,
    VOCAL_PERFORMANCE_TAGS,
    TagPool,
)

MAX_STYLE_TAGS = 10
TEXTURE_TAG_COUNT = 2


class TagDomain(str, Enum):
    VOCAL = "vocal"
    SPATIAL = "spatial"
    HARMONIC = "harmonic"
    DYNAMIC = "dynamic"
    TEMPORAL = "temporal"
    TEXTURE = "texture"


DOMAIN_POOLS: dict[TagDomain, TagPool] = {
    TagDomain.VOCAL: VOCAL_PERFORMANCE_TAGS,
    TagDomain.SPATIAL: SPATIAL_TAGS,
    TagDomain.HARMONIC: HARMONIC_TAGS,
    TagDomain.DYNAMIC: DYNAMIC_TAGS,
    TagDomain.TEMPORAL: TEMPORAL_TAGS,
    TagDomain.TEXTURE: TEXTURE_TAGS,
}

# Upper bound of tags contributed by each weighted domain during assembly.
WEIGHTED_DOMAIN_LIMITS: dict[TagDomain, int] = {
    TagDomain.VOCAL: 2,
    TagDomain.SPATIAL: 1,
    TagDomain.HARMONIC: 1,
    TagDomain.DYNAMIC: 1,
    TagDomain.TEMPORAL: 1,
}


@dataclass(frozen=True)
class StyleTagSelection:
    tags: list[str]
    sources: dict[str, list[str]] = field(default_factory=dict)


def flatten_pool(pool: TagPool, categories: Iterable[str] | None = None) -> list[str]:
    keys = pool.keys() if categories is None else categories
    return dedupe(tag for key in keys for tag in pool.get(key, ()))


def dedupe(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def take_shuffled(candidates: Sequence[str], count: int, rng: Rng) -> list[str]:
    if count <= 0 or not candidates:
        return []
    return shuffle(candidates, rng)[: min(count, len(candidates))]


def select_vocal_tags(genre: str, count: int, rng: Rng) -> list[str]:
    """Vocal tags gated by the genre's vocal weight.

    A single draw above the weight yields an empty selection.
    """

    probability = weights_for(genre).vocal
    draw = rng()
    if probability <= 0.0 or draw > probability:
        return []
    return take_shuffled(flatten_pool(VOCAL_PERFORMANCE_TAGS), count, rng)


def select_domain_tags(domain: TagDomain, count: int, rng: Rng) -> list[str]:
    return take_shuffled(flatten_pool(DOMAIN_POOLS[domain]), count, rng)


def select_texture_tags(count: int, rng: Rng) -> list[str]:
    return select_domain_tags(TagDomain.TEXTURE, count, rng)


def select_realism_tags(genre: str, count: int, rng: Rng) -> list[str]:
    categories = GENRE_REALISM_CATEGORIES.get(genre.strip().lower())
    return take_shuffled(flatten_pool(REALISM_TAGS, categories), count, rng)


def select_electronic_tags(count: int, rng: Rng) -> list[str]:
    return take_shuffled(flatten_pool(ELECTRONIC_CLARITY_TAGS), count, rng)


def _weighted(probability: float, rng: Rng, selector: Callable[[], list[str]]) -> list[str]:
    if rng() < probability:
        return selector()
    return []


def assemble_style_tags(genres: Sequence[str], rng: Rng) -> StyleTagSelection:
    """Collect style tags for ``genres`` using the primary genre's weights."""

    canonical = canonical_genres(genres)
    primary = canonical[0] if canonical else DEFAULT_GENRE
    weights = weights_for(primary).as_dict()
    sources: dict[str, list[str]] = {}

    for domain, limit in WEIGHTED_DOMAIN_LIMITS.items():
        if domain is TagDomain.VOCAL:
            picked = select_vocal_tags(primary, limit, rng)
        else:
            picked = _weighted(
                weights[domain.value],
                rng,
                lambda domain=domain, limit=limit: select_domain_tags(domain, limit, rng),
            )
        if picked:
            sources[domain.value] = picked

    sources[TagDomain.TEXTURE.value] = select_texture_tags(TEXTURE_TAG_COUNT, rng)
    sources["recording"] = [select_recording_context(primary, rng)]

    tags = dedupe(tag for values in sources.values() for tag in values)[:MAX_STYLE_TAGS]
    logger.debug("Assembled {} style tags for {}", len(tags), primary)
    return StyleTagSelection(tags=tags, sources=sources)
