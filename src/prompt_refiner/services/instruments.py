"""Instrument, harmony and vocal suggestions drawn from the genre registry."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import zip_longest
from typing import Sequence

from .genres import DEFAULT_GENRE, GENRE_REGISTRY, canonical_genres
from .rng import Rng, select_random, shuffle
from .selection import dedupe
from .tag_pools import (
    ARTICULATION_CHANCE,
    ARTICULATIONS,
    GENRE_VOCAL_STYLES,
    INSTRUMENT_FAMILIES,
    VOCAL_DELIVERIES,
    VOCAL_RANGES,
    VOCAL_TECHNIQUES,
)

MAX_INSTRUMENTS = 4


@dataclass(frozen=True)
class VocalSuggestion:
    range: str
    delivery: str
    technique: str

    def as_tags(self) -> list[str]:
        return [
            f"{self.range.lower()} vocals",
            f"{self.delivery.lower()} delivery",
            self.technique.lower(),
        ]


@dataclass(frozen=True)
class InstrumentSelection:
    instruments: list[str]
    harmony: str
    vocals: list[str]

    def formatted(self) -> str:
        return ", ".join([*self.instruments, self.harmony, *self.vocals])


def select_instruments(genres: Sequence[str], rng: Rng, limit: int = MAX_INSTRUMENTS) -> list[str]:
    """Interleave shuffled registry pools so every genre contributes early."""

    keys = canonical_genres(genres) or [DEFAULT_GENRE]
    pools = [shuffle(GENRE_REGISTRY[key].instruments, rng) for key in keys]
    interleaved = (item for group in zip_longest(*pools) for item in group if item is not None)
    return dedupe(interleaved)[: max(0, limit)]


def articulate_instrument(
    instrument: str,
    rng: Rng,
    chance: float = ARTICULATION_CHANCE,
) -> str:
    if rng() > chance:
        return instrument
    family = INSTRUMENT_FAMILIES.get(instrument.lower())
    if family is None:
        return instrument
    return f"{select_random(ARTICULATIONS[family], rng)} {instrument}"


def harmony_tag(genre: str, rng: Rng) -> str:
    definition = GENRE_REGISTRY.get(genre, GENRE_REGISTRY[DEFAULT_GENRE])
    progression = select_random(definition.progressions, rng)
    return f"{progression.name} ({progression.pattern}) harmony"


def vocal_suggestion(genre: str, rng: Rng) -> VocalSuggestion:
    palette = GENRE_VOCAL_STYLES.get(genre, {})
    return VocalSuggestion(
        range=select_random(palette.get("range", VOCAL_RANGES), rng),
        delivery=select_random(palette.get("delivery", VOCAL_DELIVERIES), rng),
        technique=select_random(palette.get("technique", VOCAL_TECHNIQUES), rng),
    )


def assemble_instruments(genres: Sequence[str], rng: Rng) -> InstrumentSelection:
    keys = canonical_genres(genres) or [DEFAULT_GENRE]
    primary = keys[0]
    instruments = [articulate_instrument(name, rng) for name in select_instruments(keys, rng)]
    return InstrumentSelection(
        instruments=instruments,
        harmony=harmony_tag(primary, rng),
        vocals=vocal_suggestion(primary, rng).as_tags(),
    )
