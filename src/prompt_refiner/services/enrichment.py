"""Direct Mode prompt construction from an explicit style list.

Styles are written into the genre field verbatim; everything else in the
prompt is derived from the registry genres the styles mention.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from loguru import logger

from .fields import MAX_MODE_HEADER_LINES
from .genres import (
    DEFAULT_GENRE,
    GENRE_REGISTRY,
    blended_bpm_range,
    canonical_genres,
    enforce_genre_count,
    format_bpm_range,
)
from .instruments import assemble_instruments
from .recording import select_recording_descriptors
from .rng import Rng, shuffle
from .selection import assemble_style_tags
from .trace import DecisionTrace, trace_decision

MOOD_COUNT = 3
HEADER_MOOD_COUNT = 2

_WORD_SPLIT = re.compile(r"[\s\-_]+")

# Style vocabulary that does not literally name a registry genre.
_STYLE_ALIASES = {
    "hip": "trap",
    "hop": "trap",
    "rap": "trap",
    "edm": "electronic",
    "electro": "electronic",
    "electropop": "electronic",
    "techno": "melodictechno",
    "dubstep": "electronic",
    "orchestral": "symphonic",
    "shoegaze": "dreampop",
    "dreamy": "dreampop",
    "chillhop": "lofi",
    "lo": "lofi",
    "fi": "lofi",
    "grunge": "rock",
    "emo": "punk",
    "gospel": "soul",
    "motown": "soul",
    "neosoul": "rnb",
    "r&b": "rnb",
    "salsa": "latin",
    "reggaeton": "latin",
    "bossa": "latin",
    "dub": "reggae",
    "swing": "jazz",
    "bebop": "jazz",
    "bluegrass": "country",
    "americana": "folk",
    "chiptune": "videogame",
    "vaporwave": "chillwave",
    "outrun": "synthwave",
    "retrowave": "synthwave",
}


def _build_style_genre_map() -> Mapping[str, str]:
    mapping: dict[str, str] = {}
    for key, definition in GENRE_REGISTRY.items():
        mapping.setdefault(key, key)
        for keyword in definition.keywords:
            if not _WORD_SPLIT.search(keyword):
                mapping.setdefault(keyword.lower(), key)
    mapping.update(_STYLE_ALIASES)
    return MappingProxyType(mapping)


STYLE_GENRE_MAP = _build_style_genre_map()


@dataclass(frozen=True)
class Enrichment:
    style_tags: list[str]
    instruments: list[str]
    instruments_formatted: str
    bpm_range: str
    production: str
    moods: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DirectModePrompt:
    text: str
    styles: list[str]
    genres: list[str]
    enrichment: Enrichment


def valid_styles(styles: Optional[Iterable[str]]) -> list[str]:
    return [style.strip() for style in styles or () if style and style.strip()]


def is_direct_mode(styles: Optional[Iterable[str]]) -> bool:
    return bool(valid_styles(styles))


def extract_genres_from_styles(styles: Iterable[str]) -> list[str]:
    """Registry genres named by words inside ``styles``.

    >>> extract_genres_from_styles(["dreamy shoegaze", "afrobeat-disco"])
    ['dreampop', 'afrobeat', 'disco']
    """

    found: list[str] = []
    for style in styles:
        for word in _WORD_SPLIT.split(style.lower()):
            genre = STYLE_GENRE_MAP.get(word)
            if genre is not None and genre not in found:
                found.append(genre)
    return found


def _moods_for(genres: Sequence[str], style_tags: Sequence[str], rng: Rng) -> list[str]:
    pool: list[str] = []
    for key in genres:
        pool.extend(mood for mood in GENRE_REGISTRY[key].moods if mood not in pool)
    if not pool:
        return list(style_tags[:MOOD_COUNT])
    return shuffle(pool, rng)[:MOOD_COUNT]


def enrich_from_genres(genres: Sequence[str], rng: Optional[Rng] = None) -> Enrichment:
    rng = rng or random.random
    keys = canonical_genres(genres)
    if not keys:
        logger.info("No registry genres to enrich from, falling back to {}", DEFAULT_GENRE)
        keys = [DEFAULT_GENRE]
    keys = enforce_genre_count(keys, len(keys), rng)

    styles = assemble_style_tags(keys, rng)
    instruments = assemble_instruments(keys, rng)
    bpm = blended_bpm_range(keys)
    if bpm is None:
        logger.warning("No BPM range for genres {}", keys)
    production = ", ".join(select_recording_descriptors(rng, 3, keys[0]))

    return Enrichment(
        style_tags=styles.tags,
        instruments=instruments.instruments,
        instruments_formatted=instruments.formatted(),
        bpm_range=format_bpm_range(bpm),
        production=production,
        moods=_moods_for(keys, styles.tags, rng),
    )


def build_max_mode_lines(styles: Sequence[str], enrichment: Enrichment) -> list[str]:
    return [
        *MAX_MODE_HEADER_LINES,
        f'genre: "{", ".join(styles)}"',
        f'bpm: "{enrichment.bpm_range}"',
        f'instruments: "{enrichment.instruments_formatted}"',
        f'style tags: "{", ".join(enrichment.style_tags)}"',
        f'recording: "{enrichment.production}"',
    ]


def build_standard_mode_lines(styles: Sequence[str], enrichment: Enrichment) -> list[str]:
    header_moods = ", ".join(enrichment.moods[:HEADER_MOOD_COUNT])
    joined = ", ".join(styles)
    header = f"[{header_moods}, {joined}]" if header_moods else f"[{joined}]"
    return [
        header,
        "",
        f"Genre: {joined}",
        f"BPM: {enrichment.bpm_range}",
        f"Mood: {', '.join(enrichment.moods)}",
        f"Instruments: {enrichment.instruments_formatted}",
        f"Style Tags: {', '.join(enrichment.style_tags)}",
        f"Recording: {enrichment.production}",
    ]


def build_direct_mode_prompt(
    styles: Iterable[str],
    max_mode: bool,
    rng: Optional[Rng] = None,
    trace: Optional[DecisionTrace] = None,
) -> DirectModePrompt:
    rng = rng or random.random
    kept = valid_styles(styles)
    genres = extract_genres_from_styles(kept)
    trace_decision(
        trace,
        "genre",
        "direct_mode.genres",
        ", ".join(genres) or DEFAULT_GENRE,
        f"{len(genres)} registry genre(s) found in {len(kept)} style(s)",
    )

    enrichment = enrich_from_genres(genres, rng)
    lines = (build_max_mode_lines if max_mode else build_standard_mode_lines)(kept, enrichment)
    logger.info("Built direct mode prompt from {} styles (max_mode={})", len(kept), max_mode)
    return DirectModePrompt(
        text="\n".join(lines),
        styles=kept,
        genres=genres or [DEFAULT_GENRE],
        enrichment=enrichment,
    )
