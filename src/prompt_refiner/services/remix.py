"""Single-field remix strategies.

Every strategy rewrites exactly one field of the prompt in its own dialect and
returns the text untouched when that field is missing.
"""

from __future__ import annotations

import random
from typing import Optional

from loguru import logger

from .fields import (
    Dialect,
    FieldName,
    detect_dialect,
    extract_genre,
    extract_genres,
    extract_mood,
    find_field_line,
    raw_genre_tokens,
    replace_field,
)
from .genres import GENRE_REGISTRY, MOOD_POOL, clamp_genre_count, electronic_ratio_for
from .instruments import assemble_instruments
from .recording import select_recording_context, select_recording_descriptors
from .rng import Rng, select_random_n
from .selection import (
    dedupe,
    select_electronic_tags,
    select_realism_tags,
    select_texture_tags,
    select_vocal_tags,
)
from .trace import DecisionTrace, trace_decision
from .types import RemixResult

STYLE_BLEND_SLOTS = 2
RECORDING_DESCRIPTOR_COUNT = 3


def _resolve(text: str, field: FieldName) -> tuple[Dialect, bool]:
    dialect = detect_dialect(text)
    return dialect, find_field_line(text, field, dialect) is not None


def remix_genre(
    text: str,
    target_genre_count: Optional[int] = None,
    rng: Optional[Rng] = None,
    trace: Optional[DecisionTrace] = None,
) -> RemixResult:
    """Redraw the genre field, keeping the slot count unless one is requested.

    Requested counts collapse to ``1`` when non-positive and to ``4`` when
    larger than the number of slots the product exposes.
    """

    rng = rng or random.random
    dialect, present = _resolve(text, FieldName.GENRE)
    if not present:
        return RemixResult(text=text)

    current = raw_genre_tokens(text)
    raw_count = len(current) or 1
    target = clamp_genre_count(target_genre_count, fallback=raw_count)

    excluded = {token.lower() for token in current}
    available = [key for key in GENRE_REGISTRY if key not in excluded]
    if len(available) < target:
        available = list(GENRE_REGISTRY)
    genres = select_random_n(available, target, rng)

    trace_decision(
        trace,
        "genre",
        "genre.count",
        "requested" if target_genre_count is not None else "preserved",
        f"{raw_count} existing slot(s), target {target}",
        {"genres": genres},
    )
    logger.debug("Remixed genre {} -> {}", current, genres)
    return RemixResult(text=replace_field(text, FieldName.GENRE, ", ".join(genres), dialect))


def remix_mood(
    text: str,
    rng: Optional[Rng] = None,
    trace: Optional[DecisionTrace] = None,
) -> RemixResult:
    rng = rng or random.random
    dialect, present = _resolve(text, FieldName.MOOD)
    if not present:
        return RemixResult(text=text)

    count = 2 if rng() < 0.5 else 3
    current = {token.strip().lower() for token in extract_mood(text).split(",")}
    candidates = [mood for mood in MOOD_POOL if mood not in current]
    moods = select_random_n(candidates, count, rng)
    trace_decision(trace, "mood", "mood.count", str(count), "two or three moods per remix")
    return RemixResult(text=replace_field(text, FieldName.MOOD, ", ".join(moods), dialect))


def remix_style_tags(
    text: str,
    rng: Optional[Rng] = None,
    trace: Optional[DecisionTrace] = None,
) -> RemixResult:
    """Regenerate style tags, blending electronic and organic pools by genre."""

    rng = rng or random.random
    dialect, present = _resolve(text, FieldName.STYLE_TAGS)
    if not present:
        return RemixResult(text=text)

    genre = extract_genre(text)
    ratio = electronic_ratio_for(genre)
    tags = select_vocal_tags(genre, 1, rng)
    tags += select_texture_tags(2, rng)

    electronic_slots = 0
    for _ in range(STYLE_BLEND_SLOTS):
        if rng() < ratio:
            electronic_slots += 1
            pool = select_electronic_tags(len(tags) + 1, rng)
        else:
            pool = select_realism_tags(genre, len(tags) + 1, rng)
        fresh = [tag for tag in pool if tag not in tags]
        if fresh:
            tags.append(fresh[0])

    tags.append(select_recording_context(genre, rng))
    tags = dedupe(tags)
    if not tags:
        tags = select_recording_descriptors(rng, 1, genre)

    trace_decision(
        trace,
        "style_tags",
        "style_tags.blend",
        f"{electronic_slots}/{STYLE_BLEND_SLOTS} electronic",
        f"electronic ratio {ratio:.2f} for {genre}",
        {"tags": tags},
    )
    return RemixResult(text=replace_field(text, FieldName.STYLE_TAGS, ", ".join(tags), dialect))


def remix_recording(
    text: str,
    rng: Optional[Rng] = None,
    trace: Optional[DecisionTrace] = None,
) -> RemixResult:
    rng = rng or random.random
    dialect, present = _resolve(text, FieldName.RECORDING)
    if not present:
        return RemixResult(text=text)

    genre = extract_genre(text)
    descriptors = select_recording_descriptors(rng, RECORDING_DESCRIPTOR_COUNT, genre)
    trace_decision(trace, "recording", "recording.descriptors", genre, "genre-biased sub-pools")
    return RemixResult(text=replace_field(text, FieldName.RECORDING, ", ".join(descriptors), dialect))


def remix_instruments(
    text: str,
    rng: Optional[Rng] = None,
    trace: Optional[DecisionTrace] = None,
) -> RemixResult:
    rng = rng or random.random
    dialect, present = _resolve(text, FieldName.INSTRUMENTS)
    if not present:
        return RemixResult(text=text)

    genres = extract_genres(text)
    selection = assemble_instruments(genres, rng)
    trace_decision(
        trace,
        "instruments",
        "instruments.source",
        "registry",
        f"pools of {', '.join(genres)}",
        {"instruments": selection.instruments},
    )
    return RemixResult(text=replace_field(text, FieldName.INSTRUMENTS, selection.formatted(), dialect))
