"""Recording-context vocabulary and the structured, conflict-free selector."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from loguru import logger

from .rng import Rng, pick_random, roll_chance, select_random
from .tag_pools import TagPool, frozen_pool

MAX_RECORDING_DESCRIPTORS = 4
GENRE_BIAS_CHANCE = 0.8

PRODUCTION_QUALITY: TagPool = frozen_pool(
    {
        "professional": (
            "professional mastering polish",
            "studio-grade production",
            "commercial studio sound",
        ),
        "demo": (
            "demo tape roughness",
            "rough mix aesthetic",
            "unpolished demo vibe",
        ),
        "raw": (
            "bootleg live recording character",
            "raw performance energy",
            "unedited authenticity",
        ),
    }
)

ENVIRONMENT: TagPool = frozen_pool(
    {
        "studio": (
            "studio session warmth",
            "recording studio precision",
            "controlled studio environment",
        ),
        "live": (
            "live venue capture",
            "concert hall natural acoustics",
            "live performance energy",
        ),
        "home": (
            "intimate bedroom recording",
            "home studio intimacy",
            "DIY home production",
        ),
        "rehearsal": (
            "rehearsal room authenticity",
            "jam session energy",
            "practice space vibe",
        ),
        "outdoor": (
            "outdoor field recording ambience",
            "natural environment capture",
            "open-air recording",
        ),
    }
)

TECHNIQUE: TagPool = frozen_pool(
    {
        "analog": (
            "warm analog console",
            "tape recorder warmth",
            "analog four-track character",
            "cassette tape saturation",
            "vintage vinyl warmth",
            "direct-to-disc recording",
        ),
        "digital": (
            "digital production clarity",
            "modern DAW precision",
            "digital multitrack recording",
        ),
        "hybrid": (
            "hybrid analog-digital chain",
            "mixed recording techniques",
        ),
    }
)

CHARACTER: TagPool = frozen_pool(
    {
        "intimate": (
            "intimate close-micd sound",
            "close-up performance texture",
            "single microphone capture",
        ),
        "spacious": (
            "atmospheric miking",
            "room ambience capture",
            "spacious reverb character",
        ),
        "vintage": (
            "vintage recording aesthetic",
            "retro production character",
            "classic recording vibe",
        ),
        "modern": (
            "contemporary production sound",
            "modern recording techniques",
        ),
        "compressed": (
            "radio broadcast compression",
            "tight dynamic control",
        ),
    }
)

RECORDING_SUB_POOLS: Mapping[str, TagPool] = MappingProxyType(
    {
        "quality": PRODUCTION_QUALITY,
        "environment": ENVIRONMENT,
        "technique": TECHNIQUE,
        "character": CHARACTER,
    }
)

# Any two keys of the same sub-pool contradict each other.
CONFLICTING_RECORDING_PAIRS: tuple[tuple[str, str, str], ...] = tuple(
    (pool_name, first, second)
    for pool_name, pool in RECORDING_SUB_POOLS.items()
    for index, first in enumerate(pool)
    for second in list(pool)[index + 1 :]
)

GENRE_RECORDING_CONTEXTS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "pop": (
            "modern pop studio",
            "professional vocal booth",
            "digital pop production",
            "radio-ready mix",
            "contemporary pop sound",
            "multitrack pop recording",
            "polished pop production",
            "commercial studio sound",
        ),
        "rock": (
            "live room tracking",
            "vintage rock studio",
            "analog rock recording",
            "garage band setup",
            "stadium rock production",
            "rehearsal room energy",
            "basement rock session",
            "classic rock studio",
            "power trio setup",
        ),
        "jazz": (
            "intimate jazz club",
            "small jazz ensemble",
            "live jazz session",
            "acoustic jazz space",
            "trio recording",
            "blue note studio vibe",
            "bebop era recording",
            "jazz quartet intimacy",
            "smoky club atmosphere",
        ),
        "blues": (
            "delta blues porch recording",
            "chicago blues club",
            "juke joint atmosphere",
            "roadhouse blues session",
            "raw blues tracking",
            "vintage blues studio",
            "one-mic blues capture",
            "acoustic blues intimacy",
        ),
        "soul": (
            "memphis soul studio",
            "motown recording booth",
            "classic soul sound",
            "vintage soul session",
            "church recording vibe",
            "stax records warmth",
            "philadelphia soul production",
            "southern soul studio",
        ),
        "rnb": (
            "contemporary r&b studio",
            "smooth r&b production",
            "neo-soul recording",
            "modern r&b booth",
            "bedroom r&b session",
            "trap-soul production",
            "alternative r&b sound",
        ),
        "country": (
            "nashville studio warmth",
            "honky-tonk recording",
            "country barn session",
            "acoustic country space",
            "outlaw country vibe",
            "bluegrass porch recording",
            "texas country studio",
            "americana recording",
            "country road sound",
        ),
        "folk": (
            "coffeehouse recording",
            "cabin acoustic session",
            "folk festival sound",
            "living room intimacy",
            "campfire recording",
            "traditional folk space",
            "singer-songwriter booth",
            "acoustic folk studio",
        ),
        "classical": (
            "concert hall recording",
            "symphonic venue capture",
            "chamber music space",
            "recital hall acoustics",
            "orchestral stage sound",
            "cathedral recording",
            "classical studio precision",
            "conservatory hall",
        ),
        "orchestral": (
            "cinematic scoring stage",
            "symphonic hall capture",
            "film scoring studio",
            "large ensemble recording",
            "abbey road orchestral",
            "epic orchestral space",
            "studio orchestra sound",
        ),
        "ambient": (
            "atmospheric field recording",
            "cathedral reverb space",
            "nature soundscape",
            "experimental studio",
            "ethereal sound design",
            "drone recording space",
            "minimal ambient room",
            "immersive soundscape",
        ),
        "cinematic": (
            "film scoring stage",
            "epic trailer production",
            "cinematic sound design",
            "hollywood scoring studio",
            "dramatic orchestral space",
            "soundtrack recording",
            "theatrical sound stage",
        ),
        "electronic": (
            "digital production studio",
            "electronic music workstation",
            "synthesizer laboratory",
            "modular synth setup",
            "laptop production",
            "home studio electronic",
            "professional edm studio",
            "hybrid analog-digital rig",
        ),
        "edm": (
            "festival sound system",
            "club sound design",
            "mainstage production",
            "modern edm studio",
            "dj booth recording",
            "electronic dance floor",
            "rave warehouse sound",
            "massive sound system",
        ),
        "house": (
            "chicago house studio",
            "underground club sound",
            "deep house production",
            "warehouse party vibe",
            "ibiza club recording",
            "classic house studio",
            "modern house production",
        ),
        "techno": (
            "berlin warehouse techno",
            "industrial techno space",
            "minimal techno studio",
            "detroit techno sound",
            "underground rave recording",
            "modular techno setup",
            "acid techno production",
        ),
        "metal": (
            "heavy metal studio",
            "brutal tracking room",
            "metal rehearsal space",
            "high-gain production",
            "thrash metal sound",
            "doom metal recording",
            "progressive metal studio",
            "extreme metal tracking",
        ),
        "punk": (
            "punk basement recording",
            "raw punk session",
            "diy punk studio",
            "garage punk sound",
            "hardcore punk tracking",
            "independent punk recording",
            "lo-fi punk aesthetic",
        ),
    }
)


def _mentions(normalized: str, needles: Iterable[str]) -> bool:
    return any(needle in normalized for needle in needles)


def preferred_technique(genre: Optional[str]) -> Optional[str]:
    if not genre:
        return None
    normalized = genre.lower()
    if _mentions(normalized, ("electronic", "edm", "house", "techno", "trap", "dubstep")):
        return "digital"
    if _mentions(normalized, ("folk", "blues", "jazz", "soul", "vintage", "retro")):
        return "analog"
    if _mentions(normalized, ("pop", "rock", "indie")):
        return "hybrid"
    return None


def preferred_environment(genre: Optional[str]) -> Optional[str]:
    if not genre:
        return None
    normalized = genre.lower()
    if _mentions(normalized, ("classical", "orchestral", "symphonic")):
        return "live"
    if _mentions(normalized, ("jazz", "blues")):
        return "live"
    if _mentions(normalized, ("lofi", "lo-fi", "bedroom")):
        return "home"
    if _mentions(normalized, ("punk", "garage")):
        return "rehearsal"
    return None


def _biased_key(pool: TagPool, preferred: Optional[str], rng: Rng) -> str:
    if preferred is not None and roll_chance(GENRE_BIAS_CHANCE, rng):
        return preferred
    return select_random(list(pool.keys()), rng)


def _draw(pool: TagPool, key: str, rng: Rng) -> str:
    return select_random(pool[key], rng)


def select_recording_descriptors(
    rng: Rng,
    count: int = 3,
    genre: Optional[str] = None,
) -> list[str]:
    """Pick at most one tag from each recording sub-pool.

    Quality is always present; environment, technique and character follow
    in that order as ``count`` (clamped to 1..4) allows.
    """

    clamped = max(1, min(MAX_RECORDING_DESCRIPTORS, count))
    selected = [_draw(PRODUCTION_QUALITY, select_random(list(PRODUCTION_QUALITY), rng), rng)]
    if clamped >= 2:
        key = _biased_key(ENVIRONMENT, preferred_environment(genre), rng)
        selected.append(_draw(ENVIRONMENT, key, rng))
    if clamped >= 3:
        key = _biased_key(TECHNIQUE, preferred_technique(genre), rng)
        selected.append(_draw(TECHNIQUE, key, rng))
    if clamped >= 4:
        selected.append(_draw(CHARACTER, select_random(list(CHARACTER), rng), rng))
    logger.debug("Recording descriptors for {}: {}", genre or "any genre", selected)
    return selected


def select_recording_context(genre: Optional[str], rng: Rng) -> str:
    curated = GENRE_RECORDING_CONTEXTS.get((genre or "").strip().lower(), ())
    context = pick_random(curated, rng)
    if context is not None:
        return context
    return select_recording_descriptors(rng, 1, genre)[0]


def recording_keys_for(tags: Iterable[str]) -> dict[str, set[str]]:
    """Map each sub-pool name to the keys whose tags appear in ``tags``."""

    present = set(tags)
    found: dict[str, set[str]] = {}
    for pool_name, pool in RECORDING_SUB_POOLS.items():
        for key, values in pool.items():
            if present.intersection(values):
                found.setdefault(pool_name, set()).add(key)
    return found


def has_recording_conflict(tags: Iterable[str]) -> bool:
    return any(len(keys) > 1 for keys in recording_keys_for(tags).values())
