"""Canonical genre registry with per-genre weights and resolution helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from .rng import Rng, shuffle

DEFAULT_GENRE = "pop"
MAX_GENRE_SLOTS = 4
NARROW_RANGE_SPREAD = 60


@dataclass(frozen=True)
class BpmRange:
    min: int
    max: int
    typical: int


@dataclass(frozen=True)
class ChordProgression:
    name: str
    pattern: str


@dataclass(frozen=True)
class GenreDefinition:
    key: str
    name: str
    keywords: tuple[str, ...]
    bpm: BpmRange
    moods: tuple[str, ...]
    instruments: tuple[str, ...]
    progressions: tuple[ChordProgression, ...]


@dataclass(frozen=True)
class TagWeights:
    vocal: float
    spatial: float
    harmonic: float
    dynamic: float
    temporal: float

    def as_dict(self) -> dict[str, float]:
        return {
            "vocal": self.vocal,
            "spatial": self.spatial,
            "harmonic": self.harmonic,
            "dynamic": self.dynamic,
            "temporal": self.temporal,
        }


_POP_PROGRESSION = ChordProgression("Axis", "I-V-vi-IV")
_DOO_WOP = ChordProgression("Doo-wop", "I-vi-IV-V")
_TWO_FIVE_ONE = ChordProgression("Jazz ii-V-I", "ii7-V7-Imaj7")
_TWELVE_BAR = ChordProgression("Twelve-bar blues", "I7-IV7-I7-V7")
_ANDALUSIAN = ChordProgression("Andalusian cadence", "i-VII-VI-V")
_AEOLIAN_LOOP = ChordProgression("Aeolian loop", "i-VI-III-VII")
_MIXOLYDIAN_VAMP = ChordProgression("Mixolydian vamp", "I-bVII-IV-I")
_ONE_CHORD_VAMP = ChordProgression("One-chord vamp", "i7")
_LYDIAN_FLOAT = ChordProgression("Lydian float", "I-II-I-II")
_CIRCLE = ChordProgression("Circle of fifths", "vi-ii-V-I")
_PLAGAL = ChordProgression("Plagal cadence", "I-IV-I")
_NEO_SOUL = ChordProgression("Neo-soul turnaround", "IVmaj7-iii7-vi7")


def _genre(
    key: str,
    name: str,
    keywords: Sequence[str],
    bpm: tuple[int, int, int],
    moods: Sequence[str],
    instruments: Sequence[str],
    progressions: Sequence[ChordProgression],
) -> GenreDefinition:
    low, high, typical = bpm
    return GenreDefinition(
        key=key,
        name=name,
        keywords=tuple(keywords),
        bpm=BpmRange(min=low, max=high, typical=typical),
        moods=tuple(moods),
        instruments=tuple(instruments),
        progressions=tuple(progressions),
    )


_DEFINITIONS = (
    _genre(
        "ambient", "Ambient", ("ambient", "atmospheric", "soundscape", "ethereal"), (60, 90, 78),
        ("ethereal", "meditative", "dreamy", "serene"),
        ("Rhodes", "synth pad", "ambient pad", "granular synth", "singing bowls", "felt piano",
         "tape loops", "cello", "glass bells", "shimmer pad"),
        (_LYDIAN_FLOAT, _PLAGAL),
    ),
    _genre(
        "jazz", "Jazz", ("jazz", "bebop", "swing", "smooth jazz"), (80, 160, 110),
        ("smooth", "sophisticated", "late-night", "warm"),
        ("piano", "upright bass", "jazz brushes", "tenor sax", "muted trumpet", "hollowbody guitar",
         "vibraphone", "Rhodes", "clarinet"),
        (_TWO_FIVE_ONE, _CIRCLE),
    ),
    _genre(
        "electronic", "Electronic", ("electronic", "electronica", "edm", "idm"), (110, 140, 124),
        ("driving", "futuristic", "hypnotic", "energetic"),
        ("analog synth", "synth bass", "drum machine", "arpeggiator", "FM synth", "supersaw",
         "synth pad", "vocoder"),
        (_AEOLIAN_LOOP, _ONE_CHORD_VAMP),
    ),
    _genre(
        "rock", "Rock", ("rock", "alt rock", "hard rock", "classic rock"), (100, 150, 120),
        ("energetic", "rebellious", "anthemic", "gritty"),
        ("electric guitar", "distorted guitar", "bass", "drums", "Hammond organ", "acoustic guitar",
         "piano"),
        (_MIXOLYDIAN_VAMP, _POP_PROGRESSION),
    ),
    _genre(
        "pop", "Pop", ("pop", "mainstream", "radio"), (95, 130, 112),
        ("uplifting", "catchy", "bright", "romantic"),
        ("piano", "synth", "electric guitar", "bass", "drums", "synth pad", "acoustic guitar",
         "handclaps", "strings"),
        (_POP_PROGRESSION, _DOO_WOP),
    ),
    _genre(
        "classical", "Classical", ("classical", "orchestral", "chamber"), (60, 140, 90),
        ("majestic", "elegant", "contemplative", "dramatic"),
        ("grand piano", "violin", "cello", "viola", "string ensemble", "french horn", "flute",
         "oboe", "clarinet", "harp", "timpani"),
        (_CIRCLE, _PLAGAL),
    ),
    _genre(
        "lofi", "Lo-Fi", ("lofi", "lo-fi", "chillhop", "study beats"), (70, 90, 80),
        ("nostalgic", "mellow", "cozy", "wistful"),
        ("Rhodes", "electric piano", "upright bass", "jazz brushes", "vinyl crackle", "clean guitar",
         "synth pad", "muted trumpet"),
        (_NEO_SOUL, _TWO_FIVE_ONE),
    ),
    _genre(
        "synthwave", "Synthwave", ("synthwave", "retrowave", "outrun"), (80, 118, 100),
        ("nostalgic", "neon", "cinematic", "driving"),
        ("analog synth", "synth bass", "drum machine", "arpeggiator", "electric guitar", "synth pad",
         "Moog synth"),
        (_AEOLIAN_LOOP, _ANDALUSIAN),
    ),
    _genre(
        "cinematic", "Cinematic", ("cinematic", "film score", "trailer", "epic"), (70, 140, 96),
        ("epic", "dramatic", "triumphant", "tense"),
        ("string ensemble", "brass section", "french horn", "timpani", "grand piano", "choir",
         "cello", "taiko drums", "harp"),
        (_AEOLIAN_LOOP, _CIRCLE),
    ),
    _genre(
        "folk", "Folk", ("folk", "acoustic", "singer-songwriter", "americana"), (80, 120, 96),
        ("earthy", "heartfelt", "nostalgic", "gentle"),
        ("acoustic guitar", "fiddle", "banjo", "mandolin", "upright bass", "harmonica", "cello",
         "accordion"),
        (_PLAGAL, _POP_PROGRESSION),
    ),
    _genre(
        "rnb", "R&B", ("rnb", "r&b", "neo soul", "contemporary r&b"), (60, 100, 80),
        ("sensual", "smooth", "intimate", "soulful"),
        ("Rhodes", "synth bass", "drums", "electric guitar", "synth pad", "808", "strings",
         "electric piano"),
        (_NEO_SOUL, _TWO_FIVE_ONE),
    ),
    _genre(
        "videogame", "Video Game", ("videogame", "chiptune", "8-bit", "game music"), (100, 160, 130),
        ("playful", "adventurous", "heroic", "quirky"),
        ("square wave lead", "chiptune arpeggio", "FM synth", "synth bass", "drum machine",
         "string ensemble", "glockenspiel"),
        (_MIXOLYDIAN_VAMP, _LYDIAN_FLOAT),
    ),
    _genre(
        "country", "Country", ("country", "nashville", "honky-tonk"), (80, 130, 104),
        ("heartfelt", "nostalgic", "rowdy", "hopeful"),
        ("acoustic guitar", "pedal steel", "fiddle", "banjo", "Telecaster", "bass", "drums",
         "harmonica"),
        (_PLAGAL, _POP_PROGRESSION),
    ),
    _genre(
        "soul", "Soul", ("soul", "motown", "northern soul"), (70, 110, 92),
        ("soulful", "passionate", "warm", "uplifting"),
        ("Hammond organ", "electric bass", "drums", "brass section", "electric guitar", "piano",
         "tambourine", "strings"),
        (_DOO_WOP, _NEO_SOUL),
    ),
    _genre(
        "blues", "Blues", ("blues", "delta blues", "chicago blues"), (60, 120, 84),
        ("gritty", "melancholic", "raw", "soulful"),
        ("electric guitar", "slide guitar", "harmonica", "upright bass", "drums", "piano",
         "Hammond organ"),
        (_TWELVE_BAR,),
    ),
    _genre(
        "punk", "Punk", ("punk", "hardcore", "pop punk"), (150, 200, 172),
        ("rebellious", "aggressive", "raw", "defiant"),
        ("distorted guitar", "electric bass", "drums", "electric guitar"),
        (_POP_PROGRESSION, _MIXOLYDIAN_VAMP),
    ),
    _genre(
        "latin", "Latin", ("latin", "salsa", "reggaeton", "bossa nova"), (90, 130, 104),
        ("passionate", "sultry", "festive", "vibrant"),
        ("nylon string guitar", "congas", "timbales", "bongos", "brass section", "piano",
         "electric bass", "maracas"),
        (_ANDALUSIAN, _TWO_FIVE_ONE),
    ),
    _genre(
        "metal", "Metal", ("metal", "heavy metal", "thrash", "doom"), (90, 200, 140),
        ("aggressive", "dark", "intense", "brooding"),
        ("distorted guitar", "electric bass", "drums", "double kick drums", "electric guitar",
         "choir"),
        (_AEOLIAN_LOOP, _ANDALUSIAN),
    ),
    _genre(
        "trap", "Trap", ("trap", "hip hop", "rap"), (130, 170, 140),
        ("dark", "hard-hitting", "confident", "moody"),
        ("808", "hi-hat rolls", "synth pad", "piano", "synth bass", "bells", "snare"),
        (_ONE_CHORD_VAMP, _AEOLIAN_LOOP),
    ),
    _genre(
        "retro", "Retro", ("retro", "vintage", "throwback", "oldies"), (90, 130, 110),
        ("nostalgic", "playful", "warm", "bright"),
        ("Wurlitzer", "electric bass", "drums", "electric guitar", "brass section", "organ",
         "tambourine"),
        (_DOO_WOP, _POP_PROGRESSION),
    ),
    _genre(
        "symphonic", "Symphonic", ("symphonic", "symphony", "orchestra"), (60, 140, 88),
        ("majestic", "grand", "dramatic", "triumphant"),
        ("string ensemble", "brass section", "timpani", "french horn", "choir", "harp", "flute",
         "pipe organ"),
        (_CIRCLE, _PLAGAL),
    ),
    _genre(
        "disco", "Disco", ("disco", "nu-disco", "boogie"), (110, 130, 120),
        ("groovy", "euphoric", "glamorous", "danceable"),
        ("electric bass", "drums", "strings", "electric guitar", "brass section", "electric piano",
         "congas"),
        (_NEO_SOUL, _MIXOLYDIAN_VAMP),
    ),
    _genre(
        "funk", "Funk", ("funk", "p-funk", "groove"), (90, 125, 106),
        ("groovy", "funky", "playful", "confident"),
        ("electric bass", "clean guitar", "drums", "brass section", "Hammond organ", "clavinet",
         "congas"),
        (_ONE_CHORD_VAMP, _MIXOLYDIAN_VAMP),
    ),
    _genre(
        "reggae", "Reggae", ("reggae", "dub", "roots reggae"), (60, 90, 76),
        ("laid-back", "uplifting", "sunny", "spiritual"),
        ("electric bass", "drums", "clean guitar", "Hammond organ", "brass section", "melodica",
         "percussion"),
        (_PLAGAL, _MIXOLYDIAN_VAMP),
    ),
    _genre(
        "afrobeat", "Afrobeat", ("afrobeat", "afrobeats", "afro-pop"), (95, 125, 110),
        ("joyful", "vibrant", "hypnotic", "celebratory"),
        ("talking drum", "congas", "electric bass", "clean guitar", "brass section", "shekere",
         "drums"),
        (_ONE_CHORD_VAMP, _MIXOLYDIAN_VAMP),
    ),
    _genre(
        "house", "House", ("house", "deep house", "tech house"), (118, 130, 124),
        ("euphoric", "groovy", "uplifting", "hypnotic"),
        ("drum machine", "synth bass", "electric piano", "synth pad", "handclaps", "organ",
         "vocal chops"),
        (_NEO_SOUL, _AEOLIAN_LOOP),
    ),
    _genre(
        "trance", "Trance", ("trance", "uplifting trance", "psytrance"), (125, 145, 138),
        ("euphoric", "soaring", "hypnotic", "emotional"),
        ("supersaw", "arpeggiator", "synth bass", "drum machine", "synth pad", "piano"),
        (_AEOLIAN_LOOP, _ANDALUSIAN),
    ),
    _genre(
        "downtempo", "Downtempo", ("downtempo", "trip hop", "chillout"), (70, 100, 88),
        ("mellow", "introspective", "smoky", "hazy"),
        ("breakbeat drums", "synth pad", "Rhodes", "upright bass", "strings", "turntable scratches"),
        (_NEO_SOUL, _ONE_CHORD_VAMP),
    ),
    _genre(
        "dreampop", "Dream Pop", ("dreampop", "dream pop", "shoegaze"), (70, 110, 92),
        ("dreamy", "hazy", "wistful", "ethereal"),
        ("reverb guitar", "synth pad", "electric bass", "drums", "electric guitar", "glockenspiel"),
        (_LYDIAN_FLOAT, _POP_PROGRESSION),
    ),
    _genre(
        "chillwave", "Chillwave", ("chillwave", "glo-fi"), (80, 110, 95),
        ("nostalgic", "sunny", "hazy", "relaxed"),
        ("analog synth", "drum machine", "synth bass", "clean guitar", "synth pad"),
        (_LYDIAN_FLOAT, _NEO_SOUL),
    ),
    _genre(
        "newage", "New Age", ("newage", "new age", "healing", "meditation"), (60, 90, 72),
        ("peaceful", "serene", "spiritual", "healing"),
        ("piano", "synth pad", "flute", "harp", "singing bowls", "ocean drum", "strings"),
        (_LYDIAN_FLOAT, _PLAGAL),
    ),
    _genre(
        "hyperpop", "Hyperpop", ("hyperpop", "bubblegum bass", "digicore"), (130, 170, 150),
        ("chaotic", "euphoric", "glitchy", "playful"),
        ("supersaw", "distorted 808", "pitched vocal chops", "drum machine", "synth bass",
         "bitcrushed synth"),
        (_POP_PROGRESSION, _AEOLIAN_LOOP),
    ),
    _genre(
        "drill", "Drill", ("drill", "uk drill", "ny drill"), (135, 150, 142),
        ("menacing", "dark", "cold", "tense"),
        ("808", "sliding 808", "hi-hat rolls", "piano", "strings", "choir", "snare"),
        (_ANDALUSIAN, _ONE_CHORD_VAMP),
    ),
    _genre(
        "melodictechno", "Melodic Techno", ("melodictechno", "melodic techno", "progressive"),
        (118, 128, 122),
        ("hypnotic", "emotional", "driving", "introspective"),
        ("analog synth", "arpeggiator", "synth bass", "drum machine", "synth pad", "Moog synth"),
        (_AEOLIAN_LOOP, _ONE_CHORD_VAMP),
    ),
    _genre(
        "indie", "Indie", ("indie", "indie rock", "indie pop", "alternative"), (90, 140, 116),
        ("bittersweet", "introspective", "youthful", "hopeful"),
        ("electric guitar", "clean guitar", "bass", "drums", "synth", "acoustic guitar",
         "glockenspiel"),
        (_POP_PROGRESSION, _MIXOLYDIAN_VAMP),
    ),
)

GENRE_REGISTRY: Mapping[str, GenreDefinition] = MappingProxyType(
    {definition.key: definition for definition in _DEFINITIONS}
)

DEFAULT_WEIGHTS = TagWeights(vocal=0.5, spatial=0.5, harmonic=0.4, dynamic=0.4, temporal=0.3)


def _w(vocal: float, spatial: float, harmonic: float, dynamic: float, temporal: float) -> TagWeights:
    return TagWeights(vocal, spatial, harmonic, dynamic, temporal)


GENRE_TAG_WEIGHTS: Mapping[str, TagWeights] = MappingProxyType(
    {
        "jazz": _w(0.8, 0.4, 0.5, 0.3, 0.3),
        "blues": _w(0.75, 0.35, 0.4, 0.35, 0.3),
        "soul": _w(0.85, 0.4, 0.45, 0.4, 0.3),
        "rnb": _w(0.85, 0.5, 0.4, 0.45, 0.35),
        "electronic": _w(0.4, 0.7, 0.3, 0.5, 0.4),
        "house": _w(0.45, 0.65, 0.3, 0.55, 0.5),
        "trance": _w(0.3, 0.8, 0.35, 0.4, 0.35),
        "melodictechno": _w(0.35, 0.75, 0.4, 0.45, 0.4),
        "rock": _w(0.6, 0.45, 0.35, 0.55, 0.35),
        "metal": _w(0.45, 0.35, 0.3, 0.7, 0.35),
        "punk": _w(0.6, 0.3, 0.2, 0.6, 0.3),
        "indie": _w(0.65, 0.5, 0.4, 0.4, 0.35),
        "pop": _w(0.75, 0.55, 0.4, 0.5, 0.35),
        "disco": _w(0.65, 0.55, 0.4, 0.5, 0.45),
        "funk": _w(0.6, 0.45, 0.4, 0.5, 0.5),
        "hyperpop": _w(0.7, 0.7, 0.35, 0.6, 0.4),
        "ambient": _w(0.15, 0.85, 0.5, 0.25, 0.2),
        "dreampop": _w(0.5, 0.8, 0.45, 0.3, 0.25),
        "chillwave": _w(0.45, 0.75, 0.4, 0.3, 0.3),
        "newage": _w(0.2, 0.8, 0.55, 0.25, 0.2),
        "downtempo": _w(0.4, 0.65, 0.4, 0.35, 0.35),
        "synthwave": _w(0.45, 0.7, 0.45, 0.45, 0.35),
        "classical": _w(0.3, 0.75, 0.7, 0.55, 0.3),
        "symphonic": _w(0.25, 0.8, 0.65, 0.6, 0.3),
        "cinematic": _w(0.3, 0.85, 0.6, 0.65, 0.35),
        "folk": _w(0.75, 0.35, 0.45, 0.3, 0.25),
        "country": _w(0.8, 0.4, 0.4, 0.35, 0.3),
        "latin": _w(0.65, 0.45, 0.4, 0.45, 0.5),
        "reggae": _w(0.7, 0.5, 0.35, 0.4, 0.45),
        "afrobeat": _w(0.55, 0.5, 0.4, 0.5, 0.55),
        "trap": _w(0.7, 0.55, 0.25, 0.6, 0.45),
        "drill": _w(0.7, 0.5, 0.2, 0.6, 0.45),
        "lofi": _w(0.45, 0.55, 0.4, 0.3, 0.35),
        "retro": _w(0.6, 0.5, 0.4, 0.4, 0.35),
        "videogame": _w(0.2, 0.7, 0.55, 0.5, 0.4),
    }
)

# 1.0 draws style tags purely from the electronic clarity pool, 0.0 purely from realism.
ELECTRONIC_RATIO: Mapping[str, float] = MappingProxyType(
    {
        "ambient": 0.5,
        "jazz": 0.0,
        "electronic": 1.0,
        "rock": 0.1,
        "pop": 0.5,
        "classical": 0.0,
        "lofi": 0.4,
        "synthwave": 1.0,
        "cinematic": 0.3,
        "folk": 0.0,
        "rnb": 0.5,
        "videogame": 0.8,
        "country": 0.0,
        "soul": 0.1,
        "blues": 0.0,
        "punk": 0.0,
        "latin": 0.2,
        "metal": 0.1,
        "trap": 0.9,
        "retro": 0.3,
        "symphonic": 0.0,
        "disco": 0.4,
        "funk": 0.2,
        "reggae": 0.2,
        "afrobeat": 0.3,
        "house": 1.0,
        "trance": 1.0,
        "downtempo": 0.6,
        "dreampop": 0.4,
        "chillwave": 0.7,
        "newage": 0.4,
        "hyperpop": 1.0,
        "drill": 0.9,
        "melodictechno": 1.0,
        "indie": 0.2,
    }
)
DEFAULT_ELECTRONIC_RATIO = 0.5

MOOD_POOL: tuple[str, ...] = (
    "euphoric",
    "melancholic",
    "nostalgic",
    "dreamy",
    "energetic",
    "brooding",
    "uplifting",
    "bittersweet",
    "serene",
    "defiant",
    "playful",
    "haunting",
    "romantic",
    "triumphant",
    "wistful",
    "introspective",
    "tense",
    "hopeful",
    "mysterious",
    "warm",
    "gritty",
    "hypnotic",
    "tender",
    "restless",
    "cinematic",
    "lonely",
    "anthemic",
    "sultry",
    "peaceful",
    "dark",
)


def is_registry_genre(token: str) -> bool:
    return token.strip().lower() in GENRE_REGISTRY


def resolve_genre(token: Optional[str]) -> str:
    """Canonical key for ``token`` or ``DEFAULT_GENRE`` when it is unknown."""

    if not token:
        return DEFAULT_GENRE
    key = token.strip().lower()
    return key if key in GENRE_REGISTRY else DEFAULT_GENRE


def canonical_genres(tokens: Iterable[str]) -> list[str]:
    """Registry keys among ``tokens`` in input order, without duplicates."""

    result: list[str] = []
    for token in tokens:
        key = token.strip().lower()
        if is_registry_genre(key) and key not in result:
            result.append(key)
    return result


def weights_for(genre: str) -> TagWeights:
    return GENRE_TAG_WEIGHTS.get(genre.strip().lower(), DEFAULT_WEIGHTS)


def electronic_ratio_for(genre: str) -> float:
    return ELECTRONIC_RATIO.get(genre.strip().lower(), DEFAULT_ELECTRONIC_RATIO)


def clamp_genre_count(value: Optional[int], fallback: int = 1) -> int:
    """Clamp a requested slot count to ``1..MAX_GENRE_SLOTS``.

    ``None`` uses ``fallback``; zero and negative values collapse to one.
    """

    raw = fallback if value is None else value
    if raw <= 0:
        return 1
    return min(MAX_GENRE_SLOTS, raw)


def enforce_genre_count(genres: Sequence[str], target: int, rng: Rng) -> list[str]:
    count = clamp_genre_count(target)
    current = canonical_genres(genres)
    if len(current) >= count:
        return current[:count]
    spare = [key for key in GENRE_REGISTRY if key not in current]
    return current + shuffle(spare, rng)[: count - len(current)]


def blended_bpm_range(genres: Sequence[str]) -> Optional[tuple[int, int]]:
    """Intersect the BPM ranges of ``genres``.

    Non-overlapping ranges fall back to a narrowed union centred on the
    midpoint of the full span.
    """

    ranges = [
        (GENRE_REGISTRY[key].bpm.min, GENRE_REGISTRY[key].bpm.max)
        for key in canonical_genres(genres)
    ]
    if not ranges:
        return None
    if len(ranges) == 1:
        return ranges[0]

    low = max(start for start, _ in ranges)
    high = min(end for _, end in ranges)
    if low <= high:
        return low, high

    union_low = min(start for start, _ in ranges)
    union_high = max(end for _, end in ranges)
    midpoint = (union_low + union_high) / 2
    return (
        max(union_low, math.floor(midpoint - NARROW_RANGE_SPREAD / 2)),
        min(union_high, math.ceil(midpoint + NARROW_RANGE_SPREAD / 2)),
    )


def format_bpm_range(bpm_range: Optional[tuple[int, int]]) -> str:
    if bpm_range is None:
        return "between 90 and 120"
    low, high = bpm_range
    if low == high:
        return str(low)
    return f"between {low} and {high}"
