"""Static descriptor vocabularies grouped into tag domains.

Everything here is plain immutable data; sampling lives in ``selection`` and
``recording``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

TagPool = Mapping[str, tuple[str, ...]]


def frozen_pool(table: dict[str, tuple[str, ...]]) -> TagPool:
    return MappingProxyType(table)


VOCAL_PERFORMANCE_TAGS: TagPool = frozen_pool(
    {
        "breath_texture": (
            "breathy delivery",
            "airy vocals",
            "whispered tones",
            "smooth vocals",
            "raspy edge",
        ),
        "vocal_power": (
            "belt technique",
            "powerful vocals",
            "soft delivery",
            "intimate whisper",
            "vocal restraint",
        ),
        "techniques": (
            "falsetto sections",
            "chest voice dominance",
            "head voice clarity",
            "vibrato",
            "straight-tone delivery",
        ),
        "character": (
            "crooner style",
            "operatic delivery",
            "conversational vocals",
            "theatrical performance",
            "raw emotion",
        ),
        "layering": (
            "choir stacking",
            "vocal doubles",
            "harmony layers",
            "octave vocal layers",
            "unison vocal tracking",
        ),
        "articulation": (
            "clear diction",
            "slurred phrasing",
            "staccato delivery",
            "legato phrasing",
        ),
        "mic_technique": (
            "close-mic intimacy",
            "distant mic character",
            "proximity effect",
            "off-axis vocal warmth",
        ),
        "genre_styles": (
            "soul vocal runs",
            "jazz scat vocalization",
            "gospel shouts",
            "country twang",
            "blues grit",
        ),
    }
)

SPATIAL_TAGS: TagPool = frozen_pool(
    {
        "reverb": (
            "lush hall reverb",
            "plate reverb shimmer",
            "short room reverb",
            "cavernous reverb tail",
        ),
        "width": (
            "wide stereo field",
            "panned doubles",
            "immersive stereo image",
            "narrow focused center",
        ),
        "depth": (
            "layered depth",
            "distant background layers",
            "upfront dry lead",
        ),
        "echo": (
            "tape echo throws",
            "ping-pong delay",
            "dub delay trails",
        ),
    }
)

HARMONIC_TAGS: TagPool = frozen_pool(
    {
        "color": (
            "extended chord voicings",
            "modal harmony",
            "lush seventh chords",
            "open fifth drones",
        ),
        "motion": (
            "chromatic passing chords",
            "descending bassline",
            "pedal tone tension",
            "unexpected key change",
        ),
        "tension": (
            "suspended chord tension",
            "bittersweet minor-major shifts",
            "unresolved cadences",
        ),
    }
)

DYNAMIC_TAGS: TagPool = frozen_pool(
    {
        "arc": (
            "slow-building crescendo",
            "explosive chorus lift",
            "gradual swell",
            "sudden drop to silence",
        ),
        "contrast": (
            "quiet-loud contrast",
            "wide dynamic range",
            "restrained verses",
            "punchy accents",
        ),
        "energy": (
            "relentless drive",
            "laid-back energy",
            "simmering intensity",
        ),
    }
)

TEMPORAL_TAGS: TagPool = frozen_pool(
    {
        "groove": (
            "swung groove",
            "straight eighth feel",
            "syncopated pulse",
            "half-time feel",
        ),
        "timing": (
            "behind-the-beat pocket",
            "rubato passages",
            "tight quantized timing",
            "loose human timing",
        ),
        "pattern": (
            "polyrhythmic layers",
            "shuffle rhythm",
            "four-on-the-floor pulse",
        ),
    }
)

TEXTURE_TAGS: TagPool = frozen_pool(
    {
        "surface": (
            "warm analog haze",
            "crisp high end",
            "vinyl crackle",
            "gritty saturation",
            "glassy shimmer",
        ),
        "density": (
            "sparse arrangement",
            "dense layered wall",
            "minimal instrumentation",
            "rich orchestral texture",
        ),
        "tone": (
            "dark moody tone",
            "bright airy mix",
            "velvety low mids",
            "lo-fi grain",
        ),
    }
)

REALISM_TAGS: TagPool = frozen_pool(
    {
        "room_acoustics": (
            "small room acoustics",
            "room tone",
            "small-bedroom acoustics",
            "natural reverb",
            "early reflections emphasized",
        ),
        "mic_character": (
            "close mic presence",
            "off-axis mic placement",
            "proximity effect",
            "single-mic capture",
            "light mic handling noise",
        ),
        "performance": (
            "one-take performance",
            "natural timing drift",
            "human micro-rubato",
            "natural dynamics",
            "no brickwall feel",
        ),
        "human_sounds": (
            "breath detail",
            "audible inhales",
            "mouth noise",
            "subtle lip noise",
        ),
        "instrument_noises": (
            "pick noise",
            "fret squeak",
            "string slides",
            "finger movement noise",
            "chair creak",
        ),
        "analog_character": (
            "tape saturation",
            "analog warmth",
            "harmonic grit",
            "slight wow & flutter",
            "gentle preamp drive",
        ),
        "mix_character": (
            "limited stereo",
            "narrow mono image",
            "mono-compatible",
            "background noise floor consistent",
            "imperfections kept",
        ),
    }
)

ELECTRONIC_CLARITY_TAGS: TagPool = frozen_pool(
    {
        "bass_control": (
            "tight sub bass",
            "controlled low end",
            "mono-compatible sub",
            "phase-aligned bass",
        ),
        "transients": (
            "sharp transients",
            "fast attack",
            "clean punch",
            "high dynamic contrast",
        ),
        "spatial": (
            "focused stereo image",
            "minimal spatial smear",
            "tight width",
            "center-focused mix",
        ),
        "distortion": (
            "controlled saturation",
            "harmonic distortion only",
            "clean high end",
        ),
        "arrangement": (
            "minimal layer stacking",
            "intentional drops",
            "clear drop structure",
        ),
    }
)

_ALL_REALISM = tuple(REALISM_TAGS.keys())

# Realism categories that suit each genre; genres missing here use every category.
GENRE_REALISM_CATEGORIES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "country": _ALL_REALISM,
        "folk": _ALL_REALISM,
        "blues": (
            "room_acoustics",
            "performance",
            "human_sounds",
            "instrument_noises",
            "analog_character",
        ),
        "jazz": (
            "room_acoustics",
            "mic_character",
            "performance",
            "human_sounds",
            "analog_character",
        ),
        "soul": ("room_acoustics", "performance", "human_sounds", "analog_character"),
        "rock": ("performance", "instrument_noises", "analog_character"),
        "metal": ("performance", "instrument_noises"),
        "punk": ("performance", "instrument_noises", "analog_character"),
        "classical": ("room_acoustics", "performance"),
        "symphonic": ("room_acoustics", "performance"),
        "cinematic": ("room_acoustics", "performance"),
        "lofi": ("analog_character",),
    }
)

ARTICULATION_CHANCE = 0.4

ARTICULATIONS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "guitar": (
            "Arpeggiated",
            "Strummed",
            "Picked",
            "Palm Muted",
            "Fingerpicked",
            "Jangly",
            "Clean",
            "Overdriven",
            "Crunchy",
            "Chorus Drenched",
            "Reverb Soaked",
            "Tremolo",
            "Slide",
            "Wah",
        ),
        "piano": (
            "Comping",
            "Arpeggiated",
            "Block Chords",
            "Stride Style",
            "Sparse",
            "Rolling",
            "Gentle",
            "Dramatic",
        ),
        "bass": (
            "Walking",
            "Slapped",
            "Picked",
            "Round",
            "Deep",
            "Punchy",
            "Subby",
            "Groovy",
            "Syncopated",
            "Root Note",
        ),
        "drums": (
            "Brushed",
            "Tight",
            "Punchy",
            "Laid Back",
            "Driving",
            "Snappy",
            "Tom Heavy",
            "Minimal",
            "Busy",
            "Loose",
        ),
        "strings": (
            "Legato",
            "Staccato",
            "Pizzicato",
            "Tremolo",
            "Swelling",
            "Lush",
            "Warm",
            "Soaring",
            "Mournful",
        ),
        "brass": ("Muted", "Bold", "Fanfare", "Stabs", "Swells", "Punchy", "Warm", "Bright"),
        "woodwind": ("Legato", "Staccato", "Soft", "Bright", "Warm", "Solo", "Ornamented", "Runs"),
        "synth": (
            "Sidechained",
            "Evolving",
            "Plucky",
            "Warm",
            "Bright",
            "Detuned",
            "Filtered",
            "Pulsing",
            "Shimmering",
        ),
        "organ": ("Swelling", "Comping", "Warm", "Bright", "Full", "Sparse", "Churchy"),
        "percussion": ("Tight", "Loose", "Syncopated", "Soft", "Driving", "Minimal", "Busy", "Latin"),
    }
)

# Lowercased instrument name -> articulation family.
INSTRUMENT_FAMILIES: Mapping[str, str] = MappingProxyType(
    {
        "guitar": "guitar",
        "acoustic guitar": "guitar",
        "electric guitar": "guitar",
        "nylon string guitar": "guitar",
        "hollowbody guitar": "guitar",
        "telecaster": "guitar",
        "distorted guitar": "guitar",
        "clean guitar": "guitar",
        "fretless guitar": "guitar",
        "slide guitar": "guitar",
        "pedal steel": "guitar",
        "piano": "piano",
        "grand piano": "piano",
        "felt piano": "piano",
        "prepared piano": "piano",
        "rhodes": "piano",
        "wurlitzer": "piano",
        "electric piano": "piano",
        "upright piano": "piano",
        "bass": "bass",
        "upright bass": "bass",
        "electric bass": "bass",
        "synth bass": "bass",
        "808": "bass",
        "drums": "drums",
        "jazz brushes": "drums",
        "drum machine": "drums",
        "breakbeat drums": "drums",
        "strings": "strings",
        "violin": "strings",
        "fiddle": "strings",
        "viola": "strings",
        "cello": "strings",
        "string ensemble": "strings",
        "trumpet": "brass",
        "muted trumpet": "brass",
        "trombone": "brass",
        "french horn": "brass",
        "brass section": "brass",
        "saxophone": "woodwind",
        "tenor sax": "woodwind",
        "alto sax": "woodwind",
        "clarinet": "woodwind",
        "flute": "woodwind",
        "oboe": "woodwind",
        "synth": "synth",
        "synth pad": "synth",
        "analog synth": "synth",
        "fm synth": "synth",
        "moog synth": "synth",
        "arpeggiator": "synth",
        "supersaw": "synth",
        "organ": "organ",
        "hammond organ": "organ",
        "pipe organ": "organ",
        "congas": "percussion",
        "bongos": "percussion",
        "shaker": "percussion",
        "tambourine": "percussion",
        "handclaps": "percussion",
        "timpani": "percussion",
        "timbales": "percussion",
    }
)

VOCAL_RANGES = ("Soprano", "Mezzo-Soprano", "Alto", "Tenor", "Baritone", "Bass")
VOCAL_DELIVERIES = ("Breathy", "Belted", "Crooned", "Raspy", "Smooth", "Falsetto", "Spoken")
VOCAL_TECHNIQUES = (
    "Stacked Harmonies",
    "Call And Response",
    "Ad-libs",
    "Double Tracked",
    "Vocal Runs",
    "Layered Choir",
)

# Narrower vocal palettes for genres with a strong vocal tradition.
GENRE_VOCAL_STYLES: Mapping[str, Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {
        "jazz": {
            "range": ("Alto", "Baritone", "Tenor"),
            "delivery": ("Crooned", "Smooth", "Breathy"),
            "technique": ("Scat Phrasing", "Vocal Runs"),
        },
        "soul": {
            "range": ("Alto", "Tenor", "Mezzo-Soprano"),
            "delivery": ("Belted", "Raspy", "Smooth"),
            "technique": ("Vocal Runs", "Call And Response"),
        },
        "metal": {
            "range": ("Tenor", "Baritone"),
            "delivery": ("Belted", "Raspy"),
            "technique": ("Double Tracked", "Harsh Screams"),
        },
        "country": {
            "range": ("Tenor", "Alto", "Baritone"),
            "delivery": ("Smooth", "Raspy"),
            "technique": ("Twang", "Stacked Harmonies"),
        },
        "trap": {
            "range": ("Tenor", "Baritone"),
            "delivery": ("Spoken", "Smooth"),
            "technique": ("Ad-libs", "Autotuned Hooks"),
        },
        "drill": {
            "range": ("Baritone", "Bass"),
            "delivery": ("Spoken", "Raspy"),
            "technique": ("Ad-libs", "Double Tracked"),
        },
        "classical": {
            "range": ("Soprano", "Mezzo-Soprano", "Tenor"),
            "delivery": ("Smooth",),
            "technique": ("Layered Choir", "Operatic Vibrato"),
        },
    }
)
