"""Read and rewrite named fields of a prompt in either textual dialect.

Standard prompts use capitalised bare fields (``Genre: rock``); max prompts
use lowercase quoted fields (``genre: "rock"``) below an optional banner.
Writers address only the first matching line and leave every other byte
untouched.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional, Union

from .genres import DEFAULT_GENRE, canonical_genres, resolve_genre

MAX_MODE_HEADER_LINES = (
    "[Is_MAX_MODE: MAX](MAX)",
    "[QUALITY: MAX](MAX)",
    "[REALISM: MAX](MAX)",
    "[REAL_INSTRUMENTS: MAX](MAX)",
)
MAX_MODE_HEADER = "\n".join(MAX_MODE_HEADER_LINES)
ALTERNATE_MAX_SIGNATURE = "::tags realistic music ::"
MAX_MODE_SIGNATURES = (MAX_MODE_HEADER_LINES[0], ALTERNATE_MAX_SIGNATURE)
DEFAULT_MOOD = "emotional"


class Dialect(str, Enum):
    STANDARD = "standard"
    MAX = "max"


class FieldName(str, Enum):
    GENRE = "Genre"
    BPM = "BPM"
    MOOD = "Mood"
    INSTRUMENTS = "Instruments"
    STYLE_TAGS = "Style Tags"
    RECORDING = "Recording"


FieldLike = Union[FieldName, str]

_QUOTED_FIELD = re.compile(r'^[a-z][a-z ]*:[^\S\n]*"', re.MULTILINE)
_GENRE_FIRST = re.compile(r'^genre:[^\S\n]*"?([^"\n,]+)', re.IGNORECASE | re.MULTILINE)
_GENRE_LINE = re.compile(r'^genre:[^\S\n]*"?([^"\n]+?)(?:"|$)', re.IGNORECASE | re.MULTILINE)
_MOOD_LINE = re.compile(r'^mood:[^\S\n]*"?([^"\n]+)', re.IGNORECASE | re.MULTILINE)
_LOCKED_QUOTED = re.compile(r'^(instruments:[^\S\n]*")([^"]*)', re.IGNORECASE | re.MULTILINE)
_LOCKED_BARE = re.compile(r'^(instruments:[^\S\n]*)([^"\n]*)$', re.IGNORECASE | re.MULTILINE)


def _name(field: FieldLike) -> str:
    return field.value if isinstance(field, FieldName) else str(field)


def has_max_header(text: str) -> bool:
    return any(signature in text for signature in MAX_MODE_SIGNATURES)


def detect_dialect(text: str) -> Dialect:
    if has_max_header(text) or _QUOTED_FIELD.search(text):
        return Dialect.MAX
    return Dialect.STANDARD


def strip_max_header(text: str) -> str:
    """Drop the contiguous banner lines at the top of a max prompt."""

    body = text.lstrip()
    if body.startswith("[Is_MAX_MODE:"):
        prefix = "["
    elif body.startswith("::tags"):
        prefix = "::"
    else:
        return text
    lines = body.split("\n")
    index = 0
    while index < len(lines) and lines[index].strip().startswith(prefix):
        index += 1
    return "\n".join(lines[index:]).strip()


def prepend_max_header(text: str) -> str:
    return f"{MAX_MODE_HEADER}\n{text}"


def _field_pattern(name: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(name)}:[^\r\n]*", re.MULTILINE)


def find_field_line(text: str, field: FieldLike, dialect: Optional[Dialect] = None) -> Optional[str]:
    dialect = dialect or detect_dialect(text)
    name = _name(field)
    key = name.lower() if dialect is Dialect.MAX else name
    match = _field_pattern(key).search(text)
    return match.group(0) if match else None


def replace_field(
    text: str,
    field: FieldLike,
    new_value: str,
    dialect: Optional[Dialect] = None,
) -> str:
    """Rewrite the value of the first ``field`` line, or return ``text`` as is."""

    dialect = dialect or detect_dialect(text)
    name = _name(field)
    if dialect is Dialect.MAX:
        key = name.lower()
        replacement = f'{key}: "{new_value}"'
    else:
        key = name
        replacement = f"{key}: {new_value}"
    return _field_pattern(key).sub(lambda _match: replacement, text, count=1)


def extract_field(text: str, field: FieldLike) -> Optional[str]:
    pattern = re.compile(
        rf'^{re.escape(_name(field))}:[^\S\n]*"?([^"\n]*)', re.IGNORECASE | re.MULTILINE
    )
    match = pattern.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def raw_genre_tokens(text: str) -> list[str]:
    """Comma-separated genre tokens exactly as written, before canonicalisation."""

    match = _GENRE_LINE.search(text)
    if match is None:
        return []
    return [token.strip() for token in match.group(1).split(",") if token.strip()]


def extract_genre(text: str) -> str:
    match = _GENRE_FIRST.search(text)
    return resolve_genre(match.group(1)) if match else DEFAULT_GENRE


def extract_genres(text: str) -> list[str]:
    genres = canonical_genres(raw_genre_tokens(text))
    return genres or [DEFAULT_GENRE]


def extract_mood(text: str) -> str:
    match = _MOOD_LINE.search(text)
    if match is None:
        return DEFAULT_MOOD
    return match.group(1).strip() or DEFAULT_MOOD


def inject_locked_phrase(text: str, phrase: Optional[str]) -> str:
    """Append ``phrase`` to the instruments field, or to the end of the prompt."""

    if not phrase:
        return text

    quoted = _LOCKED_QUOTED.search(text)
    if quoted is not None:
        separator = ", " if quoted.group(2).strip() else ""
        return _LOCKED_QUOTED.sub(
            lambda match: f"{match.group(1)}{match.group(2)}{separator}{phrase}",
            text,
            count=1,
        )

    bare = _LOCKED_BARE.search(text)
    if bare is not None:
        existing = bare.group(2).strip()
        separator = ", " if existing else ""
        spacer = "" if existing or bare.group(1).endswith(" ") else " "
        return _LOCKED_BARE.sub(
            lambda match: f"{match.group(1)}{match.group(2)}{separator}{spacer}{phrase}",
            text,
            count=1,
        )

    return f"{text}\n{phrase}"
