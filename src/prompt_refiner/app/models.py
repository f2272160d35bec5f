from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RefinementType(str, Enum):
    STYLE = "style"
    LYRICS = "lyrics"
    COMBINED = "combined"


class LyricsAction(str, Enum):
    NONE = "none"
    REFINE_EXISTING = "refine_existing"
    BOOTSTRAP = "bootstrap"


class RemixField(str, Enum):
    GENRE = "genre"
    MOOD = "mood"
    STYLE_TAGS = "style_tags"
    INSTRUMENTS = "instruments"
    RECORDING = "recording"


class StyleChanges(BaseModel):
    seed_genres: Optional[list[str]] = None
    suno_styles: Optional[list[str]] = None
    harmonic_style: Optional[str] = Field(default=None, max_length=64)
    harmonic_combination: Optional[str] = Field(default=None, max_length=64)
    polyrhythm_combination: Optional[str] = Field(default=None, max_length=64)
    time_signature: Optional[str] = Field(default=None, max_length=16)
    time_signature_journey: Optional[str] = Field(default=None, max_length=64)
    mood_category: Optional[str] = Field(default=None, max_length=64)

    def changed_fields(self) -> list[str]:
        return [name for name, value in self if value is not None]


class RefinementRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_prompt: str = Field(..., min_length=1, max_length=8_000)
    current_title: str = Field(default="", max_length=256)
    feedback: str = Field(default="", max_length=2_000)
    current_lyrics: Optional[str] = Field(default=None, max_length=20_000)
    locked_phrase: Optional[str] = Field(default=None, max_length=256)
    lyrics_topic: Optional[str] = Field(default=None, max_length=512)
    suno_styles: list[str] = Field(default_factory=list, max_length=16)
    style_changes: Optional[StyleChanges] = None
    refinement_type: Optional[RefinementType] = None
    seed: Optional[int] = Field(default=None, ge=0)


class GenerationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    title: str = ""
    lyrics: Optional[str] = None
    debug_trace: Optional[dict[str, Any]] = None
    story_mode_fallback: bool = False


class RemixRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=8_000)
    seed: Optional[int] = Field(default=None, ge=0)
    target_genre_count: Optional[int] = Field(default=None)


class RemixResponse(BaseModel):
    field: RemixField
    text: str
    changed: bool


class HealthResponse(BaseModel):
    status: str = "ok"
    max_mode: bool
    lyrics_mode: bool
    use_local_llm: bool
    story_mode: bool
    model_name: str
