"""Shared service data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional, Protocol

DEFAULT_OLLAMA_ENDPOINT = "http://127.0.0.1:11434"
DEFAULT_OLLAMA_MODEL = "gemma3:4b"


@dataclass(frozen=True)
class RemixResult:
    text: str


@dataclass(frozen=True)
class AvailabilityStatus:
    available: bool
    has_required_model: bool
    checked_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class Capabilities:
    """Read-only switches the refinement core consults on every request."""

    lyrics_mode: bool = False
    max_mode: bool = False
    use_local_llm: bool = False
    story_mode: bool = False
    llm_available: bool = False
    use_suno_tags: bool = False
    ollama_endpoint: str = DEFAULT_OLLAMA_ENDPOINT
    model_name: str = DEFAULT_OLLAMA_MODEL
    llm_timeout_ms: int = 90_000
    story_timeout_ms: int = 8_000


class LLMCollaborator(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str, *, timeout_ms: int) -> str:
        ...


class AvailabilityChecker(Protocol):
    async def check(self, endpoint: str) -> AvailabilityStatus:
        ...


@dataclass(frozen=True)
class StoryInput:
    genre: str
    bpm_range: str
    moods: list[str]
    instruments: list[str]
    style_tags: list[str]
    recording_context: Optional[str] = None
    styles: list[str] = field(default_factory=list)
