"""Narrative prose transform applied after deterministic refinement.

The structured prompt is reduced to a small JSON document, handed to the
language model, and the prose it returns replaces the prompt text. Any
failure leaves the deterministic prompt in place.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from loguru import logger

from ..app.models import GenerationResult
from .fields import FieldName, extract_field, prepend_max_header, strip_max_header
from .genres import DEFAULT_GENRE
from .trace import DecisionTrace, trace_decision
from .types import Capabilities, LLMCollaborator, StoryInput

MIN_STORY_LENGTH = 100
MAX_STORY_LENGTH = 500

STORY_GENERATION_SYSTEM_PROMPT = """You turn structured music data into evocative narrative prose for a music generation model.

Your task:
1. Keep every musical fact accurate (genre, tempo, instruments, mood)
2. Weave the keywords into the prose so the model still recognises them
3. Describe the sound with vivid sensory detail
4. Write one cohesive paragraph or a short scene

Output requirements:
- Length: 100 to 500 characters
- Plain narrative prose with no headers, bullets or key-value pairs
- Mention the tempo naturally
- Never use section markers such as [VERSE] or [CHORUS]
- Never mention MAX or any quality banner
- Respond with the narrative only, no explanations"""


def _split(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def extract_story_input(text: str, styles: Optional[list[str]] = None) -> StoryInput:
    body = strip_max_header(text)
    genres = _split(extract_field(body, FieldName.GENRE))
    return StoryInput(
        genre=genres[0] if genres else DEFAULT_GENRE,
        bpm_range=extract_field(body, FieldName.BPM) or "between 90 and 120",
        moods=_split(extract_field(body, FieldName.MOOD)),
        instruments=_split(extract_field(body, FieldName.INSTRUMENTS)),
        style_tags=_split(extract_field(body, FieldName.STYLE_TAGS)),
        recording_context=extract_field(body, FieldName.RECORDING) or None,
        styles=list(styles or []),
    )


def build_story_user_prompt(story_input: StoryInput) -> str:
    payload: dict[str, Any] = {"genre": story_input.genre, "bpmRange": story_input.bpm_range}
    if story_input.moods:
        payload["moods"] = story_input.moods
    if story_input.instruments:
        payload["instruments"] = story_input.instruments
    if story_input.style_tags:
        payload["styleTags"] = story_input.style_tags
    if story_input.recording_context:
        payload["recordingContext"] = story_input.recording_context
    if story_input.styles:
        payload["styles"] = story_input.styles
    return (
        "Transform this structured music data into narrative prose:\n\n"
        f"{json.dumps(payload, indent=2)}"
    )


def story_mode_enabled(capabilities: Capabilities) -> bool:
    return capabilities.story_mode and capabilities.llm_available


async def apply_story_mode(
    result: GenerationResult,
    capabilities: Capabilities,
    llm: LLMCollaborator,
    trace: Optional[DecisionTrace] = None,
) -> GenerationResult:
    """Replace ``result.text`` with narrative prose when story mode is active.

    Never raises; failures return ``result`` flagged with
    ``story_mode_fallback``.
    """

    if not story_mode_enabled(capabilities):
        return result

    story_input = extract_story_input(result.text)
    try:
        narrative = await llm.complete(
            STORY_GENERATION_SYSTEM_PROMPT,
            build_story_user_prompt(story_input),
            timeout_ms=capabilities.story_timeout_ms,
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Story mode failed, keeping deterministic prompt: {}", exc)
        trace_decision(trace, "story", "story.transform", "fallback", str(exc))
        return result.model_copy(update={"story_mode_fallback": True})

    narrative = (narrative or "").strip()
    if not narrative:
        logger.warning("Story mode returned empty output, keeping deterministic prompt")
        trace_decision(trace, "story", "story.transform", "fallback", "empty narrative")
        return result.model_copy(update={"story_mode_fallback": True})

    if len(narrative) > MAX_STORY_LENGTH:
        logger.debug("Story narrative is {} characters, above the requested limit", len(narrative))
    text = prepend_max_header(narrative) if capabilities.max_mode else narrative
    trace_decision(trace, "story", "story.transform", "narrative", f"{len(narrative)} characters")
    return result.model_copy(update={"text": text})
