from __future__ import annotations

from dataclasses import replace

import pytest

from prompt_refiner.app.models import RefinementRequest, RefinementType, StyleChanges
from prompt_refiner.services.exceptions import (
    LocalLLMUnavailable,
    LocalModelMissing,
    LyricsGenerationFailure,
    TransientLLMFailure,
    ValidationFailure,
)
from prompt_refiner.services.fields import MAX_MODE_HEADER, extract_field
from prompt_refiner.services.rng import create_seeded_rng
from prompt_refiner.services.router import RefinementRouter, lyrics_action, resolve_refinement_type
from prompt_refiner.services.trace import DecisionTrace
from prompt_refiner.services.types import AvailabilityStatus, Capabilities

AMBIENT_PROMPT = (
    "Genre: ambient\n"
    "BPM: between 60 and 90\n"
    "Instruments: synth pad, felt piano\n"
    "Style Tags: airy, wide"
)

MAX_PROMPT = (
    f"{MAX_MODE_HEADER}\n"
    'genre: "soul"\n'
    'bpm: "between 70 and 110"\n'
    'mood: "warm"\n'
    'instruments: "Rhodes, bass"\n'
    'style tags: "vintage"\n'
    'recording: "studio session warmth"'
)


class DummyLLM:
    def __init__(self, response: str = "[Verse]\nnew words", error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, str, int]] = []

    async def complete(self, system_prompt: str, user_prompt: str, *, timeout_ms: int) -> str:
        self.calls.append((system_prompt, user_prompt, timeout_ms))
        if self.error is not None:
            raise self.error
        return self.response


class DummyAvailability:
    def __init__(self, available: bool = True, has_required_model: bool = True) -> None:
        self.status = AvailabilityStatus(available=available, has_required_model=has_required_model)
        self.endpoints: list[str] = []

    async def check(self, endpoint: str) -> AvailabilityStatus:
        self.endpoints.append(endpoint)
        return self.status


def _router(
    llm: DummyLLM | None = None,
    availability: DummyAvailability | None = None,
    **flags: object,
) -> tuple[RefinementRouter, DummyLLM]:
    llm = llm or DummyLLM()
    capabilities = replace(Capabilities(), **flags)
    return RefinementRouter(capabilities, llm, availability), llm


def _lines_without(text: str, prefix: str) -> list[str]:
    return [line for line in text.split("\n") if not line.lower().startswith(prefix)]


def test_lyrics_action() -> None:
    assert lyrics_action(False, "words").value == "none"
    assert lyrics_action(True, "words").value == "refine_existing"
    assert lyrics_action(True, None).value == "bootstrap"


def test_resolve_refinement_type() -> None:
    assert resolve_refinement_type(None) is RefinementType.COMBINED
    assert resolve_refinement_type("style") is RefinementType.STYLE
    with pytest.raises(ValidationFailure) as excinfo:
        resolve_refinement_type("none")
    assert excinfo.value.field == "refinement_type"


@pytest.mark.asyncio
async def test_lyrics_refinement_requires_feedback() -> None:
    router, llm = _router(lyrics_mode=True)
    request = RefinementRequest(
        current_prompt=MAX_PROMPT,
        current_lyrics="[Verse]\nold words",
        feedback="",
        refinement_type=RefinementType.LYRICS,
    )
    with pytest.raises(ValidationFailure) as excinfo:
        await router.refine(request, create_seeded_rng(1))
    assert excinfo.value.field == "feedback"
    assert llm.calls == []


@pytest.mark.asyncio
async def test_style_refinement_on_prompt_without_mood() -> None:
    router, llm = _router()
    request = RefinementRequest(
        current_prompt=AMBIENT_PROMPT,
        current_title="Drift",
        current_lyrics="keep me",
        refinement_type=RefinementType.STYLE,
    )
    result = await router.refine(request, create_seeded_rng(2))
    assert _lines_without(result.text, "style tags:") == _lines_without(AMBIENT_PROMPT, "style tags:")
    assert extract_field(result.text, "Style Tags") != "airy, wide"
    assert result.title == "Drift"
    assert result.lyrics == "keep me"
    assert llm.calls == []


@pytest.mark.asyncio
async def test_style_refinement_injects_locked_phrase() -> None:
    router, _ = _router()
    request = RefinementRequest(
        current_prompt=MAX_PROMPT,
        locked_phrase="glass harmonica",
        refinement_type=RefinementType.STYLE,
    )
    result = await router.refine(request, create_seeded_rng(2))
    assert 'instruments: "Rhodes, bass, glass harmonica"' in result.text


@pytest.mark.asyncio
async def test_style_refinement_applies_story_mode() -> None:
    router, llm = _router(DummyLLM(response="A warm soul groove at 90 BPM."), story_mode=True, llm_available=True)
    request = RefinementRequest(current_prompt=MAX_PROMPT, refinement_type=RefinementType.STYLE)
    result = await router.refine(request, create_seeded_rng(3))
    assert result.text == "A warm soul groove at 90 BPM."
    assert len(llm.calls) == 1


@pytest.mark.asyncio
async def test_lyrics_refinement_keeps_prompt_and_calls_llm() -> None:
    router, llm = _router(lyrics_mode=True, use_suno_tags=True)
    request = RefinementRequest(
        current_prompt=MAX_PROMPT,
        current_lyrics="[Verse]\nold words",
        feedback="make it sadder",
        lyrics_topic="rainy harbour",
        refinement_type=RefinementType.LYRICS,
    )
    result = await router.refine(request, create_seeded_rng(1))
    assert result.text == MAX_PROMPT
    assert result.lyrics == "[Verse]\nnew words"
    system_prompt, user_prompt, _ = llm.calls[0]
    assert "soul song with a warm mood" in system_prompt
    assert "Suno-compatible" in system_prompt
    assert user_prompt.endswith("Topic/theme: rainy harbour")
    assert "make it sadder" in user_prompt


@pytest.mark.asyncio
async def test_lyrics_refinement_bootstraps_when_no_lyrics() -> None:
    router, llm = _router(lyrics_mode=True)
    request = RefinementRequest(
        current_prompt=MAX_PROMPT,
        feedback="about leaving home",
        refinement_type=RefinementType.LYRICS,
    )
    result = await router.refine(request, create_seeded_rng(1))
    assert result.lyrics == "[Verse]\nnew words"
    assert "Write lyrics about: about leaving home" in llm.calls[0][1]


@pytest.mark.asyncio
async def test_lyrics_refinement_without_lyrics_mode_or_lyrics_is_rejected() -> None:
    router, llm = _router()
    request = RefinementRequest(
        current_prompt=MAX_PROMPT,
        feedback="more hope",
        refinement_type=RefinementType.LYRICS,
    )
    with pytest.raises(ValidationFailure) as excinfo:
        await router.refine(request)
    assert excinfo.value.field == "current_lyrics"
    assert llm.calls == []


@pytest.mark.asyncio
async def test_lyrics_refinement_without_lyrics_mode_applies_feedback() -> None:
    router, llm = _router()
    request = RefinementRequest(
        current_prompt=MAX_PROMPT,
        current_lyrics="[Verse]\nold words",
        feedback="make the chorus happier",
        refinement_type=RefinementType.LYRICS,
    )
    result = await router.refine(request, create_seeded_rng(1))
    assert result.text == MAX_PROMPT
    assert result.lyrics == "[Verse]\nnew words"
    assert len(llm.calls) == 1
    assert "make the chorus happier" in llm.calls[0][1]
    assert "[Verse]\nold words" in llm.calls[0][1]


@pytest.mark.asyncio
async def test_empty_llm_output_keeps_current_lyrics() -> None:
    router, _ = _router(DummyLLM(response="  "), lyrics_mode=True)
    request = RefinementRequest(
        current_prompt=MAX_PROMPT,
        current_lyrics="[Verse]\nold words",
        feedback="tighter rhymes",
        refinement_type=RefinementType.LYRICS,
    )
    result = await router.refine(request)
    assert result.lyrics == "[Verse]\nold words"


@pytest.mark.asyncio
async def test_llm_error_on_lyrics_path_is_raised() -> None:
    router, _ = _router(DummyLLM(error=TransientLLMFailure("boom")), lyrics_mode=True)
    request = RefinementRequest(
        current_prompt=MAX_PROMPT,
        current_lyrics="[Verse]\nold words",
        feedback="tighter rhymes",
    )
    with pytest.raises(LyricsGenerationFailure):
        await router.refine(request)


@pytest.mark.asyncio
async def test_combined_regenerates_style_then_lyrics() -> None:
    router, llm = _router(lyrics_mode=True)
    request = RefinementRequest(
        current_prompt=MAX_PROMPT,
        current_lyrics="[Verse]\nold words",
        feedback="more hope",
    )
    trace = DecisionTrace()
    result = await router.refine(request, create_seeded_rng(4), trace)
    assert result.text != MAX_PROMPT
    assert _lines_without(result.text, "style tags:") == _lines_without(MAX_PROMPT, "style tags:")
    assert result.lyrics == "[Verse]\nnew words"
    assert len(llm.calls) == 1
    assert result.debug_trace is not None
    assert "refinement.routing" in trace.keys()
    assert "lyrics.refine" in trace.keys()


@pytest.mark.asyncio
async def test_combined_without_lyrics_mode_skips_llm() -> None:
    router, llm = _router()
    request = RefinementRequest(current_prompt=MAX_PROMPT, current_lyrics="old", feedback="x")
    result = await router.refine(request, create_seeded_rng(4))
    assert result.lyrics == "old"
    assert llm.calls == []


@pytest.mark.asyncio
async def test_combined_is_reproducible_for_a_seed() -> None:
    router, _ = _router()
    request = RefinementRequest(current_prompt=MAX_PROMPT)
    first = await router.refine(request, create_seeded_rng(99))
    second = await router.refine(request, create_seeded_rng(99))
    assert first == second


@pytest.mark.asyncio
async def test_local_llm_unavailable() -> None:
    availability = DummyAvailability(available=False, has_required_model=False)
    router, llm = _router(availability=availability, lyrics_mode=True, use_local_llm=True)
    request = RefinementRequest(
        current_prompt=MAX_PROMPT,
        current_lyrics="old",
        feedback="x",
        refinement_type=RefinementType.LYRICS,
    )
    with pytest.raises(LocalLLMUnavailable):
        await router.refine(request)
    assert availability.endpoints == ["http://127.0.0.1:11434"]
    assert llm.calls == []


@pytest.mark.asyncio
async def test_local_model_missing() -> None:
    availability = DummyAvailability(available=True, has_required_model=False)
    router, llm = _router(availability=availability, lyrics_mode=True, use_local_llm=True)
    request = RefinementRequest(current_prompt=MAX_PROMPT, feedback="about rivers")
    with pytest.raises(LocalModelMissing):
        await router.refine(request)
    assert llm.calls == []


@pytest.mark.asyncio
async def test_direct_mode_short_circuits_routing() -> None:
    router, llm = _router(max_mode=True)
    request = RefinementRequest(
        current_prompt=AMBIENT_PROMPT,
        current_title="Neon",
        current_lyrics="keep",
        suno_styles=["synthwave", " "],
        refinement_type=RefinementType.LYRICS,
    )
    result = await router.refine(request, create_seeded_rng(6))
    assert result.text.startswith(MAX_MODE_HEADER)
    assert 'genre: "synthwave"' in result.text
    assert result.title == "Neon"
    assert result.lyrics == "keep"
    assert llm.calls == []


@pytest.mark.asyncio
async def test_direct_mode_bootstraps_lyrics_when_missing() -> None:
    router, llm = _router(lyrics_mode=True)
    request = RefinementRequest(
        current_prompt=AMBIENT_PROMPT,
        suno_styles=["lo-fi hip hop"],
        lyrics_topic="late trains",
    )
    result = await router.refine(request, create_seeded_rng(6))
    assert result.text.startswith("[")
    assert result.lyrics == "[Verse]\nnew words"
    assert "Write lyrics about: late trains" in llm.calls[0][1]


@pytest.mark.asyncio
async def test_style_changes_are_traced_without_changing_output() -> None:
    router, _ = _router()
    changes = StyleChanges(seed_genres=["jazz"], time_signature="7/8")
    plain = RefinementRequest(current_prompt=MAX_PROMPT, refinement_type=RefinementType.STYLE)
    traced = plain.model_copy(update={"style_changes": changes})
    trace = DecisionTrace()
    first = await router.refine(plain, create_seeded_rng(8))
    second = await router.refine(traced, create_seeded_rng(8), trace)
    assert first.text == second.text
    assert "refinement.genre.changed" in trace.keys()
    assert "refinement.style_changes.other" in trace.keys()


@pytest.mark.asyncio
async def test_blank_style_list_is_not_direct_mode() -> None:
    router, _ = _router()
    request = RefinementRequest(
        current_prompt=MAX_PROMPT,
        suno_styles=["  ", ""],
        refinement_type=RefinementType.STYLE,
    )
    trace = DecisionTrace()
    await router.refine(request, create_seeded_rng(5), trace)
    assert trace.decisions[0].branch_taken == "style"
