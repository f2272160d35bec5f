"""Route a refinement request to style, lyrics or combined handling."""

from __future__ import annotations

import random
from typing import Optional

from loguru import logger

from ..app.models import (
    GenerationResult,
    LyricsAction,
    RefinementRequest,
    RefinementType,
    StyleChanges,
)
from .enrichment import build_direct_mode_prompt, is_direct_mode, valid_styles
from .exceptions import (
    LocalLLMUnavailable,
    LocalModelMissing,
    LyricsGenerationFailure,
    ValidationFailure,
)
from .fields import detect_dialect, extract_genre, extract_mood, inject_locked_phrase
from .lyrics import (
    build_lyrics_bootstrap_prompt,
    build_lyrics_bootstrap_user_prompt,
    build_lyrics_refinement_prompt,
    build_lyrics_refinement_user_prompt,
    clean_lyrics,
    lyrics_seed,
    optional_topic,
)
from .remix import remix_style_tags
from .rng import Rng
from .story import apply_story_mode
from .trace import DecisionTrace, trace_decision
from .types import AvailabilityChecker, Capabilities, LLMCollaborator


def lyrics_action(lyrics_mode: bool, current_lyrics: Optional[str]) -> LyricsAction:
    if not lyrics_mode:
        return LyricsAction.NONE
    return LyricsAction.REFINE_EXISTING if current_lyrics else LyricsAction.BOOTSTRAP


def resolve_refinement_type(value: object) -> RefinementType:
    if value is None:
        return RefinementType.COMBINED
    try:
        return RefinementType(value)
    except ValueError as exc:
        raise ValidationFailure(f"Invalid refinement type: {value}", "refinement_type") from exc


class RefinementRouter:
    """Refines an existing prompt, title and lyrics according to user feedback.

    Style fields are always regenerated without a language model. The
    ``llm`` collaborator is only used for lyrics and for the optional story
    transform.
    """

    def __init__(
        self,
        capabilities: Capabilities,
        llm: LLMCollaborator,
        availability: Optional[AvailabilityChecker] = None,
    ) -> None:
        self._capabilities = capabilities
        self._llm = llm
        self._availability = availability

    @property
    def capabilities(self) -> Capabilities:
        return self._capabilities

    async def refine(
        self,
        request: RefinementRequest,
        rng: Optional[Rng] = None,
        trace: Optional[DecisionTrace] = None,
    ) -> GenerationResult:
        result = await self._route(request, rng or random.random, trace)
        if trace is not None:
            result = result.model_copy(update={"debug_trace": trace.as_dict()})
        return result

    async def _route(
        self,
        request: RefinementRequest,
        rng: Rng,
        trace: Optional[DecisionTrace],
    ) -> GenerationResult:
        if is_direct_mode(request.suno_styles):
            styles = valid_styles(request.suno_styles)
            trace_decision(
                trace,
                "routing",
                "refinement.routing",
                "direct_mode",
                f"{len(styles)} style(s) supplied",
            )
            if request.style_changes is not None and request.style_changes.suno_styles is not None:
                self._trace_style_list(trace, request.style_changes.suno_styles)
            return await self._refine_direct_mode(request, styles, rng, trace)

        refinement_type = resolve_refinement_type(request.refinement_type)
        logger.info(
            "Routing refinement as {} (style changes: {}, feedback: {})",
            refinement_type.value,
            request.style_changes is not None,
            bool(request.feedback.strip()),
        )
        trace_decision(
            trace,
            "routing",
            "refinement.routing",
            refinement_type.value,
            f"style_changes={request.style_changes is not None} "
            f"feedback={bool(request.feedback.strip())}",
        )
        if request.style_changes is not None:
            self._trace_style_changes(trace, request.style_changes)

        if refinement_type is RefinementType.STYLE:
            return await self._refine_style_only(request, rng, trace)
        if refinement_type is RefinementType.LYRICS:
            return await self._refine_lyrics_only(request, trace)
        return await self._refine_combined(request, rng, trace)

    async def _refine_direct_mode(
        self,
        request: RefinementRequest,
        styles: list[str],
        rng: Rng,
        trace: Optional[DecisionTrace],
    ) -> GenerationResult:
        prompt = build_direct_mode_prompt(styles, self._capabilities.max_mode, rng, trace)
        lyrics = request.current_lyrics
        if self._capabilities.lyrics_mode and not request.current_lyrics:
            lyrics = await self._bootstrap_lyrics(prompt.text, request, trace) or lyrics
        return GenerationResult(text=prompt.text, title=request.current_title, lyrics=lyrics)

    def _regenerate_style(
        self,
        request: RefinementRequest,
        rng: Rng,
        trace: Optional[DecisionTrace],
    ) -> str:
        genre = extract_genre(request.current_prompt)
        trace_decision(trace, "genre", "refinement.genre", genre, "extracted from the current prompt")
        text = remix_style_tags(request.current_prompt, rng, trace).text
        text = inject_locked_phrase(text, request.locked_phrase)
        logger.info("Regenerated style tags for {} ({} dialect)", genre, detect_dialect(text).value)
        return text

    async def _refine_style_only(
        self,
        request: RefinementRequest,
        rng: Rng,
        trace: Optional[DecisionTrace],
    ) -> GenerationResult:
        result = GenerationResult(
            text=self._regenerate_style(request, rng, trace),
            title=request.current_title,
            lyrics=request.current_lyrics,
        )
        return await apply_story_mode(result, self._capabilities, self._llm, trace)

    async def _refine_lyrics_only(
        self,
        request: RefinementRequest,
        trace: Optional[DecisionTrace],
    ) -> GenerationResult:
        if not request.feedback.strip():
            raise ValidationFailure("Feedback is required for lyrics refinement", "feedback")

        action = lyrics_action(self._capabilities.lyrics_mode, request.current_lyrics)
        trace_decision(trace, "lyrics", "lyrics.action", action.value, "lyrics-only refinement")
        if action is LyricsAction.NONE:
            if not request.current_lyrics:
                raise ValidationFailure(
                    "Cannot refine lyrics without existing lyrics", "current_lyrics"
                )
            # Explicit lyrics requests still apply feedback to existing lyrics.
            action = LyricsAction.REFINE_EXISTING

        lyrics = await self._apply_lyrics_action(action, request.current_prompt, request, trace)
        return GenerationResult(
            text=request.current_prompt,
            title=request.current_title,
            lyrics=lyrics,
        )

    async def _refine_combined(
        self,
        request: RefinementRequest,
        rng: Rng,
        trace: Optional[DecisionTrace],
    ) -> GenerationResult:
        text = self._regenerate_style(request, rng, trace)
        result = GenerationResult(
            text=text,
            title=request.current_title,
            lyrics=request.current_lyrics,
        )

        action = lyrics_action(self._capabilities.lyrics_mode, request.current_lyrics)
        trace_decision(trace, "lyrics", "lyrics.action", action.value, "after style regeneration")
        if action is LyricsAction.NONE:
            return await apply_story_mode(result, self._capabilities, self._llm, trace)

        lyrics = await self._apply_lyrics_action(action, text, request, trace)
        return result.model_copy(update={"lyrics": lyrics})

    async def _apply_lyrics_action(
        self,
        action: LyricsAction,
        prompt_text: str,
        request: RefinementRequest,
        trace: Optional[DecisionTrace],
    ) -> Optional[str]:
        if action is LyricsAction.REFINE_EXISTING:
            return await self._refine_lyrics(prompt_text, request, trace)
        if action is LyricsAction.BOOTSTRAP:
            return await self._bootstrap_lyrics(prompt_text, request, trace) or request.current_lyrics
        return request.current_lyrics

    async def _ensure_local_llm(self) -> None:
        if not self._capabilities.use_local_llm or self._availability is None:
            return
        endpoint = self._capabilities.ollama_endpoint
        status = await self._availability.check(endpoint)
        if not status.available:
            raise LocalLLMUnavailable(endpoint)
        if not status.has_required_model:
            raise LocalModelMissing(endpoint, self._capabilities.model_name)

    async def _call_llm(
        self,
        system_prompt: str,
        user_prompt: str,
        label: str,
        trace: Optional[DecisionTrace],
    ) -> Optional[str]:
        await self._ensure_local_llm()
        try:
            output = await self._llm.complete(
                system_prompt,
                user_prompt,
                timeout_ms=self._capabilities.llm_timeout_ms,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Lyrics call {} failed", label)
            raise LyricsGenerationFailure(f"{label} failed: {exc}") from exc
        trace_decision(trace, "lyrics", label, "llm", f"{len(output or '')} characters returned")
        return clean_lyrics(output)

    async def _refine_lyrics(
        self,
        prompt_text: str,
        request: RefinementRequest,
        trace: Optional[DecisionTrace],
    ) -> Optional[str]:
        current = request.current_lyrics or ""
        genre = extract_genre(prompt_text)
        mood = extract_mood(prompt_text)
        logger.info("Refining {} characters of lyrics for {} / {}", len(current), genre, mood)
        system_prompt = build_lyrics_refinement_prompt(
            genre,
            mood,
            self._capabilities.use_suno_tags,
            self._capabilities.max_mode,
        )
        user_prompt = build_lyrics_refinement_user_prompt(
            current, request.feedback, optional_topic(request.lyrics_topic)
        )
        refined = await self._call_llm(system_prompt, user_prompt, "lyrics.refine", trace)
        return refined or request.current_lyrics

    async def _bootstrap_lyrics(
        self,
        prompt_text: str,
        request: RefinementRequest,
        trace: Optional[DecisionTrace],
    ) -> Optional[str]:
        seed = lyrics_seed(request.lyrics_topic, request.feedback)
        genre = extract_genre(prompt_text)
        mood = extract_mood(prompt_text)
        logger.info("Bootstrapping lyrics about {!r} for {} / {}", seed, genre, mood)
        system_prompt = build_lyrics_bootstrap_prompt(
            self._capabilities.max_mode, self._capabilities.use_suno_tags
        )
        user_prompt = build_lyrics_bootstrap_user_prompt(seed, genre, mood)
        return await self._call_llm(system_prompt, user_prompt, "lyrics.bootstrap", trace)

    @staticmethod
    def _trace_style_list(trace: Optional[DecisionTrace], styles: list[str]) -> None:
        trace_decision(
            trace,
            "style_tags",
            "refinement.suno_styles.changed",
            ", ".join(styles) or "cleared",
            f"{len(styles)} style(s) selected",
        )

    def _trace_style_changes(self, trace: Optional[DecisionTrace], changes: StyleChanges) -> None:
        if changes.seed_genres is not None:
            trace_decision(
                trace,
                "genre",
                "refinement.genre.changed",
                ", ".join(changes.seed_genres) or "cleared",
                f"{len(changes.seed_genres)} genre(s) selected",
            )
        if changes.suno_styles is not None:
            self._trace_style_list(trace, changes.suno_styles)
        others = [
            name for name in changes.changed_fields() if name not in ("seed_genres", "suno_styles")
        ]
        if others:
            trace_decision(
                trace,
                "style_tags",
                "refinement.style_changes.other",
                ", ".join(others),
                f"additional fields changed: {', '.join(others)}",
            )
