from __future__ import annotations

from typing import Optional, cast

from fastapi import APIRouter, HTTPException, Request
from loguru import logger

from ..services.exceptions import (
    LocalLLMUnavailable,
    LocalModelMissing,
    LyricsGenerationFailure,
    ValidationFailure,
)
from ..services.remix import (
    remix_genre,
    remix_instruments,
    remix_mood,
    remix_recording,
    remix_style_tags,
)
from ..services.rng import Rng, create_seeded_rng
from ..services.router import RefinementRouter
from ..services.trace import DecisionTrace
from ..services.types import Capabilities
from .models import (
    GenerationResult,
    HealthResponse,
    RefinementRequest,
    RemixField,
    RemixRequest,
    RemixResponse,
)
from .settings import Settings

router = APIRouter()


def get_refinement_router(request: Request) -> RefinementRouter:
    return cast(RefinementRouter, request.app.state.refinement_router)


def _rng_for(seed: Optional[int], request: Request) -> Optional[Rng]:
    settings = cast(Settings, request.app.state.settings)
    effective = seed if seed is not None else settings.default_seed
    if effective is None:
        return None
    return create_seeded_rng(effective)


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    capabilities = cast(Capabilities, request.app.state.capabilities)
    return HealthResponse(
        max_mode=capabilities.max_mode,
        lyrics_mode=capabilities.lyrics_mode,
        use_local_llm=capabilities.use_local_llm,
        story_mode=capabilities.story_mode,
        model_name=capabilities.model_name,
    )


@router.post("/refine", response_model=GenerationResult)
async def refine(payload: RefinementRequest, request: Request, debug: bool = False) -> GenerationResult:
    refinement_router = get_refinement_router(request)
    trace = DecisionTrace() if debug else None
    try:
        return await refinement_router.refine(payload, _rng_for(payload.seed, request), trace)
    except ValidationFailure as exc:
        raise HTTPException(
            status_code=422, detail={"field": exc.field, "message": str(exc)}
        ) from exc
    except (LocalLLMUnavailable, LocalModelMissing) as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except LyricsGenerationFailure as exc:
        logger.exception("Lyrics generation failed")
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.post("/remix/{field}", response_model=RemixResponse)
async def remix(field: RemixField, payload: RemixRequest, request: Request) -> RemixResponse:
    rng = _rng_for(payload.seed, request)
    if field is RemixField.GENRE:
        result = remix_genre(payload.prompt, payload.target_genre_count, rng)
    elif field is RemixField.MOOD:
        result = remix_mood(payload.prompt, rng)
    elif field is RemixField.STYLE_TAGS:
        result = remix_style_tags(payload.prompt, rng)
    elif field is RemixField.INSTRUMENTS:
        result = remix_instruments(payload.prompt, rng)
    else:
        result = remix_recording(payload.prompt, rng)
    return RemixResponse(field=field, text=result.text, changed=result.text != payload.prompt)
