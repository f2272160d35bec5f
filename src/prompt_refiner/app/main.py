from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from loguru import logger

from ..services.ollama import OllamaClient
from ..services.router import RefinementRouter
from ..services.types import AvailabilityChecker, LLMCollaborator
from .routes import router
from .settings import Settings, get_settings


def create_app(
    settings: Optional[Settings] = None,
    llm: Optional[LLMCollaborator] = None,
    availability: Optional[AvailabilityChecker] = None,
) -> FastAPI:
    """Create and configure FastAPI instance."""
    settings = settings or get_settings()
    ollama = OllamaClient(
        settings.ollama_endpoint,
        settings.ollama_model,
        availability_timeout_ms=settings.availability_timeout_ms,
        cache_ttl_seconds=settings.availability_cache_ttl_seconds,
    )
    capabilities = settings.capabilities()
    refinement_router = RefinementRouter(
        capabilities,
        llm or ollama,
        availability or ollama,
    )

    @asynccontextmanager
    async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Prompt refiner ready (max_mode={}, lyrics_mode={}, local_llm={})",
            capabilities.max_mode,
            capabilities.lyrics_mode,
            capabilities.use_local_llm,
        )
        yield
        await ollama.close()

    app = FastAPI(title="Prompt Refiner", version="0.1.0", lifespan=_lifespan)
    app.state.settings = settings
    app.state.capabilities = capabilities
    app.state.ollama = ollama
    app.state.refinement_router = refinement_router
    app.include_router(router)
    return app


app = create_app()
