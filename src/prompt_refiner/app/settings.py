from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..services.types import DEFAULT_OLLAMA_ENDPOINT, DEFAULT_OLLAMA_MODEL, Capabilities


class Settings(BaseSettings):
    """Runtime configuration for the prompt refiner."""

    model_config = SettingsConfigDict(
        env_prefix="PROMPT_REFINER_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    lyrics_mode: bool = Field(default=False, description="Generate or refine lyrics alongside prompts.")
    max_mode: bool = Field(default=False, description="Write prompts in the quoted max dialect.")
    use_local_llm: bool = Field(
        default=False,
        description="Route language model calls to a local Ollama server.",
    )
    story_mode: bool = Field(default=False, description="Rewrite refined prompts as narrative prose.")
    llm_available: bool = Field(
        default=False,
        description="Whether a language model is configured for optional transforms.",
    )
    use_suno_tags: bool = Field(default=False, description="Ask for Suno-compatible section tags.")
    ollama_endpoint: str = Field(default=DEFAULT_OLLAMA_ENDPOINT, max_length=256)
    ollama_model: str = Field(default=DEFAULT_OLLAMA_MODEL, min_length=1, max_length=128)
    llm_timeout_ms: int = Field(
        default=90_000,
        ge=1_000,
        le=600_000,
        description="Timeout for lyrics completions.",
    )
    story_timeout_ms: int = Field(
        default=8_000,
        ge=500,
        le=120_000,
        description="Timeout for the story mode transform.",
    )
    availability_timeout_ms: int = Field(default=5_000, ge=100, le=60_000)
    availability_cache_ttl_seconds: float = Field(default=30.0, ge=0.0, le=3_600.0)
    default_seed: int | None = Field(
        default=None,
        ge=0,
        description="Seed used when a request does not carry one.",
    )

    @model_validator(mode="after")
    def _normalise_endpoint(self) -> "Settings":
        endpoint = self.ollama_endpoint.strip().rstrip("/")
        if not endpoint:
            endpoint = DEFAULT_OLLAMA_ENDPOINT
        elif "://" not in endpoint:
            endpoint = f"http://{endpoint}"
        self.ollama_endpoint = endpoint
        return self

    def capabilities(self) -> Capabilities:
        return Capabilities(
            lyrics_mode=self.lyrics_mode,
            max_mode=self.max_mode,
            use_local_llm=self.use_local_llm,
            story_mode=self.story_mode,
            llm_available=self.llm_available,
            use_suno_tags=self.use_suno_tags,
            ollama_endpoint=self.ollama_endpoint,
            model_name=self.ollama_model,
            llm_timeout_ms=self.llm_timeout_ms,
            story_timeout_ms=self.story_timeout_ms,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
