"""Local Ollama client used for lyrics and story completions."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Optional

import httpx
from loguru import logger

from .exceptions import TransientLLMFailure
from .types import DEFAULT_OLLAMA_ENDPOINT, DEFAULT_OLLAMA_MODEL, AvailabilityStatus


def model_matches(installed: str, required: str) -> bool:
    return installed == required or installed.startswith(f"{required}:")


class OllamaClient:
    """Talks to ``/api/tags`` and ``/api/generate`` on a local Ollama server.

    Availability results are cached per endpoint for ``cache_ttl_seconds``.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_OLLAMA_ENDPOINT,
        model: str = DEFAULT_OLLAMA_MODEL,
        *,
        availability_timeout_ms: int = 5_000,
        cache_ttl_seconds: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.model = model
        self._availability_timeout = availability_timeout_ms / 1000.0
        self._cache_ttl = cache_ttl_seconds
        self._client = client
        self._cache: dict[tuple[str, str], tuple[float, AvailabilityStatus]] = {}
        self._lock = asyncio.Lock()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def clear_cache(self) -> None:
        self._cache.clear()

    async def check(self, endpoint: Optional[str] = None) -> AvailabilityStatus:
        base = (endpoint or self.endpoint).rstrip("/")
        key = (base, self.model)
        async with self._lock:
            cached = self._cache.get(key)
            now = time.monotonic()
            if cached is not None and now - cached[0] < self._cache_ttl:
                return cached[1]
            status = await self._probe(base)
            self._cache[key] = (now, status)
            return status

    async def _probe(self, base: str) -> AvailabilityStatus:
        try:
            response = await self.client.get(f"{base}/api/tags", timeout=self._availability_timeout)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Ollama availability check against {} failed: {}", base, exc)
            return AvailabilityStatus(available=False, has_required_model=False)

        models = (payload.get("models") or []) if isinstance(payload, dict) else None
        if not isinstance(models, list):
            logger.warning("Ollama at {} returned an unexpected tags payload", base)
            return AvailabilityStatus(available=False, has_required_model=False)
        has_model = any(
            isinstance(entry, dict) and model_matches(str(entry.get("name", "")), self.model)
            for entry in models
        )
        logger.info("Ollama at {} is up (model {} installed: {})", base, self.model, has_model)
        return AvailabilityStatus(available=True, has_required_model=has_model)

    async def complete(self, system_prompt: str, user_prompt: str, *, timeout_ms: int) -> str:
        payload: dict[str, Any] = {
            "model": self.model,
            "system": system_prompt,
            "prompt": user_prompt,
            "stream": False,
        }
        started = time.monotonic()
        try:
            response = await self.client.post(
                f"{self.endpoint}/api/generate",
                json=payload,
                timeout=timeout_ms / 1000.0,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise TransientLLMFailure(f"Ollama timed out after {timeout_ms}ms") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise TransientLLMFailure(f"Ollama request failed: {exc}") from exc

        if not isinstance(data, dict):
            raise TransientLLMFailure("Ollama returned an unexpected generate payload")
        text = str(data.get("response", ""))
        logger.debug(
            "Ollama completion: {:.2f}s, {} characters", time.monotonic() - started, len(text)
        )
        return text
