"""Shared service-layer exceptions."""

from __future__ import annotations


class RefinementError(Exception):
    """Base class for expected refinement failures."""


class ValidationFailure(RefinementError):
    """Malformed or missing request input, attributed to a single field."""

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field


class LocalLLMUnavailable(RefinementError):
    """Offline mode is on but the local model endpoint cannot be reached."""

    def __init__(self, endpoint: str) -> None:
        super().__init__(f"local LLM endpoint {endpoint} is not reachable")
        self.endpoint = endpoint


class LocalModelMissing(RefinementError):
    """Local endpoint answered but the configured model is not installed."""

    def __init__(self, endpoint: str, model: str) -> None:
        super().__init__(f"model {model} is not installed at {endpoint}")
        self.endpoint = endpoint
        self.model = model


class TransientLLMFailure(RefinementError):
    """Timeout or network error while talking to a language model."""


class LyricsGenerationFailure(RefinementError):
    """Language model failed while producing lyrics."""


class InvariantViolation(RuntimeError):
    """Caller broke a sampling helper precondition."""
