from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .decoder import DecodeError


class LLMError(RuntimeError):
    pass


class LLMConfigError(LLMError):
    """Raised when a client cannot be built (missing key, unknown provider)."""


class LLMDecodeError(LLMError):
    """Raised when no recovery stage produced parseable JSON."""

    def __init__(self, error: "DecodeError"):
        super().__init__("AI response was not valid JSON format")
        self.error = error


class LLMValidationError(LLMError):
    """Raised when the model output cannot be validated against the requested schema."""


class LLMAPIError(LLMError):
    def __init__(self, message: str, *, status: int = 500):
        super().__init__(message)
        self.status = status


class RateLimitExceeded(LLMAPIError):
    def __init__(self, key: str):
        super().__init__("Rate limit exceeded. Please try again later.", status=429)
        self.key = key
