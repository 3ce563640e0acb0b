from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol

from simcase import config

from .types import LLMResult, Shape


@dataclass(frozen=True)
class LLMConfig:
    provider: str
    model: str
    api_key_env: str
    timeout_s: float = config.REQUEST_TIMEOUT_S
    max_tokens: int = config.DEFAULT_MAX_TOKENS
    temperature: float = config.DEFAULT_TEMPERATURE


class LLMClient(Protocol):
    """Small interface for "prompt -> JSON section" style tasks."""

    def complete(
        self,
        prompt: str,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResult:
        raise NotImplementedError

    def generate_json(
        self,
        prompt: str,
        *,
        expect: Shape = "object",
        schema: Optional[dict[str, Any]] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResult:
        raise NotImplementedError
