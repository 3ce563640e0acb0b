from __future__ import annotations

from typing import Optional

from simcase import config

from .anthropic_client import AnthropicLLM
from .base import LLMClient, LLMConfig
from .errors import LLMConfigError


def build_llm(*, provider: str = "anthropic", model: Optional[str] = None) -> LLMClient:
    """Factory for provider clients.

    Providers:
    - anthropic (Claude)

    Extend by adding new provider clients and mapping here.
    """

    p = provider.lower().strip()
    if p in ("anthropic", "claude"):
        return AnthropicLLM(
            LLMConfig(
                provider="anthropic",
                model=model or config.ANTHROPIC_MODEL,
                api_key_env=config.ANTHROPIC_API_KEY_ENV,
            )
        )

    raise LLMConfigError(f"Unknown LLM provider: {provider}")
