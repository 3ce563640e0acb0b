from __future__ import annotations

import dataclasses
import os
from typing import Any, Optional

import anthropic

from simcase import logger as logger_mod

from ._json import validate_json
from ._retry import RetryConfig, execute_with_retry
from .base import LLMClient, LLMConfig
from .decoder import DecodeStage, decode
from .errors import LLMAPIError, LLMConfigError, LLMDecodeError
from .types import LLMResult, Shape, Usage

log = logger_mod.get_logger()

# HTTP-style status -> message a caller can show to the user
_STATUS_MESSAGES = {
    400: "Invalid request format",
    401: "Invalid API key",
    408: "Request timeout. Please try again.",
    429: "API rate limit exceeded. Please try again later.",
}


def to_api_error(error: anthropic.APIError) -> LLMAPIError:
    """Map an SDK error onto an :class:`LLMAPIError` with an HTTP-style status."""

    if isinstance(error, anthropic.APITimeoutError):
        status = 408
    elif (
        isinstance(error, anthropic.APIStatusError)
        and error.status_code in _STATUS_MESSAGES
    ):
        status = error.status_code
    else:
        status = 500

    if status == 500 and isinstance(error, anthropic.APIConnectionError):
        message = "Network error. Please check your connection and try again."
    else:
        message = _STATUS_MESSAGES.get(status, "Internal server error")
    return LLMAPIError(message, status=status)


class AnthropicLLM(LLMClient):
    """Anthropic Claude client wrapper.

    One user message in, the concatenated text blocks out. ``generate_json``
    runs the reply through :func:`~simcase.llm.decoder.decode` and, when a
    schema is given, validates the decoded value against it.
    """

    def __init__(
        self,
        config: LLMConfig,
        *,
        client: Any = None,
        retry: Optional[RetryConfig] = None,
    ):
        self._cfg = config
        self._retry = retry or RetryConfig()

        if client is None:
            api_key = os.getenv(config.api_key_env)
            if not api_key:
                raise LLMConfigError(
                    f"Missing env var {config.api_key_env} for Anthropic API key"
                )
            # Retries are handled by execute_with_retry, not the SDK.
            client = anthropic.Anthropic(
                api_key=api_key, timeout=config.timeout_s, max_retries=0
            )

        self._client = client

    @property
    def config(self) -> LLMConfig:
        return self._cfg

    def _extract_text(self, message: Any) -> str:
        texts = [
            block.text
            for block in getattr(message, "content", None) or []
            if getattr(block, "type", None) == "text"
        ]
        if not texts:
            raise LLMAPIError("Unexpected response format from Claude", status=500)
        return "\n".join(texts)

    def complete(
        self,
        prompt: str,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResult:
        if not prompt or not prompt.strip():
            raise ValueError("Prompt is required")

        def call():
            return self._client.messages.create(
                model=self._cfg.model,
                max_tokens=max_tokens or self._cfg.max_tokens,
                temperature=(
                    self._cfg.temperature if temperature is None else temperature
                ),
                messages=[{"role": "user", "content": prompt}],
            )

        try:
            message = execute_with_retry(
                call, context=f"calling {self._cfg.model}", retry=self._retry
            )
        except anthropic.APIError as e:
            raise to_api_error(e) from e

        usage = getattr(message, "usage", None)
        return LLMResult(
            provider=self._cfg.provider,
            model=self._cfg.model,
            raw_text=self._extract_text(message),
            usage=Usage(
                input_tokens=getattr(usage, "input_tokens", 0) or 0,
                output_tokens=getattr(usage, "output_tokens", 0) or 0,
            ),
        )

    def generate_json(
        self,
        prompt: str,
        *,
        expect: Shape = "object",
        schema: Optional[dict[str, Any]] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResult:
        result = self.complete(prompt, max_tokens=max_tokens, temperature=temperature)

        head, tail = logger_mod.preview(result.raw_text)
        log.debug("Raw Claude response (first chars): %s", head)
        log.debug("Raw Claude response (last chars): %s", tail)

        decoded = decode(result.raw_text, expect=expect)
        if not decoded.ok:
            log.error("❌ JSON parsing failed: %s", decoded.error.parser_message)
            log.error("Attempted text: %s", decoded.error.attempted_text)
            raise LLMDecodeError(decoded.error)

        if decoded.stage is not DecodeStage.STRICT:
            log.warning("Claude response needed cleanup (stage=%s)", decoded.stage.value)

        if schema is not None:
            validate_json(decoded.value, schema)

        return dataclasses.replace(
            result, output_json=decoded.value, decode_stage=decoded.stage.value
        )
