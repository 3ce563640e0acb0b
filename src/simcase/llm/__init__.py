"""LLM provider abstractions and model-output decoding.

Design goals:
- Keep provider-specific SDKs isolated.
- Recover JSON from chatty model replies with one shared decoder.
- Validate output against a JSON Schema after decoding, never inside it.
"""

from .decoder import DecodeError, DecodeResult, DecodeStage, decode
from .errors import (
    LLMAPIError,
    LLMConfigError,
    LLMDecodeError,
    LLMError,
    LLMValidationError,
    RateLimitExceeded,
)
from .factory import build_llm
from .rate_limit import TokenBucketLimiter, client_identity
from .types import LLMResult, Usage

__all__ = [
    "DecodeError",
    "DecodeResult",
    "DecodeStage",
    "LLMAPIError",
    "LLMConfigError",
    "LLMDecodeError",
    "LLMError",
    "LLMResult",
    "LLMValidationError",
    "RateLimitExceeded",
    "TokenBucketLimiter",
    "Usage",
    "build_llm",
    "client_identity",
    "decode",
]
