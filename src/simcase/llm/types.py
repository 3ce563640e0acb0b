from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

Shape = Literal["object", "array"]


@dataclass(frozen=True)
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class LLMResult:
    """Provider-neutral result container."""

    provider: str
    model: str
    raw_text: str
    output_json: Any = None
    usage: Usage = field(default_factory=Usage)
    # Name of the decoder stage that produced output_json, None for plain text.
    decode_stage: Optional[str] = None
