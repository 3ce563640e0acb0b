from __future__ import annotations

from typing import Any

from jsonschema import validate
from jsonschema.exceptions import ValidationError as _SchemaValidationError

from .decoder import decode
from .errors import LLMValidationError
from .types import Shape


def parse_json(text: str, *, expect: Shape = "object") -> Any:
    """Parse JSON from a model response.

    Assumes the provider was instructed to return JSON only, but tolerates the
    usual fences, prose and stray control characters. Raises
    :class:`~simcase.llm.errors.LLMDecodeError` when nothing parses.
    """

    return decode(text, expect=expect).unwrap()


def validate_json(instance: Any, schema: dict[str, Any]) -> None:
    try:
        validate(instance=instance, schema=schema)
    except _SchemaValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path)
        suffix = f" (at {where})" if where else ""
        raise LLMValidationError(
            f"JSON schema validation failed: {e.message}{suffix}"
        ) from e
