"""Recover a JSON value from the free text of a model completion.

Models asked to "return only JSON" still wrap the payload in markdown fences,
add commentary around it, or leak control characters into string literals.
:func:`decode` runs a fixed ladder of recovery stages, from exact to lossy,
and stops at the first one whose output parses strictly:

1. strip a markdown fence (```` ```json ```` or bare ```` ``` ````)
2. slice from the first opening bracket to the last closing bracket
3. strict parse
4. delete control characters other than tab / newline / carriage return
5. escape tab / newline / carriage return, delete other controls, collapse whitespace
6. turn every control into a space, collapse whitespace, drop trailing commas

Malformed input is a normal outcome and comes back as a failed
:class:`DecodeResult`; only a non-``str`` input raises.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .errors import LLMDecodeError
from .types import Shape

JSON_FENCE = "```json"
FENCE = "```"

_BRACKETS = {
    "object": ("{", "}"),
    "array": ("[", "]"),
}

# C0/C1 controls except \t, \n and \r
_UNSAFE_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_ANY_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_COMMA_OBJECT_RE = re.compile(r",\s*}")
_TRAILING_COMMA_ARRAY_RE = re.compile(r",\s*]")

_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


class DecodeStage(str, Enum):
    STRICT = "strict"
    STRIP_CONTROL = "strip_control"
    ESCAPE_CONTROL = "escape_control"
    REPAIR = "repair"


@dataclass(frozen=True)
class DecodeError:
    """Why decoding failed: the last text tried and the parser's complaint."""

    attempted_text: str
    parser_message: str


@dataclass(frozen=True)
class DecodeResult:
    value: Any = None
    stage: Optional[DecodeStage] = None
    error: Optional[DecodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise LLMDecodeError(self.error)
        return self.value


def _reject_constant(name: str) -> Any:
    # json.loads accepts NaN / Infinity; strict JSON does not.
    raise ValueError(f"Invalid JSON constant: {name}")


def _loads(text: str) -> Any:
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except RecursionError as e:
        # Deeply nested input is malformed output, not a programming error.
        raise ValueError(f"JSON nested too deeply: {e}") from e


def strip_fences(text: str) -> str:
    if FENCE in text:
        json_start = text.find(JSON_FENCE)
        if json_start != -1:
            text = text[json_start + len(JSON_FENCE) :]
        else:
            text = text[text.find(FENCE) + len(FENCE) :]

        closing = text.rfind(FENCE)
        if closing != -1:
            text = text[:closing]

    return text.strip()


def extract_boundaries(text: str, expect: Shape = "object") -> str:
    """Slice ``text`` to its outermost bracket pair, if it has one."""
    opening, closing = _BRACKETS[expect]
    first = text.find(opening)
    last = text.rfind(closing)
    if first != -1 and last != -1 and last > first:
        return text[first : last + 1]
    return text


def strip_control_chars(text: str) -> str:
    return _UNSAFE_CONTROL_RE.sub("", text)


def escape_control_chars(text: str) -> str:
    escaped = _ANY_CONTROL_RE.sub(lambda m: _CONTROL_ESCAPES.get(m.group(0), ""), text)
    return _WHITESPACE_RE.sub(" ", escaped).strip()


def repair(text: str) -> str:
    fixed = _ANY_CONTROL_RE.sub(" ", text)
    fixed = _WHITESPACE_RE.sub(" ", fixed)
    fixed = _TRAILING_COMMA_OBJECT_RE.sub("}", fixed)
    fixed = _TRAILING_COMMA_ARRAY_RE.sub("]", fixed)
    return fixed.strip()


def decode(raw_text: str, *, expect: Shape = "object") -> DecodeResult:
    """Decode a model reply into a JSON value.

    ``expect`` picks which bracket pair bounds the payload: ``"object"`` for
    ``{...}`` replies, ``"array"`` for ``[...]`` replies.
    """

    if not isinstance(raw_text, str):
        raise TypeError(f"raw_text must be str, not {type(raw_text).__name__}")
    if expect not in _BRACKETS:
        raise ValueError(f"expect must be 'object' or 'array', not {expect!r}")

    # Well-formed JSON is returned untouched, even when a string inside it
    # contains a fence or the top level is not the expected bracket pair.
    try:
        return DecodeResult(value=_loads(raw_text), stage=DecodeStage.STRICT)
    except ValueError as e:
        last_error: ValueError = e

    sliced = extract_boundaries(strip_fences(raw_text), expect)

    if sliced != raw_text:
        try:
            return DecodeResult(value=_loads(sliced), stage=DecodeStage.STRICT)
        except ValueError as e:
            last_error = e

    # The escape and repair stages both start from the stripped text.
    stripped = strip_control_chars(sliced)
    attempts = (
        (DecodeStage.STRIP_CONTROL, stripped),
        (DecodeStage.ESCAPE_CONTROL, escape_control_chars(stripped)),
        (DecodeStage.REPAIR, repair(stripped)),
    )
    for stage, attempted in attempts:
        try:
            return DecodeResult(value=_loads(attempted), stage=stage)
        except ValueError as e:
            last_error = e

    return DecodeResult(
        error=DecodeError(attempted_text=attempted, parser_message=str(last_error))
    )
