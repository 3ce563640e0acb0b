from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from simcase import logger as logger_mod
from simcase.llm._json import parse_json, validate_json
from simcase.llm.base import LLMClient
from simcase.llm.errors import LLMError, LLMValidationError
from simcase.schemas import OBJECTIVE_REFINEMENT_SCHEMA

log = logger_mod.get_logger()

UNPARSEABLE_FEEDBACK = "Unable to parse AI response. Please try again."


@dataclass(frozen=True)
class RefinedObjective:
    original: str
    refined: str
    explanation: str
    accepted: bool = False


@dataclass(frozen=True)
class ObjectiveRefinement:
    refined_objectives: list[RefinedObjective] = field(default_factory=list)
    general_feedback: str = ""


def _normalize(item: dict[str, Any]) -> RefinedObjective:
    original = item.get("original") or ""
    return RefinedObjective(
        original=original,
        refined=item.get("refined") or original,
        explanation=item.get("explanation") or "No explanation provided",
    )


def parse_objective_refinement(content: str) -> ObjectiveRefinement:
    """Turn Claude's objective-refinement reply into an ObjectiveRefinement.

    Never raises for a bad reply: the result is empty and carries a
    "please try again" message instead.
    """

    try:
        data = parse_json(content)
        validate_json(data, OBJECTIVE_REFINEMENT_SCHEMA)
    except LLMError as e:
        log.error(f"Error parsing AI response: {e}")
        log.error(f"Raw content: {content}")
        return ObjectiveRefinement(general_feedback=UNPARSEABLE_FEEDBACK)

    return ObjectiveRefinement(
        refined_objectives=[_normalize(item) for item in data["refinedObjectives"]],
        general_feedback=data.get("generalFeedback") or "No general feedback provided",
    )


def refine_objectives(
    client: LLMClient, prompt: str, *, max_tokens: int = 3000, temperature: float = 0.3
) -> ObjectiveRefinement:
    # Lower temperature keeps the formatting consistent.
    if not prompt:
        raise ValueError("No objectives provided for refinement")

    result = client.complete(prompt, max_tokens=max_tokens, temperature=temperature)
    refinement = parse_objective_refinement(result.raw_text)
    if not refinement.refined_objectives:
        raise LLMValidationError("Failed to parse AI response. Please try again.")
    return refinement
