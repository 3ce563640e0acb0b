"""JSON Schemas for the sections Claude is asked to generate.

The decoder does not know about any of these; callers validate the decoded
value with :func:`simcase.llm._json.validate_json` or :func:`validate_case`.
"""

from __future__ import annotations

from typing import Any, Optional

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

_NON_EMPTY = {"type": "string", "minLength": 1}

MISTAKE_CATEGORIES = [
    "assessment",
    "clinical_reasoning",
    "communication",
    "technical",
    "safety",
    "prioritization",
]

REQUIRED_VITALS = [
    "temperature",
    "heartRate",
    "bloodPressure",
    "respiratoryRate",
    "oxygenSaturation",
]

MAX_CASE_TITLE = 80

OBJECTIVE_REFINEMENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["refinedObjectives"],
    "properties": {
        "refinedObjectives": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "original": {"type": "string"},
                    "refined": {"type": "string"},
                    "explanation": {"type": "string"},
                },
            },
        },
        "generalFeedback": {"type": "string"},
    },
}

COMMON_MISTAKES_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["mistakes"],
    "properties": {
        "mistakes": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["mistake", "category"],
                "properties": {
                    "mistake": _NON_EMPTY,
                    "category": {"enum": MISTAKE_CATEGORIES},
                    "whyItHappens": {"type": "string"},
                    "correctApproach": {"type": "string"},
                    "preventionStrategy": {"type": "string"},
                },
            },
        }
    },
}

CASE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["overview", "patient", "presentation"],
    "properties": {
        "overview": {
            "type": "object",
            "required": ["caseTitle"],
            "properties": {
                "caseTitle": {
                    "type": "string",
                    "minLength": 1,
                    "maxLength": MAX_CASE_TITLE,
                }
            },
        },
        "patient": {
            "type": "object",
            "required": ["demographics"],
            "properties": {
                "demographics": {
                    "type": "object",
                    "required": ["fullName", "age"],
                    "properties": {
                        "fullName": _NON_EMPTY,
                        "age": {"type": ["string", "integer", "number"]},
                    },
                }
            },
        },
        "presentation": {
            "type": "object",
            "required": ["vitalSigns"],
            "properties": {
                "vitalSigns": {"type": "object", "required": REQUIRED_VITALS},
            },
        },
    },
}

_CASE_VALIDATOR = Draft7Validator(CASE_SCHEMA)


def validate_case(data: Any) -> Optional[str]:
    """Return the most relevant problem with a generated case, or None."""

    error = best_match(_CASE_VALIDATOR.iter_errors(data))
    if error is None:
        return None
    where = ".".join(str(p) for p in error.absolute_path) or "case"
    return f"{where}: {error.message}"
