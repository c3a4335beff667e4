import json
import math
import re
from typing import Any, Dict, List

from .errors import InvalidResponseShape, MalformedResponse

SCORE_MIN, SCORE_MAX = 1, 100

# list fields each analysis mode asks the model for, with the type of their items
LIST_FIELDS = {
    "basic": [
        ("feedback.strengths", str), ("feedback.weaknesses", str), ("feedback.skillsIdentified", str),
    ],
    "enhanced": [
        ("feedback.strengths", str), ("feedback.weaknesses", str), ("feedback.skillsIdentified", str),
        ("suggestedQuestions", str), ("experience", dict), ("education", dict),
    ],
}

_ITEM_NAMES = {str: "strings", dict: "objects"}

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def clamp_score(value) -> int:
    """Round to an int and pull into [1, 100]."""
    return max(SCORE_MIN, min(SCORE_MAX, int(round(value))))


def parse_payload(raw: str) -> Dict[str, Any]:
    if not isinstance(raw, str):
        raise MalformedResponse(f"Expected response text, got {type(raw).__name__}")
    text = raw.strip()
    fenced = _FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Response is not valid JSON: {e.msg}") from e
    if not isinstance(parsed, dict):
        raise MalformedResponse(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def _lookup(payload: Dict[str, Any], dotted: str):
    node: Any = payload
    for part in dotted.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def validate_payload(payload: Dict[str, Any], mode: str) -> None:
    """Raise InvalidResponseShape naming every field that fails the checklist."""
    problems: List[str] = []
    for name in ("score", "matchScore"):
        if not _is_number(payload.get(name)):
            problems.append(f"{name} must be a number")
    if not isinstance(payload.get("feedback"), dict):
        problems.append("feedback must be an object")
    elif not isinstance(payload["feedback"].get("recommendation"), str):
        problems.append("feedback.recommendation must be a string")
    for dotted, item_type in LIST_FIELDS[mode]:
        value = _lookup(payload, dotted)
        if not isinstance(value, list):
            problems.append(f"{dotted} must be a list")
        elif not all(isinstance(item, item_type) for item in value):
            problems.append(f"{dotted} must contain only {_ITEM_NAMES[item_type]}")
    if problems:
        raise InvalidResponseShape(problems)
