# condition_evaluator.py - Declarative condition matching for triggers and actions
# This file decides whether a set of field/operator/value conditions holds for an event payload.

import logging
from typing import Dict, List, Any, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

OPERATORS = ("equals", "contains", "greater_than", "less_than")

_MISSING = object()

class Condition(BaseModel):
    field: str
    operator: str = "equals"
    value: Any = None

def conditions_from_mapping(mapping: Optional[Dict[str, Any]]) -> List[Condition]:
    """Convert a free-form ``{field: expected}`` map into conditions.

    A scalar expected value means ``equals``. A dict expected value whose keys
    are operators is read as ``{operator: value}`` and yields one condition per
    entry, so ``{"score": {"greater_than": 49}}`` becomes a single numeric
    comparison. Any other dict is compared with ``equals`` as a whole.
    """
    conditions = []
    for field, expected in (mapping or {}).items():
        if isinstance(expected, dict) and expected and any(op in OPERATORS for op in expected):
            for operator, value in expected.items():
                conditions.append(Condition(field=field, operator=str(operator), value=value))
        else:
            conditions.append(Condition(field=field, operator="equals", value=expected))
    return conditions

def matches(conditions: List[Condition], payload: Optional[Dict[str, Any]]) -> bool:
    """All conditions must hold (AND). An empty list always matches."""
    payload = payload or {}
    for condition in conditions:
        if not _evaluate(condition, payload):
            return False
    return True

def mapping_matches(mapping: Optional[Dict[str, Any]], payload: Optional[Dict[str, Any]]) -> bool:
    return matches(conditions_from_mapping(mapping), payload)

def _evaluate(condition: Condition, payload: Dict[str, Any]) -> bool:
    actual = _resolve_field(condition.field, payload)
    if actual is _MISSING:
        return False

    operator = condition.operator
    expected = condition.value

    if operator == "equals":
        return _equals(actual, expected)

    # Only equality can match an explicit null
    if actual is None:
        return False

    if operator == "contains":
        return str(expected) in str(actual)

    if operator in ("greater_than", "less_than"):
        try:
            left, right = float(actual), float(expected)
        except (TypeError, ValueError):
            return False
        return left > right if operator == "greater_than" else left < right

    logger.warning(f"Unknown condition operator '{operator}' on field '{condition.field}'")
    return False

def _equals(actual: Any, expected: Any) -> bool:
    if actual is None or expected is None:
        return actual is expected
    # bool is an int subclass: True must not equal 1
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    if actual == expected:
        return True
    # "10" == 10, but only when one side is a string
    if isinstance(actual, str) != isinstance(expected, str):
        return str(actual) == str(expected)
    return False

def _resolve_field(path: str, payload: Dict[str, Any]) -> Any:
    """Resolve plain keys first, then dot notation like 'lead.source'."""
    if path in payload:
        return payload[path]

    current: Any = payload
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current
