"""Comparison operators used by conditions."""

from typing import Union

from vigil.schemas import ConditionOperator

# Absolute tolerance for EQUAL / NOT_EQUAL
EQUALITY_TOLERANCE = 0.01

OPERATOR_SYMBOLS = {
    ConditionOperator.GREATER_THAN: ">",
    ConditionOperator.LESS_THAN: "<",
    ConditionOperator.GREATER_THAN_EQUAL: "≥",
    ConditionOperator.LESS_THAN_EQUAL: "≤",
    ConditionOperator.EQUAL: "=",
    ConditionOperator.NOT_EQUAL: "≠",
    ConditionOperator.PERCENTAGE_CHANGE: "%Δ",
    ConditionOperator.CROSSES_ABOVE: "↑",
    ConditionOperator.CROSSES_BELOW: "↓",
}


def compare_values(actual: float, operator: ConditionOperator, target: float) -> bool:
    """Compare ``actual`` against ``target`` with the given operator."""
    if operator == ConditionOperator.GREATER_THAN:
        return actual > target
    elif operator == ConditionOperator.LESS_THAN:
        return actual < target
    elif operator == ConditionOperator.GREATER_THAN_EQUAL:
        return actual >= target
    elif operator == ConditionOperator.LESS_THAN_EQUAL:
        return actual <= target
    elif operator == ConditionOperator.EQUAL:
        return abs(actual - target) < EQUALITY_TOLERANCE
    elif operator == ConditionOperator.NOT_EQUAL:
        return abs(actual - target) >= EQUALITY_TOLERANCE
    elif operator == ConditionOperator.PERCENTAGE_CHANGE:
        # target is the magnitude threshold, direction ignored
        return abs(actual) >= target
    # CROSSES_ABOVE / CROSSES_BELOW need the previous observation, which is
    # not passed to the evaluator; they never match.
    return False


def operator_symbol(operator: Union[ConditionOperator, str]) -> str:
    """Display symbol for an operator, falling back to its name."""
    try:
        return OPERATOR_SYMBOLS[ConditionOperator(operator)]
    except ValueError:
        return str(operator)
