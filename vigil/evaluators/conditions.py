"""Condition and condition-group evaluation."""

import math
from typing import List, Optional

from loguru import logger

from vigil.schemas import (
    Condition,
    ConditionField,
    ConditionGroup,
    ConditionLogic,
    ConditionOperator,
    ConditionResult,
    EvaluationResult,
    MarketObservation,
    NewsContext,
)
from .fields import get_field_value
from .operators import compare_values, operator_symbol


def _format_value(value: float) -> str:
    if math.isfinite(value):
        return f"{value:.2f}"
    return str(value)


def evaluate_condition(
    condition: Condition,
    observation: MarketObservation,
    news: Optional[NewsContext] = None,
) -> ConditionResult:
    """Evaluate one condition. Unresolvable or malformed conditions never match."""
    try:
        field = ConditionField(condition.field)
    except ValueError:
        logger.warning(f"Condition {condition.id}: unknown field {condition.field!r}")
        return ConditionResult(matched=False, description=f"unknown field {condition.field}")

    try:
        operator = ConditionOperator(condition.operator)
    except ValueError:
        logger.warning(f"Condition {condition.id}: unknown operator {condition.operator!r}")
        return ConditionResult(matched=False, description=f"unknown operator {condition.operator}")

    value = get_field_value(field, observation, news)
    if value is None:
        logger.debug(f"{observation.ticker}: {field.value} unavailable for condition {condition.id}")
        return ConditionResult(matched=False, description=f"{field.value} data unavailable")

    description = f"{field.value} {operator_symbol(operator)} {condition.value:g} (actual: {_format_value(value)})"

    if operator in (ConditionOperator.CROSSES_ABOVE, ConditionOperator.CROSSES_BELOW):
        return ConditionResult(matched=False, description=f"{description} requires previous observation")

    return ConditionResult(matched=compare_values(value, operator, condition.value), description=description)


def evaluate_condition_groups(
    groups: List[ConditionGroup],
    observation: MarketObservation,
    news: Optional[NewsContext] = None,
) -> EvaluationResult:
    """Any satisfied group triggers; descriptions come from satisfied groups only."""
    conditions_met: List[str] = []
    triggered = False

    for group in groups:
        results = [evaluate_condition(c, observation, news) for c in group.conditions]
        if not results:
            continue

        if group.logic == ConditionLogic.AND:
            group_met = all(r.matched for r in results)
        else:
            group_met = any(r.matched for r in results)

        if group_met:
            triggered = True
            conditions_met.extend(r.description for r in results if r.matched)

    reason = f"Conditions met: {', '.join(conditions_met)}" if triggered else "No conditions met"
    return EvaluationResult(triggered=triggered, reason=reason, conditions_met=conditions_met)
