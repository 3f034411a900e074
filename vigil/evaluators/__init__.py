"""Pure evaluators for conditions, news triggers and anomalies."""

from .anomaly import calculate_statistics, evaluate_anomaly, has_recent_news, MIN_HISTORY_POINTS
from .conditions import evaluate_condition, evaluate_condition_groups
from .fields import FIELD_EXTRACTORS, get_field_value
from .news import evaluate_news_trigger
from .operators import compare_values, operator_symbol, EQUALITY_TOLERANCE

__all__ = [
    "calculate_statistics",
    "evaluate_anomaly",
    "has_recent_news",
    "MIN_HISTORY_POINTS",
    "evaluate_condition",
    "evaluate_condition_groups",
    "FIELD_EXTRACTORS",
    "get_field_value",
    "evaluate_news_trigger",
    "compare_values",
    "operator_symbol",
    "EQUALITY_TOLERANCE",
]
