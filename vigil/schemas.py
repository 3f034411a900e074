"""Core data models."""

import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, List, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def validate_timezone(name: str) -> str:
    """Reject names that are not known IANA zones."""
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"unknown timezone: {name!r}")
    return name


class AlertType(str, Enum):
    """Evaluation path of an alert."""
    THRESHOLD = "THRESHOLD"
    MULTI_CONDITION = "MULTI_CONDITION"
    NEWS_TRIGGERED = "NEWS_TRIGGERED"
    ANOMALY = "ANOMALY"

class AlertStatus(str, Enum):
    ACTIVE = "ACTIVE"
    TRIGGERED = "TRIGGERED"
    SNOOZED = "SNOOZED"
    DISMISSED = "DISMISSED"
    EXPIRED = "EXPIRED"
    DISABLED = "DISABLED"

class AlertPriority(str, Enum):
    """Priority level of alert."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

class ConditionLogic(str, Enum):
    AND = "AND"
    OR = "OR"

class ConditionOperator(str, Enum):
    """Comparison operators for a single condition."""
    GREATER_THAN = "GREATER_THAN"
    LESS_THAN = "LESS_THAN"
    GREATER_THAN_EQUAL = "GREATER_THAN_EQUAL"
    LESS_THAN_EQUAL = "LESS_THAN_EQUAL"
    EQUAL = "EQUAL"
    NOT_EQUAL = "NOT_EQUAL"
    PERCENTAGE_CHANGE = "PERCENTAGE_CHANGE"  # |actual| >= threshold
    CROSSES_ABOVE = "CROSSES_ABOVE"
    CROSSES_BELOW = "CROSSES_BELOW"

class ConditionField(str, Enum):
    """Numeric fields a condition can reference."""
    PRICE = "PRICE"
    PRICE_CHANGE = "PRICE_CHANGE"  # % vs previous close
    VOLUME = "VOLUME"
    VOLUME_RATIO = "VOLUME_RATIO"  # current vs average volume
    PE_RATIO = "PE_RATIO"
    RSI = "RSI"
    MOVING_AVG_50 = "MOVING_AVG_50"
    MOVING_AVG_200 = "MOVING_AVG_200"
    NEWS_SENTIMENT = "NEWS_SENTIMENT"
    MARKET_CAP = "MARKET_CAP"

class UserAction(str, Enum):
    PENDING = "PENDING"
    VIEWED = "VIEWED"
    DISMISSED = "DISMISSED"
    SNOOZED = "SNOOZED"


# ---- rule definition ----

class Condition(BaseModel):
    """Single comparison of a field against a threshold.

    Unknown field or operator names are kept as plain strings so a malformed
    rule still loads; the evaluator treats such a condition as unmatched.
    """
    id: str = Field(default_factory=_new_id)
    field: Union[ConditionField, str] = Field(..., union_mode="left_to_right")
    operator: Union[ConditionOperator, str] = Field(..., union_mode="left_to_right")
    value: float
    baseline_value: Optional[float] = None

class ConditionGroup(BaseModel):
    """Conditions combined with AND/OR logic."""
    id: str = Field(default_factory=_new_id)
    logic: ConditionLogic = ConditionLogic.AND
    conditions: List[Condition] = Field(default_factory=list)

class AnomalyConfig(BaseModel):
    price_change_threshold: float = Field(15.0, ge=0, le=100, description="% move vs previous close")
    volume_spike_multiplier: float = Field(5.0, ge=1, le=100)
    statistical_sigma: float = Field(2.0, ge=0.5, le=5)
    requires_no_news: bool = Field(True, description="Only trigger when no recent news explains the move")
    news_lookback_hours: int = Field(24, ge=1, le=168)

class Frequency(BaseModel):
    max_per_day: int = Field(3, ge=1, le=100)
    cooldown_minutes: float = Field(60, ge=0)
    batching_enabled: bool = True
    batching_window_minutes: float = Field(15, gt=0, le=1440)

class QuietHours(BaseModel):
    """Do-not-disturb window. ``start_time > end_time`` wraps through midnight."""
    enabled: bool = False
    start_time: str = "22:00"
    end_time: str = "08:00"
    days: List[int] = Field(default_factory=lambda: [0, 1, 2, 3, 4, 5, 6], description="0=Sunday .. 6=Saturday")
    timezone: Optional[str] = Field(None, description="IANA zone, engine timezone when unset")

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_hhmm(cls, v: str) -> str:
        if not _HHMM.match(v):
            raise ValueError(f"expected HH:MM, got {v!r}")
        return v

    @field_validator("days")
    @classmethod
    def _check_days(cls, v: List[int]) -> List[int]:
        for d in v:
            if not 0 <= d <= 6:
                raise ValueError(f"weekday out of range: {d}")
        return v

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else validate_timezone(v)

class Alert(BaseModel):
    """User-defined watch rule."""
    id: str = Field(default_factory=_new_id)
    ticker: str = Field(..., min_length=1, description="Subject identifier")
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    type: AlertType
    priority: AlertPriority = AlertPriority.MEDIUM
    status: AlertStatus = AlertStatus.ACTIVE

    condition_groups: List[ConditionGroup] = Field(default_factory=list)
    anomaly_config: Optional[AnomalyConfig] = None

    frequency: Frequency = Field(default_factory=Frequency)
    quiet_hours: QuietHours = Field(default_factory=QuietHours)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    expires_at: Optional[datetime] = None
    snoozed_until: Optional[datetime] = None

    # Bookkeeping, mutated through vigil.services.lifecycle
    last_triggered_at: Optional[datetime] = None
    triggered_count: int = Field(0, ge=0)


# ---- per-tick inputs ----

class MarketObservation(BaseModel):
    """Market snapshot for one ticker."""
    ticker: str
    price: float
    previous_close: float
    volume: float
    average_volume: Optional[float] = None
    pe_ratio: Optional[float] = None
    rsi: Optional[float] = None
    moving_avg_50: Optional[float] = None
    moving_avg_200: Optional[float] = None
    market_cap: Optional[float] = None
    timestamp: datetime = Field(default_factory=_utcnow)

class NewsItem(BaseModel):
    title: str
    summary: Optional[str] = None
    source: Optional[str] = None
    url: Optional[str] = None
    published_at: Optional[datetime] = None

class NewsContext(BaseModel):
    """News for one ticker over the lookback window."""
    ticker: str
    articles: List[NewsItem] = Field(default_factory=list)
    news_count: int = Field(0, ge=0)
    average_sentiment: Optional[float] = Field(None, ge=-1, le=1)

    @model_validator(mode="after")
    def _count_articles(self) -> "NewsContext":
        # news_count may exceed the articles carried, never fall below them
        if self.news_count < len(self.articles):
            self.news_count = len(self.articles)
        return self

    @classmethod
    def from_articles(cls, ticker: str, articles: List[NewsItem]) -> "NewsContext":
        """Build a context with keyword sentiment computed from the articles."""
        from vigil.services.sentiment import SentimentAnalyzer

        return cls(
            ticker=ticker,
            articles=articles,
            news_count=len(articles),
            average_sentiment=SentimentAnalyzer().calculate_sentiment(articles) if articles else None,
        )

class PriceHistoryPoint(BaseModel):
    timestamp: datetime
    price: float
    volume: float = 0.0


# ---- engine outputs ----

class TriggerEvent(BaseModel):
    """A fired alert. Immutable; user actions produce updated copies."""
    id: str = Field(default_factory=_new_id)
    alert_id: str
    ticker: str
    triggered_at: datetime = Field(default_factory=_utcnow)
    trigger_reason: str
    conditions_met: Tuple[str, ...] = ()

    # Market data at trigger time
    price_at_trigger: float
    volume_at_trigger: Optional[float] = None
    news_count: Optional[int] = None
    sentiment: Optional[float] = None

    user_action: UserAction = UserAction.PENDING
    action_at: Optional[datetime] = None
    snoozed_until: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)

class ConditionResult(BaseModel):
    matched: bool
    description: str

class EvaluationResult(BaseModel):
    triggered: bool
    reason: str
    conditions_met: List[str] = Field(default_factory=list)

class AnomalyResult(EvaluationResult):
    detected: bool = False
    explained_by_news: bool = False

class GateDecision(BaseModel):
    passed: bool
    gate: Optional[str] = None  # name of the gate that blocked
    reason: str = ""

class AlertEvaluation(BaseModel):
    """Outcome of evaluating one alert during a tick."""
    alert_id: str
    ticker: str
    triggered: bool = False
    reason: str = ""
    conditions_met: List[str] = Field(default_factory=list)
    event: Optional[TriggerEvent] = None
    blocked_by: Optional[str] = None
    error: Optional[str] = None

class AlertStatistics(BaseModel):
    total_alerts: int = 0
    active_alerts: int = 0
    triggered_today: int = 0
    triggered_this_week: int = 0
    triggered_this_month: int = 0
    average_triggers_per_day: float = 0.0
    most_triggered_ticker: Optional[str] = None
    most_triggered_alert_type: Optional[AlertType] = None


# ---- delivery ----

class NotificationLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

class NotificationTemplate(BaseModel):
    """Standardized notification structure for all channels."""
    title: str
    body: str  # Markdown supported
    level: NotificationLevel = NotificationLevel.INFO
    ticker: str
    event_ids: List[str] = Field(default_factory=list)

    # Key-Value pairs for structured display (e.g. Price: 100)
    fields: List[Dict[str, str]] = Field(default_factory=list)
    extras: Dict[str, Any] = Field(default_factory=dict)
