"""Shared fixtures."""

from datetime import datetime, timezone

import pytest

from vigil.schemas import (
    Alert,
    AlertType,
    Condition,
    ConditionGroup,
    ConditionLogic,
    MarketObservation,
    TriggerEvent,
)

# Friday
NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def observation():
    return MarketObservation(
        ticker="SBER",
        price=255.5,
        previous_close=250.0,
        volume=10_000_000,
        average_volume=8_000_000,
        pe_ratio=4.2,
        rsi=65,
        moving_avg_50=248.0,
        moving_avg_200=240.0,
        timestamp=NOW,
    )


@pytest.fixture
def make_alert():
    def _make(*conditions, logic=ConditionLogic.AND, type=AlertType.THRESHOLD, **kwargs):
        groups = kwargs.pop("condition_groups", None)
        if groups is None and conditions:
            groups = [ConditionGroup(logic=logic, conditions=[Condition(field=f, operator=o, value=v) for f, o, v in conditions])]
        return Alert(
            ticker=kwargs.pop("ticker", "SBER"),
            name=kwargs.pop("name", "Test alert"),
            type=type,
            condition_groups=groups or [],
            **kwargs,
        )
    return _make


@pytest.fixture
def make_event():
    def _make(ticker="SBER", alert_id="alert-1", triggered_at=NOW, reason="Conditions met: PRICE > 250"):
        return TriggerEvent(
            alert_id=alert_id,
            ticker=ticker,
            triggered_at=triggered_at,
            trigger_reason=reason,
            price_at_trigger=255.5,
        )
    return _make
