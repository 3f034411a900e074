"""Test trigger history and alert lifecycle bookkeeping."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from vigil.schemas import AlertStatus, AlertType, TriggerEvent, UserAction
from vigil.services import InMemoryTriggerHistory
from vigil.services import lifecycle

UTC = timezone.utc


def test_count_today_per_alert(make_event, now):
    history = InMemoryTriggerHistory(timezone="UTC")
    history.record(make_event(alert_id="a", triggered_at=now - timedelta(hours=1)))
    history.record(make_event(alert_id="a", triggered_at=now))
    history.record(make_event(alert_id="b", triggered_at=now))
    history.record(make_event(alert_id="a", triggered_at=now - timedelta(days=1)))

    assert history.count_today("a", now) == 2
    assert history.count_today("b", now) == 1
    assert history.count_today("c", now) == 0


def test_count_today_uses_local_day(make_event):
    history = InMemoryTriggerHistory(timezone="Europe/Moscow")
    # 22:00 UTC on the 15th is 01:00 on the 16th in Moscow
    history.record(make_event(alert_id="a", triggered_at=datetime(2026, 10, 15, 22, 0, tzinfo=UTC)))

    assert history.count_today("a", datetime(2026, 10, 16, 9, 0, tzinfo=UTC)) == 1
    assert history.count_today("a", datetime(2026, 10, 15, 12, 0, tzinfo=UTC)) == 0


def test_history_is_bounded(make_event, now):
    history = InMemoryTriggerHistory(max_events=3, timezone="UTC")
    for i in range(5):
        history.record(make_event(reason=f"event {i}", triggered_at=now))

    assert len(history) == 3
    assert [e.trigger_reason for e in history.events()] == ["event 4", "event 3", "event 2"]
    assert len(history.events(limit=1)) == 1

    history.clear()
    assert len(history) == 0


def test_statistics(make_alert, make_event, now):
    sber = make_alert(("PRICE", "GREATER_THAN", 250), ticker="SBER")
    gazp = make_alert(type=AlertType.NEWS_TRIGGERED, ticker="GAZP", status=AlertStatus.DISABLED)

    history = InMemoryTriggerHistory(timezone="UTC")
    history.record(make_event(ticker="SBER", alert_id=sber.id, triggered_at=datetime(2026, 9, 30, 10, tzinfo=UTC)))
    history.record(make_event(ticker="SBER", alert_id=sber.id, triggered_at=datetime(2026, 10, 2, 10, tzinfo=UTC)))
    history.record(make_event(ticker="GAZP", alert_id=gazp.id, triggered_at=datetime(2026, 10, 13, 10, tzinfo=UTC)))
    history.record(make_event(ticker="SBER", alert_id=sber.id, triggered_at=now - timedelta(hours=2)))
    history.record(make_event(ticker="SBER", alert_id=sber.id, triggered_at=now))

    stats = history.statistics([sber, gazp], now)

    assert stats.total_alerts == 2
    assert stats.active_alerts == 1
    assert stats.triggered_today == 2
    assert stats.triggered_this_week == 3  # week starts Monday the 12th
    assert stats.triggered_this_month == 4
    assert stats.average_triggers_per_day == pytest.approx(round(5 / 17, 2))
    assert stats.most_triggered_ticker == "SBER"
    assert stats.most_triggered_alert_type == AlertType.THRESHOLD


def test_statistics_empty(make_alert, now):
    stats = InMemoryTriggerHistory(timezone="UTC").statistics([make_alert()], now)
    assert stats.total_alerts == 1
    assert stats.triggered_today == 0
    assert stats.average_triggers_per_day == 0
    assert stats.most_triggered_ticker is None


def test_record_trigger_keeps_alert_active(make_alert, make_event, now):
    alert = make_alert(("PRICE", "GREATER_THAN", 250))
    lifecycle.record_trigger(alert, make_event(alert_id=alert.id, triggered_at=now))

    assert alert.status == AlertStatus.ACTIVE
    assert alert.triggered_count == 1
    assert alert.last_triggered_at == now
    assert alert.updated_at == now


def test_snooze_and_resume(make_alert, now):
    alert = make_alert()
    lifecycle.snooze(alert, 2, now)

    assert alert.status == AlertStatus.SNOOZED
    assert alert.snoozed_until == now + timedelta(hours=2)

    assert lifecycle.resume_if_due(alert, now + timedelta(hours=1)) is False
    assert alert.status == AlertStatus.SNOOZED

    assert lifecycle.resume_if_due(alert, now + timedelta(hours=2)) is True
    assert alert.status == AlertStatus.ACTIVE
    assert alert.snoozed_until is None


def test_resume_ignores_other_statuses(make_alert, now):
    alert = make_alert(status=AlertStatus.DISABLED)
    assert lifecycle.resume_if_due(alert, now) is False
    assert alert.status == AlertStatus.DISABLED


def test_toggle(make_alert, now):
    alert = make_alert()
    assert lifecycle.toggle(alert, now) == AlertStatus.DISABLED
    assert lifecycle.toggle(alert, now) == AlertStatus.ACTIVE

    alert.status = AlertStatus.EXPIRED
    assert lifecycle.toggle(alert, now) == AlertStatus.ACTIVE


def test_expire_and_dismiss(make_alert, now):
    alert = make_alert()
    lifecycle.expire(alert, now)
    assert alert.status == AlertStatus.EXPIRED

    lifecycle.dismiss(alert, now)
    assert alert.status == AlertStatus.DISMISSED


def test_event_actions_return_copies(make_event, now):
    event = make_event()
    later = now + timedelta(minutes=5)

    viewed = lifecycle.mark_viewed(event, later)
    assert viewed.user_action == UserAction.VIEWED
    assert viewed.action_at == later
    assert viewed.id == event.id
    assert event.user_action == UserAction.PENDING

    snoozed = lifecycle.snooze_event(event, 4, later)
    assert snoozed.user_action == UserAction.SNOOZED
    assert snoozed.snoozed_until == later + timedelta(hours=4)

    assert lifecycle.dismiss_event(event, later).user_action == UserAction.DISMISSED


def test_events_are_immutable(make_event):
    event = make_event()
    with pytest.raises(ValidationError):
        event.trigger_reason = "changed"


def test_event_conditions_are_immutable():
    event = TriggerEvent(
        alert_id="a",
        ticker="SBER",
        trigger_reason="Conditions met: PRICE > 250",
        conditions_met=["PRICE > 250"],
        price_at_trigger=255.5,
    )
    assert event.conditions_met == ("PRICE > 250",)
    with pytest.raises(AttributeError):
        event.conditions_met.append("RSI > 60")
