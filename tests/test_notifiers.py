"""Test notification templates."""

from datetime import datetime, timezone

import pytest

from vigil.notifiers import LogNotifier
from vigil.schemas import NotificationLevel, TriggerEvent


def _event(reason, hour, **kwargs):
    return TriggerEvent(
        alert_id="alert-1",
        ticker="SBER",
        triggered_at=datetime(2026, 10, 16, hour, 5, tzinfo=timezone.utc),
        trigger_reason=reason,
        price_at_trigger=255.5,
        **kwargs,
    )


def test_single_event_template():
    event = _event("Conditions met: PRICE > 250 (actual: 255.50)", 10, volume_at_trigger=1_250_000)
    template = LogNotifier().create_template("SBER", [event])

    assert template.title == "SBER: Conditions met: PRICE > 250 (actual: 255.50)"
    assert template.level == NotificationLevel.INFO
    assert template.body == "- 10:05 Conditions met: PRICE > 250 (actual: 255.50)"
    assert template.fields == [
        {"key": "Price", "value": "255.50"},
        {"key": "Volume", "value": "1,250,000"},
    ]
    assert template.event_ids == [event.id]


def test_batch_template():
    events = [_event("first", 10), _event("second", 11, news_count=3)]
    template = LogNotifier().create_template("SBER", events)

    assert template.title == "SBER: 2 alerts triggered"
    assert template.level == NotificationLevel.WARNING
    assert template.body.splitlines() == ["- 10:05 first", "- 11:05 second"]
    assert {"key": "News", "value": "3"} in template.fields


@pytest.mark.asyncio
async def test_log_notifier_send():
    notifier = LogNotifier()
    template = notifier.create_template("SBER", [_event("first", 10)])
    assert await notifier.send(template) is True
