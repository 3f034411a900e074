"""The single mutation path for alert bookkeeping and user actions."""

from datetime import datetime, timedelta

from loguru import logger

from vigil.schemas import Alert, AlertStatus, TriggerEvent, UserAction
from vigil.utils import ensure_aware


def record_trigger(alert: Alert, event: TriggerEvent) -> None:
    """Update bookkeeping after ``event`` fired for ``alert``.

    Status stays ACTIVE so the alert keeps being evaluated, subject to its
    cooldown and daily cap.
    """
    alert.last_triggered_at = event.triggered_at
    alert.triggered_count += 1
    alert.updated_at = event.triggered_at


def expire(alert: Alert, now: datetime) -> None:
    if alert.status != AlertStatus.EXPIRED:
        alert.status = AlertStatus.EXPIRED
        alert.updated_at = now
        logger.info(f"Alert {alert.id} ({alert.ticker}) expired")


def snooze(alert: Alert, hours: float, now: datetime) -> None:
    alert.status = AlertStatus.SNOOZED
    alert.snoozed_until = ensure_aware(now) + timedelta(hours=hours)
    alert.updated_at = now
    logger.info(f"Alert {alert.id} snoozed until {alert.snoozed_until.isoformat()}")


def resume_if_due(alert: Alert, now: datetime) -> bool:
    """Reactivate a snoozed alert whose snooze has elapsed."""
    if alert.status != AlertStatus.SNOOZED or alert.snoozed_until is None:
        return False
    if ensure_aware(now) < ensure_aware(alert.snoozed_until):
        return False
    alert.status = AlertStatus.ACTIVE
    alert.snoozed_until = None
    alert.updated_at = now
    logger.info(f"Alert {alert.id} resumed after snooze")
    return True


def dismiss(alert: Alert, now: datetime) -> None:
    alert.status = AlertStatus.DISMISSED
    alert.updated_at = now


def toggle(alert: Alert, now: datetime) -> AlertStatus:
    """Switch between ACTIVE and DISABLED; any other status becomes ACTIVE."""
    alert.status = AlertStatus.DISABLED if alert.status == AlertStatus.ACTIVE else AlertStatus.ACTIVE
    alert.updated_at = now
    return alert.status


# --- trigger event actions (events are immutable; these return copies) ---

def mark_viewed(event: TriggerEvent, now: datetime) -> TriggerEvent:
    return event.model_copy(update={"user_action": UserAction.VIEWED, "action_at": now})


def dismiss_event(event: TriggerEvent, now: datetime) -> TriggerEvent:
    return event.model_copy(update={"user_action": UserAction.DISMISSED, "action_at": now})


def snooze_event(event: TriggerEvent, hours: float, now: datetime) -> TriggerEvent:
    return event.model_copy(update={
        "user_action": UserAction.SNOOZED,
        "action_at": now,
        "snoozed_until": ensure_aware(now) + timedelta(hours=hours),
    })
