"""Gates applied before an alert is evaluated, in order:
status, expiry, quiet hours, cooldown, daily cap.
"""

from datetime import datetime, timedelta
from typing import Optional

from vigil.schemas import Alert, AlertStatus, GateDecision, QuietHours
from vigil.utils import ensure_aware, minute_of_day, parse_hhmm, sunday_weekday, to_zone
from .base import BaseGate, GateContext, GatePipeline


def is_in_quiet_hours(quiet_hours: QuietHours, now: datetime, default_timezone: Optional[str] = None) -> bool:
    """Whether ``now`` falls inside the quiet-hours window.

    Weekday and time of day are taken in the window's timezone, else in
    ``default_timezone``, else in the configured engine timezone. A window with
    start > end runs through midnight. Both bounds are inclusive at minute
    resolution.
    """
    if not quiet_hours.enabled:
        return False

    local = to_zone(now, quiet_hours.timezone or default_timezone)
    if sunday_weekday(local) not in quiet_hours.days:
        return False

    current = minute_of_day(local)
    start = parse_hhmm(quiet_hours.start_time)
    end = parse_hhmm(quiet_hours.end_time)

    if start > end:
        return current >= start or current <= end
    return start <= current <= end


class StatusGate(BaseGate):
    name = "status"

    def check(self, alert: Alert, ctx: GateContext) -> Optional[str]:
        if alert.status != AlertStatus.ACTIVE:
            return f"status is {alert.status.value}"
        return None


class ExpiryGate(BaseGate):
    name = "expiry"

    def check(self, alert: Alert, ctx: GateContext) -> Optional[str]:
        if alert.expires_at and ensure_aware(ctx.now) > ensure_aware(alert.expires_at):
            return f"expired at {alert.expires_at.isoformat()}"
        return None


class QuietHoursGate(BaseGate):
    name = "quiet_hours"

    def check(self, alert: Alert, ctx: GateContext) -> Optional[str]:
        if is_in_quiet_hours(alert.quiet_hours, ctx.now, ctx.timezone):
            qh = alert.quiet_hours
            return f"in quiet hours {qh.start_time}-{qh.end_time}"
        return None


class CooldownGate(BaseGate):
    name = "cooldown"

    def check(self, alert: Alert, ctx: GateContext) -> Optional[str]:
        if alert.last_triggered_at is None:
            return None
        elapsed = ensure_aware(ctx.now) - ensure_aware(alert.last_triggered_at)
        if elapsed < timedelta(minutes=alert.frequency.cooldown_minutes):
            return f"in cooldown ({alert.frequency.cooldown_minutes:g}m)"
        return None


class DailyCapGate(BaseGate):
    name = "daily_cap"

    def check(self, alert: Alert, ctx: GateContext) -> Optional[str]:
        if ctx.triggers_today >= alert.frequency.max_per_day:
            return f"daily limit reached ({ctx.triggers_today}/{alert.frequency.max_per_day})"
        return None


DEFAULT_GATES = GatePipeline([
    StatusGate(),
    ExpiryGate(),
    QuietHoursGate(),
    CooldownGate(),
    DailyCapGate(),
])


def check_gates(
    alert: Alert,
    now: datetime,
    triggers_today: int,
    timezone: Optional[str] = None,
) -> GateDecision:
    """Run the default gate pipeline for ``alert`` at ``now``."""
    return DEFAULT_GATES.run(alert, GateContext(now=now, triggers_today=triggers_today, timezone=timezone))
