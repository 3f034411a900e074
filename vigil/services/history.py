"""Trigger history: the source of daily trigger counts and statistics."""

import threading
from abc import ABC, abstractmethod
from collections import Counter, deque
from datetime import datetime, timedelta
from typing import Deque, Iterable, List, Optional

from vigil.config import settings
from vigil.schemas import Alert, AlertStatistics, AlertStatus, TriggerEvent
from vigil.utils import to_zone


class TriggerHistory(ABC):
    """Where fired events are recorded and counted.

    Production deployments back this with durable storage; the engine only
    depends on this interface.
    """

    @abstractmethod
    def record(self, event: TriggerEvent) -> None:
        """Record a fired event."""
        pass

    @abstractmethod
    def count_today(self, alert_id: str, now: datetime) -> int:
        """Number of events for ``alert_id`` on the local calendar day of ``now``."""
        pass


class InMemoryTriggerHistory(TriggerHistory):
    """Bounded in-process history, safe to read from worker threads."""

    def __init__(self, max_events: Optional[int] = None, timezone: Optional[str] = None):
        self.timezone = timezone or settings.engine.timezone
        self._events: Deque[TriggerEvent] = deque(maxlen=max_events or settings.history.max_events)
        self._lock = threading.Lock()

    def record(self, event: TriggerEvent) -> None:
        with self._lock:
            self._events.append(event)

    def count_today(self, alert_id: str, now: datetime) -> int:
        today = to_zone(now, self.timezone).date()
        with self._lock:
            return sum(
                1 for e in self._events
                if e.alert_id == alert_id and to_zone(e.triggered_at, self.timezone).date() == today
            )

    def events(self, limit: int = 50) -> List[TriggerEvent]:
        """Most recent events first."""
        with self._lock:
            history = list(self._events)
        history.reverse()
        return history[:limit]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def statistics(self, alerts: Iterable[Alert], now: datetime) -> AlertStatistics:
        """Aggregate trigger statistics over the recorded history."""
        alerts = list(alerts)
        with self._lock:
            events = list(self._events)

        local_now = to_zone(now, self.timezone)
        today = local_now.date()
        week_start = today - timedelta(days=today.weekday())
        month_start = today.replace(day=1)
        dates = [to_zone(e.triggered_at, self.timezone).date() for e in events]

        stats = AlertStatistics(
            total_alerts=len(alerts),
            active_alerts=sum(1 for a in alerts if a.status == AlertStatus.ACTIVE),
            triggered_today=sum(1 for d in dates if d == today),
            triggered_this_week=sum(1 for d in dates if week_start <= d <= today),
            triggered_this_month=sum(1 for d in dates if month_start <= d <= today),
        )

        if not events:
            return stats

        days = (today - min(dates)).days + 1
        stats.average_triggers_per_day = round(len(events) / days, 2)
        stats.most_triggered_ticker = Counter(e.ticker for e in events).most_common(1)[0][0]

        types_by_alert = {a.id: a.type for a in alerts}
        type_counts = Counter(types_by_alert[e.alert_id] for e in events if e.alert_id in types_by_alert)
        if type_counts:
            stats.most_triggered_alert_type = type_counts.most_common(1)[0][0]

        return stats
