"""Base notifier interface."""

from abc import ABC, abstractmethod
from typing import List
from vigil.schemas import NotificationLevel, NotificationTemplate, TriggerEvent

class BaseNotifier(ABC):
    """Interface for delivering a batch of trigger events for one ticker."""

    @abstractmethod
    async def send(self, template: NotificationTemplate) -> bool:
        """Send a formatted notification."""
        pass

    def create_template(self, ticker: str, events: List[TriggerEvent]) -> NotificationTemplate:
        """Convert a batch of events to the standard template."""
        level = NotificationLevel.INFO
        if len(events) > 1: level = NotificationLevel.WARNING

        if len(events) == 1:
            title = f"{ticker}: {events[0].trigger_reason}"
        else:
            title = f"{ticker}: {len(events)} alerts triggered"

        lines = []
        for e in events:
            lines.append(f"- {e.triggered_at.strftime('%H:%M')} {e.trigger_reason}")

        latest = events[-1]
        fields = [{"key": "Price", "value": f"{latest.price_at_trigger:.2f}"}]
        if latest.volume_at_trigger is not None:
            fields.append({"key": "Volume", "value": f"{latest.volume_at_trigger:,.0f}"})
        if latest.news_count:
            fields.append({"key": "News", "value": str(latest.news_count)})

        return NotificationTemplate(
            title=title,
            body="\n".join(lines),
            level=level,
            ticker=ticker,
            event_ids=[e.id for e in events],
            fields=fields,
        )
