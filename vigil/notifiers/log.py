"""Notifier that writes deliveries to the log."""

from loguru import logger
from vigil.schemas import NotificationLevel, NotificationTemplate
from .base import BaseNotifier

class LogNotifier(BaseNotifier):
    """Logs each notification; the default when no channel is wired in."""

    async def send(self, template: NotificationTemplate) -> bool:
        field_text = ", ".join(f"{f['key']}={f['value']}" for f in template.fields)
        msg = f"[{template.level.value.upper()}] {template.title}"
        if field_text:
            msg = f"{msg} ({field_text})"

        if template.level == NotificationLevel.CRITICAL:
            logger.warning(msg)
        else:
            logger.info(msg)
        return True
