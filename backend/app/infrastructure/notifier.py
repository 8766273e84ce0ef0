"""Logging Notifier — default Notifier that records notification intents.

Invariants:
    - Never raises: a failed notification must not undo a committed status change
    - Only updates whose options ask for it are announced

Design Decisions:
    - Log line instead of a push transport: delivery to devices is handled elsewhere
"""

import logging

from app.core.entities import StatusUpdate

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Notifier that writes one structured log line per intent."""

    async def notify(self, update: StatusUpdate) -> None:
        if not update.should_notify:
            return
        logger.info(
            f"Notify {update.entity_type.value} {update.entity_id}: {update.status}",
            extra={
                "entity_type": update.entity_type.value,
                "entity_id": str(update.entity_id),
                "notify_users": update.options.notify_users,
                "real_time": update.options.send_real_time_updates,
            },
        )
