"""
Post-commit push notifications.

PushNotifier queues the delivery task with ``transaction.on_commit`` so a
notification is only sent for work that actually committed. Queueing
failures are logged and dropped; they never reach the ledger code.
"""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.db import transaction

logger = logging.getLogger(__name__)


class PushNotifier:
    def notify(
        self,
        user_id,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        if not settings.PUSH_NOTIFICATIONS_ENABLED:
            return

        def _enqueue() -> None:
            # Import here to avoid circular imports
            from .tasks import send_push_notification

            try:
                send_push_notification.delay(user_id, title, body, data or {})
            except Exception as e:
                logger.error(
                    f"Failed to queue push notification: {e}",
                    extra={"user_id": str(user_id)},
                )

        transaction.on_commit(_enqueue)


notifier = PushNotifier()
