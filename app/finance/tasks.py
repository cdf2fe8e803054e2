"""
Celery tasks for the finance app.

Tasks:
    process_due_recurrences: Periodic entry point for the recurrence sweep
    send_push_notification: Deliver a push message to a user's devices

Schedule:
    process_due_recurrences runs daily via celery-beat (see migration
    0002_add_recurrence_sweep_schedule). It is idempotent per definition
    and due date, so extra runs are harmless.

Usage:
    from finance.tasks import process_due_recurrences

    process_due_recurrences.delay()
    process_due_recurrences.delay(today="2024-03-01")
"""

from __future__ import annotations

import datetime
import logging
from typing import Any

import httpx
from celery import shared_task

from .models import PushToken
from .push import ExpoPushClient, is_expo_push_token

logger = logging.getLogger(__name__)


# =============================================================================
# Periodic Task: Recurrence Sweep
# =============================================================================


@shared_task(bind=True)
def process_due_recurrences(self, today: str | None = None) -> dict:
    """
    Materialize every recurring transaction that is due.

    Args:
        today: Optional ISO date overriding the cut-off (backfills, tests)

    Returns:
        Dict with processed, finished and failed counts
    """
    # Import here to avoid circular imports
    from .recurrence import recurrence

    cutoff = datetime.date.fromisoformat(today) if today else None
    result = recurrence.sweep(today=cutoff)
    return result.to_dict()


# =============================================================================
# Push Delivery
# =============================================================================


@shared_task(
    bind=True,
    autoretry_for=(httpx.TransportError,),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_kwargs={"max_retries": 3},
)
def send_push_notification(
    self,
    user_id: int,
    title: str,
    body: str,
    data: dict[str, Any] | None = None,
) -> dict:
    """
    Send a push message to every Expo token registered by the user.

    Network errors are retried. Rejections from the push service are
    logged and the task completes, since nothing downstream depends on
    delivery.

    Returns:
        Dict with:
        - sent: Number of messages accepted by the push service
        - skipped: Number of malformed tokens ignored
    """
    tokens = list(PushToken.objects.owned_by(user_id).values_list("token", flat=True))
    valid = [token for token in tokens if is_expo_push_token(token)]
    skipped = len(tokens) - len(valid)

    if not valid:
        logger.info(
            "No push tokens registered, skipping notification",
            extra={"user_id": str(user_id), "skipped": skipped},
        )
        return {"sent": 0, "skipped": skipped}

    try:
        with ExpoPushClient() as client:
            tickets = client.send(valid, title=title, body=body, data=data)
    except httpx.HTTPStatusError as e:
        logger.error(
            f"Push service returned {e.response.status_code}",
            extra={"user_id": str(user_id)},
        )
        return {"sent": 0, "skipped": skipped}

    sent = sum(1 for ticket in tickets if ticket.get("status") == "ok")
    logger.info(
        f"Push notification sent to {sent} devices",
        extra={"user_id": str(user_id), "sent": sent, "skipped": skipped},
    )
    return {"sent": sent, "skipped": skipped}
