"""
Expo push delivery over HTTP.

Sends messages to the Expo push service in chunks of 100 (the service's
per-request cap). Used only from the send_push_notification Celery task;
nothing in the ledger path waits on it.

Usage:
    from finance.push import ExpoPushClient

    with ExpoPushClient() as client:
        tickets = client.send(tokens, title="Hi", body="...", data={})
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)

MAX_MESSAGES_PER_REQUEST = 100

_EXPO_TOKEN_RE = re.compile(r"^(ExponentPushToken|ExpoPushToken)\[.+\]$")


def is_expo_push_token(token: str) -> bool:
    return bool(_EXPO_TOKEN_RE.match(token or ""))


class ExpoPushClient:
    """
    Thin synchronous client for the Expo push API.

    Args:
        url: Push endpoint, defaults to settings.EXPO_PUSH_URL
        timeout: Request timeout in seconds
        client: Optional preconfigured httpx.Client (tests inject a mock transport)
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ):
        self.url = url or settings.EXPO_PUSH_URL
        self.timeout = timeout or settings.EXPO_PUSH_TIMEOUT_SECONDS
        self._client = client or httpx.Client(timeout=self.timeout)

    def __enter__(self) -> ExpoPushClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if not self._client.is_closed:
            self._client.close()

    def send(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Send one message per token.

        Returns:
            The push tickets returned by Expo, in token order

        Raises:
            httpx.TransportError: Network failure (retryable)
            httpx.HTTPStatusError: Non-2xx response
        """
        messages = [
            {"to": token, "sound": "default", "title": title, "body": body, "data": data or {}}
            for token in tokens
        ]
        tickets: list[dict[str, Any]] = []
        for start in range(0, len(messages), MAX_MESSAGES_PER_REQUEST):
            chunk = messages[start : start + MAX_MESSAGES_PER_REQUEST]
            response = self._client.post(
                self.url,
                json=chunk,
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
            tickets.extend(response.json().get("data", []))

        for ticket in tickets:
            if ticket.get("status") == "error":
                logger.warning(
                    f"Expo rejected push message: {ticket.get('message')}",
                    extra={"details": ticket.get("details")},
                )
        return tickets
