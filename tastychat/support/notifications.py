"""Fire-and-forget notifications for ticket events.

Delivery runs in background tasks owned by NotificationDispatcher. A failed
delivery is logged and never reaches the chat turn that triggered it.
"""

import asyncio
import hashlib
import hmac
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Literal
from uuid import uuid4

import httpx
from pydantic import BaseModel, Field

from tastychat.observability.logging import get_logger
from tastychat.support.models import utc_now

logger = get_logger(__name__)

EventType = Literal["ticket_created", "agent_reply", "escalation", "ticket_timeout"]


class NotificationEvent(BaseModel):
    """Payload sent to notification channels."""

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: EventType
    ticket_id: str | None = None
    session_id: str | None = None
    email: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=utc_now)


class NotificationError(Exception):
    """A notification channel rejected or failed a delivery."""


class Notifier(ABC):
    """A notification channel."""

    @abstractmethod
    async def send(self, event: NotificationEvent) -> None:
        """Deliver one event. Raises NotificationError on failure."""
        pass


class LoggingNotifier(Notifier):
    """Writes events to the log. Default channel when no webhook is configured."""

    async def send(self, event: NotificationEvent) -> None:
        logger.info(
            "notification_sent",
            event_type=event.event_type,
            event_id=event.event_id,
            ticket_id=event.ticket_id,
            session_id=event.session_id,
        )


class WebhookNotifier(Notifier):
    """POSTs events as JSON, signed with HMAC-SHA256 when a secret is set."""

    def __init__(
        self,
        url: str,
        secret: str | None = None,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._secret = secret
        self._timeout = timeout
        self._client = client

    def sign_payload(self, payload: str, timestamp: int) -> str:
        """Return "v1=<hex>" over "{timestamp}.{payload}"."""
        assert self._secret is not None
        signed = f"{timestamp}.{payload}"
        digest = hmac.new(self._secret.encode(), signed.encode(), hashlib.sha256).hexdigest()
        return f"v1={digest}"

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def send(self, event: NotificationEvent) -> None:
        payload = event.model_dump_json()
        headers = {
            "Content-Type": "application/json",
            "X-TastyChat-Event-Type": event.event_type,
            "X-TastyChat-Delivery-Id": event.event_id,
        }
        if self._secret:
            timestamp = int(time.time())
            headers["X-TastyChat-Timestamp"] = str(timestamp)
            headers["X-TastyChat-Signature"] = self.sign_payload(payload, timestamp)

        client = await self._ensure_client()
        try:
            response = await client.post(
                self._url, content=payload, headers=headers, timeout=self._timeout
            )
        except httpx.HTTPError as e:
            raise NotificationError(f"Webhook delivery failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise NotificationError(f"Webhook returned {response.status_code}")

        logger.info(
            "webhook_delivered",
            event_type=event.event_type,
            event_id=event.event_id,
            status_code=response.status_code,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class NotificationDispatcher:
    """Schedules notifier sends as background tasks."""

    def __init__(self, notifiers: list[Notifier] | None = None) -> None:
        self._notifiers = notifiers if notifiers is not None else [LoggingNotifier()]
        self._tasks: set[asyncio.Task[None]] = set()

    def dispatch(self, event: NotificationEvent) -> None:
        """Schedule delivery of `event` to every notifier and return immediately."""
        for notifier in self._notifiers:
            task = asyncio.create_task(self._deliver(notifier, event))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for all in-flight deliveries."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _deliver(self, notifier: Notifier, event: NotificationEvent) -> None:
        try:
            await notifier.send(event)
        except Exception as e:
            logger.error(
                "notification_failed",
                notifier=type(notifier).__name__,
                event_type=event.event_type,
                event_id=event.event_id,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def close(self) -> None:
        """Drain pending deliveries and release notifier resources."""
        await self.drain()
        for notifier in self._notifiers:
            if isinstance(notifier, WebhookNotifier):
                await notifier.close()
