"""
Outbound notifications (certificate issued, referral events)

Notifications are best effort: nothing that triggers one may fail because
delivery failed. Call sites go through notify_safely.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
import logging

import httpx

from learnhub.core import config
from learnhub.core.errors import NotificationFailure

logger = logging.getLogger(__name__)


class Notifier(ABC):
    @abstractmethod
    async def notify(self, event: str, payload: dict) -> None:
        raise NotImplementedError


class LogNotifier(Notifier):
    """Default when no webhook is configured"""

    async def notify(self, event: str, payload: dict) -> None:
        logger.info("notification %s: %s", event, payload)


class WebhookNotifier(Notifier):
    """POSTs events to the mail/SMS relay"""

    def __init__(self, url: str, timeout: float = None):
        self.url = url
        self.timeout = timeout or config.NOTIFY_TIMEOUT_SECONDS

    async def notify(self, event: str, payload: dict) -> None:
        body = {"event": event, "payload": payload, "sent_at": datetime.utcnow().isoformat()}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=body)
        except httpx.RequestError as e:
            raise NotificationFailure(f"{event}: {e}") from e

        if response.status_code >= 400:
            raise NotificationFailure(f"{event}: relay answered {response.status_code}")


def build_notifier(webhook_url: Optional[str] = None) -> Notifier:
    url = webhook_url or config.NOTIFY_WEBHOOK_URL
    if url:
        return WebhookNotifier(url)
    return LogNotifier()


async def notify_safely(notifier: Optional[Notifier], event: str, payload: dict) -> bool:
    """Deliver and report success; failures are logged, never raised"""
    if notifier is None:
        return False
    try:
        await notifier.notify(event, payload)
        return True
    except NotificationFailure as e:
        logger.warning("Notification %s failed: %s", event, e.detail)
    except Exception:
        logger.exception("Notification %s crashed", event)
    return False
