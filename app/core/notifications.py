"""
Best-effort notifications (club joins, job failures).

Delivery never affects the request or job that triggered it: failures are
logged and dropped. With NOTIFY_WEBHOOK_URL unset, messages are only logged.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging

import requests

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass
class NotificationEvent:
    type: str
    recipient_id: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_message(self) -> dict:
        return {"type": self.type, "recipient_id": self.recipient_id, "payload": self.payload}


class LogNotificationSender:
    def send(self, message: dict) -> None:
        logger.info(f"Notification {message['type']} for {message.get('recipient_id')}: {message.get('payload')}")


class WebhookNotificationSender:
    def __init__(self, url: str, timeout: float = 5.0):
        self.url = url
        self.timeout = timeout

    def send(self, message: dict) -> None:
        response = requests.post(self.url, json=message, timeout=self.timeout)
        response.raise_for_status()
        logger.info(f"Webhook sent (status {response.status_code})")


def get_notification_sender():
    if settings.notify_webhook_url:
        return WebhookNotificationSender(settings.notify_webhook_url, settings.notify_timeout_seconds)
    return LogNotificationSender()


def notify(event: NotificationEvent, sender=None) -> None:
    sender = sender or get_notification_sender()
    try:
        sender.send(event.to_message())
    except Exception as e:
        logger.warning(f"Notification {event.type} failed: {e}")
