"""
Notification sink

The lifecycle emits user-facing notifications through an injected sink.
Delivery (email, SMS, push) is the sink's business; a failing sink never
fails the operation that triggered it.
"""

import logging
from enum import Enum
from typing import Optional, Protocol, runtime_checkable

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """Notification severity"""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@runtime_checkable
class NotificationSinkProtocol(Protocol):
    """Interface for notification delivery"""

    async def notify(self, user_id: str, title: str, message: str, severity: Severity) -> None:
        """Deliver one notification to a user"""
        ...


class LoggingNotificationSink:
    """Sink that only writes notifications to the log"""

    async def notify(self, user_id: str, title: str, message: str, severity: Severity) -> None:
        logger.info(f"🔔 [{severity.value}] to {user_id}: {title} - {message}")


async def safe_notify(
    sink: Optional[NotificationSinkProtocol],
    user_id: str,
    title: str,
    message: str,
    severity: Severity = Severity.INFO,
    attempts: int = 3,
) -> bool:
    """
    Send a notification, retrying briefly, and swallow any final failure.

    Returns:
        True if the sink accepted the notification
    """
    if not sink:
        logger.warning(f"Notification sink not available, skipping '{title}' for {user_id}")
        return False

    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=0.05, max=1),
            reraise=True,
        ):
            with attempt:
                await sink.notify(user_id, title, message, severity)
        return True
    except Exception as e:
        logger.error(f"❌ Failed to deliver notification '{title}' to {user_id}: {e}")
        return False
