"""
In-process event bus

Events carry a unique id, a dotted type (``payment.approved``) and a JSON
data payload. Handlers are awaited in subscription order; a failing handler
is logged and never propagates into the publisher.
"""

import fnmatch
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Lifecycle event types"""

    # Order Events
    ORDER_CREATED = "order.created"
    ORDER_APPROVED = "order.approved"
    ORDER_REJECTED = "order.rejected"
    ORDER_CANCELLED = "order.cancelled"

    # Payment Events
    PAYMENT_APPROVED = "payment.approved"
    PAYMENT_FAILED = "payment.failed"
    PAYMENT_REFUNDED = "payment.refunded"

    # Shipment Events
    SHIPMENT_CREATED = "shipment.created"
    SHIPMENT_STATUS_CHANGED = "shipment.status_changed"
    SHIPMENT_INCIDENT_REPORTED = "shipment.incident_reported"


class ServiceSource(Enum):
    """Publishing services"""

    ORDER_SERVICE = "order_service"
    PAYMENT_SERVICE = "payment_service"
    SHIPMENT_SERVICE = "shipment_service"
    LIFECYCLE_SERVICE = "lifecycle_service"


class Event:
    """Event model"""

    def __init__(
        self,
        event_type: EventType,
        source: ServiceSource,
        data: Dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type.value
        self.source = source.value
        self.data = data
        self.subject = subject
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.metadata = metadata or {}
        self.version = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "data": self.data,
            "metadata": self.metadata,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        event = cls.__new__(cls)
        event.id = data.get("id")
        event.type = data.get("type")
        event.source = data.get("source")
        event.subject = data.get("subject")
        event.timestamp = data.get("timestamp")
        event.data = data.get("data", {})
        event.metadata = data.get("metadata", {})
        event.version = data.get("version", "1.0.0")
        return event


EventHandler = Callable[[Event], Awaitable[None]]


class InMemoryEventBus:
    """
    Event bus that dispatches to subscribers in the publishing task.

    ``publish_event`` returns only after every matching handler has run, so
    a saga step triggered by an event is complete when the publishing
    operation returns.
    """

    def __init__(self, service_name: str = "parcelflow"):
        self.service_name = service_name
        self._subscriptions: List[Tuple[str, EventHandler]] = []
        self.published: List[Event] = []
        logger.info(f"In-memory EventBus initialized for {service_name}")

    async def subscribe_to_events(self, pattern: str, handler: EventHandler, durable: Optional[str] = None) -> str:
        """Subscribe to events whose type matches a glob pattern (``shipment.*``)"""
        self._subscriptions.append((pattern, handler))
        logger.info(f"Subscribed to {pattern}")
        return durable or pattern

    async def publish_event(self, event: Event) -> bool:
        """Publish an event and await every matching handler"""
        self.published.append(event)
        for pattern, handler in list(self._subscriptions):
            if not fnmatch.fnmatchcase(event.type, pattern):
                continue
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Handler for {pattern} failed on event {event.type} [{event.id}]: {e}")
        logger.debug(f"Published event {event.type} [{event.id}]")
        return True

    async def close(self):
        self._subscriptions.clear()
        logger.info("Event bus closed")
