"""
Lifecycle Event Handlers

The saga reacting to payment, order and shipment events. Every step reads
the current state before applying a transition, so a replayed event or a
re-run after a crash is a no-op once the step has been applied.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ....core.event_bus import EventType
from ....core.exceptions import InvalidTransitionError
from ....core.notifications import NotificationSinkProtocol, Severity, safe_notify
from ...order_service.models import OrderStatus
from ...order_service.order_service import OrderService
from ...shipment_service.models import Shipment, ShipmentStatus
from ...shipment_service.shipment_service import ShipmentService

logger = logging.getLogger(__name__)

MAX_TRACKED_EVENTS = 10000

_SHIPMENT_MESSAGES = {
    ShipmentStatus.IN_TRANSIT.value: ("Shipment in transit", Severity.INFO),
    ShipmentStatus.OUT_FOR_DELIVERY.value: ("Shipment out for delivery", Severity.INFO),
    ShipmentStatus.DELIVERED.value: ("Shipment delivered", Severity.SUCCESS),
    ShipmentStatus.RETURNED.value: ("Shipment returned", Severity.WARNING),
}


class LifecycleEventHandlers:
    """Saga steps plus the event handlers that trigger them"""

    def __init__(
        self,
        order_service: OrderService,
        shipment_service: ShipmentService,
        notification_sink: Optional[NotificationSinkProtocol] = None,
        admin_recipient: str = "admin",
    ):
        self.order_service = order_service
        self.shipment_service = shipment_service
        self.notification_sink = notification_sink
        self.admin_recipient = admin_recipient
        self.processed_event_ids = set()

    # Idempotency tracking

    def is_event_processed(self, event_id: Optional[str]) -> bool:
        """Check if event has already been processed (idempotency)"""
        return bool(event_id) and event_id in self.processed_event_ids

    def mark_event_processed(self, event_id: Optional[str]):
        """Mark event as processed"""
        if not event_id:
            return
        self.processed_event_ids.add(event_id)
        # Limit size to prevent memory issues
        if len(self.processed_event_ids) > MAX_TRACKED_EVENTS:
            self.processed_event_ids = set(list(self.processed_event_ids)[MAX_TRACKED_EVENTS // 2:])

    # Saga steps (guarded)

    async def advance_paid_order(self, order_id: str, payment_id: Optional[str] = None) -> bool:
        """
        Move a paid order to PENDING_APPROVAL and tell the administrator.

        Returns:
            True if this call applied the transition
        """
        order = await self.order_service.get_order(order_id)
        if order.status != OrderStatus.AWAITING_PAYMENT:
            logger.info(f"Order {order_id} already {order.status.value}, payment step skipped")
            return False

        try:
            await self.order_service.record_payment_confirmed(order_id, payment_id)
        except InvalidTransitionError:
            logger.info(f"Order {order_id} advanced concurrently, payment step skipped")
            return False

        await safe_notify(
            self.notification_sink,
            self.admin_recipient,
            "Order pending approval",
            f"Order {order_id} has been paid and is waiting for approval",
            Severity.INFO,
        )
        return True

    async def materialize_approved_order(self, order_id: str) -> Optional[Shipment]:
        """
        Create the shipment for an approved order and link it back.

        Safe to repeat: the shipment is created once per order and linking
        the same id twice is a no-op.
        """
        order = await self.order_service.get_order(order_id)
        if order.status != OrderStatus.APPROVED:
            logger.info(f"Order {order_id} is {order.status.value}, no shipment to materialize")
            return None

        shipment = await self.shipment_service.materialize(order)
        already_linked = order.shipment_id == shipment.shipment_id
        await self.order_service.attach_shipment(order_id, shipment.shipment_id)

        if not already_linked:
            await safe_notify(
                self.notification_sink,
                order.user_id,
                "Order approved",
                f"Order {order_id} was approved. Shipment {shipment.shipment_id} is ready for pickup",
                Severity.SUCCESS,
            )
        return shipment

    # Event handlers

    async def handle_payment_approved(self, event_data: Dict[str, Any], event_id: str = None) -> None:
        """Handle payment.approved event"""
        try:
            if self.is_event_processed(event_id):
                logger.debug(f"Event {event_id} already processed, skipping")
                return

            order_id = event_data.get("order_id")
            if not order_id:
                logger.warning("payment.approved event missing order_id")
                return

            await self.advance_paid_order(order_id, event_data.get("payment_id"))
            self.mark_event_processed(event_id)

        except Exception as e:
            logger.error(f"❌ Failed to handle payment.approved event: {e}")

    async def handle_payment_failed(self, event_data: Dict[str, Any], event_id: str = None) -> None:
        """Handle payment.failed event"""
        try:
            if self.is_event_processed(event_id):
                logger.debug(f"Event {event_id} already processed, skipping")
                return

            await safe_notify(
                self.notification_sink,
                event_data.get("user_id"),
                "Payment declined",
                f"Payment for order {event_data.get('order_id')} failed: {event_data.get('failure_reason')}",
                Severity.ERROR,
            )
            self.mark_event_processed(event_id)

        except Exception as e:
            logger.error(f"❌ Failed to handle payment.failed event: {e}")

    async def handle_order_approved(self, event_data: Dict[str, Any], event_id: str = None) -> None:
        """Handle order.approved event"""
        try:
            if self.is_event_processed(event_id):
                logger.debug(f"Event {event_id} already processed, skipping")
                return

            order_id = event_data.get("order_id")
            if not order_id:
                logger.warning("order.approved event missing order_id")
                return

            await self.materialize_approved_order(order_id)
            self.mark_event_processed(event_id)

        except Exception as e:
            logger.error(f"❌ Failed to handle order.approved event: {e}")

    async def handle_order_rejected(self, event_data: Dict[str, Any], event_id: str = None) -> None:
        """Handle order.rejected event"""
        try:
            if self.is_event_processed(event_id):
                logger.debug(f"Event {event_id} already processed, skipping")
                return

            await safe_notify(
                self.notification_sink,
                event_data.get("user_id"),
                "Order rejected",
                f"Order {event_data.get('order_id')} was rejected: {event_data.get('reason')}",
                Severity.WARNING,
            )
            self.mark_event_processed(event_id)

        except Exception as e:
            logger.error(f"❌ Failed to handle order.rejected event: {e}")

    async def handle_shipment_status_changed(self, event_data: Dict[str, Any], event_id: str = None) -> None:
        """
        Handle shipment.status_changed event

        Terminal shipment states close the journey; the order itself stays
        APPROVED and the shipment status is the record of completion.
        """
        try:
            if self.is_event_processed(event_id):
                logger.debug(f"Event {event_id} already processed, skipping")
                return

            new_status = event_data.get("new_status")
            shipment_id = event_data.get("shipment_id")
            if event_data.get("is_terminal"):
                logger.info(
                    f"Shipment {shipment_id} finished as {new_status}; "
                    f"order {event_data.get('order_id')} journey closed"
                )

            title, severity = _SHIPMENT_MESSAGES.get(new_status, ("Shipment updated", Severity.INFO))
            await safe_notify(
                self.notification_sink,
                event_data.get("user_id"),
                title,
                f"Shipment {shipment_id} for order {event_data.get('order_id')} is now {new_status}",
                severity,
            )
            self.mark_event_processed(event_id)

        except Exception as e:
            logger.error(f"❌ Failed to handle shipment.status_changed event: {e}")

    def get_event_handlers(self) -> Dict[str, Callable]:
        """
        Return a mapping of event patterns to handler functions

        Returns:
            Dict mapping event type to handler function
        """
        return {
            EventType.PAYMENT_APPROVED.value: lambda event: self.handle_payment_approved(event.data, event.id),
            EventType.PAYMENT_FAILED.value: lambda event: self.handle_payment_failed(event.data, event.id),
            EventType.ORDER_APPROVED.value: lambda event: self.handle_order_approved(event.data, event.id),
            EventType.ORDER_REJECTED.value: lambda event: self.handle_order_rejected(event.data, event.id),
            EventType.SHIPMENT_STATUS_CHANGED.value: lambda event: self.handle_shipment_status_changed(event.data, event.id),
        }


async def register_event_handlers(event_bus, handlers: LifecycleEventHandlers) -> int:
    """Subscribe every lifecycle handler on the event bus"""
    if not event_bus:
        logger.warning("Event bus not available, lifecycle handlers not registered")
        return 0

    count = 0
    for pattern, handler in handlers.get_event_handlers().items():
        await event_bus.subscribe_to_events(
            pattern=pattern,
            handler=handler,
            durable=f"lifecycle-{pattern.replace('.', '-')}-consumer",
        )
        count += 1
    logger.info(f"✅ Registered {count} lifecycle event handlers")
    return count
