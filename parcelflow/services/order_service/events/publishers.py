"""
Order Service Event Publishers

Functions to publish events from order service
"""

import logging
from typing import Optional

from ....core.event_bus import Event, EventType, ServiceSource
from ..models import Order
from .models import (
    OrderCreatedEvent,
    OrderApprovedEvent,
    OrderRejectedEvent,
    OrderCancelledEvent,
)

logger = logging.getLogger(__name__)


async def publish_order_created(event_bus, order: Order) -> bool:
    """Publish order.created event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping order.created event")
        return False

    try:
        event_data = OrderCreatedEvent(
            order_id=order.order_id,
            user_id=order.user_id,
            invoice_id=order.invoice_id,
            total_amount=order.total_amount,
            currency=order.currency,
            timestamp=order.created_at,
        )

        event = Event(
            event_type=EventType.ORDER_CREATED,
            source=ServiceSource.ORDER_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(f"✅ Published order.created event for order {order.order_id}")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to publish order.created event: {e}")
        return False


async def publish_order_approved(event_bus, order: Order, admin_id: str) -> bool:
    """Publish order.approved event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping order.approved event")
        return False

    try:
        event_data = OrderApprovedEvent(
            order_id=order.order_id,
            user_id=order.user_id,
            admin_id=admin_id,
            timestamp=order.updated_at,
        )

        event = Event(
            event_type=EventType.ORDER_APPROVED,
            source=ServiceSource.ORDER_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(f"✅ Published order.approved event for order {order.order_id}")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to publish order.approved event: {e}")
        return False


async def publish_order_rejected(event_bus, order: Order, admin_id: str, reason: str) -> bool:
    """Publish order.rejected event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping order.rejected event")
        return False

    try:
        event_data = OrderRejectedEvent(
            order_id=order.order_id,
            user_id=order.user_id,
            admin_id=admin_id,
            reason=reason,
            timestamp=order.updated_at,
        )

        event = Event(
            event_type=EventType.ORDER_REJECTED,
            source=ServiceSource.ORDER_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(f"✅ Published order.rejected event for order {order.order_id}")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to publish order.rejected event: {e}")
        return False


async def publish_order_cancelled(
    event_bus,
    order: Order,
    actor_id: str,
    reason: Optional[str] = None,
) -> bool:
    """Publish order.cancelled event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping order.cancelled event")
        return False

    try:
        event_data = OrderCancelledEvent(
            order_id=order.order_id,
            user_id=order.user_id,
            actor_id=actor_id,
            reason=reason,
            shipment_id=order.shipment_id,
            timestamp=order.updated_at,
        )

        event = Event(
            event_type=EventType.ORDER_CANCELLED,
            source=ServiceSource.ORDER_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(f"✅ Published order.cancelled event for order {order.order_id}")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to publish order.cancelled event: {e}")
        return False
