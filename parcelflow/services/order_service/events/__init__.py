"""
Order Service Events Module

Exports all event-related functionality for order service
"""

from .models import (
    OrderCreatedEvent,
    OrderApprovedEvent,
    OrderRejectedEvent,
    OrderCancelledEvent,
)

from .publishers import (
    publish_order_created,
    publish_order_approved,
    publish_order_rejected,
    publish_order_cancelled,
)

__all__ = [
    # Event Models
    "OrderCreatedEvent",
    "OrderApprovedEvent",
    "OrderRejectedEvent",
    "OrderCancelledEvent",
    # Publishers
    "publish_order_created",
    "publish_order_approved",
    "publish_order_rejected",
    "publish_order_cancelled",
]
