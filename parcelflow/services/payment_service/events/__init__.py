"""
Payment Service Events Module

Exports all event-related functionality for payment service
"""

from .models import (
    PaymentApprovedEvent,
    PaymentFailedEvent,
    PaymentRefundedEvent,
)

from .publishers import (
    publish_payment_approved,
    publish_payment_failed,
    publish_payment_refunded,
)

__all__ = [
    # Event Models
    "PaymentApprovedEvent",
    "PaymentFailedEvent",
    "PaymentRefundedEvent",
    # Publishers
    "publish_payment_approved",
    "publish_payment_failed",
    "publish_payment_refunded",
]
