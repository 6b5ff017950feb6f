"""
Payment Service Event Publishers

Functions to publish events from payment service
"""

import logging

from ....core.event_bus import Event, EventType, ServiceSource
from ..models import Payment
from .models import (
    PaymentApprovedEvent,
    PaymentFailedEvent,
    PaymentRefundedEvent,
)

logger = logging.getLogger(__name__)


async def publish_payment_approved(event_bus, payment: Payment) -> bool:
    """Publish payment.approved event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping payment.approved event")
        return False

    try:
        event_data = PaymentApprovedEvent(
            payment_id=payment.payment_id,
            invoice_id=payment.invoice_id,
            order_id=payment.order_id,
            user_id=payment.user_id,
            amount=payment.amount,
            currency=payment.currency,
            receipt_id=payment.receipt_id,
            timestamp=payment.updated_at,
        )

        event = Event(
            event_type=EventType.PAYMENT_APPROVED,
            source=ServiceSource.PAYMENT_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(f"✅ Published payment.approved event for payment {payment.payment_id}")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to publish payment.approved event: {e}")
        return False


async def publish_payment_failed(event_bus, payment: Payment) -> bool:
    """Publish payment.failed event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping payment.failed event")
        return False

    try:
        event_data = PaymentFailedEvent(
            payment_id=payment.payment_id,
            invoice_id=payment.invoice_id,
            order_id=payment.order_id,
            user_id=payment.user_id,
            amount=payment.amount,
            failure_reason=payment.failure_reason,
            timestamp=payment.updated_at,
        )

        event = Event(
            event_type=EventType.PAYMENT_FAILED,
            source=ServiceSource.PAYMENT_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(f"✅ Published payment.failed event for payment {payment.payment_id}")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to publish payment.failed event: {e}")
        return False


async def publish_payment_refunded(event_bus, payment: Payment) -> bool:
    """Publish payment.refunded event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping payment.refunded event")
        return False

    try:
        event_data = PaymentRefundedEvent(
            payment_id=payment.payment_id,
            invoice_id=payment.invoice_id,
            order_id=payment.order_id,
            user_id=payment.user_id,
            amount=payment.amount,
            timestamp=payment.updated_at,
        )

        event = Event(
            event_type=EventType.PAYMENT_REFUNDED,
            source=ServiceSource.PAYMENT_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(f"✅ Published payment.refunded event for payment {payment.payment_id}")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to publish payment.refunded event: {e}")
        return False
