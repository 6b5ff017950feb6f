"""
Lifecycle Service Factory

Factory functions for creating service instances with real dependencies.
This is the ONLY place that wires the state machines together.

Usage:
    from .factory import create_lifecycle_service
    service = create_lifecycle_service(settings)
    await service.start()
"""
from typing import Optional

from ...core.clock import ClockProtocol, SystemClock
from ...core.config import ParcelflowConfig, get_settings
from ...core.entity_locks import EntityLockRegistry
from ...core.event_bus import InMemoryEventBus
from ...core.notifications import LoggingNotificationSink, NotificationSinkProtocol
from ..order_service.factory import create_order_service
from ..payment_service.factory import create_payment_service
from ..pricing_service.pricing_engine import PricingEngine
from ..shipment_service.factory import create_shipment_service
from .events.handlers import LifecycleEventHandlers
from .lifecycle_service import LifecycleService


def create_lifecycle_service(
    config: Optional[ParcelflowConfig] = None,
    clock: Optional[ClockProtocol] = None,
    notification_sink: Optional[NotificationSinkProtocol] = None,
    authorizer=None,
    event_bus=None,
) -> LifecycleService:
    """
    Create LifecycleService with every collaborator wired in.

    All services share one lock registry, one clock and one event bus.

    Args:
        config: Platform configuration (defaults to global settings)
        clock: Time source
        notification_sink: Where user / admin notifications go
        authorizer: Payment authorizer (defaults to the simulated one)
        event_bus: Event bus (defaults to a fresh in-memory bus)

    Returns:
        Configured LifecycleService; call ``await service.start()`` before use
    """
    config = config or get_settings()
    clock = clock or SystemClock()
    locks = EntityLockRegistry()
    event_bus = event_bus or InMemoryEventBus(config.lifecycle.service_name)
    notification_sink = notification_sink or LoggingNotificationSink()

    order_service = create_order_service(locks=locks, clock=clock, event_bus=event_bus)
    shipment_service = create_shipment_service(
        config=config.lifecycle, locks=locks, clock=clock, event_bus=event_bus
    )
    payment_service = create_payment_service(
        invoice_repository=order_service.invoice_repository,
        order_repository=order_service.repository,
        config=config.lifecycle,
        authorizer=authorizer,
        locks=locks,
        clock=clock,
        event_bus=event_bus,
    )

    handlers = LifecycleEventHandlers(
        order_service=order_service,
        shipment_service=shipment_service,
        notification_sink=notification_sink,
        admin_recipient=config.lifecycle.admin_notification_recipient,
    )

    return LifecycleService(
        order_service=order_service,
        shipment_service=shipment_service,
        payment_service=payment_service,
        pricing_engine=PricingEngine(config.tariff),
        handlers=handlers,
        locks=locks,
        event_bus=event_bus,
        config=config.lifecycle,
    )
