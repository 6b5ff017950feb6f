"""
Order Service Factory

Factory functions for creating service instances with their default
dependencies.

Usage:
    from .factory import create_order_service
    service = create_order_service(locks=locks, clock=clock, event_bus=event_bus)
"""
from typing import Optional

from ...core.clock import ClockProtocol
from ...core.entity_locks import EntityLockRegistry
from .order_service import OrderService


def create_order_service(
    locks: Optional[EntityLockRegistry] = None,
    clock: Optional[ClockProtocol] = None,
    event_bus=None,
) -> OrderService:
    """
    Create OrderService backed by the in-memory repositories.

    Args:
        locks: Shared per-entity lock registry
        clock: Time source
        event_bus: Event bus for publishing events

    Returns:
        Configured OrderService instance
    """
    from .order_repository import InMemoryInvoiceRepository, InMemoryOrderRepository

    return OrderService(
        repository=InMemoryOrderRepository(),
        invoice_repository=InMemoryInvoiceRepository(),
        locks=locks,
        clock=clock,
        event_bus=event_bus,
    )
