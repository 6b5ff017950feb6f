"""
Payment Service Factory

Factory functions for creating service instances with their default
dependencies.
"""
from typing import Optional

from ...core.clock import ClockProtocol
from ...core.config import LifecycleConfig
from ...core.entity_locks import EntityLockRegistry
from ..order_service.protocols import InvoiceRepositoryProtocol, OrderRepositoryProtocol
from .payment_service import PaymentService


def create_payment_service(
    invoice_repository: InvoiceRepositoryProtocol,
    order_repository: OrderRepositoryProtocol,
    config: Optional[LifecycleConfig] = None,
    authorizer=None,
    locks: Optional[EntityLockRegistry] = None,
    clock: Optional[ClockProtocol] = None,
    event_bus=None,
) -> PaymentService:
    """
    Create PaymentService backed by the in-memory repository.

    Args:
        invoice_repository: Where invoices are read from (owned by order service)
        order_repository: Where the owning orders are read from (owned by order service)
        config: Lifecycle settings (authorization timeout, simulated declines)
        authorizer: Payment authorizer; defaults to the simulated one
        locks: Shared per-entity lock registry
        clock: Time source
        event_bus: Event bus for publishing events
    """
    from .payment_repository import InMemoryPaymentRepository
    from .providers.simulated import SimulatedPaymentAuthorizer

    config = config or LifecycleConfig()
    return PaymentService(
        repository=InMemoryPaymentRepository(),
        invoice_repository=invoice_repository,
        order_repository=order_repository,
        authorizer=authorizer or SimulatedPaymentAuthorizer(config.declined_account_suffixes),
        locks=locks,
        clock=clock,
        event_bus=event_bus,
        authorization_timeout_seconds=config.payment_authorization_timeout_seconds,
    )
