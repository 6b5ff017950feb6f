"""
Order Service Business Logic

Order state machine: creation with an immutable invoice, payment
confirmation, administrator decision and cancellation.
"""

from typing import Any, Callable, FrozenSet, List, Optional, Tuple
from decimal import Decimal
import logging
import uuid

from pydantic import ValidationError as PydanticValidationError

from ...core.clock import ClockProtocol, SystemClock
from ...core.entity_locks import EntityLockRegistry, order_key
from ...core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from ..pricing_service.models import Address, CostBreakdown, PackageDetails
from .models import (
    Invoice, Order, OrderStatus, StatusChange,
    ORDER_TRANSITIONS, SYSTEM_ACTOR,
)
from .protocols import InvoiceRepositoryProtocol, OrderRepositoryProtocol
from .events.publishers import (
    publish_order_created,
    publish_order_approved,
    publish_order_rejected,
    publish_order_cancelled,
)

logger = logging.getLogger(__name__)

CANCELLABLE_STATUSES = frozenset({OrderStatus.AWAITING_PAYMENT, OrderStatus.PENDING_APPROVAL})


def _coerce(model_cls, value: Any, name: str):
    if isinstance(value, model_cls):
        return value
    try:
        return model_cls.model_validate(value)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {name}: {e.errors()[0].get('msg', e)}")


class OrderService:
    """
    Order lifecycle business logic

    Every transition runs under the order's lock: load a copy, check the
    edge, mutate, append one status change, save. A failed check leaves the
    stored order untouched.
    """

    def __init__(
        self,
        repository: OrderRepositoryProtocol,
        invoice_repository: InvoiceRepositoryProtocol,
        locks: Optional[EntityLockRegistry] = None,
        clock: Optional[ClockProtocol] = None,
        event_bus=None,
    ):
        self.repository = repository
        self.invoice_repository = invoice_repository
        self.locks = locks or EntityLockRegistry()
        self.clock = clock or SystemClock()
        self.event_bus = event_bus

        logger.info("✅ OrderService initialized")

    # Order Lifecycle Operations

    async def create(
        self,
        user_id: str,
        origin: Any,
        destination: Any,
        package: Any,
        distance_km: Decimal,
        breakdown: CostBreakdown,
    ) -> Tuple[Order, Invoice]:
        """
        Create an order in AWAITING_PAYMENT together with its invoice.

        Raises:
            ValidationError: blank user, malformed address or package,
                non-positive total
        """
        if not user_id or not str(user_id).strip():
            raise ValidationError("user_id is required")
        origin = _coerce(Address, origin, "origin address")
        destination = _coerce(Address, destination, "destination address")
        package = _coerce(PackageDetails, package, "package")

        if breakdown.total <= 0:
            raise ValidationError(f"Invoice total must be positive, got {breakdown.total}")

        line_items = breakdown.line_items()
        if sum((item.amount for item in line_items), Decimal("0")) != breakdown.total:
            raise ValidationError("Invoice line items do not add up to the priced total")

        now = self.clock.now()
        order_id = f"ord_{uuid.uuid4().hex[:16]}"
        invoice_id = f"inv_{uuid.uuid4().hex[:16]}"

        invoice = Invoice(
            invoice_id=invoice_id,
            invoice_number=f"INV-{now:%Y%m%d}-{uuid.uuid4().hex[:6].upper()}",
            order_id=order_id,
            user_id=user_id,
            line_items=tuple(line_items),
            total_amount=breakdown.total,
            currency=breakdown.currency,
            issued_at=now,
        )

        order = Order(
            order_id=order_id,
            user_id=user_id,
            origin=origin,
            destination=destination,
            package=package,
            distance_km=Decimal(str(distance_km)),
            status=OrderStatus.AWAITING_PAYMENT,
            invoice_id=invoice_id,
            total_amount=breakdown.total,
            currency=breakdown.currency,
            created_at=now,
            updated_at=now,
            status_history=[
                StatusChange(status=OrderStatus.AWAITING_PAYMENT.value, timestamp=now, actor_id=user_id)
            ],
        )

        async with self.locks.hold(order_key(order_id)):
            await self.invoice_repository.save_invoice(invoice)
            await self.repository.save_order(order)

        logger.info(f"Order {order_id} created for user {user_id}, total {breakdown.total} {breakdown.currency}")
        await publish_order_created(self.event_bus, order)
        return order, invoice

    async def record_payment_confirmed(self, order_id: str, payment_id: Optional[str] = None) -> Order:
        """AWAITING_PAYMENT -> PENDING_APPROVAL, actor = system"""

        def link_payment(order: Order):
            order.payment_id = payment_id or order.payment_id

        return await self._transition(
            order_id,
            OrderStatus.PENDING_APPROVAL,
            actor_id=SYSTEM_ACTOR,
            allowed_from=frozenset({OrderStatus.AWAITING_PAYMENT}),
            mutate=link_payment,
        )

    async def approve(self, order_id: str, admin_id: str) -> Order:
        """PENDING_APPROVAL -> APPROVED; shipment materialization follows via order.approved"""
        if not admin_id:
            raise ValidationError("admin_id is required")
        order = await self._transition(
            order_id,
            OrderStatus.APPROVED,
            actor_id=admin_id,
            allowed_from=frozenset({OrderStatus.PENDING_APPROVAL}),
        )
        await publish_order_approved(self.event_bus, order, admin_id)
        return order

    async def reject(self, order_id: str, admin_id: str, reason: str) -> Order:
        """PENDING_APPROVAL -> REJECTED; a reason is mandatory"""
        if not admin_id:
            raise ValidationError("admin_id is required")
        if not reason or not reason.strip():
            raise ValidationError("A rejection reason is required")
        reason = reason.strip()

        def store_reason(order: Order):
            order.rejection_reason = reason

        order = await self._transition(
            order_id,
            OrderStatus.REJECTED,
            actor_id=admin_id,
            reason=reason,
            allowed_from=frozenset({OrderStatus.PENDING_APPROVAL}),
            mutate=store_reason,
        )
        await publish_order_rejected(self.event_bus, order, admin_id, reason)
        return order

    async def cancel(self, order_id: str, actor_id: str, reason: Optional[str] = None) -> Order:
        """Cancel an order that has not been approved yet"""
        if not actor_id:
            raise ValidationError("actor_id is required")
        order = await self._transition(
            order_id,
            OrderStatus.CANCELLED,
            actor_id=actor_id,
            reason=reason,
            allowed_from=CANCELLABLE_STATUSES,
            mutate=lambda o: setattr(o, "cancellation_reason", reason),
        )
        await publish_order_cancelled(self.event_bus, order, actor_id, reason)
        return order

    async def close_after_return(self, order_id: str, actor_id: str, reason: Optional[str] = None) -> Order:
        """
        APPROVED -> CANCELLED once the linked shipment has been returned.

        Only the lifecycle cascade calls this; it has already checked the
        shipment state under the shipment lock.
        """
        order = await self._transition(
            order_id,
            OrderStatus.CANCELLED,
            actor_id=actor_id,
            reason=reason,
            allowed_from=frozenset({OrderStatus.APPROVED}),
            mutate=lambda o: setattr(o, "cancellation_reason", reason),
        )
        await publish_order_cancelled(self.event_bus, order, actor_id, reason)
        return order

    async def attach_shipment(self, order_id: str, shipment_id: str) -> Order:
        """
        Store the materialized shipment id on an approved order.

        Idempotent for the same shipment id. No status change is recorded.
        """
        async with self.locks.hold(order_key(order_id)):
            order = await self._load(order_id)
            if order.shipment_id == shipment_id:
                return order
            if order.status != OrderStatus.APPROVED:
                raise InvalidTransitionError(
                    f"Cannot attach a shipment to order {order_id} in status {order.status.value}",
                    current_status=order.status.value,
                )
            if order.shipment_id:
                raise InvalidTransitionError(
                    f"Order {order_id} already linked to shipment {order.shipment_id}",
                    current_status=order.status.value,
                )
            order.shipment_id = shipment_id
            order.updated_at = self.clock.now()
            await self.repository.save_order(order)

        logger.info(f"Order {order_id} linked to shipment {shipment_id}")
        return order

    # Queries

    async def get_order(self, order_id: str) -> Order:
        return await self._load(order_id)

    async def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        user_id: Optional[str] = None,
    ) -> List[Order]:
        return await self.repository.list_orders(status=status, user_id=user_id)

    async def get_invoice(self, invoice_id: str) -> Invoice:
        invoice = await self.invoice_repository.get_invoice(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    # Internals

    async def _load(self, order_id: str) -> Order:
        order = await self.repository.get_order(order_id)
        if not order:
            raise NotFoundError("Order", order_id)
        return order

    async def _transition(
        self,
        order_id: str,
        target: OrderStatus,
        actor_id: str,
        allowed_from: FrozenSet[OrderStatus],
        reason: Optional[str] = None,
        mutate: Optional[Callable[[Order], None]] = None,
    ) -> Order:
        async with self.locks.hold(order_key(order_id)):
            order = await self._load(order_id)
            current = order.status

            if current not in allowed_from or target not in ORDER_TRANSITIONS[current]:
                raise InvalidTransitionError(
                    f"Order {order_id} cannot move from {current.value} to {target.value}",
                    current_status=current.value,
                    requested=target.value,
                )

            now = self.clock.now()
            if mutate:
                mutate(order)
            order.status = target
            order.updated_at = now
            order.status_history.append(
                StatusChange(status=target.value, timestamp=now, actor_id=actor_id, reason=reason)
            )
            await self.repository.save_order(order)

        logger.info(f"Order {order_id}: {current.value} -> {target.value} by {actor_id}")
        return order
