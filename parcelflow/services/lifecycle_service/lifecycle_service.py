"""
Lifecycle Service

Facade over the order, payment and shipment state machines. This is the
interface the UI / HTTP layer talks to. Cross-entity steps (payment
confirmation, shipment materialization) run as event handlers; the
cancellation cascade and crash recovery run here.
"""

from typing import Any, Dict, List, Optional
from decimal import Decimal
import logging

from pydantic import ValidationError as PydanticValidationError

from ...core.config import LifecycleConfig
from ...core.entity_locks import EntityLockRegistry, order_key, shipment_key
from ...core.exceptions import InvalidTransitionError, ValidationError
from ..order_service.models import Invoice, Order, OrderCreatedResponse, OrderStatus
from ..order_service.order_service import CANCELLABLE_STATUSES, OrderService
from ..payment_service.models import Payment, PaymentStatus
from ..payment_service.payment_service import PaymentService
from ..pricing_service.distance import estimate_distance_km, estimate_travel_hours
from ..pricing_service.models import Address, PackageDetails, QuoteResponse
from ..pricing_service.pricing_engine import PricingEngine
from ..shipment_service.models import Shipment, ShipmentStatus
from ..shipment_service.shipment_service import ShipmentService
from ..tracking_service.models import TimelineResponse
from ..tracking_service.timeline import merge_timeline
from .events.handlers import LifecycleEventHandlers, register_event_handlers

logger = logging.getLogger(__name__)


def _coerce(model_cls, value: Any, name: str):
    if isinstance(value, model_cls):
        return value
    try:
        return model_cls.model_validate(value)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {name}: {e.errors()[0].get('msg', e)}")


class LifecycleService:
    """
    Order / payment / shipment lifecycle orchestrator

    All collaborators are injected; see factory.create_lifecycle_service.
    """

    def __init__(
        self,
        order_service: OrderService,
        shipment_service: ShipmentService,
        payment_service: PaymentService,
        pricing_engine: PricingEngine,
        handlers: LifecycleEventHandlers,
        locks: EntityLockRegistry,
        event_bus=None,
        config: Optional[LifecycleConfig] = None,
    ):
        self.order_service = order_service
        self.shipment_service = shipment_service
        self.payment_service = payment_service
        self.pricing_engine = pricing_engine
        self.handlers = handlers
        self.locks = locks
        self.event_bus = event_bus
        self.config = config or LifecycleConfig()
        self._started = False

        logger.info("✅ LifecycleService initialized")

    async def start(self) -> None:
        """Subscribe the saga handlers. Calling twice is a no-op."""
        if self._started:
            return
        await register_event_handlers(self.event_bus, self.handlers)
        self._started = True

    # Pricing

    async def quote(
        self,
        origin: Any,
        destination: Any,
        package: Any,
        distance_km: Optional[Decimal] = None,
    ) -> QuoteResponse:
        """Price a prospective order without creating anything"""
        origin = _coerce(Address, origin, "origin address")
        destination = _coerce(Address, destination, "destination address")
        package = _coerce(PackageDetails, package, "package")
        distance = self._resolve_distance(origin, destination, distance_km)

        breakdown = self.pricing_engine.price_package(package, distance)
        return QuoteResponse(
            breakdown=breakdown,
            line_items=breakdown.line_items(),
            distance_km=distance,
            estimated_travel_hours=estimate_travel_hours(distance, self.config.average_speed_kmh),
        )

    # Orders

    async def create_order(
        self,
        user_id: str,
        origin: Any,
        destination: Any,
        package: Any,
        distance_km: Optional[Decimal] = None,
    ) -> OrderCreatedResponse:
        """Price and create an order in AWAITING_PAYMENT with its invoice"""
        origin = _coerce(Address, origin, "origin address")
        destination = _coerce(Address, destination, "destination address")
        package = _coerce(PackageDetails, package, "package")
        distance = self._resolve_distance(origin, destination, distance_km)

        breakdown = self.pricing_engine.price_package(package, distance)
        order, invoice = await self.order_service.create(
            user_id=user_id,
            origin=origin,
            destination=destination,
            package=package,
            distance_km=distance,
            breakdown=breakdown,
        )
        return OrderCreatedResponse(order=order, invoice=invoice)

    async def get_order(self, order_id: str) -> Order:
        return await self.order_service.get_order(order_id)

    async def list_orders(self, status: Optional[OrderStatus] = None, user_id: Optional[str] = None) -> List[Order]:
        return await self.order_service.list_orders(status=status, user_id=user_id)

    async def get_invoice(self, invoice_id: str) -> Invoice:
        return await self.order_service.get_invoice(invoice_id)

    async def approve_order(self, order_id: str, admin_id: str) -> Order:
        """Approve; the shipment is materialized by the order.approved handler"""
        await self.order_service.approve(order_id, admin_id)
        return await self.order_service.get_order(order_id)

    async def reject_order(self, order_id: str, admin_id: str, reason: str) -> Order:
        return await self.order_service.reject(order_id, admin_id, reason)

    async def cancel_order(self, order_id: str, actor_id: str, reason: Optional[str] = None) -> Order:
        """
        Cancel an order.

        Before approval this is a plain order transition. After approval the
        shipment must still be waiting for pickup: it is returned first and
        then the order is cancelled, holding the order lock and then the
        shipment lock. A shipment that is already RETURNED only needs the
        order step. An order whose payment is being authorized, or was
        approved but not yet applied, cannot be cancelled until that settles.
        """
        if not actor_id:
            raise ValidationError("actor_id is required")

        async with self.locks.hold(order_key(order_id)):
            order = await self.order_service.get_order(order_id)
            if order.status == OrderStatus.AWAITING_PAYMENT:
                await self._refuse_if_payment_in_flight(order)
            if order.status in CANCELLABLE_STATUSES:
                return await self.order_service.cancel(order_id, actor_id, reason)
            if order.status != OrderStatus.APPROVED:
                raise InvalidTransitionError(
                    f"Order {order_id} is {order.status.value} and cannot be cancelled",
                    current_status=order.status.value,
                    requested=OrderStatus.CANCELLED.value,
                )

            shipment_id = order.shipment_id
            if not shipment_id:
                existing = await self.shipment_service.get_shipment_by_order(order_id)
                shipment_id = existing.shipment_id if existing else None
            if not shipment_id:
                raise InvalidTransitionError(
                    f"Order {order_id} is approved and its shipment is still being prepared",
                    current_status=order.status.value,
                    requested=OrderStatus.CANCELLED.value,
                )

            async with self.locks.hold(shipment_key(shipment_id)):
                shipment = await self.shipment_service.get_shipment(shipment_id)
                if shipment.status == ShipmentStatus.READY_FOR_PICKUP:
                    await self.shipment_service.return_for_cancellation(
                        shipment_id, actor_id, reason or "Order cancelled before pickup"
                    )
                elif shipment.status != ShipmentStatus.RETURNED:
                    raise InvalidTransitionError(
                        f"Order {order_id} cannot be cancelled: shipment {shipment_id} is {shipment.status.value}",
                        current_status=shipment.status.value,
                        requested=OrderStatus.CANCELLED.value,
                    )

            if not order.shipment_id:
                await self.order_service.attach_shipment(order_id, shipment_id)
            return await self.order_service.close_after_return(order_id, actor_id, reason)

    # Payments

    async def confirm_payment(self, invoice_id: str, payment_method: Any) -> Payment:
        """Pay an invoice; the order advances through the payment.approved handler"""
        return await self.payment_service.process_payment(invoice_id, payment_method)

    async def refund_payment(self, payment_id: str) -> Payment:
        """Refunds are always explicit; cancellation never refunds on its own"""
        return await self.payment_service.refund(payment_id)

    async def get_payment(self, payment_id: str) -> Payment:
        return await self.payment_service.get_payment(payment_id)

    async def list_user_payments(
        self,
        user_id: str,
        status: Optional[PaymentStatus] = None,
        receipts_only: bool = False,
    ) -> List[Payment]:
        """A user's payment attempts, or only those that produced a receipt"""
        if receipts_only:
            return await self.payment_service.list_receipts_for_user(user_id)
        return await self.payment_service.list_payments_for_user(user_id, status)

    # Shipments

    async def get_shipment(self, shipment_id: str) -> Shipment:
        return await self.shipment_service.get_shipment(shipment_id)

    async def list_shipments(
        self,
        status: Optional[ShipmentStatus] = None,
        user_id: Optional[str] = None,
        delivery_person_id: Optional[str] = None,
    ) -> List[Shipment]:
        return await self.shipment_service.list_shipments(
            status=status, user_id=user_id, delivery_person_id=delivery_person_id
        )

    async def list_delayed_shipments(self) -> List[Shipment]:
        """Active shipments past their estimated delivery time"""
        return await self.shipment_service.list_delayed_shipments()

    async def change_shipment_status(
        self,
        shipment_id: str,
        status: Any,
        reason: Optional[str],
        actor_id: str,
    ) -> Shipment:
        return await self.shipment_service.change_status(shipment_id, status, reason, actor_id)

    async def assign_delivery_person(self, shipment_id: str, person_id: str, actor_id: str) -> Shipment:
        return await self.shipment_service.assign_delivery_person(shipment_id, person_id, actor_id)

    async def assign_vehicle(self, shipment_id: str, vehicle_id: str, actor_id: str) -> Shipment:
        return await self.shipment_service.assign_vehicle(shipment_id, vehicle_id, actor_id)

    async def report_incident(
        self,
        shipment_id: str,
        incident_type: Any,
        description: str,
        reported_by: str,
    ) -> Shipment:
        return await self.shipment_service.report_incident(shipment_id, incident_type, description, reported_by)

    # Tracking

    async def get_unified_timeline(
        self,
        order_id: Optional[str] = None,
        shipment_id: Optional[str] = None,
    ) -> TimelineResponse:
        """Timeline for an order or a shipment (exactly one id)"""
        if bool(order_id) == bool(shipment_id):
            raise ValidationError("Provide exactly one of order_id or shipment_id")

        if shipment_id:
            shipment = await self.shipment_service.get_shipment(shipment_id)
            order = await self.order_service.get_order(shipment.order_id)
        else:
            order = await self.order_service.get_order(order_id)
            if order.shipment_id:
                shipment = await self.shipment_service.get_shipment(order.shipment_id)
            else:
                shipment = await self.shipment_service.get_shipment_by_order(order.order_id)

        events = merge_timeline(
            order.status_history,
            shipment.status_history if shipment else [],
        )
        return TimelineResponse(
            order_id=order.order_id,
            shipment_id=shipment.shipment_id if shipment else None,
            events=events,
        )

    # Recovery

    async def recover(self) -> Dict[str, int]:
        """
        Re-apply saga steps interrupted by a crash.

        PENDING payments older than the authorization timeout are marked
        FAILED so their invoices can be paid again. Paid orders still
        awaiting payment are advanced; approved orders without a shipment
        get one.
        """
        expired = len(await self.payment_service.expire_stale_payments())

        advanced = 0
        for order in await self.order_service.list_orders(status=OrderStatus.AWAITING_PAYMENT):
            payment = await self.payment_service.get_approved_payment(order.invoice_id)
            if payment and await self.handlers.advance_paid_order(order.order_id, payment.payment_id):
                advanced += 1

        materialized = 0
        for order in await self.order_service.list_orders(status=OrderStatus.APPROVED):
            if order.shipment_id:
                continue
            if await self.handlers.materialize_approved_order(order.order_id):
                materialized += 1

        if expired or advanced or materialized:
            logger.warning(
                f"Recovery expired {expired} stale payments, advanced {advanced} paid orders "
                f"and materialized {materialized} shipments"
            )
        else:
            logger.info("Recovery found no interrupted lifecycle steps")
        return {
            "payments_expired": expired,
            "orders_advanced": advanced,
            "shipments_materialized": materialized,
        }

    # Internals

    async def _refuse_if_payment_in_flight(self, order: Order) -> None:
        pending = await self.payment_service.get_pending_payment(order.invoice_id)
        if pending:
            raise InvalidTransitionError(
                f"Order {order.order_id} has payment {pending.payment_id} being authorized",
                current_status=order.status.value,
                requested=OrderStatus.CANCELLED.value,
            )
        approved = await self.payment_service.get_approved_payment(order.invoice_id)
        if approved:
            raise InvalidTransitionError(
                f"Order {order.order_id} is paid by {approved.payment_id} and awaits approval",
                current_status=order.status.value,
                requested=OrderStatus.CANCELLED.value,
            )

    @staticmethod
    def _resolve_distance(origin: Address, destination: Address, distance_km: Optional[Any]) -> Decimal:
        if distance_km is None:
            return estimate_distance_km(origin, destination)
        try:
            distance = Decimal(str(distance_km))
        except ArithmeticError:
            raise ValidationError(f"distance_km must be a number, got {distance_km!r}")
        if not distance.is_finite() or distance < 0:
            raise ValidationError(f"distance_km cannot be negative, got {distance}")
        return distance
