"""
Shipment Service Business Logic

Shipment state machine: materialization from an approved order, courier
and vehicle assignment, forward-only delivery progress and incident-driven
returns.
"""

from datetime import datetime
from typing import Any, List, Optional
import logging
import uuid

from ...core.clock import ClockProtocol, SystemClock
from ...core.entity_locks import EntityLockRegistry, order_key, shipment_key
from ...core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from ...core.status_history import StatusChange, SYSTEM_ACTOR
from ..order_service.models import Order
from ..pricing_service.distance import estimate_delivery
from .models import (
    Incident, IncidentType, Shipment, ShipmentStatus,
    ASSIGNABLE_STATUSES, next_delivery_step,
)
from .protocols import ShipmentRepositoryProtocol
from .events.publishers import (
    publish_shipment_created,
    publish_shipment_status_changed,
    publish_shipment_incident_reported,
)

logger = logging.getLogger(__name__)


class ShipmentService:
    """
    Shipment lifecycle business logic

    All mutations run under the shipment's lock on a copy of the stored
    shipment; nothing is saved until every check has passed.
    """

    def __init__(
        self,
        repository: ShipmentRepositoryProtocol,
        locks: Optional[EntityLockRegistry] = None,
        clock: Optional[ClockProtocol] = None,
        event_bus=None,
        incident_description_max_length: int = 500,
        default_delivery_hours: int = 24,
        average_speed_kmh: float = 40.0,
    ):
        self.repository = repository
        self.locks = locks or EntityLockRegistry()
        self.clock = clock or SystemClock()
        self.event_bus = event_bus
        self.incident_description_max_length = incident_description_max_length
        self.default_delivery_hours = default_delivery_hours
        self.average_speed_kmh = average_speed_kmh

        logger.info("✅ ShipmentService initialized")

    async def materialize(self, order: Order) -> Shipment:
        """
        Create the shipment for an approved order.

        Returns the existing shipment when the order already has one, so a
        replayed approval never creates a second shipment.
        """
        created = False
        async with self.locks.hold(order_key(order.order_id)):
            shipment = await self.repository.get_shipment_by_order(order.order_id)
            if shipment:
                logger.info(f"Shipment {shipment.shipment_id} already exists for order {order.order_id}")
            else:
                now = self.clock.now()
                shipment = Shipment(
                    shipment_id=f"shp_{uuid.uuid4().hex[:16]}",
                    order_id=order.order_id,
                    user_id=order.user_id,
                    origin=order.origin,
                    destination=order.destination,
                    package=order.package,
                    weight_kg=order.package.weight_kg,
                    distance_km=order.distance_km,
                    priority=order.package.priority,
                    total_cost=order.total_amount,
                    currency=order.currency,
                    status=ShipmentStatus.READY_FOR_PICKUP,
                    created_at=now,
                    updated_at=now,
                    estimated_delivery=estimate_delivery(
                        now,
                        order.distance_km,
                        order.package.priority,
                        default_hours=self.default_delivery_hours,
                        average_speed_kmh=self.average_speed_kmh,
                    ),
                    status_history=[
                        StatusChange(
                            status=ShipmentStatus.READY_FOR_PICKUP.value,
                            timestamp=now,
                            actor_id=SYSTEM_ACTOR,
                        )
                    ],
                )
                await self.repository.save_shipment(shipment)
                created = True
                logger.info(f"Shipment {shipment.shipment_id} materialized for order {order.order_id}")

        if created:
            await publish_shipment_created(self.event_bus, shipment)
        return shipment

    # Assignment

    async def assign_delivery_person(self, shipment_id: str, person_id: str, actor_id: str) -> Shipment:
        """Assign (or reassign) the courier while the shipment has not left for delivery"""
        if not person_id or not person_id.strip():
            raise ValidationError("delivery person id is required")

        async with self.locks.hold(shipment_key(shipment_id)):
            shipment = await self._load(shipment_id)
            self._check_assignable(shipment, "delivery person")
            shipment.delivery_person_id = person_id.strip()
            shipment.updated_at = self.clock.now()
            await self.repository.save_shipment(shipment)

        logger.info(f"Shipment {shipment_id} assigned to delivery person {person_id} by {actor_id}")
        return shipment

    async def assign_vehicle(self, shipment_id: str, vehicle_id: str, actor_id: str) -> Shipment:
        """Assign the vehicle; requires an assigned delivery person"""
        if not vehicle_id or not vehicle_id.strip():
            raise ValidationError("vehicle id is required")

        async with self.locks.hold(shipment_key(shipment_id)):
            shipment = await self._load(shipment_id)
            self._check_assignable(shipment, "vehicle")
            if not shipment.delivery_person_id:
                raise ValidationError(f"Shipment {shipment_id} needs a delivery person before a vehicle")
            shipment.vehicle_id = vehicle_id.strip()
            shipment.updated_at = self.clock.now()
            await self.repository.save_shipment(shipment)

        logger.info(f"Shipment {shipment_id} assigned vehicle {vehicle_id} by {actor_id}")
        return shipment

    # Status changes

    async def change_status(
        self,
        shipment_id: str,
        new_status: Any,
        reason: Optional[str],
        actor_id: str,
    ) -> Shipment:
        """
        Advance a shipment exactly one step along its delivery path.

        Raises:
            ValidationError: unknown status or missing actor
            InvalidTransitionError: backwards, same-state, skipped or
                terminal moves, and RETURNED (use report_incident)
        """
        try:
            target = ShipmentStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown shipment status: {new_status!r}")
        if not actor_id:
            raise ValidationError("actor_id is required")

        async with self.locks.hold(shipment_key(shipment_id)):
            shipment = await self._load(shipment_id)
            current = shipment.status

            if target == ShipmentStatus.RETURNED:
                raise InvalidTransitionError(
                    f"Shipment {shipment_id} can only be returned through an incident report",
                    current_status=current.value,
                    requested=target.value,
                )
            if next_delivery_step(current) != target:
                raise InvalidTransitionError(
                    f"Shipment {shipment_id} cannot move from {current.value} to {target.value}",
                    current_status=current.value,
                    requested=target.value,
                )

            now = self.clock.now()
            shipment.status = target
            shipment.updated_at = now
            if target == ShipmentStatus.DELIVERED:
                shipment.actual_delivery = now
            shipment.status_history.append(
                StatusChange(status=target.value, timestamp=now, actor_id=actor_id, reason=reason)
            )
            await self.repository.save_shipment(shipment)

        logger.info(f"Shipment {shipment_id}: {current.value} -> {target.value} by {actor_id}")
        await publish_shipment_status_changed(self.event_bus, shipment, current.value, actor_id, reason)
        return shipment

    async def report_incident(
        self,
        shipment_id: str,
        incident_type: Any,
        description: str,
        reported_by: str,
    ) -> Shipment:
        """Attach an incident and return the shipment, as one step"""
        try:
            incident_type = IncidentType(incident_type)
        except ValueError:
            raise ValidationError(f"Unknown incident type: {incident_type!r}")
        description = (description or "").strip()
        if not description:
            raise ValidationError("Incident description is required")
        if len(description) > self.incident_description_max_length:
            raise ValidationError(
                f"Incident description exceeds {self.incident_description_max_length} characters"
            )
        if not reported_by:
            raise ValidationError("reported_by is required")

        async with self.locks.hold(shipment_key(shipment_id)):
            shipment = await self._load(shipment_id)
            current = shipment.status
            if shipment.is_terminal:
                raise InvalidTransitionError(
                    f"Shipment {shipment_id} is already {current.value}",
                    current_status=current.value,
                    requested=ShipmentStatus.RETURNED.value,
                )

            now = self.clock.now()
            shipment.incident = Incident(
                incident_id=f"inc_{uuid.uuid4().hex[:16]}",
                incident_type=incident_type,
                description=description,
                reported_by=reported_by,
                reported_at=now,
            )
            shipment.status = ShipmentStatus.RETURNED
            shipment.updated_at = now
            shipment.status_history.append(
                StatusChange(
                    status=ShipmentStatus.RETURNED.value,
                    timestamp=now,
                    actor_id=reported_by,
                    reason=f"{incident_type.value}: {description}",
                )
            )
            await self.repository.save_shipment(shipment)

        logger.warning(f"Incident {incident_type.value} on shipment {shipment_id}, shipment returned")
        await publish_shipment_incident_reported(self.event_bus, shipment)
        await publish_shipment_status_changed(
            self.event_bus, shipment, current.value, reported_by, shipment.status_history[-1].reason
        )
        return shipment

    async def return_for_cancellation(self, shipment_id: str, actor_id: str, reason: Optional[str] = None) -> Shipment:
        """READY_FOR_PICKUP -> RETURNED when the owning order is cancelled"""
        async with self.locks.hold(shipment_key(shipment_id)):
            shipment = await self._load(shipment_id)
            current = shipment.status
            if current != ShipmentStatus.READY_FOR_PICKUP:
                raise InvalidTransitionError(
                    f"Shipment {shipment_id} in {current.value} can no longer be withdrawn",
                    current_status=current.value,
                    requested=ShipmentStatus.RETURNED.value,
                )

            now = self.clock.now()
            shipment.status = ShipmentStatus.RETURNED
            shipment.updated_at = now
            shipment.status_history.append(
                StatusChange(status=ShipmentStatus.RETURNED.value, timestamp=now, actor_id=actor_id, reason=reason)
            )
            await self.repository.save_shipment(shipment)

        logger.info(f"Shipment {shipment_id} returned before pickup by {actor_id}")
        await publish_shipment_status_changed(self.event_bus, shipment, current.value, actor_id, reason)
        return shipment

    # Queries

    async def get_shipment(self, shipment_id: str) -> Shipment:
        return await self._load(shipment_id)

    async def get_shipment_by_order(self, order_id: str) -> Optional[Shipment]:
        return await self.repository.get_shipment_by_order(order_id)

    async def list_shipments(
        self,
        status: Optional[ShipmentStatus] = None,
        user_id: Optional[str] = None,
        delivery_person_id: Optional[str] = None,
    ) -> List[Shipment]:
        return await self.repository.list_shipments(
            status=status, user_id=user_id, delivery_person_id=delivery_person_id
        )

    async def list_shipments_for_user(self, user_id: str) -> List[Shipment]:
        if not user_id:
            raise ValidationError("user_id is required")
        return await self.repository.list_shipments(user_id=user_id)

    async def list_delayed_shipments(self, now: Optional[datetime] = None) -> List[Shipment]:
        """
        Shipments still on their way after their estimated delivery time.

        Delivered and returned shipments are never delayed, nor are
        shipments without an estimate.
        """
        now = now or self.clock.now()
        return [
            shipment for shipment in await self.repository.list_shipments()
            if not shipment.is_terminal
            and shipment.estimated_delivery is not None
            and shipment.estimated_delivery < now
        ]

    # Internals

    async def _load(self, shipment_id: str) -> Shipment:
        shipment = await self.repository.get_shipment(shipment_id)
        if not shipment:
            raise NotFoundError("Shipment", shipment_id)
        return shipment

    @staticmethod
    def _check_assignable(shipment: Shipment, what: str):
        if shipment.status not in ASSIGNABLE_STATUSES:
            raise InvalidTransitionError(
                f"Cannot assign {what} to shipment {shipment.shipment_id} in {shipment.status.value}",
                current_status=shipment.status.value,
            )
