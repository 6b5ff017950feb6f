"""
Shipment Service Factory

Factory functions for creating service instances with their default
dependencies.
"""
from typing import Optional

from ...core.clock import ClockProtocol
from ...core.config import LifecycleConfig
from ...core.entity_locks import EntityLockRegistry
from .shipment_service import ShipmentService


def create_shipment_service(
    config: Optional[LifecycleConfig] = None,
    locks: Optional[EntityLockRegistry] = None,
    clock: Optional[ClockProtocol] = None,
    event_bus=None,
) -> ShipmentService:
    """
    Create ShipmentService backed by the in-memory repository.

    Args:
        config: Lifecycle settings (incident limits, delivery estimate)
        locks: Shared per-entity lock registry
        clock: Time source
        event_bus: Event bus for publishing events
    """
    from .shipment_repository import InMemoryShipmentRepository

    config = config or LifecycleConfig()
    return ShipmentService(
        repository=InMemoryShipmentRepository(),
        locks=locks,
        clock=clock,
        event_bus=event_bus,
        incident_description_max_length=config.incident_description_max_length,
        default_delivery_hours=config.default_delivery_hours,
        average_speed_kmh=config.average_speed_kmh,
    )
