"""
Shipment Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import List, Optional, Protocol, runtime_checkable

from .models import Shipment, ShipmentStatus


@runtime_checkable
class ShipmentRepositoryProtocol(Protocol):
    """
    Interface for Shipment Repository.

    Implementations must return copies: mutating a returned shipment must
    not change stored state until it is saved.
    """

    async def get_shipment(self, shipment_id: str) -> Optional[Shipment]:
        """Get shipment by ID"""
        ...

    async def get_shipment_by_order(self, order_id: str) -> Optional[Shipment]:
        """Get the shipment materialized for an order"""
        ...

    async def save_shipment(self, shipment: Shipment) -> Shipment:
        """Insert or replace a shipment"""
        ...

    async def list_shipments(
        self,
        status: Optional[ShipmentStatus] = None,
        user_id: Optional[str] = None,
        delivery_person_id: Optional[str] = None,
    ) -> List[Shipment]:
        """List shipments, oldest first"""
        ...
