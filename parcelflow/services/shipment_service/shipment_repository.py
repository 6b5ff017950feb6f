"""
Shipment Repository

In-memory storage for shipments. Reads hand out deep copies.
"""

import logging
from typing import Dict, List, Optional

from .models import Shipment, ShipmentStatus

logger = logging.getLogger(__name__)


class InMemoryShipmentRepository:
    """Shipment storage keyed by shipment id, indexed by order id"""

    def __init__(self):
        self._shipments: Dict[str, Shipment] = {}
        self._by_order: Dict[str, str] = {}

    async def get_shipment(self, shipment_id: str) -> Optional[Shipment]:
        shipment = self._shipments.get(shipment_id)
        return shipment.model_copy(deep=True) if shipment else None

    async def get_shipment_by_order(self, order_id: str) -> Optional[Shipment]:
        shipment_id = self._by_order.get(order_id)
        return await self.get_shipment(shipment_id) if shipment_id else None

    async def save_shipment(self, shipment: Shipment) -> Shipment:
        self._shipments[shipment.shipment_id] = shipment.model_copy(deep=True)
        self._by_order[shipment.order_id] = shipment.shipment_id
        logger.debug(f"Saved shipment {shipment.shipment_id} ({shipment.status.value})")
        return shipment

    async def list_shipments(
        self,
        status: Optional[ShipmentStatus] = None,
        user_id: Optional[str] = None,
        delivery_person_id: Optional[str] = None,
    ) -> List[Shipment]:
        shipments = [
            s for s in self._shipments.values()
            if (status is None or s.status == status)
            and (user_id is None or s.user_id == user_id)
            and (delivery_person_id is None or s.delivery_person_id == delivery_person_id)
        ]
        shipments.sort(key=lambda s: (s.created_at, s.shipment_id))
        return [s.model_copy(deep=True) for s in shipments]
