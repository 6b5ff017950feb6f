"""
Shipment Service Data Models

Pydantic models for shipments, delivery incidents and status history.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ...core.status_history import StatusChange
from ..pricing_service.models import Address, PackageDetails


class ShipmentStatus(str, Enum):
    """Shipment status enumeration"""
    READY_FOR_PICKUP = "ready_for_pickup"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    RETURNED = "returned"


# Forward-only delivery path. RETURNED sits outside it and can be entered
# from any non-terminal step.
SHIPMENT_DELIVERY_PATH = [
    ShipmentStatus.READY_FOR_PICKUP,
    ShipmentStatus.IN_TRANSIT,
    ShipmentStatus.OUT_FOR_DELIVERY,
    ShipmentStatus.DELIVERED,
]

TERMINAL_SHIPMENT_STATUSES = frozenset({ShipmentStatus.DELIVERED, ShipmentStatus.RETURNED})

ASSIGNABLE_STATUSES = frozenset({ShipmentStatus.READY_FOR_PICKUP, ShipmentStatus.IN_TRANSIT})


def next_delivery_step(status: ShipmentStatus) -> Optional[ShipmentStatus]:
    """The only status change_status accepts from ``status``"""
    if status not in SHIPMENT_DELIVERY_PATH:
        return None
    index = SHIPMENT_DELIVERY_PATH.index(status)
    if index + 1 >= len(SHIPMENT_DELIVERY_PATH):
        return None
    return SHIPMENT_DELIVERY_PATH[index + 1]


class IncidentType(str, Enum):
    """Delivery incident types"""
    INCORRECT_ADDRESS = "incorrect_address"
    RECIPIENT_ABSENT = "recipient_absent"
    DAMAGED_PACKAGE = "damaged_package"
    DELAY = "delay"
    LOST_PACKAGE = "lost_package"
    REFUSED_DELIVERY = "refused_delivery"
    OTHER = "other"


class Incident(BaseModel):
    """Incident reported by a delivery person. Immutable."""
    model_config = ConfigDict(frozen=True)

    incident_id: str
    incident_type: IncidentType
    description: str
    reported_by: str
    reported_at: datetime


# Core Shipment Model

class Shipment(BaseModel):
    """Core shipment model"""
    shipment_id: str
    order_id: str
    user_id: str
    origin: Address
    destination: Address
    package: PackageDetails
    weight_kg: Decimal
    distance_km: Decimal
    priority: int = 0
    total_cost: Decimal
    currency: str = "COP"
    status: ShipmentStatus = ShipmentStatus.READY_FOR_PICKUP
    delivery_person_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    incident: Optional[Incident] = None
    status_history: List[StatusChange] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_SHIPMENT_STATUSES


# Request Models

class ShipmentStatusChangeRequest(BaseModel):
    """Advance a shipment along its delivery path"""
    status: ShipmentStatus
    actor_id: str = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=500)


class DeliveryPersonAssignRequest(BaseModel):
    """Assign a delivery person"""
    delivery_person_id: str = Field(..., min_length=1)
    actor_id: str = Field(..., min_length=1)


class VehicleAssignRequest(BaseModel):
    """Assign a vehicle"""
    vehicle_id: str = Field(..., min_length=1)
    actor_id: str = Field(..., min_length=1)


class IncidentReportRequest(BaseModel):
    """Report a delivery incident"""
    incident_type: IncidentType
    description: str = Field(..., min_length=1)
    reported_by: str = Field(..., min_length=1)


# Response Models

class ShipmentListResponse(BaseModel):
    """Shipment list response"""
    shipments: List[Shipment]
    count: int
