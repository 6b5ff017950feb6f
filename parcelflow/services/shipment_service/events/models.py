"""
Shipment Service Event Models

Pydantic models for events published by shipment service
"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ShipmentCreatedEvent(BaseModel):
    """Event published when a shipment is materialized for an order"""
    shipment_id: str
    order_id: str
    user_id: str
    estimated_delivery: Optional[datetime] = None
    timestamp: datetime


class ShipmentStatusChangedEvent(BaseModel):
    """Event published on every shipment status change"""
    shipment_id: str
    order_id: str
    user_id: str
    old_status: str
    new_status: str
    is_terminal: bool
    actor_id: str
    reason: Optional[str] = None
    timestamp: datetime


class ShipmentIncidentReportedEvent(BaseModel):
    """Event published when an incident returns a shipment"""
    shipment_id: str
    order_id: str
    user_id: str
    incident_id: str
    incident_type: str
    description: str
    reported_by: str
    timestamp: datetime
