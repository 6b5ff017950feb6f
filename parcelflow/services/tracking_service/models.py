"""
Tracking Service Data Models

Display-ready timeline entries. Derived on demand, never stored.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime
from enum import Enum


class EventOrigin(str, Enum):
    """Which status log an entry came from"""
    ORDER = "order"
    SHIPMENT = "shipment"


class TrackingEvent(BaseModel):
    """One entry of a unified order + shipment timeline"""
    model_config = ConfigDict(frozen=True)

    status: str
    label: str
    color: str
    description: str
    completed: bool
    timestamp: Optional[datetime] = None
    origin: EventOrigin
    canonical_index: int
    actor_id: Optional[str] = None
    reason: Optional[str] = None


class TimelineResponse(BaseModel):
    """Unified timeline for an order and its shipment"""
    order_id: str
    shipment_id: Optional[str] = None
    events: List[TrackingEvent]
