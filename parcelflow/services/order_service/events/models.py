"""
Order Service Event Models

Pydantic models for events published by order service
"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal


class OrderCreatedEvent(BaseModel):
    """Event published when order is created"""
    order_id: str
    user_id: str
    invoice_id: str
    total_amount: Decimal
    currency: str = "COP"
    timestamp: datetime


class OrderApprovedEvent(BaseModel):
    """Event published when an administrator approves an order"""
    order_id: str
    user_id: str
    admin_id: str
    timestamp: datetime


class OrderRejectedEvent(BaseModel):
    """Event published when an administrator rejects an order"""
    order_id: str
    user_id: str
    admin_id: str
    reason: str
    timestamp: datetime


class OrderCancelledEvent(BaseModel):
    """Event published when order is cancelled"""
    order_id: str
    user_id: str
    actor_id: str
    reason: Optional[str] = None
    shipment_id: Optional[str] = None
    timestamp: datetime
