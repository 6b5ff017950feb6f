"""
Order Service Data Models

Pydantic models for shipment orders, their invoices and status history.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Tuple
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ...core.status_history import StatusChange, SYSTEM_ACTOR
from ..pricing_service.models import Address, LineItem, PackageDetails


class OrderStatus(str, Enum):
    """Order status enumeration"""
    AWAITING_PAYMENT = "awaiting_payment"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


TERMINAL_ORDER_STATUSES = frozenset({OrderStatus.REJECTED, OrderStatus.CANCELLED})

# Every edge an order may ever take. APPROVED -> CANCELLED is only taken once
# the linked shipment has been returned.
ORDER_TRANSITIONS = {
    OrderStatus.AWAITING_PAYMENT: frozenset({OrderStatus.PENDING_APPROVAL, OrderStatus.CANCELLED}),
    OrderStatus.PENDING_APPROVAL: frozenset({OrderStatus.APPROVED, OrderStatus.REJECTED, OrderStatus.CANCELLED}),
    OrderStatus.APPROVED: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.REJECTED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


# Core Order Models

class Order(BaseModel):
    """Core order model"""
    order_id: str
    user_id: str
    origin: Address
    destination: Address
    package: PackageDetails
    distance_km: Decimal
    status: OrderStatus = OrderStatus.AWAITING_PAYMENT
    shipment_id: Optional[str] = None
    payment_id: Optional[str] = None
    invoice_id: str
    total_amount: Decimal
    currency: str = "COP"
    rejection_reason: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    status_history: List[StatusChange] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ORDER_STATUSES


class Invoice(BaseModel):
    """Invoice owned by exactly one order. Immutable."""
    model_config = ConfigDict(frozen=True)

    invoice_id: str
    invoice_number: str
    order_id: str
    user_id: str
    line_items: Tuple[LineItem, ...]
    total_amount: Decimal
    currency: str = "COP"
    issued_at: datetime


# Request Models

class OrderCreateRequest(BaseModel):
    """Create order request"""
    user_id: str = Field(..., min_length=1)
    origin: Address
    destination: Address
    package: PackageDetails
    distance_km: Optional[Decimal] = Field(None, ge=0)


class OrderDecisionRequest(BaseModel):
    """Administrator approve / reject request"""
    admin_id: str = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=500)


class OrderCancelRequest(BaseModel):
    """Cancel order request"""
    actor_id: str = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=500)


# Response Models

class OrderCreatedResponse(BaseModel):
    """Order creation result"""
    order: Order
    invoice: Invoice


class OrderListResponse(BaseModel):
    """Order list response"""
    orders: List[Order]
    count: int
