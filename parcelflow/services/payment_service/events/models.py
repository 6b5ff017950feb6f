"""
Payment Service Event Models

Pydantic models for events published by payment service
"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal


class PaymentApprovedEvent(BaseModel):
    """Event published when a payment is authorized"""
    payment_id: str
    invoice_id: str
    order_id: str
    user_id: str
    amount: Decimal
    currency: str = "COP"
    receipt_id: Optional[str] = None
    timestamp: datetime


class PaymentFailedEvent(BaseModel):
    """Event published when a payment is declined or times out"""
    payment_id: str
    invoice_id: str
    order_id: str
    user_id: str
    amount: Decimal
    failure_reason: Optional[str] = None
    timestamp: datetime


class PaymentRefundedEvent(BaseModel):
    """Event published when a payment is refunded"""
    payment_id: str
    invoice_id: str
    order_id: str
    user_id: str
    amount: Decimal
    timestamp: datetime
