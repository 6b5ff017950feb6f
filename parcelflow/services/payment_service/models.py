"""
Payment Service Data Models

Pydantic models for payment attempts against invoices.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum


class PaymentStatus(str, Enum):
    """Payment status enumeration"""
    PENDING = "pending"
    APPROVED = "approved"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethodType(str, Enum):
    """Payment method type"""
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    CASH = "cash"
    DIGITAL_WALLET = "digital_wallet"
    PAYPAL = "paypal"
    OTHER = "other"


class PaymentProvider(str, Enum):
    """Payment provider / card network"""
    VISA = "visa"
    MASTERCARD = "mastercard"
    AMERICAN_EXPRESS = "american_express"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    MERCADO_PAGO = "mercado_pago"
    CASH = "cash"
    OTHER = "other"


def mask_account(account_number: Optional[str]) -> Optional[str]:
    """Keep only the last four characters of an account number"""
    if not account_number:
        return None
    digits = "".join(account_number.split())
    if len(digits) <= 4:
        return f"**** {digits}"
    return f"**** {digits[-4:]}"


class PaymentMethod(BaseModel):
    """Stored payment method descriptor. Never holds the raw account number."""
    model_config = ConfigDict(frozen=True)

    method_type: PaymentMethodType
    provider: PaymentProvider
    account_reference: Optional[str] = None

    @property
    def account_suffix(self) -> Optional[str]:
        return self.account_reference[-4:] if self.account_reference else None


class PaymentMethodRequest(BaseModel):
    """Payment method as submitted by the payer"""
    method_type: PaymentMethodType
    provider: PaymentProvider
    account_number: Optional[str] = Field(None, max_length=64)

    def to_payment_method(self) -> PaymentMethod:
        return PaymentMethod(
            method_type=self.method_type,
            provider=self.provider,
            account_reference=mask_account(self.account_number),
        )


class Payment(BaseModel):
    """Payment attempt against one invoice"""
    payment_id: str
    invoice_id: str
    order_id: str
    user_id: str
    payment_method: PaymentMethod
    amount: Decimal
    currency: str = "COP"
    status: PaymentStatus = PaymentStatus.PENDING
    receipt_id: Optional[str] = None
    failure_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    refunded_at: Optional[datetime] = None


class AuthorizationResult(BaseModel):
    """Outcome reported by a payment authorizer"""
    approved: bool
    receipt_id: Optional[str] = None
    decline_reason: Optional[str] = None


# Request Models

class PaymentConfirmRequest(BaseModel):
    """Pay an invoice"""
    invoice_id: str = Field(..., min_length=1)
    payment_method: PaymentMethodRequest


class PaymentListResponse(BaseModel):
    """Payments recorded for an invoice"""
    payments: List[Payment]
    count: int
