"""
Payment Service

Payment attempts, authorization and refunds for order invoices.
"""

from .models import Payment, PaymentMethod, PaymentMethodRequest, PaymentStatus
from .payment_service import PaymentService

__all__ = ["Payment", "PaymentMethod", "PaymentMethodRequest", "PaymentService", "PaymentStatus"]
