"""
Payment Repository

In-memory storage for payment attempts.
"""

import logging
from typing import Dict, List, Optional

from .models import Payment, PaymentStatus

logger = logging.getLogger(__name__)


class InMemoryPaymentRepository:
    """Payment storage keyed by payment id"""

    def __init__(self):
        self._payments: Dict[str, Payment] = {}

    async def get_payment(self, payment_id: str) -> Optional[Payment]:
        payment = self._payments.get(payment_id)
        return payment.model_copy(deep=True) if payment else None

    async def save_payment(self, payment: Payment) -> Payment:
        self._payments[payment.payment_id] = payment.model_copy(deep=True)
        logger.debug(f"Saved payment {payment.payment_id} ({payment.status.value})")
        return payment

    async def list_payments_for_invoice(self, invoice_id: str) -> List[Payment]:
        payments = [p for p in self._payments.values() if p.invoice_id == invoice_id]
        payments.sort(key=lambda p: (p.created_at, p.payment_id))
        return [p.model_copy(deep=True) for p in payments]

    async def list_payments(
        self,
        status: Optional[PaymentStatus] = None,
        user_id: Optional[str] = None,
    ) -> List[Payment]:
        payments = [
            p for p in self._payments.values()
            if (status is None or p.status == status)
            and (user_id is None or p.user_id == user_id)
        ]
        payments.sort(key=lambda p: (p.created_at, p.payment_id))
        return [p.model_copy(deep=True) for p in payments]
