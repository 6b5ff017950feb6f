"""
Payment Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import List, Optional, Protocol, runtime_checkable

from .models import AuthorizationResult, Payment, PaymentMethod, PaymentStatus


@runtime_checkable
class PaymentRepositoryProtocol(Protocol):
    """Interface for Payment Repository"""

    async def get_payment(self, payment_id: str) -> Optional[Payment]:
        """Get payment by ID"""
        ...

    async def save_payment(self, payment: Payment) -> Payment:
        """Insert or replace a payment"""
        ...

    async def list_payments_for_invoice(self, invoice_id: str) -> List[Payment]:
        """All attempts against an invoice, oldest first"""
        ...

    async def list_payments(
        self,
        status: Optional[PaymentStatus] = None,
        user_id: Optional[str] = None,
    ) -> List[Payment]:
        """List payments, oldest first"""
        ...


@runtime_checkable
class PaymentAuthorizerProtocol(Protocol):
    """Interface for payment authorization (simulated check or provider round-trip)"""

    async def authorize(self, payment: Payment, payment_method: PaymentMethod) -> AuthorizationResult:
        """Authorize a pending payment"""
        ...
