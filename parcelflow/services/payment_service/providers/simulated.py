"""Simulated payment authorizer."""

import logging
from typing import Iterable, Optional
from uuid import uuid4

from ..models import AuthorizationResult, Payment, PaymentMethod, PaymentMethodType
from .base import PaymentAuthorizer

logger = logging.getLogger(__name__)


class SimulatedPaymentAuthorizer(PaymentAuthorizer):
    """
    Local authorization check.

    Cash is always accepted. Other methods need an account reference, and
    accounts ending in one of ``declined_suffixes`` are declined.
    """

    def __init__(self, declined_suffixes: Optional[Iterable[str]] = None):
        self.declined_suffixes = ("0002",) if declined_suffixes is None else tuple(declined_suffixes)

    async def authorize(self, payment: Payment, payment_method: PaymentMethod) -> AuthorizationResult:
        if payment_method.method_type == PaymentMethodType.CASH:
            return AuthorizationResult(approved=True, receipt_id=f"rcpt_{uuid4().hex[:12]}")

        suffix = payment_method.account_suffix
        if not suffix:
            return AuthorizationResult(approved=False, decline_reason="Missing account reference")
        if suffix.endswith(self.declined_suffixes):
            logger.info(f"Simulated decline for payment {payment.payment_id}")
            return AuthorizationResult(approved=False, decline_reason="Insufficient funds")

        return AuthorizationResult(approved=True, receipt_id=f"rcpt_{uuid4().hex[:12]}")
