"""
Payment Authorizer Mock for Component Testing
"""
import asyncio
from typing import Any, Dict, List, Optional

from parcelflow.services.payment_service.models import AuthorizationResult


class MockPaymentAuthorizer:
    """Approves by default; can decline, stall or raise"""

    def __init__(self):
        self._call_log: List[Dict[str, Any]] = []
        self._decline_reason: Optional[str] = None
        self._delay: float = 0.0
        self._should_raise: Optional[Exception] = None
        self.release = asyncio.Event()
        self._hold = False

    async def authorize(self, payment, payment_method) -> AuthorizationResult:
        self._call_log.append({"payment_id": payment.payment_id, "amount": payment.amount})
        if self._hold:
            await self.release.wait()
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._should_raise:
            raise self._should_raise
        if self._decline_reason:
            return AuthorizationResult(approved=False, decline_reason=self._decline_reason)
        return AuthorizationResult(approved=True, receipt_id=f"rcpt_mock_{len(self._call_log)}")

    # Test helper methods

    def decline(self, reason: str = "Insufficient funds"):
        self._decline_reason = reason

    def approve(self):
        self._decline_reason = None

    def stall(self, seconds: float):
        self._delay = seconds

    def hold_until_released(self):
        """Block authorizations until ``release.set()`` is called"""
        self._hold = True
        self.release = asyncio.Event()

    def set_error(self, error: Exception):
        self._should_raise = error

    def get_call_count(self) -> int:
        return len(self._call_log)
