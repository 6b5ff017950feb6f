"""Payment authorizer interface."""

from abc import ABC, abstractmethod

from ..models import AuthorizationResult, Payment, PaymentMethod


class PaymentAuthorizer(ABC):
    """Abstract payment authorizer."""

    @abstractmethod
    async def authorize(self, payment: Payment, payment_method: PaymentMethod) -> AuthorizationResult:
        """Authorize a pending payment."""
        raise NotImplementedError
