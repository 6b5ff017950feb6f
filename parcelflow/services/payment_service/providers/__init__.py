from .base import PaymentAuthorizer
from .simulated import SimulatedPaymentAuthorizer

__all__ = ["PaymentAuthorizer", "SimulatedPaymentAuthorizer"]
