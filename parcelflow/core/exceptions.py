"""
Lifecycle error taxonomy

Shared by every service so callers can map failures onto one set of types.
"""

from typing import Any, Optional


class LifecycleError(Exception):
    """Base exception for parcelflow lifecycle errors"""
    pass


class ValidationError(LifecycleError):
    """Malformed input or a rule violation on input data"""
    pass


class InvalidTransitionError(LifecycleError):
    """Requested state change is not allowed from the current state"""

    def __init__(self, message: str, current_status: Optional[str] = None, requested: Optional[str] = None):
        super().__init__(message)
        self.current_status = current_status
        self.requested = requested


class NotFoundError(LifecycleError):
    """Entity does not exist"""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class DuplicatePaymentError(LifecycleError):
    """Invoice already has an approved or in-flight payment"""
    pass


class PaymentDeclinedError(LifecycleError):
    """Payment authorization failed or timed out"""

    def __init__(self, message: str, payment: Any = None):
        super().__init__(message)
        self.payment = payment
