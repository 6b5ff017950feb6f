"""
Component Test Mocks

Shared mock implementations for component testing.
These mocks replace the event bus, notification delivery and payment
authorization.
"""

from .event_bus_mock import MockEventBus
from .notification_mock import MockNotificationSink
from .authorizer_mock import MockPaymentAuthorizer

__all__ = [
    'MockEventBus',
    'MockNotificationSink',
    'MockPaymentAuthorizer',
]
