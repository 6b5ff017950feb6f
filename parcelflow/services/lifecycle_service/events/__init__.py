"""
Lifecycle Service Events Module

Saga handlers reacting to payment, order and shipment events
"""

from .handlers import LifecycleEventHandlers, register_event_handlers

__all__ = [
    "LifecycleEventHandlers",
    "register_event_handlers",
]
