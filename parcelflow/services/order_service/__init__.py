"""
Order Service

Order state machine and invoices for shipment orders.
"""

from .models import Invoice, Order, OrderStatus, StatusChange
from .order_service import OrderService

__all__ = ["Invoice", "Order", "OrderService", "OrderStatus", "StatusChange"]
