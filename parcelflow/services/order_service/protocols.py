"""
Order Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import List, Optional, Protocol, runtime_checkable

from .models import Invoice, Order, OrderStatus


@runtime_checkable
class OrderRepositoryProtocol(Protocol):
    """
    Interface for Order Repository.

    Implementations must return copies: mutating a returned order must not
    change stored state until it is saved.
    """

    async def get_order(self, order_id: str) -> Optional[Order]:
        """Get order by ID"""
        ...

    async def save_order(self, order: Order) -> Order:
        """Insert or replace an order"""
        ...

    async def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        user_id: Optional[str] = None,
    ) -> List[Order]:
        """List orders, oldest first"""
        ...


@runtime_checkable
class InvoiceRepositoryProtocol(Protocol):
    """Interface for Invoice Repository"""

    async def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        """Get invoice by ID"""
        ...

    async def save_invoice(self, invoice: Invoice) -> Invoice:
        """Store a new invoice"""
        ...

    async def get_invoice_by_order(self, order_id: str) -> Optional[Invoice]:
        """Get the invoice owned by an order"""
        ...
