"""
Order Repository

In-memory storage for orders and invoices. Reads hand out deep copies so
callers work on a snapshot.
"""

import logging
from typing import Dict, List, Optional

from .models import Invoice, Order, OrderStatus

logger = logging.getLogger(__name__)


class InMemoryOrderRepository:
    """Order storage keyed by order id"""

    def __init__(self):
        self._orders: Dict[str, Order] = {}

    async def get_order(self, order_id: str) -> Optional[Order]:
        order = self._orders.get(order_id)
        return order.model_copy(deep=True) if order else None

    async def save_order(self, order: Order) -> Order:
        self._orders[order.order_id] = order.model_copy(deep=True)
        logger.debug(f"Saved order {order.order_id} ({order.status.value})")
        return order

    async def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        user_id: Optional[str] = None,
    ) -> List[Order]:
        orders = [
            o for o in self._orders.values()
            if (status is None or o.status == status) and (user_id is None or o.user_id == user_id)
        ]
        orders.sort(key=lambda o: (o.created_at, o.order_id))
        return [o.model_copy(deep=True) for o in orders]


class InMemoryInvoiceRepository:
    """Invoice storage; invoices are immutable so they are stored as-is"""

    def __init__(self):
        self._invoices: Dict[str, Invoice] = {}

    async def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        return self._invoices.get(invoice_id)

    async def save_invoice(self, invoice: Invoice) -> Invoice:
        self._invoices[invoice.invoice_id] = invoice
        logger.debug(f"Saved invoice {invoice.invoice_number} for order {invoice.order_id}")
        return invoice

    async def get_invoice_by_order(self, order_id: str) -> Optional[Invoice]:
        for invoice in self._invoices.values():
            if invoice.order_id == order_id:
                return invoice
        return None
