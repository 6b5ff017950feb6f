"""
Lifecycle component fixtures

Factory fixtures that drive an order to a given point of its lifecycle
through the public LifecycleService operations.
"""
from decimal import Decimal

import pytest

from tests.fixtures import make_admin_id, make_card


@pytest.fixture
def admin_id() -> str:
    return make_admin_id()


@pytest.fixture
def place_order(lifecycle, user_id, origin, destination, package):
    """Create an order awaiting payment; returns OrderCreatedResponse"""
    async def _place(**overrides):
        args = dict(user_id=user_id, origin=origin, destination=destination, package=package,
                    distance_km=Decimal("15"))
        args.update(overrides)
        return await lifecycle.create_order(**args)
    return _place


@pytest.fixture
def paid_order(lifecycle, place_order):
    """Create and pay an order; returns (order, payment)"""
    async def _paid():
        created = await place_order()
        payment = await lifecycle.confirm_payment(created.invoice.invoice_id, make_card())
        return await lifecycle.get_order(created.order.order_id), payment
    return _paid


@pytest.fixture
def approved_order(lifecycle, paid_order, admin_id):
    """Create, pay and approve an order; returns (order, shipment)"""
    async def _approved():
        order, _ = await paid_order()
        order = await lifecycle.approve_order(order.order_id, admin_id)
        shipment = await lifecycle.get_shipment(order.shipment_id)
        return order, shipment
    return _approved
