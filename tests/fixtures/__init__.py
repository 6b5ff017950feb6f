"""
Shared Test Fixtures

Centralized factories used across all test layers.

Structure:
    - common.py: ID generators, timestamps, controllable clocks
    - lifecycle_fixtures.py: Addresses, packages, payment methods
"""

# Common utilities
from .common import (
    make_user_id,
    make_admin_id,
    make_courier_id,
    make_timestamp,
    FixedClock,
    TickingClock,
)

# Lifecycle fixtures
from .lifecycle_fixtures import (
    make_address,
    make_address_dict,
    make_package,
    make_package_dict,
    make_card,
    make_declined_card,
    make_cash,
)

__all__ = [
    "make_user_id",
    "make_admin_id",
    "make_courier_id",
    "make_timestamp",
    "FixedClock",
    "TickingClock",
    "make_address",
    "make_address_dict",
    "make_package",
    "make_package_dict",
    "make_card",
    "make_declined_card",
    "make_cash",
]
