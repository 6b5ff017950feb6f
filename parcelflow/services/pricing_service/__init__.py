"""
Pricing Service

Deterministic cost calculation for shipment orders.
"""

from .models import AdditionalServiceType, Address, CostBreakdown, GeoPoint, LineItem, PackageDetails
from .pricing_engine import PricingEngine

__all__ = [
    "AdditionalServiceType",
    "Address",
    "CostBreakdown",
    "GeoPoint",
    "LineItem",
    "PackageDetails",
    "PricingEngine",
]
