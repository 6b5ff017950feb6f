"""
Pricing Engine

Pure cost calculation. Each component is rounded to the currency minor unit
with ROUND_HALF_UP and the total is the sum of the rounded components, so an
invoice built from the breakdown always adds up to the total.
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from ...core.config import TariffConfig
from ...core.exceptions import ValidationError
from .models import AdditionalServiceType, CostBreakdown, PackageDetails

logger = logging.getLogger(__name__)

MAX_PRIORITY = 5


def _to_decimal(name: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if not result.is_finite():
        raise ValidationError(f"{name} must be finite")
    return result


class PricingEngine:
    """Prices shipments from package and route attributes"""

    def __init__(self, tariff: Optional[TariffConfig] = None):
        self.tariff = tariff or TariffConfig()

    def _round(self, amount: Decimal) -> Decimal:
        return amount.quantize(self.tariff.minor_unit, rounding=ROUND_HALF_UP)

    def _service_price(self, service: Any) -> Decimal:
        try:
            service_type = AdditionalServiceType(service)
        except ValueError:
            raise ValidationError(f"Unknown additional service: {service!r}")
        price = self.tariff.service_prices.get(service_type.value)
        if price is None:
            raise ValidationError(f"No tariff configured for service: {service_type.value}")
        return price

    def price(
        self,
        weight_kg: Any,
        width_cm: Any,
        height_cm: Any,
        length_cm: Any,
        distance_km: Any,
        priority_level: int = 0,
        additional_services: Iterable[Any] = (),
    ) -> CostBreakdown:
        """
        Compute the itemized cost of a shipment.

        Each component is rounded ROUND_HALF_UP to the currency minor unit
        on its own, and the total is the exact sum of the rounded
        components. The total therefore always matches the invoice lines,
        and may differ by a minor unit from rounding the unrounded sum.

        Raises:
            ValidationError: non-positive weight or dimensions, negative
                distance, priority outside 0..5, unknown service type
        """
        weight = _to_decimal("weight_kg", weight_kg)
        width = _to_decimal("width_cm", width_cm)
        height = _to_decimal("height_cm", height_cm)
        length = _to_decimal("length_cm", length_cm)
        distance = _to_decimal("distance_km", distance_km)

        for name, value in (("weight_kg", weight), ("width_cm", width),
                            ("height_cm", height), ("length_cm", length)):
            if value <= 0:
                raise ValidationError(f"{name} must be positive, got {value}")
        if distance < 0:
            raise ValidationError(f"distance_km cannot be negative, got {distance}")
        if isinstance(priority_level, bool) or not isinstance(priority_level, int):
            raise ValidationError(f"priority_level must be an integer, got {priority_level!r}")
        if not 0 <= priority_level <= MAX_PRIORITY:
            raise ValidationError(f"priority_level must be between 0 and {MAX_PRIORITY}, got {priority_level}")

        services_total = sum((self._service_price(s) for s in additional_services), Decimal("0"))
        volume_m3 = width * height * length / Decimal(1_000_000)

        base_cost = self._round(self.tariff.base_cost)
        distance_cost = self._round(distance * self.tariff.per_km_rate)
        weight_cost = self._round(weight * self.tariff.per_kg_rate)
        volume_cost = self._round(volume_m3 * self.tariff.per_m3_rate)
        services_cost = self._round(services_total)
        priority_cost = self._round(Decimal(priority_level) * self.tariff.priority_surcharge_rate)

        total = base_cost + distance_cost + weight_cost + volume_cost + services_cost + priority_cost

        return CostBreakdown(
            base_cost=base_cost,
            distance_cost=distance_cost,
            weight_cost=weight_cost,
            volume_cost=volume_cost,
            services_cost=services_cost,
            priority_cost=priority_cost,
            total=total,
            currency=self.tariff.currency,
            distance_km=distance,
            priority_level=priority_level,
        )

    def price_package(self, package: PackageDetails, distance_km: Any) -> CostBreakdown:
        """Price a validated package over a distance"""
        return self.price(
            weight_kg=package.weight_kg,
            width_cm=package.width_cm,
            height_cm=package.height_cm,
            length_cm=package.length_cm,
            distance_km=distance_km,
            priority_level=package.priority,
            additional_services=package.additional_services,
        )
