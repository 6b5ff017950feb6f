#!/usr/bin/env python3
"""Tariff configuration - rates used by the pricing engine"""
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict


def _decimal(val: str, default: str) -> Decimal:
    try:
        return Decimal(val) if val else Decimal(default)
    except InvalidOperation:
        return Decimal(default)


def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


def _default_service_prices() -> Dict[str, Decimal]:
    return {
        "insurance": Decimal("3000"),
        "fragile": Decimal("2000"),
        "signature_required": Decimal("1500"),
    }


@dataclass
class TariffConfig:
    """Pricing rates. Amounts are expressed in major currency units."""
    base_cost: Decimal = Decimal("5000")
    per_km_rate: Decimal = Decimal("800")
    per_kg_rate: Decimal = Decimal("1500")
    per_m3_rate: Decimal = Decimal("200000")
    priority_surcharge_rate: Decimal = Decimal("3000")
    service_prices: Dict[str, Decimal] = field(default_factory=_default_service_prices)

    currency: str = "COP"
    currency_minor_digits: int = 2

    @property
    def minor_unit(self) -> Decimal:
        """Smallest representable amount, e.g. Decimal('0.01')"""
        return Decimal(1).scaleb(-self.currency_minor_digits)

    @classmethod
    def from_env(cls) -> 'TariffConfig':
        """Load tariff config from environment variables"""
        return cls(
            base_cost=_decimal(os.getenv("TARIFF_BASE_COST", ""), "5000"),
            per_km_rate=_decimal(os.getenv("TARIFF_PER_KM_RATE", ""), "800"),
            per_kg_rate=_decimal(os.getenv("TARIFF_PER_KG_RATE", ""), "1500"),
            per_m3_rate=_decimal(os.getenv("TARIFF_PER_M3_RATE", ""), "200000"),
            priority_surcharge_rate=_decimal(os.getenv("TARIFF_PRIORITY_SURCHARGE", ""), "3000"),
            service_prices={
                "insurance": _decimal(os.getenv("TARIFF_SERVICE_INSURANCE", ""), "3000"),
                "fragile": _decimal(os.getenv("TARIFF_SERVICE_FRAGILE", ""), "2000"),
                "signature_required": _decimal(os.getenv("TARIFF_SERVICE_SIGNATURE_REQUIRED", ""), "1500"),
            },
            currency=os.getenv("CURRENCY", "COP"),
            currency_minor_digits=_int(os.getenv("CURRENCY_MINOR_DIGITS", "2"), 2),
        )
