"""
Pricing Service Data Models

Pydantic models for route, package and cost breakdown data.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from decimal import Decimal
from enum import Enum


class AdditionalServiceType(str, Enum):
    """Extra services billed at a fixed price"""
    INSURANCE = "insurance"
    FRAGILE = "fragile"
    SIGNATURE_REQUIRED = "signature_required"


# Route Models

class GeoPoint(BaseModel):
    """Geographic coordinates"""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Address(BaseModel):
    """Structured postal address"""
    model_config = ConfigDict(frozen=True)

    street: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)
    coordinates: Optional[GeoPoint] = None

    @field_validator("street", "city", "state", "zip_code", "country")
    @classmethod
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError("address fields cannot be blank")
        return v.strip()

    def one_line(self) -> str:
        return f"{self.street}, {self.city}, {self.state} {self.zip_code}, {self.country}"


class PackageDetails(BaseModel):
    """Physical package attributes and requested services"""
    model_config = ConfigDict(frozen=True)

    weight_kg: Decimal = Field(..., gt=0)
    width_cm: Decimal = Field(..., gt=0)
    height_cm: Decimal = Field(..., gt=0)
    length_cm: Decimal = Field(..., gt=0)
    priority: int = Field(0, ge=0, le=5)
    additional_services: List[AdditionalServiceType] = Field(default_factory=list)
    notes: Optional[str] = Field(None, max_length=500)

    @property
    def volume_m3(self) -> Decimal:
        return self.width_cm * self.height_cm * self.length_cm / Decimal(1_000_000)


# Cost Models

class LineItem(BaseModel):
    """One invoice line"""
    model_config = ConfigDict(frozen=True)

    description: str
    amount: Decimal


class CostBreakdown(BaseModel):
    """Itemized price of a shipment. Every component is already rounded."""
    model_config = ConfigDict(frozen=True)

    base_cost: Decimal
    distance_cost: Decimal
    weight_cost: Decimal
    volume_cost: Decimal
    services_cost: Decimal
    priority_cost: Decimal
    total: Decimal
    currency: str = "COP"

    distance_km: Decimal = Decimal("0")
    priority_level: int = 0

    def line_items(self) -> List[LineItem]:
        """Invoice lines for the non-zero components, in fixed order"""
        candidates = [
            ("Base shipping cost", self.base_cost),
            (f"Distance cost ({self.distance_km} km)", self.distance_cost),
            ("Weight cost", self.weight_cost),
            ("Volume cost", self.volume_cost),
            ("Additional services", self.services_cost),
            (f"Priority shipping (level {self.priority_level})", self.priority_cost),
        ]
        return [LineItem(description=d, amount=a) for d, a in candidates if a > 0]


class QuoteRequest(BaseModel):
    """Request to price a prospective order"""
    origin: Address
    destination: Address
    package: PackageDetails
    distance_km: Optional[Decimal] = Field(None, ge=0)


class QuoteResponse(BaseModel):
    """Quote for a prospective order"""
    breakdown: CostBreakdown
    line_items: List[LineItem]
    distance_km: Decimal
    estimated_travel_hours: Decimal
