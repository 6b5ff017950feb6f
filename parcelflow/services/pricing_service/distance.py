"""
Route distance and delivery-time estimates

Great-circle distance when both addresses carry coordinates, otherwise a
coarse zone heuristic on city / zip / state.
"""

import math
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from .models import Address, GeoPoint

EARTH_RADIUS_KM = 6371.0

# Zone fallback distances (km)
SAME_ZIP_KM = Decimal("5")
SAME_CITY_KM = Decimal("15")
SAME_STATE_KM = Decimal("50")
OTHER_STATE_KM = Decimal("150")

_TWO_PLACES = Decimal("0.01")


def haversine_km(a: GeoPoint, b: GeoPoint) -> Decimal:
    """Great-circle distance between two points, rounded to 0.01 km"""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return Decimal(str(EARTH_RADIUS_KM * c)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def _same(x: str, y: str) -> bool:
    return x.strip().casefold() == y.strip().casefold()


def estimate_distance_km(origin: Address, destination: Address) -> Decimal:
    """Distance between two addresses"""
    if origin.coordinates and destination.coordinates:
        return haversine_km(origin.coordinates, destination.coordinates)

    if _same(origin.city, destination.city):
        if _same(origin.zip_code, destination.zip_code):
            return SAME_ZIP_KM
        return SAME_CITY_KM
    if _same(origin.state, destination.state):
        return SAME_STATE_KM
    return OTHER_STATE_KM


def estimate_travel_hours(distance_km: Decimal, average_speed_kmh: float = 40.0) -> Decimal:
    """Driving time at an average speed, rounded to 0.01 h"""
    if average_speed_kmh <= 0:
        raise ValueError("average speed must be positive")
    hours = Decimal(distance_km) / Decimal(str(average_speed_kmh))
    return hours.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def estimate_delivery(
    start: datetime,
    distance_km: Decimal,
    priority: int,
    default_hours: int = 24,
    average_speed_kmh: float = 40.0,
) -> datetime:
    """
    Expected delivery time for a shipment leaving at ``start``.

    Handling time plus whole hours of travel; priorities above 3 shave four
    hours per level.
    """
    travel = math.ceil(estimate_travel_hours(distance_km, average_speed_kmh))
    hours = default_hours + travel
    if priority > 3:
        hours -= (priority - 3) * 4
    return start + timedelta(hours=max(hours, 1))
