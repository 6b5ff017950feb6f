"""
Status display catalog

Static lookup from status key to label, color hint, canonical index and
description. State machines never read this table.
"""

from typing import Dict, NamedTuple

from ..order_service.models import OrderStatus
from ..shipment_service.models import ShipmentStatus
from .models import EventOrigin

DEFAULT_COLOR = "#6c757d"


class StatusInfo(NamedTuple):
    label: str
    color: str
    canonical_index: int
    description: str


# Full expected journey of a successful order, order steps then shipment steps
CANONICAL_JOURNEY = [
    (EventOrigin.ORDER, OrderStatus.AWAITING_PAYMENT.value),
    (EventOrigin.ORDER, OrderStatus.PENDING_APPROVAL.value),
    (EventOrigin.ORDER, OrderStatus.APPROVED.value),
    (EventOrigin.SHIPMENT, ShipmentStatus.READY_FOR_PICKUP.value),
    (EventOrigin.SHIPMENT, ShipmentStatus.IN_TRANSIT.value),
    (EventOrigin.SHIPMENT, ShipmentStatus.OUT_FOR_DELIVERY.value),
    (EventOrigin.SHIPMENT, ShipmentStatus.DELIVERED.value),
]

# Statuses after which no further journey steps are projected
JOURNEY_END_STATUSES = frozenset({
    OrderStatus.REJECTED.value,
    OrderStatus.CANCELLED.value,
    ShipmentStatus.RETURNED.value,
    ShipmentStatus.DELIVERED.value,
})

STATUS_CATALOG: Dict[str, StatusInfo] = {
    # Order statuses
    OrderStatus.AWAITING_PAYMENT.value: StatusInfo(
        "Awaiting payment", "#FFA726", 0, "Order created, waiting for payment"),
    OrderStatus.PENDING_APPROVAL.value: StatusInfo(
        "Pending approval", "#FF9800", 1, "Payment received, waiting for administrator approval"),
    OrderStatus.APPROVED.value: StatusInfo(
        "Approved", "#42A5F5", 2, "Order approved, shipment being prepared"),
    OrderStatus.REJECTED.value: StatusInfo(
        "Rejected", "#E53935", 2, "Order rejected by an administrator"),
    OrderStatus.CANCELLED.value: StatusInfo(
        "Cancelled", "#EF5350", 7, "Order cancelled"),
    # Shipment statuses
    ShipmentStatus.READY_FOR_PICKUP.value: StatusInfo(
        "Ready for pickup", "#FFA726", 3, "Package ready to be collected by the courier"),
    ShipmentStatus.IN_TRANSIT.value: StatusInfo(
        "In transit", "#42A5F5", 4, "Package on its way"),
    ShipmentStatus.OUT_FOR_DELIVERY.value: StatusInfo(
        "Out for delivery", "#66BB6A", 5, "Courier is delivering the package"),
    ShipmentStatus.DELIVERED.value: StatusInfo(
        "Delivered", "#4CAF50", 6, "Package delivered"),
    ShipmentStatus.RETURNED.value: StatusInfo(
        "Returned", "#FF9800", 7, "Package returned to sender"),
}

UNKNOWN_INDEX = len(CANONICAL_JOURNEY) + 1


def lookup(status: str) -> StatusInfo:
    """Display info for a status key; unknown keys get a neutral entry"""
    info = STATUS_CATALOG.get(status)
    if info:
        return info
    return StatusInfo(status.replace("_", " ").capitalize(), DEFAULT_COLOR, UNKNOWN_INDEX, status)


def journey_position(status: str) -> int:
    """Position on the canonical journey, or -1 when off the path"""
    for index, (_, key) in enumerate(CANONICAL_JOURNEY):
        if key == status:
            return index
    return -1
