"""
Shipment Service Events Module

Exports all event-related functionality for shipment service
"""

from .models import (
    ShipmentCreatedEvent,
    ShipmentStatusChangedEvent,
    ShipmentIncidentReportedEvent,
)

from .publishers import (
    publish_shipment_created,
    publish_shipment_status_changed,
    publish_shipment_incident_reported,
)

__all__ = [
    # Event Models
    "ShipmentCreatedEvent",
    "ShipmentStatusChangedEvent",
    "ShipmentIncidentReportedEvent",
    # Publishers
    "publish_shipment_created",
    "publish_shipment_status_changed",
    "publish_shipment_incident_reported",
]
