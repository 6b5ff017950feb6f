"""
Shipment Service

Shipment state machine: delivery progress, assignment and incidents.
"""

from .models import Incident, IncidentType, Shipment, ShipmentStatus
from .shipment_service import ShipmentService

__all__ = ["Incident", "IncidentType", "Shipment", "ShipmentService", "ShipmentStatus"]
