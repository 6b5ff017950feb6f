"""
Shipment Service Event Publishers

Functions to publish events from shipment service
"""

import logging
from typing import Optional

from ....core.event_bus import Event, EventType, ServiceSource
from ..models import Shipment
from .models import (
    ShipmentCreatedEvent,
    ShipmentStatusChangedEvent,
    ShipmentIncidentReportedEvent,
)

logger = logging.getLogger(__name__)


async def publish_shipment_created(event_bus, shipment: Shipment) -> bool:
    """Publish shipment.created event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping shipment.created event")
        return False

    try:
        event_data = ShipmentCreatedEvent(
            shipment_id=shipment.shipment_id,
            order_id=shipment.order_id,
            user_id=shipment.user_id,
            estimated_delivery=shipment.estimated_delivery,
            timestamp=shipment.created_at,
        )

        event = Event(
            event_type=EventType.SHIPMENT_CREATED,
            source=ServiceSource.SHIPMENT_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(f"✅ Published shipment.created event for shipment {shipment.shipment_id}")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to publish shipment.created event: {e}")
        return False


async def publish_shipment_status_changed(
    event_bus,
    shipment: Shipment,
    old_status: str,
    actor_id: str,
    reason: Optional[str] = None,
) -> bool:
    """Publish shipment.status_changed event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping shipment.status_changed event")
        return False

    try:
        event_data = ShipmentStatusChangedEvent(
            shipment_id=shipment.shipment_id,
            order_id=shipment.order_id,
            user_id=shipment.user_id,
            old_status=old_status,
            new_status=shipment.status.value,
            is_terminal=shipment.is_terminal,
            actor_id=actor_id,
            reason=reason,
            timestamp=shipment.updated_at,
        )

        event = Event(
            event_type=EventType.SHIPMENT_STATUS_CHANGED,
            source=ServiceSource.SHIPMENT_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(
            f"✅ Published shipment.status_changed event for shipment {shipment.shipment_id}: "
            f"{old_status} -> {shipment.status.value}"
        )
        return True

    except Exception as e:
        logger.error(f"❌ Failed to publish shipment.status_changed event: {e}")
        return False


async def publish_shipment_incident_reported(event_bus, shipment: Shipment) -> bool:
    """Publish shipment.incident_reported event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping shipment.incident_reported event")
        return False

    try:
        incident = shipment.incident
        event_data = ShipmentIncidentReportedEvent(
            shipment_id=shipment.shipment_id,
            order_id=shipment.order_id,
            user_id=shipment.user_id,
            incident_id=incident.incident_id,
            incident_type=incident.incident_type.value,
            description=incident.description,
            reported_by=incident.reported_by,
            timestamp=incident.reported_at,
        )

        event = Event(
            event_type=EventType.SHIPMENT_INCIDENT_REPORTED,
            source=ServiceSource.SHIPMENT_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(f"✅ Published shipment.incident_reported event for shipment {shipment.shipment_id}")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to publish shipment.incident_reported event: {e}")
        return False
