"""
Timeline Merge Engine

Merges an order's status log with its shipment's status log into one
ordered, de-duplicated sequence, then projects the remaining steps of the
expected journey as placeholders.
"""

from typing import Iterable, List, Optional, Tuple

from ...core.status_history import StatusChange
from .models import EventOrigin, TrackingEvent
from .status_catalog import CANONICAL_JOURNEY, JOURNEY_END_STATUSES, journey_position, lookup

ORIGIN_PRIORITY = {EventOrigin.ORDER: 0, EventOrigin.SHIPMENT: 1}


def _sort_key(entry: Tuple[EventOrigin, StatusChange]):
    origin, change = entry
    return (
        change.timestamp,
        ORIGIN_PRIORITY[origin],
        lookup(change.status).canonical_index,
        change.status,
        change.actor_id,
        change.reason or "",
    )


def merge_timeline(
    order_history: Iterable[StatusChange],
    shipment_history: Optional[Iterable[StatusChange]] = None,
) -> List[TrackingEvent]:
    """
    Build the unified timeline.

    Real events are sorted by timestamp, then order before shipment, then
    canonical index. Exact duplicates (same origin, status and timestamp)
    appear once. Unless the journey has ended, every canonical step past
    the furthest one reached follows as a placeholder with no timestamp.
    """
    entries = [(EventOrigin.ORDER, c) for c in order_history]
    entries += [(EventOrigin.SHIPMENT, c) for c in (shipment_history or [])]

    seen = set()
    unique = []
    for origin, change in entries:
        key = (origin, change.status, change.timestamp)
        if key in seen:
            continue
        seen.add(key)
        unique.append((origin, change))
    unique.sort(key=_sort_key)

    events: List[TrackingEvent] = []
    furthest = -1
    ended = False
    for origin, change in unique:
        info = lookup(change.status)
        events.append(TrackingEvent(
            status=change.status,
            label=info.label,
            color=info.color,
            description=info.description,
            completed=True,
            timestamp=change.timestamp,
            origin=origin,
            canonical_index=info.canonical_index,
            actor_id=change.actor_id,
            reason=change.reason,
        ))
        furthest = max(furthest, journey_position(change.status))
        ended = ended or change.status in JOURNEY_END_STATUSES

    if ended:
        return events

    for origin, status in CANONICAL_JOURNEY[furthest + 1:]:
        info = lookup(status)
        events.append(TrackingEvent(
            status=status,
            label=info.label,
            color=info.color,
            description=info.description,
            completed=False,
            timestamp=None,
            origin=origin,
            canonical_index=info.canonical_index,
        ))
    return events
