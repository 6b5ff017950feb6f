"""
Tracking Service

Unified, display-ready timelines built from order and shipment status logs.
"""

from .models import EventOrigin, TrackingEvent
from .timeline import merge_timeline

__all__ = ["EventOrigin", "TrackingEvent", "merge_timeline"]
