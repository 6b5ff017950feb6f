"""
Lifecycle Service

Saga orchestrating orders, payments and shipments, and the HTTP surface
that exposes it.
"""

from .factory import create_lifecycle_service
from .lifecycle_service import LifecycleService

__all__ = ["LifecycleService", "create_lifecycle_service"]
