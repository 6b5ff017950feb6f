#!/usr/bin/env python3
"""Lifecycle service configuration"""
import os
from dataclasses import dataclass, field
from typing import List


def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


def _list(val: str) -> List[str]:
    return [item.strip() for item in val.split(",") if item.strip()]


@dataclass
class LifecycleConfig:
    """Order / payment / shipment lifecycle settings"""
    service_name: str = "lifecycle_service"
    service_host: str = "0.0.0.0"
    service_port: int = 8240

    payment_authorization_timeout_seconds: float = 10.0
    declined_account_suffixes: List[str] = field(default_factory=lambda: ["0002"])

    incident_description_max_length: int = 500
    admin_notification_recipient: str = "admin"

    # Delivery estimate
    default_delivery_hours: int = 24
    average_speed_kmh: float = 40.0

    @classmethod
    def from_env(cls) -> 'LifecycleConfig':
        """Load lifecycle config from environment variables"""
        return cls(
            service_name=os.getenv("LIFECYCLE_SERVICE_NAME", "lifecycle_service"),
            service_host=os.getenv("SERVICE_HOST", "0.0.0.0"),
            service_port=_int(os.getenv("SERVICE_PORT", "8240"), 8240),
            payment_authorization_timeout_seconds=_float(
                os.getenv("PAYMENT_AUTHORIZATION_TIMEOUT_SECONDS", "10"), 10.0
            ),
            declined_account_suffixes=_list(os.getenv("DECLINED_ACCOUNT_SUFFIXES", "0002")),
            incident_description_max_length=_int(os.getenv("INCIDENT_DESCRIPTION_MAX_LENGTH", "500"), 500),
            admin_notification_recipient=os.getenv("ADMIN_NOTIFICATION_RECIPIENT", "admin"),
            default_delivery_hours=_int(os.getenv("DEFAULT_DELIVERY_HOURS", "24"), 24),
            average_speed_kmh=_float(os.getenv("AVERAGE_SPEED_KMH", "40"), 40.0),
        )
