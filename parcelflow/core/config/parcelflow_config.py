#!/usr/bin/env python3
"""Top-level parcelflow configuration"""
from dataclasses import dataclass, field

from .logging_config import LoggingConfig
from .tariff_config import TariffConfig
from .lifecycle_config import LifecycleConfig


@dataclass
class ParcelflowConfig:
    """Aggregated configuration for the parcelflow platform"""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    tariff: TariffConfig = field(default_factory=TariffConfig)
    lifecycle: LifecycleConfig = field(default_factory=LifecycleConfig)

    @classmethod
    def from_env(cls) -> 'ParcelflowConfig':
        """Load full config from environment variables"""
        return cls(
            logging=LoggingConfig.from_env(),
            tariff=TariffConfig.from_env(),
            lifecycle=LifecycleConfig.from_env(),
        )
