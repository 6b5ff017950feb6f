#!/usr/bin/env python3
"""Modular configuration system for parcelflow

Configuration hierarchy:
- logging_config: Logging configuration
- tariff_config: Pricing rates and currency
- lifecycle_config: Payment timeout, incident limits, notification recipients
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .tariff_config import TariffConfig
from .lifecycle_config import LifecycleConfig
from .parcelflow_config import ParcelflowConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = ParcelflowConfig.from_env()


def get_settings() -> ParcelflowConfig:
    """Get global settings instance"""
    return settings


def reload_settings() -> ParcelflowConfig:
    """Reload settings from environment"""
    global settings
    settings = ParcelflowConfig.from_env()
    return settings


__all__ = [
    'ParcelflowConfig',
    'get_settings',
    'reload_settings',
    'settings',
    'LoggingConfig',
    'TariffConfig',
    'LifecycleConfig',
]
