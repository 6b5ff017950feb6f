"""
Service logger setup

Configures stdlib logging for a parcelflow service from LoggingConfig.
"""

import logging
import sys
from typing import Optional

from .config import LoggingConfig, get_settings

_configured_handlers = set()


def setup_service_logger(service_name: str, config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Create (or fetch) the logger for a service.

    Handlers are attached once per service name; calling again returns the
    same logger without duplicating output.

    Args:
        service_name: Logger name, e.g. "lifecycle_service"
        config: Logging config (defaults to global settings)

    Returns:
        Configured logger
    """
    config = config or get_settings().logging
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    if service_name in _configured_handlers:
        return logger

    formatter = logging.Formatter(config.log_format)

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Library modules log through "parcelflow.*"; route them the same way
    package_logger = logging.getLogger("parcelflow")
    package_logger.setLevel(logger.level)
    if not package_logger.handlers:
        for handler in logger.handlers:
            package_logger.addHandler(handler)

    _configured_handlers.add(service_name)
    return logger
