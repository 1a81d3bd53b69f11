"""
Service Logger Setup

Configures standard library logging for a microservice from LoggingConfig.

Usage:
    from core.logger import setup_service_logger

    logger = setup_service_logger("collaboration_service")
"""

import logging
import sys
from typing import Optional

from core.config import LoggingConfig


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure root handlers and return the service logger.

    Args:
        service_name: Logger name, usually the service package name
        level: Explicit level overriding the configured one
        config: Logging configuration (defaults to environment)

    Returns:
        Configured service logger
    """
    config = config or LoggingConfig.from_env()
    log_level = getattr(logging, (level or config.log_level).upper(), logging.INFO)
    formatter = logging.Formatter(config.log_format)

    root = logging.getLogger()
    root.setLevel(log_level)

    # Avoid stacking handlers when called more than once
    for handler in list(root.handlers):
        if getattr(handler, "_service_handler", False):
            root.removeHandler(handler)

    if config.enable_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        console._service_handler = True
        root.addHandler(console)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(formatter)
        file_handler._service_handler = True
        root.addHandler(file_handler)

    logger = logging.getLogger(service_name)
    logger.setLevel(log_level)
    return logger


__all__ = ["setup_service_logger"]
