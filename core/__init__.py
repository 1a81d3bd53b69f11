#!/usr/bin/env python3
"""
Core Module for Microservices Architecture

Shared infrastructure components for the collaboration platform services.

COMPONENTS:
    - config/: Environment driven configuration dataclasses
    - config_manager.py: Per-service configuration and endpoint resolution
    - logger.py: Service logger setup
    - nats_client.py: NATS event bus for event-driven architecture
    - postgres_client.py: asyncpg pool wrapper
    - service_client_base.py: Base HTTP client for peer services

USAGE:
    from core.config_manager import ConfigManager

    # Initialize configuration for a service
    config = ConfigManager("collaboration_service")
"""

from .config_manager import ConfigManager, ServiceConfig

__all__ = [
    "ConfigManager",
    "ServiceConfig",
]

__version__ = "1.0.0"
