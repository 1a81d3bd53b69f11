"""
Centralized Configuration Manager

Resolves per-service configuration and peer service endpoints.

Usage:
    from core.config_manager import ConfigManager

    config = ConfigManager("collaboration_service")
    host, port = config.discover_service(
        service_name='wallet_service',
        default_host='localhost',
        default_port=8208,
        env_host_key='WALLET_SERVICE_HOST',
        env_port_key='WALLET_SERVICE_PORT'
    )
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from core.config import (
    CollaborationConfig,
    InfraConfig,
    LoggingConfig,
)

logger = logging.getLogger(__name__)


@dataclass
class ServiceConfig:
    """Resolved configuration for one microservice"""
    service_name: str
    environment: str = "development"
    log_level: str = "INFO"
    infra: InfraConfig = field(default_factory=InfraConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    collaboration: CollaborationConfig = field(default_factory=CollaborationConfig)

    @property
    def nats_enabled(self) -> bool:
        return self.infra.nats_enabled


class ConfigManager:
    """Configuration manager for a single microservice"""

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.environment = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        self._service_config: Optional[ServiceConfig] = None

    def get_service_config(self) -> ServiceConfig:
        """Load (once) and return the service configuration"""
        if self._service_config is None:
            logging_config = LoggingConfig.from_env()
            self._service_config = ServiceConfig(
                service_name=self.service_name,
                environment=self.environment,
                log_level=logging_config.log_level,
                infra=InfraConfig.from_env(),
                logging=logging_config,
                collaboration=CollaborationConfig.from_env(),
            )
        return self._service_config

    def discover_service(
        self,
        service_name: str,
        default_host: str,
        default_port: int,
        env_host_key: Optional[str] = None,
        env_port_key: Optional[str] = None,
    ) -> Tuple[str, int]:
        """
        Resolve a peer service endpoint.

        Priority: environment variables → defaults.

        Args:
            service_name: Name of the peer service (for logging)
            default_host: Host used when no environment override exists
            default_port: Port used when no environment override exists
            env_host_key: Environment variable holding the host
            env_port_key: Environment variable holding the port

        Returns:
            Tuple of (host, port)
        """
        host = os.getenv(env_host_key) if env_host_key else None
        port_value = os.getenv(env_port_key) if env_port_key else None

        port = default_port
        if port_value:
            try:
                port = int(port_value)
            except ValueError:
                logger.warning(
                    f"Invalid port '{port_value}' in {env_port_key}, using default {default_port}"
                )

        resolved_host = host or default_host
        logger.debug(f"Resolved {service_name} for {self.service_name}: {resolved_host}:{port}")
        return resolved_host, port


__all__ = ["ConfigManager", "ServiceConfig"]
