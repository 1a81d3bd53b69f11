"""
Collaboration Service Factory

Factory for creating collaboration service instances with proper dependency injection.
"""

import logging
from typing import Optional

from core.config_manager import ConfigManager
from core.logger import setup_service_logger
from core.nats_client import NATSEventBus

from .collaboration_repository import CollaborationRepository
from .collaboration_service import CollaborationService
from .clients.contract_client import ContractClient
from .clients.escrow_client import EscrowClient
from .clients.message_client import MessageClient
from .clients.notification_client import NotificationClient

logger = logging.getLogger(__name__)


class CollaborationServiceFactory:
    """Factory for creating collaboration service components"""

    def __init__(self, config: Optional[ConfigManager] = None):
        self.config = config or ConfigManager("collaboration_service")
        self._repository: Optional[CollaborationRepository] = None
        self._service: Optional[CollaborationService] = None
        self._nats_client: Optional[NATSEventBus] = None
        self._contract_client: Optional[ContractClient] = None
        self._escrow_client: Optional[EscrowClient] = None
        self._notification_client: Optional[NotificationClient] = None
        self._message_client: Optional[MessageClient] = None

    async def initialize(self) -> None:
        """Initialize all components"""
        service_config = self.config.get_service_config()
        setup_service_logger(self.config.service_name, config=service_config.logging)
        logger.info("Initializing Collaboration Service components...")

        # Initialize repository
        self._repository = CollaborationRepository(self.config)
        await self._repository.initialize()

        # Initialize NATS client
        if service_config.nats_enabled:
            try:
                self._nats_client = NATSEventBus(
                    service_name="collaboration_service",
                    config=service_config.infra,
                )
                await self._nats_client.connect()
                logger.info("NATS client connected")
            except Exception as e:
                logger.warning(f"NATS client initialization failed: {e}")
                self._nats_client = None

        # Initialize service clients
        self._contract_client = ContractClient()
        self._escrow_client = EscrowClient()
        self._notification_client = NotificationClient()
        self._message_client = MessageClient()

        # Initialize main service
        self._service = CollaborationService(
            repository=self._repository,
            event_bus=self._nats_client,
            contract_client=self._contract_client,
            escrow_client=self._escrow_client,
            notification_client=self._notification_client,
            message_client=self._message_client,
            config=service_config.collaboration,
        )

        logger.info("Collaboration Service components initialized")

    async def close(self) -> None:
        """Close all components"""
        logger.info("Closing Collaboration Service components...")

        # In-flight side effects go out before their clients are closed
        if self._service:
            await self._service.drain_side_effects(
                timeout=self._service.config.outbox_drain_timeout
            )

        for client in (
            self._contract_client,
            self._escrow_client,
            self._notification_client,
            self._message_client,
        ):
            if client:
                await client.close()

        if self._nats_client:
            await self._nats_client.close()

        if self._repository:
            await self._repository.close()

        logger.info("Collaboration Service components closed")

    @property
    def repository(self) -> CollaborationRepository:
        """Get collaboration repository"""
        if not self._repository:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._repository

    @property
    def service(self) -> CollaborationService:
        """Get collaboration service"""
        if not self._service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._service

    @property
    def nats_client(self) -> Optional[NATSEventBus]:
        """Get NATS client"""
        return self._nats_client


# Global factory instance
_factory: Optional[CollaborationServiceFactory] = None


async def get_factory() -> CollaborationServiceFactory:
    """Get or create factory instance"""
    global _factory
    if _factory is None:
        _factory = CollaborationServiceFactory()
        await _factory.initialize()
    return _factory


async def close_factory() -> None:
    """Close factory instance"""
    global _factory
    if _factory:
        await _factory.close()
        _factory = None


__all__ = [
    "CollaborationServiceFactory",
    "get_factory",
    "close_factory",
]
