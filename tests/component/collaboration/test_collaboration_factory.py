"""
Component Tests for CollaborationServiceFactory

Wiring of repository, event bus and peer clients without real infrastructure.
"""

import pytest

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.component.collaboration.mocks import HangingNotificationClient
from tests.contracts.collaboration.data_contract import CollaborationTestDataFactory
from core.config_manager import ConfigManager
from core.nats_client import NATSEventBus
from microservices.collaboration_service.collaboration_repository import CollaborationRepository
from microservices.collaboration_service.collaboration_service import CollaborationService
from microservices.collaboration_service import factory as factory_module
from microservices.collaboration_service.factory import CollaborationServiceFactory
from microservices.collaboration_service.outbox import SideEffectKind


@pytest.fixture
def offline_repository(monkeypatch):
    """Repository lifecycle without a database pool"""
    calls = []

    async def initialize(self):
        calls.append("initialize")

    async def close(self):
        calls.append("close")

    monkeypatch.setattr(CollaborationRepository, "initialize", initialize)
    monkeypatch.setattr(CollaborationRepository, "close", close)
    return calls


class TestFactory:

    def test_not_initialized(self):
        factory = CollaborationServiceFactory(ConfigManager("collaboration_service"))

        with pytest.raises(RuntimeError):
            factory.service
        with pytest.raises(RuntimeError):
            factory.repository
        assert factory.nats_client is None

    @pytest.mark.asyncio
    async def test_initialize_without_nats(self, monkeypatch, offline_repository):
        monkeypatch.setenv("NATS_ENABLED", "false")
        monkeypatch.setenv("COLLAB_OUTBOX_MAX_ATTEMPTS", "4")
        factory = CollaborationServiceFactory(ConfigManager("collaboration_service"))

        await factory.initialize()
        try:
            assert isinstance(factory.service, CollaborationService)
            assert factory.service.repository is factory.repository
            assert factory.nats_client is None
            assert factory.service.event_publisher is None
            assert factory.service.outbox.max_attempts == 4
            assert factory.service.contract_gate.contract_client is not None
        finally:
            await factory.close()

        assert offline_repository == ["initialize", "close"]

    @pytest.mark.asyncio
    async def test_nats_failure_degrades_to_no_bus(self, monkeypatch, offline_repository):
        async def refuse(self):
            raise ConnectionError("nats unreachable")

        monkeypatch.setenv("NATS_ENABLED", "true")
        monkeypatch.setattr(NATSEventBus, "connect", refuse)
        factory = CollaborationServiceFactory(ConfigManager("collaboration_service"))

        await factory.initialize()
        try:
            assert factory.nats_client is None
            assert factory.service.event_bus is None
        finally:
            await factory.close()

    @pytest.mark.asyncio
    async def test_close_drains_in_flight_side_effects(self, monkeypatch, offline_repository):
        async def store(collaboration, entry):
            return collaboration

        monkeypatch.setenv("NATS_ENABLED", "false")
        monkeypatch.setenv("COLLAB_OUTBOX_DRAIN_TIMEOUT", "0.05")
        factory = CollaborationServiceFactory(ConfigManager("collaboration_service"))
        await factory.initialize()

        # Given: A proposal whose influencer notification never completes
        service = factory.service
        notifier = HangingNotificationClient()
        service.outbox.notification_client = notifier
        monkeypatch.setattr(service.repository, "create_collaboration", store)
        await service.create_collaboration(
            CollaborationTestDataFactory.make_create_request(message=None)
        )

        # When: Shutting down
        await factory.close()

        # Then: The dispatch task was waited on, then cancelled before the clients closed
        assert len(notifier.started) == 1
        assert service.config.outbox_drain_timeout == 0.05
        assert [e.kind for e in service.outbox.pending] == [SideEffectKind.NOTIFICATION]
        assert service.dispatch_errors == []
        assert offline_repository == ["initialize", "close"]


class TestGlobalFactory:

    @pytest.mark.asyncio
    async def test_get_factory_is_shared_until_closed(self, monkeypatch, offline_repository):
        monkeypatch.setenv("NATS_ENABLED", "false")
        monkeypatch.setattr(factory_module, "_factory", None)

        first = await factory_module.get_factory()
        second = await factory_module.get_factory()
        assert first is second
        assert offline_repository == ["initialize"]

        await factory_module.close_factory()
        assert factory_module._factory is None
        assert offline_repository == ["initialize", "close"]
