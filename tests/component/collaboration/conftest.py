"""
Component Test Fixtures for Collaboration Service

Provides the service wired to in-memory mocks (see mocks.py).
"""

import pytest

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.component.collaboration.mocks import (
    MockCollaborationRepository,
    MockContractClient,
    MockEscrowClient,
    MockMessageClient,
    MockNotificationClient,
)
from tests.contracts.collaboration.data_contract import (
    CollaborationStatus,
    CollaborationTestDataFactory,
)
from core.config import CollaborationConfig
from microservices.collaboration_service.collaboration_service import CollaborationService


@pytest.fixture
def factory() -> CollaborationTestDataFactory:
    """Provide test data factory"""
    return CollaborationTestDataFactory()


@pytest.fixture
def mock_repository() -> MockCollaborationRepository:
    return MockCollaborationRepository()


@pytest.fixture
def contract_client() -> MockContractClient:
    """Contract client reporting a fully signed contract"""
    return MockContractClient(signed=True)


@pytest.fixture
def escrow_client() -> MockEscrowClient:
    return MockEscrowClient()


@pytest.fixture
def notification_client() -> MockNotificationClient:
    return MockNotificationClient()


@pytest.fixture
def message_client() -> MockMessageClient:
    return MockMessageClient()


@pytest.fixture
def collaboration_config() -> CollaborationConfig:
    return CollaborationConfig(outbox_max_attempts=3)


@pytest.fixture
def collaboration_service(
    mock_repository,
    mock_event_bus,
    contract_client,
    escrow_client,
    notification_client,
    message_client,
    collaboration_config,
) -> CollaborationService:
    """CollaborationService with every dependency mocked"""
    return CollaborationService(
        repository=mock_repository,
        event_bus=mock_event_bus,
        contract_client=contract_client,
        escrow_client=escrow_client,
        notification_client=notification_client,
        message_client=message_client,
        config=collaboration_config,
    )


@pytest.fixture
def seed_collaboration(mock_repository, factory):
    """Store a collaboration in a given status with a consistent history"""

    def _seed(status: CollaborationStatus = CollaborationStatus.PROPOSAL_SENT, **overrides):
        steps = {
            CollaborationStatus.PROPOSAL_SENT: 0,
            CollaborationStatus.NEGOTIATION: 1,
            CollaborationStatus.CONTRACT_SIGNED: 3,
            CollaborationStatus.IN_PRODUCTION: 4,
            CollaborationStatus.IN_REVIEW: 5,
        }.get(status)
        if steps is None:
            # Statuses off the happy path get a creation record only
            collaboration = factory.make_collaboration(status=status, **overrides)
            return mock_repository.seed(collaboration, factory.make_history(collaboration))

        collaboration = factory.make_collaboration(status=status, version=steps + 1, **overrides)
        return mock_repository.seed(collaboration, factory.make_history(collaboration, steps=steps))

    return _seed
