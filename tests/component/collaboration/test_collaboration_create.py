"""
Component Tests for Collaboration Creation

Proposal creation through CollaborationService with mocked repository,
event bus and peer clients.
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from pydantic import ValidationError

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.contracts.collaboration.data_contract import CollaborationStatus
from microservices.collaboration_service.models import CreationMetadata
from microservices.collaboration_service.outbox import SideEffectKind
from microservices.collaboration_service.protocols import (
    CollaborationValidationError,
    InvalidAmountError,
)


class TestCreateCollaboration:
    """Tests for CollaborationService.create_collaboration"""

    @pytest.mark.asyncio
    async def test_create_computes_fees_and_initial_state(self, collaboration_service, factory):
        # Given: A proposal for 1000.00
        request = factory.make_create_request(agreed_amount=Decimal("1000.00"))

        # When: Creating the collaboration
        collaboration = await collaboration_service.create_collaboration(request)

        # Then: Fee split, status and version are set
        assert collaboration.collaboration_id.startswith("collab_")
        assert collaboration.status == CollaborationStatus.PROPOSAL_SENT
        assert collaboration.version == 1
        assert collaboration.platform_fee == Decimal("100.00")
        assert collaboration.influencer_payout == Decimal("900.00")
        assert collaboration.currency == "USD"
        assert collaboration.start_date == request.start_date
        assert collaboration.created_at == collaboration.updated_at

    @pytest.mark.asyncio
    async def test_create_records_single_creation_entry(self, collaboration_service, factory):
        request = factory.make_create_request()

        collaboration = await collaboration_service.create_collaboration(request)

        assert len(collaboration.status_history) == 1
        entry = collaboration.status_history[0]
        assert entry.sequence == 1
        assert entry.from_status is None
        assert entry.to_status == CollaborationStatus.PROPOSAL_SENT
        assert entry.action is None
        assert entry.changed_by == request.brand_id
        assert entry.reason == request.message
        assert isinstance(entry.metadata, CreationMetadata)
        assert entry.metadata.agreed_amount == Decimal("1000.00")
        assert entry.metadata.campaign_id == request.campaign_id

    @pytest.mark.asyncio
    async def test_create_persists_collaboration_and_history(
        self, collaboration_service, mock_repository, factory
    ):
        collaboration = await collaboration_service.create_collaboration(factory.make_create_request())

        stored = mock_repository.collaborations[collaboration.collaboration_id]
        assert stored.status == CollaborationStatus.PROPOSAL_SENT
        assert len(mock_repository.history[collaboration.collaboration_id]) == 1

    @pytest.mark.asyncio
    async def test_default_reason_without_message(
        self, collaboration_service, message_client, factory
    ):
        request = factory.make_create_request(message=None)

        collaboration = await collaboration_service.create_collaboration(request)
        await collaboration_service.drain_side_effects()

        assert collaboration.status_history[0].reason == "Collaboration initiated"
        assert message_client.messages == []

    @pytest.mark.asyncio
    async def test_explicit_currency_kept(self, collaboration_service, factory):
        collaboration = await collaboration_service.create_collaboration(
            factory.make_create_request(currency="EUR")
        )

        assert collaboration.currency == "EUR"
        assert collaboration.status_history[0].metadata.currency == "EUR"


class TestCreateSideEffects:
    """Tests for side effects of proposal creation"""

    @pytest.mark.asyncio
    async def test_message_notification_and_event_dispatched(
        self, collaboration_service, message_client, notification_client, mock_event_bus, factory
    ):
        request = factory.make_create_request()

        collaboration = await collaboration_service.create_collaboration(request)
        await collaboration_service.drain_side_effects()

        # Proposal message from the brand
        assert message_client.messages == [{
            "collaboration_id": collaboration.collaboration_id,
            "sender_id": request.brand_id,
            "content": request.message,
        }]
        # Influencer notified
        assert notification_client.recipients() == [request.influencer_id]
        # Created event on the bus
        event = mock_event_bus.assert_event_published(
            "collaboration.created",
            {"collaboration_id": collaboration.collaboration_id},
        )
        assert event["data"]["agreed_amount"] == "1000.00"
        assert event["data"]["platform_fee"] == "100.00"
        assert event["source"] == "collaboration_service"
        assert event["subject"] == collaboration.collaboration_id

    @pytest.mark.asyncio
    async def test_no_escrow_on_creation(self, collaboration_service, escrow_client, factory):
        await collaboration_service.create_collaboration(factory.make_create_request())
        await collaboration_service.drain_side_effects()

        assert escrow_client.instructions == []

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_creation(
        self, collaboration_service, notification_client, mock_repository, factory
    ):
        # Given: notification_service fails once
        notification_client.fail_times = 1

        # When: Creating
        collaboration = await collaboration_service.create_collaboration(factory.make_create_request())
        await collaboration_service.drain_side_effects()

        # Then: The collaboration is committed and the notification is pending
        assert collaboration.collaboration_id in mock_repository.collaborations
        pending = collaboration_service.outbox.pending
        assert [effect.kind for effect in pending] == [SideEffectKind.NOTIFICATION]
        assert "notification_service unavailable" in pending[0].last_error

        # And: A later flush delivers it
        assert await collaboration_service.flush_side_effects() == 1
        assert notification_client.recipients() == [collaboration.influencer_id]
        assert collaboration_service.outbox.pending == []


class TestCreateValidation:
    """Tests for rejected proposals"""

    @pytest.mark.asyncio
    async def test_same_party_rejected(self, collaboration_service, mock_repository, factory):
        request = factory.make_create_request(brand_id="usr_same", influencer_id="usr_same")

        with pytest.raises(CollaborationValidationError) as exc_info:
            await collaboration_service.create_collaboration(request)

        assert exc_info.value.field == "influencer_id"
        assert mock_repository.collaborations == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field_name", ["campaign_id", "brand_id", "influencer_id"])
    async def test_blank_id_rejected(self, collaboration_service, factory, field_name):
        request = factory.make_create_request(**{field_name: "   "})

        with pytest.raises(CollaborationValidationError) as exc_info:
            await collaboration_service.create_collaboration(request)

        assert exc_info.value.field == field_name

    @pytest.mark.asyncio
    async def test_end_before_start_rejected(self, collaboration_service, factory):
        request = factory.make_create_request(
            start_date=datetime(2026, 5, 1, tzinfo=timezone.utc),
            end_date=datetime(2026, 4, 1, tzinfo=timezone.utc),
        )

        with pytest.raises(CollaborationValidationError) as exc_info:
            await collaboration_service.create_collaboration(request)

        assert exc_info.value.field == "end_date"

    def test_mixed_timezone_dates_rejected(self, mock_repository, factory):
        # Given: An aware start date and an end date without an offset
        with pytest.raises(ValidationError) as exc_info:
            factory.make_create_request(
                start_date=datetime(2026, 5, 1, tzinfo=timezone.utc),
                end_date="2026-06-01T00:00:00",
            )

        # Then: The request is refused before anything is stored
        assert exc_info.value.errors()[0]["loc"] == ("end_date",)
        assert exc_info.value.errors()[0]["type"] == "timezone_aware"
        assert mock_repository.collaborations == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10.00"), Decimal("10.001")])
    async def test_invalid_amount_rejected(
        self, collaboration_service, mock_repository, mock_event_bus, factory, amount
    ):
        request = factory.make_create_request(agreed_amount=amount)

        with pytest.raises(InvalidAmountError):
            await collaboration_service.create_collaboration(request)

        assert mock_repository.collaborations == {}
        mock_event_bus.assert_no_events_published()

    @pytest.mark.asyncio
    async def test_persistence_error_propagates(
        self, collaboration_service, mock_repository, mock_event_bus, factory
    ):
        mock_repository.set_error(RuntimeError("connection reset"))

        with pytest.raises(RuntimeError):
            await collaboration_service.create_collaboration(factory.make_create_request())

        mock_event_bus.assert_no_events_published()
