"""
Collaboration Event Publishers

Builds collaboration event payloads and publishes them to NATS.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.nats_client import Event, EventType, ServiceSource

from ..models import (
    Collaboration,
    CollaborationAction,
    StatusHistoryEntry,
)
from .models import (
    CollaborationEventType,
    CollaborationCreatedEventData,
    CollaborationStatusChangedEventData,
    CollaborationCompletedEventData,
    CollaborationCancelledEventData,
)

logger = logging.getLogger(__name__)


class CollaborationEventPublisher:
    """Publisher for collaboration service events"""

    def __init__(self, event_bus=None):
        self.event_bus = event_bus
        self.source = ServiceSource.COLLABORATION_SERVICE

    async def publish(
        self,
        event_type: CollaborationEventType,
        data: Dict[str, Any],
    ) -> bool:
        """
        Publish an event to NATS.

        Args:
            event_type: The event type enum
            data: JSON-ready event payload

        Returns:
            True if published successfully, False otherwise
        """
        if not self.event_bus:
            logger.debug(f"Event bus not configured, skipping publish: {event_type.value}")
            return False

        try:
            event = Event(
                event_type=EventType(event_type.value),
                source=self.source,
                data=data,
                subject=data.get("collaboration_id"),
            )
            published = await self.event_bus.publish_event(event)
            if published:
                logger.debug(f"Published event: {event_type.value}")
            return bool(published)

        except Exception as e:
            logger.error(f"Failed to publish event {event_type.value}: {e}")
            return False

    # ====================
    # Payload builders
    # ====================

    @staticmethod
    def created_data(collaboration: Collaboration) -> Dict[str, Any]:
        """collaboration.created payload"""
        return CollaborationCreatedEventData(
            collaboration_id=collaboration.collaboration_id,
            campaign_id=collaboration.campaign_id,
            brand_id=collaboration.brand_id,
            influencer_id=collaboration.influencer_id,
            status=collaboration.status.value,
            agreed_amount=collaboration.agreed_amount,
            platform_fee=collaboration.platform_fee,
            influencer_payout=collaboration.influencer_payout,
            currency=collaboration.currency,
            timestamp=datetime.now(timezone.utc),
        ).model_dump(mode="json")

    @staticmethod
    def status_changed_data(
        collaboration: Collaboration, entry: StatusHistoryEntry
    ) -> Dict[str, Any]:
        """collaboration.status_changed payload"""
        return CollaborationStatusChangedEventData(
            collaboration_id=collaboration.collaboration_id,
            campaign_id=collaboration.campaign_id,
            from_status=entry.from_status.value,
            to_status=entry.to_status.value,
            action=entry.action.value,
            changed_by=entry.changed_by,
            reason=entry.reason,
            version=collaboration.version,
            timestamp=entry.timestamp,
        ).model_dump(mode="json")

    @staticmethod
    def completed_data(collaboration: Collaboration) -> Dict[str, Any]:
        """collaboration.completed payload"""
        return CollaborationCompletedEventData(
            collaboration_id=collaboration.collaboration_id,
            campaign_id=collaboration.campaign_id,
            brand_id=collaboration.brand_id,
            influencer_id=collaboration.influencer_id,
            agreed_amount=collaboration.agreed_amount,
            platform_fee=collaboration.platform_fee,
            influencer_payout=collaboration.influencer_payout,
            currency=collaboration.currency,
            completed_at=collaboration.completed_at,
            timestamp=datetime.now(timezone.utc),
        ).model_dump(mode="json")

    @staticmethod
    def cancelled_data(
        collaboration: Collaboration, entry: StatusHistoryEntry
    ) -> Dict[str, Any]:
        """collaboration.cancelled payload"""
        return CollaborationCancelledEventData(
            collaboration_id=collaboration.collaboration_id,
            campaign_id=collaboration.campaign_id,
            cancelled_by=entry.changed_by,
            from_status=entry.from_status.value,
            action=entry.action.value,
            reason=entry.reason,
            refunded=entry.action == CollaborationAction.REFUND,
            cancelled_at=collaboration.cancelled_at,
            timestamp=datetime.now(timezone.utc),
        ).model_dump(mode="json")


__all__ = ["CollaborationEventPublisher"]
