"""
Collaboration Service Data Contract

Test data factories for the Collaboration Service.

The service models are the single source of truth for collaboration data
structures; this module re-exports them and adds factories plus the
canonical lifecycle paths used across unit and component tests.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from microservices.collaboration_service.models import (
    ActorRole,
    Collaboration,
    CollaborationAction,
    CollaborationCreateRequest,
    CollaborationFilter,
    CollaborationStatus,
    CounterOfferMetadata,
    CreationMetadata,
    NoMetadata,
    StatusHistoryEntry,
    TransitionRequest,
)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_AMOUNT = Decimal("1000.00")
DEFAULT_COMMISSION_RATE = Decimal("0.10")
CENT = Decimal("0.01")

# (action, role) steps from PROPOSAL_SENT to COMPLETED
HAPPY_PATH: List[Tuple[CollaborationAction, ActorRole]] = [
    (CollaborationAction.ACCEPT, ActorRole.INFLUENCER),
    (CollaborationAction.SEND_CONTRACT, ActorRole.BRAND),
    (CollaborationAction.SIGN, ActorRole.INFLUENCER),
    (CollaborationAction.START_PRODUCTION, ActorRole.INFLUENCER),
    (CollaborationAction.SUBMIT_CONTENT, ActorRole.INFLUENCER),
    (CollaborationAction.APPROVE, ActorRole.BRAND),
    (CollaborationAction.PUBLISH, ActorRole.INFLUENCER),
    (CollaborationAction.RELEASE_PAYMENT, ActorRole.BRAND),
]

# Status reached after each HAPPY_PATH step
HAPPY_PATH_STATUSES: List[CollaborationStatus] = [
    CollaborationStatus.NEGOTIATION,
    CollaborationStatus.NEGOTIATION,
    CollaborationStatus.CONTRACT_SIGNED,
    CollaborationStatus.IN_PRODUCTION,
    CollaborationStatus.IN_REVIEW,
    CollaborationStatus.IN_REVIEW,
    CollaborationStatus.IN_REVIEW,
    CollaborationStatus.COMPLETED,
]


# =============================================================================
# TEST DATA FACTORY
# =============================================================================


class CollaborationTestDataFactory:
    """Factory for generating test data for collaboration service tests

    Usage:
        factory = CollaborationTestDataFactory()
        request = factory.make_create_request()
        collaboration = factory.make_collaboration(status=CollaborationStatus.IN_REVIEW)
        history = factory.make_history(collaboration)
    """

    @staticmethod
    def make_id(prefix: str = "collab") -> str:
        """Generate a unique ID with prefix"""
        return f"{prefix}_{uuid4().hex[:16]}"

    @staticmethod
    def make_collaboration_id() -> str:
        return f"collab_{uuid4().hex[:16]}"

    @staticmethod
    def make_campaign_id() -> str:
        return f"cmp_{uuid4().hex[:16]}"

    @staticmethod
    def make_brand_id() -> str:
        return f"brand_{uuid4().hex[:12]}"

    @staticmethod
    def make_influencer_id() -> str:
        return f"inf_{uuid4().hex[:12]}"

    @staticmethod
    def split(amount: Decimal) -> Tuple[Decimal, Decimal]:
        """Expected (platform_fee, influencer_payout) for an amount"""
        fee = (amount * DEFAULT_COMMISSION_RATE).quantize(CENT, rounding=ROUND_HALF_UP)
        return fee, amount - fee

    @staticmethod
    def make_schedule(
        start: Optional[datetime] = None, days: int = 30
    ) -> Dict[str, datetime]:
        """start/end/content_due dates for a collaboration window"""
        start = start or datetime(2026, 3, 1, tzinfo=timezone.utc)
        return {
            "start_date": start,
            "end_date": start + timedelta(days=days),
            "content_due_date": start + timedelta(days=days - 7),
        }

    @classmethod
    def make_create_request(cls, **overrides) -> CollaborationCreateRequest:
        """Create a valid proposal request"""
        data: Dict[str, Any] = {
            "campaign_id": cls.make_campaign_id(),
            "brand_id": cls.make_brand_id(),
            "influencer_id": cls.make_influencer_id(),
            "agreed_amount": DEFAULT_AMOUNT,
            "message": "We would love to work with you on our spring launch",
            **cls.make_schedule(),
        }
        data.update(overrides)
        return CollaborationCreateRequest(**data)

    @classmethod
    def make_collaboration(
        cls,
        status: CollaborationStatus = CollaborationStatus.PROPOSAL_SENT,
        agreed_amount: Decimal = DEFAULT_AMOUNT,
        version: int = 1,
        **overrides,
    ) -> Collaboration:
        """Create a stored collaboration (history not attached)"""
        fee, payout = cls.split(agreed_amount)
        now = datetime.now(timezone.utc)
        data: Dict[str, Any] = {
            "collaboration_id": cls.make_collaboration_id(),
            "campaign_id": cls.make_campaign_id(),
            "brand_id": cls.make_brand_id(),
            "influencer_id": cls.make_influencer_id(),
            "status": status,
            "agreed_amount": agreed_amount,
            "platform_fee": fee,
            "influencer_payout": payout,
            "currency": "USD",
            "version": version,
            "created_at": now,
            "updated_at": now,
        }
        if status == CollaborationStatus.COMPLETED:
            data["completed_at"] = now
        elif status == CollaborationStatus.CANCELLED:
            data["cancelled_at"] = now
        data.update(overrides)
        return Collaboration(**data)

    @classmethod
    def make_creation_entry(cls, collaboration: Collaboration) -> StatusHistoryEntry:
        return StatusHistoryEntry(
            entry_id=cls.make_id("hist"),
            collaboration_id=collaboration.collaboration_id,
            sequence=1,
            from_status=None,
            to_status=CollaborationStatus.PROPOSAL_SENT,
            action=None,
            changed_by=collaboration.brand_id,
            reason="Collaboration initiated",
            metadata=CreationMetadata(
                agreed_amount=collaboration.agreed_amount,
                platform_fee=collaboration.platform_fee,
                influencer_payout=collaboration.influencer_payout,
                campaign_id=collaboration.campaign_id,
            ),
            timestamp=collaboration.created_at,
        )

    @classmethod
    def make_entry(
        cls,
        collaboration_id: str,
        sequence: int,
        from_status: CollaborationStatus,
        to_status: CollaborationStatus,
        action: CollaborationAction,
        changed_by: str = "usr_test",
        reason: Optional[str] = None,
    ) -> StatusHistoryEntry:
        return StatusHistoryEntry(
            entry_id=cls.make_id("hist"),
            collaboration_id=collaboration_id,
            sequence=sequence,
            from_status=from_status,
            to_status=to_status,
            action=action,
            changed_by=changed_by,
            reason=reason,
            metadata=NoMetadata(),
            timestamp=datetime.now(timezone.utc),
        )

    @classmethod
    def make_history(
        cls, collaboration: Collaboration, steps: int = 0
    ) -> List[StatusHistoryEntry]:
        """Creation record plus the first ``steps`` happy-path entries"""
        history = [cls.make_creation_entry(collaboration)]
        previous = CollaborationStatus.PROPOSAL_SENT
        for index in range(steps):
            action, role = HAPPY_PATH[index]
            target = HAPPY_PATH_STATUSES[index]
            history.append(cls.make_entry(
                collaboration.collaboration_id,
                sequence=index + 2,
                from_status=previous,
                to_status=target,
                action=action,
                changed_by=collaboration.party_id(role) or "admin_test",
            ))
            previous = target
        return history

    @staticmethod
    def make_transition_request(
        action: CollaborationAction,
        reason: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> TransitionRequest:
        return TransitionRequest(action=action, reason=reason, metadata=metadata)

    @staticmethod
    def make_filter(**overrides) -> CollaborationFilter:
        return CollaborationFilter(**overrides)


__all__ = [
    "DEFAULT_AMOUNT",
    "HAPPY_PATH",
    "HAPPY_PATH_STATUSES",
    "CollaborationTestDataFactory",
    "ActorRole",
    "Collaboration",
    "CollaborationAction",
    "CollaborationCreateRequest",
    "CollaborationFilter",
    "CollaborationStatus",
    "CounterOfferMetadata",
    "CreationMetadata",
    "NoMetadata",
    "StatusHistoryEntry",
    "TransitionRequest",
]
